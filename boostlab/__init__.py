"""
Top-level package for the boosted tree ensemble experiments.

This package contains modules for:
- loading the iris and German credit datasets and splitting them
- feature encoding, scaling and minority-class up-sampling
- boosting model builders (AdaBoost, Gradient Boosting, XGBoost)
- training, hyperparameter search, feature pruning and nested CV
- confusion-matrix evaluation and reporting
- shared helper functions
"""

__version__ = "0.1.0"
