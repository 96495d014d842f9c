"""
Model definitions.

This subpackage contains builders for the boosted tree ensembles
(AdaBoost, Gradient Boosting, optional XGBoost) configured through
config/models.yaml.
"""
