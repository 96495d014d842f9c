"""
Training pipelines.

This subpackage includes:
- the end-to-end boosting pipeline (train_boosting)
- cross-validated grid search and nested cross-validation (tuning)
- feature-importance inspection and feature pruning (importance)
"""
