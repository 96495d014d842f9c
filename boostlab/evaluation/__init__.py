"""
Evaluation and analysis utilities.

This subpackage offers:
- the confusion-matrix evaluator (accuracy, per-class precision/recall/F1)
- decoding of predicted probabilities into category names
- plotting functions for confusion matrices, metrics and feature importances
- helpers to aggregate and compare results across datasets and models.
"""
