"""
Feature preparation utilities.

This subpackage contains:
- categorical encoding and missing-value imputation
- standard scaling fitted on the training split
- minority-class up-sampling
"""
