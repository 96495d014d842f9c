"""
Data loading and splitting utilities.

This subpackage handles:
- loading the iris and German credit datasets
- decoding raw label values into category names
- stratified train/test splits driven by config/data.yaml
"""
