"""
Shared utility functions.

This subpackage includes:
- configuration loading helpers
- seeding and reproducibility helpers
- path management
- lightweight logging helpers used across the project.
"""
