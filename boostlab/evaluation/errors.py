"""
Exceptions raised by the confusion-matrix evaluator.
"""

from __future__ import annotations


class EvaluationError(ValueError):
    """Base class for evaluation input errors."""


class InvalidLabelError(EvaluationError):
    """An observation references a label outside the declared label set."""


class EmptyInputError(EvaluationError):
    """No observations were supplied, so accuracy is undefined."""
