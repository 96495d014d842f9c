"""
Confusion-matrix evaluation for multi-class boosted-tree experiments.

Given (actual, predicted) label pairs over a fixed, ordered label set,
this module:

- builds a confusion matrix (rows = actual label, columns = predicted label)
- derives overall accuracy and per-class precision, recall and F1
- renders the result as a plain-text report

Per-class conventions (rows of the matrix are actual labels):

    precision[i] = cm[i, i] / row_sum(i)    (row = actual axis)
    recall[i]    = cm[i, i] / col_sum(i)    (column = predicted axis)
    f1[i]        = 2 * p * r / (p + r)

A class with no actual cases gets precision NaN, a class that is never
predicted gets recall NaN, and F1 is NaN whenever it cannot be formed.
These are reported, not raised. Only an empty observation set (undefined
accuracy) and labels outside the label set are errors.

Values are kept at full precision; rounding to DISPLAY_DECIMALS happens
only in the display helpers.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterable, List, Sequence, Tuple

import numpy as np
import pandas as pd

from boostlab.evaluation.errors import EmptyInputError, InvalidLabelError


DISPLAY_DECIMALS = 3

Observation = Tuple[Hashable, Hashable]


# ---------------------------------------------------------------------------
# Report container
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MetricsReport:
    """
    Read-only metrics derived from one confusion matrix.

    Attributes
    ----------
    labels : Tuple[str, ...]
        Label order used on both matrix axes and in every per-class tuple.
    accuracy : float
        Fraction of observations on the diagonal.
    precision, recall, f1 : Tuple[float, ...]
        Per-class metrics, NaN where undefined.
    support : Tuple[int, ...]
        Number of actual cases per class (row sums).
    confusion_matrix : np.ndarray
        Copy of the matrix the report was computed from.
    """

    labels: Tuple[str, ...]
    accuracy: float
    precision: Tuple[float, ...]
    recall: Tuple[float, ...]
    f1: Tuple[float, ...]
    support: Tuple[int, ...]
    confusion_matrix: np.ndarray = field(compare=False, repr=False)

    def per_class(self) -> Dict[str, Dict[str, float]]:
        """Full-precision per-class metrics keyed by label, in label order."""
        return {
            label: {
                "precision": self.precision[i],
                "recall": self.recall[i],
                "f1": self.f1[i],
                "support": self.support[i],
            }
            for i, label in enumerate(self.labels)
        }

    def to_frame(self, decimals: int = DISPLAY_DECIMALS) -> pd.DataFrame:
        """
        Per-class table (index = label) rounded for display.
        """
        df = pd.DataFrame(
            {
                "precision": self.precision,
                "recall": self.recall,
                "f1": self.f1,
                "support": self.support,
            },
            index=pd.Index(self.labels, name="label"),
        )
        return df.round({"precision": decimals, "recall": decimals, "f1": decimals})

    def as_dict(self, decimals: int = DISPLAY_DECIMALS) -> Dict[str, Any]:
        """
        JSON-friendly representation with stable keys.

        NaN values are emitted as None so the result serializes cleanly.
        """
        return {
            "labels": list(self.labels),
            "accuracy": _round_or_none(self.accuracy, decimals),
            "per_class": {
                label: {
                    "precision": _round_or_none(self.precision[i], decimals),
                    "recall": _round_or_none(self.recall[i], decimals),
                    "f1": _round_or_none(self.f1[i], decimals),
                    "support": int(self.support[i]),
                }
                for i, label in enumerate(self.labels)
            },
            "confusion_matrix": self.confusion_matrix.tolist(),
        }


def _round_or_none(value: float, decimals: int):
    if value is None or math.isnan(value):
        return None
    return round(float(value), decimals)


# ---------------------------------------------------------------------------
# Core computations
# ---------------------------------------------------------------------------


def _validate_labels(labels: Sequence[Hashable]) -> List[Hashable]:
    label_list = list(labels)
    if not label_list:
        raise ValueError("Label set must contain at least one label.")
    # Report keys are the string forms, so those must be distinct too.
    names = [str(label) for label in label_list]
    if len(set(label_list)) != len(label_list) or len(set(names)) != len(names):
        duplicates = sorted({name for name in names if names.count(name) > 1})
        raise ValueError(f"Label set contains duplicates: {duplicates}")
    return label_list


def build_confusion_matrix(
    observations: Iterable[Observation],
    labels: Sequence[Hashable],
) -> np.ndarray:
    """
    Count (actual, predicted) pairs into a square confusion matrix.

    Parameters
    ----------
    observations : Iterable[Tuple[label, label]]
        Pairs of (actual, predicted). Order does not matter and repeated
        pairs are counted individually.
    labels : Sequence[label]
        Ordered, distinct label set. Defines the matrix size and the order
        of both axes.

    Returns
    -------
    np.ndarray
        Integer array of shape (len(labels), len(labels)); cell (i, j) is
        the number of observations with actual == labels[i] and
        predicted == labels[j].

    Raises
    ------
    InvalidLabelError
        If an actual or predicted value is not in ``labels``.
    ValueError
        If ``labels`` is empty or contains duplicates (including labels
        with the same string form, such as 1 and "1").
    """
    label_list = _validate_labels(labels)
    index = {label: i for i, label in enumerate(label_list)}

    cm = np.zeros((len(label_list), len(label_list)), dtype=np.int64)
    for position, (actual, predicted) in enumerate(observations):
        if actual not in index:
            raise InvalidLabelError(
                f"Observation {position}: actual label {actual!r} is not in "
                f"the label set {label_list}."
            )
        if predicted not in index:
            raise InvalidLabelError(
                f"Observation {position}: predicted label {predicted!r} is not "
                f"in the label set {label_list}."
            )
        cm[index[actual], index[predicted]] += 1

    return cm


def _safe_ratio(numerator: float, denominator: float) -> float:
    if denominator == 0:
        return float("nan")
    return float(numerator) / float(denominator)


def compute_metrics(
    confusion_matrix: np.ndarray,
    labels: Sequence[Hashable],
) -> MetricsReport:
    """
    Derive accuracy and per-class precision/recall/F1 from a confusion matrix.

    Parameters
    ----------
    confusion_matrix : np.ndarray
        Square count matrix as returned by :func:`build_confusion_matrix`.
    labels : Sequence[label]
        The same ordered label set used to build the matrix.

    Returns
    -------
    MetricsReport
        Full-precision metrics in ``labels`` order.

    Raises
    ------
    EmptyInputError
        If the matrix holds no observations.
    ValueError
        If the matrix is not square, does not match ``labels`` or holds
        negative or non-integral counts.
    """
    label_list = _validate_labels(labels)
    raw = np.asarray(confusion_matrix)
    if raw.dtype.kind not in "iub":
        if raw.dtype.kind != "f" or not np.isfinite(raw).all() or (raw != np.floor(raw)).any():
            raise ValueError("Confusion matrix counts must be whole numbers.")
    cm = raw.astype(np.int64, copy=True)

    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValueError(f"Confusion matrix must be a square 2D array, got shape {cm.shape}.")
    if cm.shape[0] != len(label_list):
        raise ValueError(
            f"Number of labels ({len(label_list)}) does not match CM size ({cm.shape[0]})."
        )
    if (cm < 0).any():
        raise ValueError("Confusion matrix counts must be non-negative.")

    total = int(cm.sum())
    if total == 0:
        raise EmptyInputError("Cannot compute metrics from an empty confusion matrix.")

    diagonal = np.diag(cm)
    row_sums = cm.sum(axis=1)
    col_sums = cm.sum(axis=0)

    precision: List[float] = []
    recall: List[float] = []
    f1: List[float] = []
    for i in range(len(label_list)):
        p = _safe_ratio(diagonal[i], row_sums[i])
        r = _safe_ratio(diagonal[i], col_sums[i])
        if math.isnan(p) or math.isnan(r) or p + r == 0:
            f = float("nan")
        else:
            f = 2.0 * p * r / (p + r)
        precision.append(p)
        recall.append(r)
        f1.append(f)

    cm.setflags(write=False)
    return MetricsReport(
        labels=tuple(str(label) for label in label_list),
        accuracy=float(diagonal.sum()) / float(total),
        precision=tuple(precision),
        recall=tuple(recall),
        f1=tuple(f1),
        support=tuple(int(v) for v in row_sums),
        confusion_matrix=cm,
    )


def evaluate(
    actual: Sequence[Hashable],
    predicted: Sequence[Hashable],
    labels: Sequence[Hashable],
) -> MetricsReport:
    """
    Build the confusion matrix for two aligned label sequences and score it.

    Raises
    ------
    ValueError
        If ``actual`` and ``predicted`` differ in length.
    """
    actual_list = list(actual)
    predicted_list = list(predicted)
    if len(actual_list) != len(predicted_list):
        raise ValueError(
            f"Length mismatch: {len(actual_list)} actual vs "
            f"{len(predicted_list)} predicted labels."
        )
    cm = build_confusion_matrix(zip(actual_list, predicted_list), labels)
    return compute_metrics(cm, labels)


# ---------------------------------------------------------------------------
# Formatting
# ---------------------------------------------------------------------------


def _fmt(value: float, decimals: int) -> str:
    if math.isnan(value):
        return "nan"
    return f"{value:.{decimals}f}"


def format_report(report: MetricsReport, decimals: int = DISPLAY_DECIMALS) -> str:
    """
    Render a report as a plain-text block: accuracy, confusion matrix and a
    per-class precision/recall/F1 table.
    """
    width = max(10, max(len(label) for label in report.labels) + 2)
    lines = [f"Accuracy: {_fmt(report.accuracy, decimals)}", "", "Confusion matrix (rows = actual, columns = predicted):"]

    cell = "{:>" + str(width) + "}"
    lines.append(cell.format("") + "".join(cell.format(label) for label in report.labels))
    for label, row in zip(report.labels, report.confusion_matrix):
        lines.append(cell.format(label) + "".join(cell.format(int(v)) for v in row))

    lines.append("")
    header = ["", "precision", "recall", "f1", "support"]
    lines.append("".join(cell.format(h) for h in header))
    for i, label in enumerate(report.labels):
        values = [
            label,
            _fmt(report.precision[i], decimals),
            _fmt(report.recall[i], decimals),
            _fmt(report.f1[i], decimals),
            str(report.support[i]),
        ]
        lines.append("".join(cell.format(v) for v in values))

    return "\n".join(lines)
