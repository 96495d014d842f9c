"""
Map model outputs back to category names.

Boosted-tree classifiers return a probability vector per case whose columns
follow the estimator's ``classes_`` order. The helpers here take the argmax
of each row and translate the column index into the same ordered label set
the evaluator uses, so the matrix axes never drift from the model output.
"""

from __future__ import annotations

from typing import Hashable, List, Sequence

import numpy as np

from boostlab.evaluation.errors import InvalidLabelError


def decode_probabilities(
    proba: np.ndarray,
    labels: Sequence[Hashable],
) -> List[Hashable]:
    """
    Return the most probable label per row of ``proba``.

    Parameters
    ----------
    proba : np.ndarray
        Array of shape (n_cases, len(labels)).
    labels : Sequence[label]
        Label names in column order.

    Returns
    -------
    List[label]
        One predicted label per case. Ties go to the first maximal column.
    """
    arr = np.asarray(proba, dtype=float)
    if arr.ndim != 2:
        raise ValueError(f"Probability matrix must be 2D, got shape {arr.shape}.")
    if arr.shape[1] != len(labels):
        raise ValueError(
            f"Probability matrix has {arr.shape[1]} columns but {len(labels)} "
            "labels were given."
        )
    label_list = list(labels)
    return [label_list[i] for i in np.argmax(arr, axis=1)]


def decode_label_ids(
    ids: Sequence[int],
    labels: Sequence[Hashable],
) -> List[Hashable]:
    """Translate integer class ids into label names."""
    label_list = list(labels)
    decoded = []
    for position, raw in enumerate(ids):
        idx = int(raw)
        if idx < 0 or idx >= len(label_list):
            raise InvalidLabelError(
                f"Case {position}: class id {idx} is outside 0..{len(label_list) - 1}."
            )
        decoded.append(label_list[idx])
    return decoded
