"""
Plotting utilities for the boosting experiments.

This module provides convenient helpers to visualize:

- Model-level metrics (e.g., accuracy across models and datasets)
- Confusion matrices for individual models
- Feature importances of a fitted ensemble

All functions return ``(fig, ax)`` and can save the figure without showing
it, so they work in scripts as well as notebooks.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd


def _finish(fig, out_path: Optional[str], show: bool) -> None:
    fig.tight_layout()

    if out_path is not None:
        fig.savefig(out_path, dpi=300, bbox_inches="tight")

    if show:
        plt.show()
    else:
        plt.close(fig)


# ---------------------------------------------------------------------------
# Bar plots for model metrics
# ---------------------------------------------------------------------------


def plot_metric_bar(
    results_df: pd.DataFrame,
    metric: str = "accuracy",
    top_k: Optional[int] = None,
    dataset: Optional[str] = None,
    figsize: Tuple[float, float] = (10.0, 6.0),
    rotate_xticks: int = 45,
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a bar chart of a chosen metric across models.

    Parameters
    ----------
    results_df : pd.DataFrame
        DataFrame as produced by `aggregate_all_results`, containing
        columns like ["dataset", "model", "accuracy", "precision",
        "recall", "f1"].
    metric : str
        Metric column to plot (default: "accuracy").
    top_k : Optional[int]
        If provided, only the top_k models (sorted by metric descending)
        are shown.
    dataset : Optional[str]
        If provided, filter the DataFrame to this dataset ("iris", "credit").
    figsize : Tuple[float, float]
        Figure size in inches.
    rotate_xticks : int
        Rotation angle for x-axis tick labels.
    title : Optional[str]
        Title for the plot. If None, a default is constructed.
    out_path : Optional[str]
        If provided, save the figure to this path (e.g., PNG).
    show : bool
        If True, call plt.show(). If False, just return the figure/axes.

    Returns
    -------
    (fig, ax)
        Matplotlib Figure and Axes objects.
    """
    df = results_df.copy()

    if df.empty:
        raise ValueError("results_df is empty; nothing to plot.")

    if metric not in df.columns:
        raise ValueError(
            f"Metric '{metric}' not found in DataFrame columns. "
            f"Available columns: {list(df.columns)}"
        )

    if dataset is not None and "dataset" in df.columns:
        df = df[df["dataset"].astype(str).str.lower() == dataset.lower()]

    if df.empty:
        raise ValueError(f"No rows to plot after filtering for dataset={dataset!r}.")

    df_sorted = df.sort_values(metric, ascending=False, na_position="last")
    if top_k is not None and top_k > 0:
        df_sorted = df_sorted.head(top_k)

    scores = pd.to_numeric(df_sorted[metric], errors="coerce")
    if "dataset" in df_sorted.columns and dataset is None:
        names = (df_sorted["dataset"].astype(str) + ":" + df_sorted["model"].astype(str)).tolist()
    else:
        names = df_sorted["model"].astype(str).tolist()

    fig, ax = plt.subplots(figsize=figsize)
    positions = np.arange(len(names))
    ax.bar(positions, scores)

    ax.set_ylabel(metric.upper())
    ax.set_xlabel("Model")
    if title is None:
        scope = f" ({dataset})" if dataset is not None else ""
        title = f"Model comparison{scope} by {metric.upper()}"
    ax.set_title(title)
    ax.set_ylim(0.0, float(scores.max()) * 1.05 if not scores.isna().all() else 1.0)
    ax.set_xticks(positions)
    ax.set_xticklabels(names, rotation=rotate_xticks, ha="right")

    # Annotate bars with metric values
    for i, v in enumerate(scores):
        if np.isnan(v):
            continue
        ax.text(i, v, f"{v:.3f}", ha="center", va="bottom", fontsize=9)

    _finish(fig, out_path, show)
    return fig, ax


# ---------------------------------------------------------------------------
# Confusion matrix plots
# ---------------------------------------------------------------------------


def plot_confusion_matrix(
    cm: np.ndarray,
    labels: Sequence[str],
    normalize: bool = False,
    figsize: Tuple[float, float] = (6.0, 5.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Plot a confusion matrix as a heatmap.

    Parameters
    ----------
    cm : np.ndarray
        Confusion matrix of shape (n_classes, n_classes), where
        rows correspond to actual labels and columns to predicted labels.
    labels : Sequence[str]
        Class labels in the order corresponding to the confusion matrix.
    normalize : bool
        If True, normalize each row to sum to 1.0 (rows without cases stay 0).
    title : Optional[str]
        Plot title. If None, a default is chosen based on `normalize`.
    out_path : Optional[str]
        If provided, save the figure to this path.
    show : bool
        If True, show the plot; otherwise, just return fig/ax.

    Returns
    -------
    (fig, ax)
        Matplotlib Figure and Axes objects.
    """
    cm = np.asarray(cm)
    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValueError("Confusion matrix must be a square 2D array.")

    n_classes = cm.shape[0]
    if len(labels) != n_classes:
        raise ValueError(
            f"Number of labels ({len(labels)}) does not match CM size ({n_classes})."
        )

    if normalize:
        row_sums = cm.sum(axis=1, keepdims=True)
        cm_display = np.divide(
            cm, row_sums, out=np.zeros(cm.shape, dtype=float), where=row_sums != 0
        )
        fmt = ".2f"
    else:
        cm_display = cm
        fmt = "d"

    fig, ax = plt.subplots(figsize=figsize)
    im = ax.imshow(cm_display, interpolation="nearest", cmap="Blues")
    fig.colorbar(im, ax=ax)

    ax.set(
        xticks=np.arange(n_classes),
        yticks=np.arange(n_classes),
        xticklabels=list(labels),
        yticklabels=list(labels),
        ylabel="Actual label",
        xlabel="Predicted label",
    )

    if title is None:
        title = "Normalized confusion matrix" if normalize else "Confusion matrix"
    ax.set_title(title)

    plt.setp(ax.get_xticklabels(), rotation=45, ha="right", rotation_mode="anchor")

    # Annotate each cell
    thresh = cm_display.max() / 2.0 if cm_display.size > 0 else 0.5
    for i in range(n_classes):
        for j in range(n_classes):
            value = cm_display[i, j]
            ax.text(
                j,
                i,
                format(value if normalize else int(value), fmt),
                ha="center",
                va="center",
                color="white" if value > thresh else "black",
            )

    _finish(fig, out_path, show)
    return fig, ax


# ---------------------------------------------------------------------------
# Feature importances
# ---------------------------------------------------------------------------


def plot_feature_importances(
    importances: pd.DataFrame,
    top_k: Optional[int] = 15,
    figsize: Tuple[float, float] = (8.0, 6.0),
    title: Optional[str] = None,
    out_path: Optional[str] = None,
    show: bool = True,
):
    """
    Horizontal bar chart of the most important features, largest on top.

    ``importances`` is the frame returned by
    ``boostlab.training.importance.feature_importances``.
    """
    if importances.empty:
        raise ValueError("importances is empty; nothing to plot.")

    df = importances.sort_values("importance", ascending=False)
    if top_k is not None and top_k > 0:
        df = df.head(top_k)
    df = df.iloc[::-1]

    fig, ax = plt.subplots(figsize=figsize)
    ax.barh(df["feature"].astype(str), df["importance"])
    ax.set_xlabel("Importance")
    ax.set_title(title or "Feature importances")

    _finish(fig, out_path, show)
    return fig, ax
