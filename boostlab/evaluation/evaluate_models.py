"""
High-level utilities for inspecting and comparing model performance.

This module builds on the metrics and result files produced by
boostlab.training.train_boosting and aggregated by
boostlab.evaluation.analysis.

It provides helpers to:

- load all results into a single DataFrame
- print model rankings by a chosen metric (e.g., accuracy)
- pick the best model per dataset
- load confusion matrices for specific models
- pretty-print confusion matrices

Usage examples (Python):

    from boostlab.evaluation.evaluate_models import (
        load_all_results,
        print_model_ranking,
        load_model_confusion_matrix,
        pretty_print_confusion_matrix,
    )

    df = load_all_results()
    print_model_ranking(df, metric="accuracy", top_k=5)

    cm, labels = load_model_confusion_matrix("iris", "adaboost")
    if cm is not None:
        pretty_print_confusion_matrix(cm, labels=labels)
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from boostlab.evaluation.analysis import (
    CORE_COLUMNS,
    aggregate_all_results,
    get_results_dir,
    load_model_details,
)


# ---------------------------------------------------------------------------
# Core loaders
# ---------------------------------------------------------------------------


def load_all_results(
    train_config_path: str = "config/train.yaml",
    save_aggregated: bool = True,
    aggregated_filename: str = "all_results.csv",
) -> pd.DataFrame:
    """
    Load aggregated results for every dataset and model as a DataFrame.

    Thin wrapper around `aggregate_all_results`.
    """
    return aggregate_all_results(
        train_config_path=train_config_path,
        save=save_aggregated,
        filename=aggregated_filename,
    )


# ---------------------------------------------------------------------------
# Rankings and summaries
# ---------------------------------------------------------------------------


def print_model_ranking(
    df: pd.DataFrame,
    metric: str = "accuracy",
    top_k: int = 10,
) -> None:
    """
    Print a ranking of models by a chosen metric.

    Parameters
    ----------
    df : pd.DataFrame
        DataFrame as returned by `load_all_results`.
    metric : str
        Metric to sort by (e.g., "accuracy", "f1", "precision", "recall").
    top_k : int
        Number of top models to display.
    """
    if df.empty:
        print("[evaluate_models] No results found (empty DataFrame).")
        return

    if metric not in df.columns:
        print(f"[evaluate_models] Metric '{metric}' not found in DataFrame columns.")
        print("Available columns:", list(df.columns))
        return

    top_df = df.sort_values(metric, ascending=False, na_position="last").head(top_k)
    display_cols = [c for c in CORE_COLUMNS if c in top_df.columns]

    print(f"\nTop {min(top_k, len(top_df))} models by '{metric}':\n")
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(top_df[display_cols].to_string(index=False))
    print("")


def get_best_per_dataset(
    df: pd.DataFrame,
    metric: str = "accuracy",
) -> pd.DataFrame:
    """
    Return the best model per dataset according to a given metric.
    """
    if df.empty:
        return df

    if "dataset" not in df.columns:
        raise ValueError("DataFrame must contain a 'dataset' column.")

    if metric not in df.columns:
        raise ValueError(f"Metric '{metric}' not found in DataFrame columns.")

    best_rows = [
        group.sort_values(metric, ascending=False, na_position="last").head(1)
        for _, group in df.groupby("dataset")
    ]
    if best_rows:
        return pd.concat(best_rows, axis=0, ignore_index=True)
    return pd.DataFrame(columns=df.columns)


# ---------------------------------------------------------------------------
# Confusion matrix helpers
# ---------------------------------------------------------------------------


def load_model_confusion_matrix(
    dataset: str,
    model_name: str,
    train_config_path: str = "config/train.yaml",
) -> Tuple[Optional[np.ndarray], Optional[List[str]]]:
    """
    Load the confusion matrix and its label order for a specific model.

    Returns
    -------
    Tuple[Optional[np.ndarray], Optional[List[str]]]
        (matrix, labels), or (None, None) if no metrics file exists.
    """
    results_dir = get_results_dir(train_config_path)
    details = load_model_details(results_dir, dataset, model_name)
    if details is None:
        return None, None

    report = details.get("report", {}) or {}
    cm = report.get("confusion_matrix")
    if cm is None:
        return None, None
    return np.asarray(cm), list(report.get("labels", []))


def pretty_print_confusion_matrix(
    cm: np.ndarray,
    labels: Sequence[str],
) -> None:
    """
    Pretty-print a confusion matrix in the console.

    Parameters
    ----------
    cm : np.ndarray
        Confusion matrix of shape (n_classes, n_classes), rows = actual.
    labels : Sequence[str]
        Class labels in the order corresponding to the confusion matrix.
    """
    cm = np.asarray(cm)
    if cm.ndim != 2 or cm.shape[0] != cm.shape[1]:
        raise ValueError("Confusion matrix must be a square 2D array.")

    n = cm.shape[0]
    if len(labels) != n:
        raise ValueError(
            f"Number of labels ({len(labels)}) does not match CM size ({n})."
        )

    print("\nConfusion Matrix (rows = actual, columns = predicted):")
    header = [""] + list(labels)
    row_format = "{:>12}" * (len(header))
    print(row_format.format(*header))

    for i in range(n):
        row_values = [labels[i]] + [str(int(v)) for v in cm[i]]
        print(row_format.format(*row_values))
    print("")


# ---------------------------------------------------------------------------
# Simple CLI
# ---------------------------------------------------------------------------


def _cli() -> None:
    """
    Simple CLI entry point for quick inspection from the terminal.

    Examples:

        python -m boostlab.evaluation.evaluate_models
        python -m boostlab.evaluation.evaluate_models --metric f1 --top-k 5
    """
    import argparse

    parser = argparse.ArgumentParser(
        description="Inspect and compare boosting model performance."
    )
    parser.add_argument(
        "--train-config",
        type=str,
        default="config/train.yaml",
        help="Path to global train config (default: config/train.yaml).",
    )
    parser.add_argument(
        "--metric",
        type=str,
        default="accuracy",
        help="Metric to rank models by (default: accuracy).",
    )
    parser.add_argument(
        "--top-k",
        type=int,
        default=10,
        help="Number of top models to display (default: 10).",
    )
    parser.add_argument(
        "--show-best-per-dataset",
        action="store_true",
        help="Also show the best model per dataset.",
    )

    args = parser.parse_args()

    df = load_all_results(train_config_path=args.train_config)
    print_model_ranking(df, metric=args.metric, top_k=args.top_k)

    if args.show_best_per_dataset:
        best_df = get_best_per_dataset(df, metric=args.metric)
        if not best_df.empty:
            print("\nBest model per dataset:\n")
            with pd.option_context("display.max_rows", None, "display.width", 120):
                print(best_df[CORE_COLUMNS].to_string(index=False))
            print("")
        else:
            print("[evaluate_models] No per-dataset results available.")


if __name__ == "__main__":
    _cli()
