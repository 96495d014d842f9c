"""
Result aggregation and analysis utilities.

This module provides helpers to:
- load the per-dataset metrics produced by the boosting pipeline
- aggregate them into a single comparison table
- save the combined results as a CSV for reporting
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

import pandas as pd

from boostlab.data.datasets import DATASET_NAMES
from boostlab.utils.training_utils import load_train_config, ensure_dir_exists


CORE_COLUMNS = ["dataset", "model", "accuracy", "precision", "recall", "f1"]


def _safe_load_json(path: str) -> Optional[Dict[str, Any]]:
    """
    Load a JSON file if it exists, otherwise return None.
    """
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def _safe_load_csv(path: str) -> Optional[pd.DataFrame]:
    """
    Load a CSV file if it exists, otherwise return None.
    """
    if not os.path.exists(path):
        return None
    return pd.read_csv(path)


def get_results_dir(train_config_path: str = "config/train.yaml") -> str:
    """
    Get (and create) the results directory from the train config.
    """
    train_cfg = load_train_config(train_config_path)
    results_dir = (train_cfg.get("paths", {}) or {}).get("results_dir", "experiments/results")
    ensure_dir_exists(results_dir)
    return results_dir


def load_dataset_results(results_dir: str, dataset: str) -> pd.DataFrame:
    """
    Load metrics from <dataset>_results.csv (if present).

    Returns
    -------
    pd.DataFrame
        DataFrame of results; empty with the core columns if no file is found.
    """
    df = _safe_load_csv(os.path.join(results_dir, f"{dataset}_results.csv"))
    if df is None:
        return pd.DataFrame(columns=CORE_COLUMNS)
    if "dataset" not in df.columns:
        df["dataset"] = dataset
    return df


def load_model_details(results_dir: str, dataset: str, model_name: str) -> Optional[Dict[str, Any]]:
    """
    Load the detailed metrics JSON written for one dataset/model pair.
    """
    return _safe_load_json(os.path.join(results_dir, f"metrics_{dataset}_{model_name}.json"))


def aggregate_all_results(
    train_config_path: str = "config/train.yaml",
    save: bool = True,
    filename: str = "all_results.csv",
) -> pd.DataFrame:
    """
    Aggregate the results of every dataset into a single comparison table.

    Parameters
    ----------
    train_config_path : str
        Path to config/train.yaml (used to locate results_dir).
    save : bool
        Whether to save the aggregated results as a CSV file.
    filename : str
        Name of the aggregated results CSV file.

    Returns
    -------
    pd.DataFrame
        Combined results with one row per (dataset, model) and columns:
        ["dataset", "model", "accuracy", "precision", "recall", "f1", ...],
        sorted by accuracy (descending).
    """
    results_dir = get_results_dir(train_config_path)

    frames = []
    for dataset in DATASET_NAMES:
        df = load_dataset_results(results_dir, dataset)
        if df.empty:
            continue
        for c in CORE_COLUMNS:
            if c not in df.columns:
                df[c] = None
        extra = [c for c in df.columns if c not in CORE_COLUMNS]
        frames.append(df[CORE_COLUMNS + extra])

    if frames:
        combined = pd.concat(frames, axis=0, ignore_index=True)
        combined = combined.sort_values(by="accuracy", ascending=False, na_position="last")
        combined = combined.reset_index(drop=True)
    else:
        combined = pd.DataFrame(columns=CORE_COLUMNS)

    if save:
        out_path = os.path.join(results_dir, filename)
        combined.to_csv(out_path, index=False)

    return combined


if __name__ == "__main__":
    # Small CLI helper: `python -m boostlab.evaluation.analysis`
    df = aggregate_all_results()
    with pd.option_context("display.max_rows", None, "display.width", 120):
        print(df[CORE_COLUMNS])
