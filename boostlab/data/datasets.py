"""
Dataset loading utilities for the iris and German credit experiments.

This module is responsible for:
- reading the dataset configuration from config/data.yaml
- loading iris from scikit-learn's bundled copy
- loading the German credit CSV into a pandas DataFrame
- normalizing the label column to category names ("bad", "good")
- applying basic cleaning (drop NA labels, drop duplicates) as configured

Every loader returns ``(X, y, labels)`` where ``y`` holds category names
and ``labels`` is the ordered label set shared by the model, the
prediction decoder and the confusion-matrix evaluator.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Dict, List, Tuple

import pandas as pd
from sklearn.datasets import load_iris

from boostlab.utils.training_utils import load_yaml_file


DEFAULT_DATA_CONFIG_PATH = "config/data.yaml"
DATASET_NAMES = ("iris", "credit")

logger = logging.getLogger(__name__)


def load_data_config(config_path: str = DEFAULT_DATA_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the full data configuration dictionary.

    Parameters
    ----------
    config_path : str, optional
        Path to the data YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Dictionary containing the "iris", "credit", and "split" sections.
    """
    cfg = load_yaml_file(config_path)

    # Provide helpful errors if sections are missing.
    for section in ("iris", "credit", "split"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in data config: {config_path}')

    return cfg


def load_iris_dataset(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Tuple[pd.DataFrame, pd.Series, List[str]]:
    """
    Load the iris species dataset.

    Returns
    -------
    Tuple[pd.DataFrame, pd.Series, List[str]]
        - X: four numeric measurement columns
        - y: species names ("setosa", "versicolor", "virginica")
        - labels: species names in class-id order
    """
    cfg = load_data_config(config_path)
    iris_cfg = cfg["iris"] or {}

    bunch = load_iris(as_frame=True)
    X = bunch.data.copy()
    labels = [str(name) for name in bunch.target_names]

    y = bunch.target.map(dict(enumerate(labels))).rename(
        iris_cfg.get("label_column", "species")
    )

    return X.reset_index(drop=True), y.reset_index(drop=True), labels


def load_credit_dataset(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Tuple[pd.DataFrame, pd.Series, List[str]]:
    """
    Load the German credit risk dataset according to the configuration.

    This function:
    - reads the CSV specified in config/data.yaml ("credit" section)
    - ensures the label column exists
    - drops rows without a label and, optionally, duplicate rows
    - maps raw label values onto category names via "label_mapping"
      (e.g. the UCI coding {1: "good", 2: "bad"})
    - drops configured identifier columns (e.g. an unnamed CSV index)

    Returns
    -------
    Tuple[pd.DataFrame, pd.Series, List[str]]
        - X: feature columns (numeric and categorical, not yet encoded)
        - y: category names
        - labels: ordered label set from config (default ["bad", "good"])

    Raises
    ------
    FileNotFoundError
        If the dataset CSV file cannot be found.
    ValueError
        If the label column is missing or contains unknown values.
    """
    cfg = load_data_config(config_path)
    credit_cfg = cfg["credit"] or {}

    csv_path = credit_cfg.get("path", "data/raw/german_credit_data.csv")
    label_column = credit_cfg.get("label_column", "Risk")
    labels = [str(label) for label in credit_cfg.get("labels", ["bad", "good"])]
    label_mapping = credit_cfg.get("label_mapping") or {}
    drop_columns = list(credit_cfg.get("drop_columns", []) or [])
    drop_duplicates = bool(credit_cfg.get("drop_duplicates", False))

    if not os.path.exists(csv_path):
        raise FileNotFoundError(f"Dataset CSV not found at: {csv_path}")

    df = pd.read_csv(csv_path)

    if label_column not in df.columns:
        raise ValueError(
            f"Missing label column '{label_column}' in dataset CSV. "
            f"Available columns: {list(df.columns)}"
        )

    df = df.dropna(subset=[label_column])
    if drop_duplicates:
        df = df.drop_duplicates(keep="first")

    raw_labels = df[label_column]
    if pd.api.types.is_float_dtype(raw_labels) and (raw_labels % 1 == 0).all():
        # A missing label makes read_csv parse integer codes as floats.
        raw_labels = raw_labels.astype("int64")

    if label_mapping:
        # YAML keys may be ints or strings; compare on the string form.
        str_mapping = {str(k): str(v) for k, v in label_mapping.items()}
        y = raw_labels.astype(str).map(str_mapping)
        unknown = sorted(raw_labels[y.isna()].astype(str).unique())
    else:
        y = raw_labels.astype(str)
        unknown = sorted(set(y.unique()) - set(labels))

    if unknown:
        raise ValueError(
            f"Unknown value(s) in label column '{label_column}': {unknown}. "
            f"Expected labels: {labels}"
        )

    mapped_unknown = sorted(set(y.unique()) - set(labels))
    if mapped_unknown:
        raise ValueError(
            f"Label mapping produced names outside the label set: {mapped_unknown}. "
            f"Expected labels: {labels}"
        )

    present_drops = [c for c in drop_columns if c in df.columns]
    X = df.drop(columns=[label_column] + present_drops)

    logger.debug("Loaded credit data from %s: %d rows, %d features", csv_path, len(X), X.shape[1])

    return X.reset_index(drop=True), y.rename("risk").reset_index(drop=True), labels


def load_dataset(
    name: str,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Tuple[pd.DataFrame, pd.Series, List[str]]:
    """
    Load a dataset by name ("iris" or "credit").
    """
    key = name.lower()
    if key == "iris":
        return load_iris_dataset(config_path)
    if key == "credit":
        return load_credit_dataset(config_path)
    raise ValueError(f"Unknown dataset '{name}'. Expected one of: {list(DATASET_NAMES)}.")
