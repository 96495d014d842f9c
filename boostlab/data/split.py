"""
Train/test splitting utilities.

This module provides a simple interface to split a feature frame and its
labels into training and test sets, using the configuration defined in
config/data.yaml ("split" section).

We rely on scikit-learn's train_test_split and support:
- stratified splitting on the label series
- configurable test_size and random_state
"""

from __future__ import annotations

from typing import Tuple, Dict, Any

import pandas as pd
from sklearn.model_selection import train_test_split

from boostlab.data.datasets import load_data_config, DEFAULT_DATA_CONFIG_PATH


def get_split_config(
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Dict[str, Any]:
    """
    Retrieve the 'split' section from the data configuration.
    """
    cfg = load_data_config(config_path)
    return cfg["split"] or {}


def train_test_split_xy(
    X: pd.DataFrame,
    y: pd.Series,
    config_path: str = DEFAULT_DATA_CONFIG_PATH,
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]:
    """
    Split features and labels into train and test sets according to
    config/data.yaml.

    Parameters
    ----------
    X : pd.DataFrame
        Feature frame.
    y : pd.Series
        Label series aligned with X.
    config_path : str
        Path to the data YAML configuration.

    Returns
    -------
    Tuple[pd.DataFrame, pd.DataFrame, pd.Series, pd.Series]
        (X_train, X_test, y_train, y_test)

    Raises
    ------
    ValueError
        If X and y differ in length, or if stratified splitting is requested
        but the label distribution is incompatible (e.g., a class with a
        single case).
    """
    if len(X) != len(y):
        raise ValueError(f"X has {len(X)} rows but y has {len(y)} labels.")

    split_cfg = get_split_config(config_path)
    test_size = float(split_cfg.get("test_size", 0.3))
    stratify_enabled = bool(split_cfg.get("stratify", True))
    random_state = int(split_cfg.get("random_state", 42))

    X_train, X_test, y_train, y_test = train_test_split(
        X,
        y,
        test_size=test_size,
        random_state=random_state,
        stratify=y if stratify_enabled else None,
        shuffle=True,
    )

    # Reset indices for neatness
    return (
        X_train.reset_index(drop=True),
        X_test.reset_index(drop=True),
        y_train.reset_index(drop=True),
        y_test.reset_index(drop=True),
    )
