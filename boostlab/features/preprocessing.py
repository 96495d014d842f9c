"""
Tabular feature preprocessing for the boosting experiments.

Pipeline steps, in the order the training code applies them:

1. encode_categoricals   - impute (training medians) and one-hot encode
2. align_columns         - make the test frame match the train dummies
3. fit_scaler / scale_features
                         - StandardScaler fitted on the training split only
4. upsample_minority     - optional class balancing of the training split

Everything works on pandas DataFrames so that feature names survive to the
feature-importance and pruning steps.
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd
from sklearn.preprocessing import StandardScaler
from sklearn.utils import resample


MISSING_CATEGORY = "unknown"

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def numeric_fill_values(X: pd.DataFrame) -> Dict[str, float]:
    """
    Column medians of the numeric columns, used to impute missing values.

    Computed on the training split and reused for every other split.
    """
    categorical_cols = X.select_dtypes(include=["object", "category", "bool"]).columns
    numeric = X.drop(columns=categorical_cols)
    return {col: float(value) for col, value in numeric.median().items()}


def encode_categoricals(
    X: pd.DataFrame,
    drop_first: bool = False,
    fill_values: Optional[Dict[str, float]] = None,
    impute_numeric: bool = True,
) -> pd.DataFrame:
    """
    Impute missing values and one-hot encode categorical columns.

    Categorical (object / category / bool) columns get missing values
    replaced by "unknown" before encoding; numeric columns get the value
    from ``fill_values``, or the frame's own column median when no fill
    values are given.

    Parameters
    ----------
    X : pd.DataFrame
        Raw feature frame.
    drop_first : bool
        Passed to ``pd.get_dummies``.
    fill_values : Optional[Dict[str, float]]
        Per-column numeric fill values, usually from
        :func:`numeric_fill_values` on the training split.
    impute_numeric : bool
        If False, missing numeric values are left as NaN for a downstream
        imputer (e.g. inside a cross-validation pipeline).

    Returns
    -------
    pd.DataFrame
        Numeric-only frame.
    """
    df = X.copy()

    categorical_cols = df.select_dtypes(include=["object", "category", "bool"]).columns.tolist()
    numeric_cols = [c for c in df.columns if c not in categorical_cols]

    for col in categorical_cols:
        df[col] = df[col].astype("object").where(df[col].notna(), MISSING_CATEGORY).astype(str)

    if impute_numeric:
        if fill_values is None:
            fill_values = numeric_fill_values(df)
        for col in numeric_cols:
            if df[col].isna().any():
                if col not in fill_values:
                    raise ValueError(f"No fill value for numeric column '{col}'.")
                df[col] = df[col].fillna(fill_values[col])

    if categorical_cols:
        df = pd.get_dummies(df, columns=categorical_cols, drop_first=drop_first, dtype=float)
        logger.debug("One-hot encoded %d categorical columns", len(categorical_cols))

    return df


def align_columns(
    X_train: pd.DataFrame,
    X_test: pd.DataFrame,
) -> pd.DataFrame:
    """
    Reindex ``X_test`` onto the columns of ``X_train``.

    Dummy columns that only appear in the test split are dropped; columns
    missing from the test split are filled with 0.
    """
    return X_test.reindex(columns=X_train.columns, fill_value=0)


# ---------------------------------------------------------------------------
# Scaling
# ---------------------------------------------------------------------------


def fit_scaler(X_train: pd.DataFrame) -> StandardScaler:
    """
    Fit a StandardScaler on the training features.
    """
    scaler = StandardScaler()
    scaler.fit(X_train.values)
    return scaler


def scale_features(X: pd.DataFrame, scaler: StandardScaler) -> pd.DataFrame:
    """
    Apply a fitted scaler and return a DataFrame with the original columns.
    """
    scaled = scaler.transform(X.values)
    return pd.DataFrame(scaled, columns=X.columns, index=X.index)


def encode_and_scale(
    X_train: pd.DataFrame,
    X_test: pd.DataFrame,
    scale: bool = True,
) -> Tuple[pd.DataFrame, pd.DataFrame, Optional[StandardScaler]]:
    """
    Encode both splits, align the test columns and optionally scale.

    Missing numeric values in both splits are filled with the training
    medians.

    Returns
    -------
    Tuple[pd.DataFrame, pd.DataFrame, Optional[StandardScaler]]
        (X_train_prepared, X_test_prepared, scaler or None)
    """
    fill_values = numeric_fill_values(X_train)
    X_train_enc = encode_categoricals(X_train, fill_values=fill_values)
    X_test_enc = align_columns(
        X_train_enc, encode_categoricals(X_test, fill_values=fill_values)
    )

    if not scale:
        return X_train_enc, X_test_enc, None

    scaler = fit_scaler(X_train_enc)
    return (
        scale_features(X_train_enc, scaler),
        scale_features(X_test_enc, scaler),
        scaler,
    )


# ---------------------------------------------------------------------------
# Class balancing
# ---------------------------------------------------------------------------


def upsample_minority(
    X: pd.DataFrame,
    y: pd.Series,
    random_state: int = 42,
) -> Tuple[pd.DataFrame, pd.Series]:
    """
    Up-sample every non-majority class to the size of the majority class.

    Minority cases are duplicated by sampling with replacement, then the
    result is shuffled.

    Parameters
    ----------
    X : pd.DataFrame
        Training features.
    y : pd.Series
        Training labels aligned with X.
    random_state : int
        Seed for resampling and shuffling.

    Returns
    -------
    Tuple[pd.DataFrame, pd.Series]
        Balanced (X, y) with a fresh RangeIndex.
    """
    if len(X) != len(y):
        raise ValueError(f"X has {len(X)} rows but y has {len(y)} labels.")

    X = X.reset_index(drop=True)
    y = y.reset_index(drop=True)

    counts = y.value_counts()
    target = int(counts.max())

    parts_X = []
    parts_y = []
    for label, count in counts.items():
        mask = (y == label).to_numpy()
        X_cls = X[mask]
        y_cls = y[mask]
        if count < target:
            X_cls, y_cls = resample(
                X_cls,
                y_cls,
                replace=True,
                n_samples=target,
                random_state=random_state,
            )
            logger.debug("Up-sampled class %r from %d to %d cases", label, count, target)
        parts_X.append(X_cls)
        parts_y.append(y_cls)

    X_bal = pd.concat(parts_X, axis=0)
    y_bal = pd.concat(parts_y, axis=0)

    order = np.random.RandomState(random_state).permutation(len(X_bal))
    X_bal = X_bal.iloc[order].reset_index(drop=True)
    y_bal = y_bal.iloc[order].reset_index(drop=True)
    return X_bal, y_bal
