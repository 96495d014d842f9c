"""
Feature-importance inspection and feature pruning for fitted ensembles.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

import pandas as pd
from sklearn.base import clone
from sklearn.pipeline import Pipeline


def _final_estimator(model):
    if isinstance(model, Pipeline):
        return model.steps[-1][1]
    return model


def feature_importances(model, feature_names: Sequence[str]) -> pd.DataFrame:
    """
    Return a DataFrame of (feature, importance) sorted by importance, highest
    first.

    Raises
    ------
    ValueError
        If the model has no ``feature_importances_`` (e.g. not fitted) or the
        number of names does not match.
    """
    estimator = _final_estimator(model)
    importances = getattr(estimator, "feature_importances_", None)
    if importances is None:
        raise ValueError(
            f"{type(estimator).__name__} exposes no feature_importances_; "
            "is the model fitted?"
        )
    if len(importances) != len(feature_names):
        raise ValueError(
            f"Model reports {len(importances)} importances but "
            f"{len(feature_names)} feature names were given."
        )

    df = pd.DataFrame({"feature": list(feature_names), "importance": list(importances)})
    return df.sort_values("importance", ascending=False, kind="mergesort").reset_index(drop=True)


def select_features(
    importances: pd.DataFrame,
    top_k: Optional[int] = None,
    min_importance: Optional[float] = None,
) -> List[str]:
    """
    Choose the features to keep.

    ``top_k`` keeps the k most important features; ``min_importance`` keeps
    those at or above the threshold. Both may be combined. The single most
    important feature is always kept so a model can still be fitted.
    """
    if importances.empty:
        raise ValueError("No feature importances given.")
    if top_k is not None and top_k < 1:
        raise ValueError(f"top_k must be >= 1, got {top_k}.")

    ranked = importances.sort_values("importance", ascending=False, kind="mergesort")
    if min_importance is not None:
        kept = ranked[ranked["importance"] >= min_importance]
    else:
        kept = ranked
    if top_k is not None:
        kept = kept.head(top_k)
    if kept.empty:
        kept = ranked.head(1)
    return kept["feature"].tolist()


def prune_and_refit(
    model,
    X_train: pd.DataFrame,
    y_train,
    X_test: pd.DataFrame,
    features: Sequence[str],
) -> Tuple[object, pd.DataFrame]:
    """
    Fit a fresh clone of ``model`` on the selected columns only.

    Returns
    -------
    Tuple[object, pd.DataFrame]
        (fitted pruned model, X_test restricted to the same columns)
    """
    missing = [f for f in features if f not in X_train.columns]
    if missing:
        raise ValueError(f"Unknown feature(s) for pruning: {missing}")

    columns = list(features)
    pruned = clone(model)
    pruned.fit(X_train[columns], y_train)
    return pruned, X_test[columns]
