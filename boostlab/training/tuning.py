"""
Hyperparameter search and generalization checks.

- grid_search: exhaustive search with stratified k-fold cross-validation
- cv_results_frame: tidy view of GridSearchCV.cv_results_
- nested_cross_validation: an outer CV loop around the inner grid search,
  giving an estimate of how the *tuning procedure* generalizes rather than
  the optimistic best inner score.

All search and scoring internals are scikit-learn's.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from sklearn.base import clone
from sklearn.model_selection import GridSearchCV, StratifiedKFold, cross_validate


logger = logging.getLogger(__name__)


def make_cv(n_splits: int = 5, random_state: int = 42) -> StratifiedKFold:
    """Shuffled stratified k-fold splitter."""
    return StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=random_state)


def grid_search(
    estimator,
    param_grid: Dict[str, List[Any]],
    X,
    y,
    cv: int = 5,
    scoring: str = "accuracy",
    n_jobs: Optional[int] = None,
    random_state: int = 42,
) -> GridSearchCV:
    """
    Fit a GridSearchCV over ``param_grid`` and return it.

    Parameters
    ----------
    estimator : sklearn estimator
        Unfitted model; it is cloned, never fitted in place.
    param_grid : Dict[str, List[Any]]
        Search grid. Must be non-empty.
    X, y : array-like
        Training data.
    cv : int
        Number of stratified folds.
    scoring : str
        scikit-learn scoring name.
    n_jobs : Optional[int]
        Parallel jobs for the search.
    random_state : int
        Seed for fold shuffling.

    Returns
    -------
    GridSearchCV
        Fitted search; ``best_estimator_`` is refit on all of X, y.
    """
    if not param_grid:
        raise ValueError("param_grid is empty; nothing to search.")

    search = GridSearchCV(
        estimator=clone(estimator),
        param_grid=param_grid,
        scoring=scoring,
        cv=make_cv(cv, random_state),
        n_jobs=n_jobs,
        refit=True,
    )
    search.fit(X, y)
    logger.info(
        "Grid search best %s=%.4f with params %s",
        scoring,
        search.best_score_,
        search.best_params_,
    )
    return search


def cv_results_frame(search: GridSearchCV) -> pd.DataFrame:
    """
    Return the parameter combinations with mean/std test score and rank,
    sorted best first.
    """
    results = pd.DataFrame(search.cv_results_)
    cols = ["params", "mean_test_score", "std_test_score", "rank_test_score"]
    return results[cols].sort_values("rank_test_score").reset_index(drop=True)


def nested_cross_validation(
    estimator,
    param_grid: Dict[str, List[Any]],
    X,
    y,
    inner_cv: int = 3,
    outer_cv: int = 5,
    scoring: str = "accuracy",
    n_jobs: Optional[int] = None,
    random_state: int = 42,
) -> Dict[str, Any]:
    """
    Estimate generalization of grid-search tuning with nested CV.

    Each outer fold runs a full inner grid search on its training part and
    scores the refit best model on the held-out part.

    Returns
    -------
    Dict[str, Any]
        {
            "scores": per-outer-fold test scores,
            "mean": mean score,
            "std": standard deviation,
            "best_params": best inner parameters per outer fold,
            "scoring": scoring name,
        }
    """
    if not param_grid:
        raise ValueError("param_grid is empty; nothing to search.")

    inner = GridSearchCV(
        estimator=clone(estimator),
        param_grid=param_grid,
        scoring=scoring,
        cv=make_cv(inner_cv, random_state),
        n_jobs=n_jobs,
    )
    result = cross_validate(
        inner,
        X,
        y,
        cv=make_cv(outer_cv, random_state),
        scoring=scoring,
        return_estimator=True,
        n_jobs=n_jobs,
    )

    scores = np.asarray(result["test_score"], dtype=float)
    best_params = [fitted.best_params_ for fitted in result["estimator"]]
    logger.info(
        "Nested CV %s: %.4f +/- %.4f over %d outer folds",
        scoring,
        scores.mean(),
        scores.std(),
        len(scores),
    )
    return {
        "scores": scores.tolist(),
        "mean": float(scores.mean()),
        "std": float(scores.std()),
        "best_params": best_params,
        "scoring": scoring,
    }
