"""
Training and evaluation pipeline for boosted tree ensembles.

This module runs the full iris / German credit experiment for one dataset:

- loading the dataset and its ordered label set
- performing a stratified train–test split
- one-hot encoding categorical columns and standard scaling
- optionally up-sampling minority classes in the training split
- optionally tuning each model with a cross-validated grid search
- training the boosting models configured in config/models.yaml
    * AdaBoost (decision-tree weak learners)
    * Gradient Boosting
    * XGBoost (optional, if xgboost is installed)
- decoding predicted probabilities into category names
- evaluating via the confusion-matrix evaluator (accuracy and per-class
  precision, recall, F1)
- inspecting feature importances and refitting on the top features
- optionally estimating generalization with nested cross-validation
- saving metrics to CSV/JSON under experiments/results/

This module is designed to be callable both as a library function and
as a standalone script (via `python -m boostlab.training.train_boosting`).
"""

from __future__ import annotations

import json
import os
from typing import Dict, Any, List, Optional

import joblib
import pandas as pd
from sklearn.base import clone
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler

from boostlab.data.datasets import load_dataset, load_data_config, DEFAULT_DATA_CONFIG_PATH
from boostlab.data.split import train_test_split_xy
from boostlab.evaluation.confusion import MetricsReport, evaluate, format_report
from boostlab.evaluation.decoding import decode_probabilities
from boostlab.features.preprocessing import (
    encode_and_scale,
    encode_categoricals,
    upsample_minority,
)
from boostlab.models.boosting import (
    DEFAULT_MODEL_CONFIG_PATH,
    build_all_models,
    get_param_grid,
    load_model_config,
)
from boostlab.training.importance import (
    feature_importances,
    prune_and_refit,
    select_features,
)
from boostlab.training.tuning import grid_search, nested_cross_validation
from boostlab.utils.training_utils import (
    DEFAULT_TRAIN_CONFIG_PATH,
    ensure_dir_exists,
    get_logger,
    get_random_state,
    load_train_config,
    seed_everything,
)


# ---------------------------------------------------------------------------
# Core helpers
# ---------------------------------------------------------------------------


def encode_targets(y: pd.Series, labels: List[str]) -> pd.Series:
    """
    Map category names to class ids following the order of ``labels``.

    Training on ids keeps every estimator's ``classes_`` equal to
    ``range(len(labels))``, so probability columns line up with ``labels``.
    """
    mapping = {label: i for i, label in enumerate(labels)}
    ids = y.map(mapping)
    if ids.isna().any():
        unknown = sorted(y[ids.isna()].astype(str).unique())
        raise ValueError(f"Labels outside the label set {labels}: {unknown}")
    return ids.astype(int)


def predict_labels(model, X: pd.DataFrame, labels: List[str]) -> List[str]:
    """
    Predict category names by taking the argmax of ``predict_proba``.
    """
    return decode_probabilities(model.predict_proba(X), labels)


def summarize_report(report: MetricsReport) -> Dict[str, float]:
    """
    Flatten a report into accuracy plus macro-averaged precision, recall and
    F1. Labels whose metric is NaN are left out of the macro average.
    """
    return {
        "accuracy": report.accuracy,
        "precision": float(pd.Series(report.precision, dtype=float).mean()),
        "recall": float(pd.Series(report.recall, dtype=float).mean()),
        "f1": float(pd.Series(report.f1, dtype=float).mean()),
    }


def _cv_pipeline(model, param_grid: Dict[str, List[Any]], scale: bool = True):
    """
    Wrap a model with a median imputer (and a StandardScaler when ``scale``)
    so cross-validation on unprepared data refits them inside every fold.
    Grid keys are prefixed accordingly.
    """
    steps = [("imputer", SimpleImputer(strategy="median"))]
    if scale:
        steps.append(("scaler", StandardScaler()))
    steps.append(("clf", model))
    pipeline = Pipeline(steps)
    grid = {f"clf__{key}": values for key, values in param_grid.items()}
    return pipeline, grid


def _save_json(payload: Dict[str, Any], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, default=str)


# ---------------------------------------------------------------------------
# Training + evaluation
# ---------------------------------------------------------------------------


def train_and_evaluate(
    dataset: str,
    data_config_path: str = DEFAULT_DATA_CONFIG_PATH,
    model_config_path: str = DEFAULT_MODEL_CONFIG_PATH,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> pd.DataFrame:
    """
    End-to-end pipeline to train and evaluate all boosting models on one
    dataset.

    Parameters
    ----------
    dataset : str
        "iris" or "credit".
    data_config_path : str
        Path to config/data.yaml.
    model_config_path : str
        Path to config/models.yaml.
    train_config_path : str
        Path to config/train.yaml.

    Returns
    -------
    pd.DataFrame
        One row per model (plus "<model>_pruned" rows when pruning is
        enabled) with columns:
        ["dataset", "model", "accuracy", "precision", "recall", "f1"].
    """
    train_cfg = load_train_config(train_config_path)
    model_cfg = load_model_config(model_config_path)
    data_cfg = load_data_config(data_config_path)

    seed = get_random_state(train_cfg)
    seed_everything(seed)

    logger = get_logger(
        name=f"train_boosting.{dataset}",
        config=train_cfg,
        log_file_suffix=dataset,
    )

    eval_cfg = train_cfg.get("evaluation", {}) or {}
    save_cfg = train_cfg.get("save", {}) or {}
    dataset_cfg = data_cfg.get(dataset, {}) or {}

    cv_folds = int(eval_cfg.get("cv_folds", 5))
    scoring = str(eval_cfg.get("scoring", "accuracy"))
    n_jobs = eval_cfg.get("n_jobs", None)
    tune = bool(eval_cfg.get("tune", False))
    prune_top_k = dataset_cfg.get("prune_top_k", eval_cfg.get("prune_top_k", None))
    run_nested = bool(eval_cfg.get("nested_cv", False))
    scale = bool(dataset_cfg.get("scale_features", True))
    upsample = bool(dataset_cfg.get("upsample", False))

    # Load and split
    X, y, labels = load_dataset(dataset, config_path=data_config_path)
    logger.info("Loaded %s dataset with %d samples and %d raw features.", dataset, len(X), X.shape[1])
    logger.info("Label set: %s", labels)
    logger.info("Class counts: %s", y.value_counts().to_dict())

    X_train_raw, X_test_raw, y_train, y_test = train_test_split_xy(
        X, y, config_path=data_config_path
    )
    logger.info("Train size: %d, Test size: %d", len(X_train_raw), len(X_test_raw))

    X_train, X_test, _ = encode_and_scale(X_train_raw, X_test_raw, scale=scale)
    logger.info("Prepared feature shapes: X_train=%s, X_test=%s", X_train.shape, X_test.shape)

    y_train_ids = encode_targets(y_train, labels)

    # Grid search sees the original training split; up-sampled copies only
    # feed the final fits.
    X_fit, y_fit_ids = X_train, y_train_ids
    if upsample:
        X_fit, y_fit = upsample_minority(X_train, y_train, random_state=seed)
        y_fit_ids = encode_targets(y_fit, labels)
        logger.info("Up-sampled training split to %d cases: %s", len(X_fit), y_fit.value_counts().to_dict())

    # Build models
    models = build_all_models(config_path=model_config_path)
    logger.info("Built %d boosting models: %s", len(models), list(models.keys()))

    # Prepare output directories
    paths_cfg = train_cfg.get("paths", {}) or {}
    results_dir = paths_cfg.get("results_dir", "experiments/results")
    models_dir = paths_cfg.get("models_dir", "experiments/models")
    figures_dir = paths_cfg.get("figures_dir", "experiments/figures")
    ensure_dir_exists(results_dir)

    save_models = bool(save_cfg.get("save_models", False))
    save_figures = bool(save_cfg.get("save_figures", False))
    overwrite = bool(save_cfg.get("overwrite_existing", True))

    records: List[Dict[str, Any]] = []

    for model_name, base_model in models.items():
        logger.info("=" * 80)
        logger.info("Training model: %s", model_name)

        param_grid = get_param_grid(model_cfg, model_name)
        details: Dict[str, Any] = {"dataset": dataset, "model": model_name}

        if tune and param_grid:
            search = grid_search(
                base_model,
                param_grid,
                X_train,
                y_train_ids,
                cv=cv_folds,
                scoring=scoring,
                n_jobs=n_jobs,
                random_state=seed,
            )
            model = search.best_estimator_
            details["best_params"] = search.best_params_
            details["best_cv_score"] = float(search.best_score_)
            if upsample:
                model = clone(model).fit(X_fit, y_fit_ids)
        else:
            model = base_model
            model.fit(X_fit, y_fit_ids)
        logger.info("Model '%s' trained.", model_name)

        y_pred = predict_labels(model, X_test, labels)
        report = evaluate(y_test.tolist(), y_pred, labels)
        summary = summarize_report(report)
        logger.info(
            "Metrics for %s - acc: %.4f, prec: %.4f, rec: %.4f, f1: %.4f",
            model_name,
            summary["accuracy"],
            summary["precision"],
            summary["recall"],
            summary["f1"],
        )
        logger.info("\n%s", format_report(report))

        records.append({"dataset": dataset, "model": model_name, **summary})
        details["report"] = report.as_dict()

        # Feature importances and pruning
        importances = feature_importances(model, list(X_train.columns))
        importances.to_csv(
            os.path.join(results_dir, f"importances_{dataset}_{model_name}.csv"),
            index=False,
        )
        logger.info("Top features for %s:\n%s", model_name, importances.head(10).to_string(index=False))

        if prune_top_k is not None and int(prune_top_k) < X_train.shape[1]:
            kept = select_features(importances, top_k=int(prune_top_k))
            pruned_model, X_test_pruned = prune_and_refit(
                model, X_fit, y_fit_ids, X_test, kept
            )
            pruned_report = evaluate(
                y_test.tolist(), predict_labels(pruned_model, X_test_pruned, labels), labels
            )
            pruned_summary = summarize_report(pruned_report)
            logger.info(
                "Pruned %s to %d features - acc: %.4f (full model: %.4f)",
                model_name,
                len(kept),
                pruned_summary["accuracy"],
                summary["accuracy"],
            )
            records.append({"dataset": dataset, "model": f"{model_name}_pruned", **pruned_summary})
            details["pruned"] = {"features": kept, "report": pruned_report.as_dict()}

        # Nested cross-validation on the full data; numeric imputation and
        # scaling happen inside each fold
        if run_nested and param_grid:
            X_all = encode_categoricals(X, impute_numeric=False)
            y_all = encode_targets(y, labels)
            estimator, grid = _cv_pipeline(base_model, param_grid, scale=scale)
            details["nested_cv"] = nested_cross_validation(
                estimator,
                grid,
                X_all,
                y_all,
                inner_cv=int(eval_cfg.get("inner_cv_folds", 3)),
                outer_cv=cv_folds,
                scoring=scoring,
                n_jobs=n_jobs,
                random_state=seed,
            )

        metrics_json_path = os.path.join(results_dir, f"metrics_{dataset}_{model_name}.json")
        _save_json(details, metrics_json_path)
        logger.info("Saved metrics JSON for %s to %s", model_name, metrics_json_path)

        if save_figures:
            from boostlab.evaluation.plots import plot_confusion_matrix, plot_feature_importances

            ensure_dir_exists(figures_dir)
            plot_confusion_matrix(
                report.confusion_matrix,
                labels=labels,
                title=f"{dataset}: {model_name}",
                out_path=os.path.join(figures_dir, f"cm_{dataset}_{model_name}.png"),
                show=False,
            )
            plot_feature_importances(
                importances,
                top_k=15,
                title=f"{dataset}: {model_name} feature importances",
                out_path=os.path.join(figures_dir, f"importances_{dataset}_{model_name}.png"),
                show=False,
            )

        if save_models:
            ensure_dir_exists(models_dir)
            model_path = os.path.join(models_dir, f"model_{dataset}_{model_name}.joblib")
            if not os.path.exists(model_path) or overwrite:
                joblib.dump(model, model_path)
                logger.info("Saved trained model '%s' to %s", model_name, model_path)
            else:
                logger.info(
                    "Model file already exists and overwrite_existing is False: %s",
                    model_path,
                )

    # Aggregate metrics into a DataFrame and save CSV
    metrics_df = pd.DataFrame(
        records, columns=["dataset", "model", "accuracy", "precision", "recall", "f1"]
    )
    csv_path = os.path.join(results_dir, f"{dataset}_results.csv")
    metrics_df.to_csv(csv_path, index=False)
    logger.info("Saved aggregated %s metrics to %s", dataset, csv_path)

    return metrics_df


def load_trained_model(
    dataset: str,
    model_name: str,
    train_config_path: str = DEFAULT_TRAIN_CONFIG_PATH,
) -> Optional[object]:
    """
    Load a model saved by :func:`train_and_evaluate`, or None if absent.
    """
    train_cfg = load_train_config(train_config_path)
    models_dir = (train_cfg.get("paths", {}) or {}).get("models_dir", "experiments/models")
    model_path = os.path.join(models_dir, f"model_{dataset}_{model_name}.joblib")
    if not os.path.exists(model_path):
        return None
    return joblib.load(model_path)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main() -> None:
    """
    Main entry point when running this module as a script.
    """
    for dataset in ("iris", "credit"):
        _ = train_and_evaluate(dataset)


if __name__ == "__main__":
    main()
