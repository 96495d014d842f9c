"""
Boosted tree ensemble builders.

This module provides helper functions to construct the boosting models
compared in the iris and German credit experiments:

- AdaBoost over shallow decision trees (ADA)
- Gradient Boosting (GB)
- XGBoost (XGB, optional, if xgboost is installed)

Hyperparameters and search grids are read from config/models.yaml so they
can be tuned without modifying code. The training pipeline (fit/predict,
scaling, metrics) is implemented in boostlab/training/train_boosting.py.
"""

from __future__ import annotations

from typing import Dict, Any, List

from sklearn.ensemble import AdaBoostClassifier, GradientBoostingClassifier
from sklearn.tree import DecisionTreeClassifier

from boostlab.utils.training_utils import load_yaml_file

# XGBoost is an external dependency; we import it lazily and handle
# the case where it is unavailable.
try:
    from xgboost import XGBClassifier  # type: ignore

    _XGB_AVAILABLE = True
except ImportError:  # pragma: no cover
    XGBClassifier = None  # type: ignore
    _XGB_AVAILABLE = False


DEFAULT_MODEL_CONFIG_PATH = "config/models.yaml"
MODEL_NAMES = ("adaboost", "gradient_boosting", "xgboost")


# ---------------------------------------------------------------------------
# Config loading
# ---------------------------------------------------------------------------


def load_model_config(config_path: str = DEFAULT_MODEL_CONFIG_PATH) -> Dict[str, Any]:
    """
    Load and return the model configuration dictionary.

    Parameters
    ----------
    config_path : str
        Path to the model YAML configuration file.

    Returns
    -------
    Dict[str, Any]
        Parsed configuration with "general" and "models" sections.

    Raises
    ------
    FileNotFoundError
        If the YAML file does not exist.
    ValueError
        If the YAML file is empty or cannot be parsed.
    KeyError
        If required sections are missing.
    """
    cfg = load_yaml_file(config_path)

    for section in ("general", "models"):
        if section not in cfg:
            raise KeyError(f'Missing "{section}" section in model config: {config_path}')

    return cfg


def xgboost_available() -> bool:
    return _XGB_AVAILABLE


# ---------------------------------------------------------------------------
# Model builder helpers
# ---------------------------------------------------------------------------


def _model_section(cfg: Dict[str, Any], name: str) -> Dict[str, Any]:
    return (cfg.get("models", {}) or {}).get(name, {}) or {}


def _random_state(cfg: Dict[str, Any]) -> int:
    return int((cfg.get("general", {}) or {}).get("random_state", 42))


def build_adaboost(cfg: Dict[str, Any]) -> AdaBoostClassifier:
    """
    Build an AdaBoost ensemble whose weak learner is a depth-limited tree.
    """
    mcfg = _model_section(cfg, "adaboost")
    weak_learner = DecisionTreeClassifier(
        max_depth=int(mcfg.get("max_depth", 1)),
        min_samples_leaf=int(mcfg.get("min_samples_leaf", 1)),
        random_state=_random_state(cfg),
    )
    return AdaBoostClassifier(
        estimator=weak_learner,
        n_estimators=int(mcfg.get("n_estimators", 100)),
        learning_rate=float(mcfg.get("learning_rate", 1.0)),
        random_state=_random_state(cfg),
    )


def build_gradient_boosting(cfg: Dict[str, Any]) -> GradientBoostingClassifier:
    mcfg = _model_section(cfg, "gradient_boosting")
    return GradientBoostingClassifier(
        n_estimators=int(mcfg.get("n_estimators", 100)),
        learning_rate=float(mcfg.get("learning_rate", 0.1)),
        max_depth=int(mcfg.get("max_depth", 3)),
        subsample=float(mcfg.get("subsample", 1.0)),
        min_samples_split=int(mcfg.get("min_samples_split", 2)),
        min_samples_leaf=int(mcfg.get("min_samples_leaf", 1)),
        random_state=_random_state(cfg),
    )


def build_xgboost(cfg: Dict[str, Any]) -> XGBClassifier:
    if not _XGB_AVAILABLE:
        raise ImportError(
            "xgboost is not installed. Please install it or remove xgboost "
            "from the enabled model list."
        )

    mcfg = _model_section(cfg, "xgboost")
    return XGBClassifier(
        n_estimators=int(mcfg.get("n_estimators", 100)),
        max_depth=int(mcfg.get("max_depth", 3)),
        learning_rate=float(mcfg.get("learning_rate", 0.1)),
        subsample=float(mcfg.get("subsample", 1.0)),
        colsample_bytree=float(mcfg.get("colsample_bytree", 1.0)),
        reg_lambda=float(mcfg.get("reg_lambda", 1.0)),
        reg_alpha=float(mcfg.get("reg_alpha", 0.0)),
        n_jobs=int(mcfg.get("n_jobs", 1)),
        random_state=_random_state(cfg),
    )


_BUILDERS = {
    "adaboost": build_adaboost,
    "gradient_boosting": build_gradient_boosting,
    "xgboost": build_xgboost,
}


def build_model(name: str, cfg: Dict[str, Any]):
    """
    Build a single model by name.
    """
    if name not in _BUILDERS:
        raise ValueError(f"Unknown model '{name}'. Expected one of: {list(MODEL_NAMES)}.")
    return _BUILDERS[name](cfg)


def get_param_grid(cfg: Dict[str, Any], model_name: str) -> Dict[str, List[Any]]:
    """
    Return the hyperparameter search grid configured for ``model_name``.

    Grids live under ``models.<name>.param_grid`` and use estimator
    parameter names (nested names such as ``estimator__max_depth`` are
    allowed for AdaBoost's weak learner).
    """
    grid = _model_section(cfg, model_name).get("param_grid", {}) or {}
    return {key: list(values) for key, values in grid.items()}


# ---------------------------------------------------------------------------
# Public factory: build all models
# ---------------------------------------------------------------------------


def build_all_models(
    config_path: str = DEFAULT_MODEL_CONFIG_PATH,
) -> Dict[str, object]:
    """
    Build all enabled boosting models and return them in a dictionary.

    Parameters
    ----------
    config_path : str
        Path to the model YAML configuration.

    Returns
    -------
    Dict[str, object]
        Dictionary mapping model names to unfitted estimators, in the order
        of ``general.enabled`` (default: all of MODEL_NAMES). xgboost is
        skipped when it is not installed.
    """
    cfg = load_model_config(config_path)
    enabled = list((cfg["general"] or {}).get("enabled", MODEL_NAMES))

    models: Dict[str, object] = {}
    for name in enabled:
        # XGBoost is optional; skip if not available.
        if name == "xgboost" and not _XGB_AVAILABLE:
            continue
        models[name] = build_model(name, cfg)

    return models
