"""
Shared fixtures: small YAML configs and a synthetic German credit CSV
written to a temporary directory, so the suite runs without any raw data.
"""

from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import yaml


def _write_yaml(path, payload):
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(payload, f)
    return str(path)


@pytest.fixture
def credit_csv(tmp_path):
    """
    A 120-row frame shaped like the Kaggle German credit export:
    numeric and categorical columns, some missing values, and a
    good/bad Risk column with a 2:1 imbalance.
    """
    rng = np.random.RandomState(0)
    n = 120
    risk = np.array(["good"] * 80 + ["bad"] * 40)
    duration = np.where(risk == "bad", rng.randint(24, 60, n), rng.randint(6, 30, n))
    amount = np.where(risk == "bad", rng.randint(4000, 12000, n), rng.randint(500, 5000, n))
    df = pd.DataFrame(
        {
            "Unnamed: 0": np.arange(n),
            "Age": rng.randint(19, 75, n),
            "Sex": rng.choice(["male", "female"], n),
            "Job": rng.randint(0, 4, n),
            "Housing": rng.choice(["own", "rent", "free"], n),
            "Saving accounts": rng.choice(["little", "moderate", "rich", None], n),
            "Checking account": rng.choice(["little", "moderate", None], n),
            "Credit amount": amount,
            "Duration": duration,
            "Purpose": rng.choice(["car", "radio/TV", "education", "business"], n),
            "Risk": risk,
        }
    )
    path = tmp_path / "german_credit_data.csv"
    df.to_csv(path, index=False)
    return str(path)


@pytest.fixture
def data_config(tmp_path, credit_csv):
    payload = {
        "iris": {"label_column": "species", "prune_top_k": 2, "scale_features": True},
        "credit": {
            "path": credit_csv,
            "label_column": "Risk",
            "labels": ["bad", "good"],
            "label_mapping": {},
            "drop_columns": ["Unnamed: 0"],
            "drop_duplicates": False,
            "scale_features": True,
            "upsample": True,
        },
        "split": {"test_size": 0.3, "stratify": True, "random_state": 42},
    }
    return _write_yaml(tmp_path / "data.yaml", payload)


@pytest.fixture
def model_config(tmp_path):
    payload = {
        "general": {"random_state": 42, "enabled": ["adaboost", "gradient_boosting"]},
        "models": {
            "adaboost": {
                "n_estimators": 20,
                "learning_rate": 1.0,
                "max_depth": 1,
                "param_grid": {"n_estimators": [10, 20], "estimator__max_depth": [1, 2]},
            },
            "gradient_boosting": {
                "n_estimators": 20,
                "max_depth": 2,
                "param_grid": {"n_estimators": [10, 20]},
            },
        },
    }
    return _write_yaml(tmp_path / "models.yaml", payload)


@pytest.fixture
def train_config(tmp_path):
    out = tmp_path / "experiments"
    payload = {
        "general": {"random_state": 42},
        "paths": {
            "results_dir": str(out / "results"),
            "models_dir": str(out / "models"),
            "figures_dir": str(out / "figures"),
            "logs_dir": str(out / "logs"),
        },
        "logging": {"level": "WARNING", "to_file": False},
        "evaluation": {
            "scoring": "accuracy",
            "cv_folds": 3,
            "inner_cv_folds": 2,
            "tune": True,
            "prune_top_k": 5,
            "nested_cv": True,
        },
        "save": {"save_models": True, "save_figures": True, "overwrite_existing": True},
    }
    return _write_yaml(tmp_path / "train.yaml", payload)
