"""
Tests for data loading and splitting utilities.

These tests validate that:

- the data configuration can be loaded and is validated
- iris loads with its three species names in class-id order
- the credit loader decodes labels, drops identifier columns and rejects
  unknown label values
- the stratified split keeps class proportions
"""

from __future__ import annotations

import pandas as pd
import pytest
import yaml

from boostlab.data.datasets import (
    load_credit_dataset,
    load_data_config,
    load_dataset,
    load_iris_dataset,
)
from boostlab.data.split import train_test_split_xy


def test_repository_data_config_has_required_sections():
    cfg = load_data_config("config/data.yaml")

    assert "iris" in cfg
    assert "credit" in cfg
    assert "split" in cfg
    assert cfg["credit"]["labels"] == ["bad", "good"]


def test_missing_config_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_data_config(str(tmp_path / "nope.yaml"))


def test_missing_section(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text(yaml.safe_dump({"iris": {}, "credit": {}}), encoding="utf-8")
    with pytest.raises(KeyError, match="split"):
        load_data_config(str(path))


def test_empty_config_file(tmp_path):
    path = tmp_path / "data.yaml"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        load_data_config(str(path))


def test_load_iris(data_config):
    X, y, labels = load_iris_dataset(data_config)

    assert labels == ["setosa", "versicolor", "virginica"]
    assert X.shape == (150, 4)
    assert len(y) == 150
    assert y.value_counts().to_dict() == {"setosa": 50, "versicolor": 50, "virginica": 50}
    assert y.name == "species"


def test_load_credit(data_config):
    X, y, labels = load_credit_dataset(data_config)

    assert labels == ["bad", "good"]
    assert len(X) == 120
    assert "Risk" not in X.columns
    assert "Unnamed: 0" not in X.columns
    assert set(y.unique()) == {"bad", "good"}
    assert (y == "bad").sum() == 40


def test_credit_label_mapping(tmp_path, data_config):
    cfg = load_data_config(data_config)
    df = pd.read_csv(cfg["credit"]["path"])
    df["Risk"] = df["Risk"].map({"good": 1, "bad": 2})
    uci_path = tmp_path / "uci.csv"
    df.to_csv(uci_path, index=False)

    cfg["credit"]["path"] = str(uci_path)
    cfg["credit"]["label_mapping"] = {1: "good", 2: "bad"}
    cfg_path = tmp_path / "uci.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    _, y, _ = load_credit_dataset(str(cfg_path))
    assert (y == "bad").sum() == 40
    assert (y == "good").sum() == 80


def test_credit_label_mapping_with_missing_labels(tmp_path, data_config):
    cfg = load_data_config(data_config)
    df = pd.read_csv(cfg["credit"]["path"])
    df["Risk"] = df["Risk"].map({"good": 1, "bad": 2})
    df["Risk"] = df["Risk"].astype("float64")
    df.loc[[0, 1], "Risk"] = None
    uci_path = tmp_path / "uci_gaps.csv"
    df.to_csv(uci_path, index=False)

    cfg["credit"]["path"] = str(uci_path)
    cfg["credit"]["label_mapping"] = {1: "good", 2: "bad"}
    cfg_path = tmp_path / "uci_gaps.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    X, y, _ = load_credit_dataset(str(cfg_path))
    assert len(X) == 118
    assert set(y.unique()) == {"bad", "good"}
    assert (y == "bad").sum() + (y == "good").sum() == 118


def test_credit_unknown_label_value(tmp_path, data_config):
    cfg = load_data_config(data_config)
    df = pd.read_csv(cfg["credit"]["path"])
    df.loc[0, "Risk"] = "medium"
    path = tmp_path / "odd.csv"
    df.to_csv(path, index=False)

    cfg["credit"]["path"] = str(path)
    cfg_path = tmp_path / "odd.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    with pytest.raises(ValueError, match="medium"):
        load_credit_dataset(str(cfg_path))


def test_credit_missing_csv(tmp_path, data_config):
    cfg = load_data_config(data_config)
    cfg["credit"]["path"] = str(tmp_path / "missing.csv")
    cfg_path = tmp_path / "missing.yaml"
    cfg_path.write_text(yaml.safe_dump(cfg), encoding="utf-8")

    with pytest.raises(FileNotFoundError):
        load_credit_dataset(str(cfg_path))


def test_load_dataset_dispatch(data_config):
    _, _, labels = load_dataset("IRIS", data_config)
    assert labels[0] == "setosa"
    with pytest.raises(ValueError, match="Unknown dataset"):
        load_dataset("mnist", data_config)


def test_stratified_split(data_config):
    X, y, _ = load_credit_dataset(data_config)
    X_train, X_test, y_train, y_test = train_test_split_xy(X, y, config_path=data_config)

    assert len(X_train) + len(X_test) == len(X)
    assert len(X_test) == 36
    assert (y_test == "bad").sum() == 12
    assert list(X_train.index) == list(range(len(X_train)))


def test_split_length_mismatch(data_config):
    X, y, _ = load_iris_dataset(data_config)
    with pytest.raises(ValueError):
        train_test_split_xy(X, y.iloc[:-1], config_path=data_config)
