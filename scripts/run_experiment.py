"""
Run the boosting experiment for a single dataset.

This script is a convenience wrapper around
`boostlab.training.train_boosting.train_and_evaluate`, which:

- loads the iris or German credit dataset
- encodes, scales and (optionally) up-samples the training split
- trains every boosting model enabled in config/models.yaml
- evaluates them on the test split with the confusion-matrix evaluator
- writes metrics under experiments/results/

Usage (from project root):

    python scripts/run_experiment.py --dataset iris
    python scripts/run_experiment.py --dataset credit --data-config config/data.yaml
"""

from __future__ import annotations

import argparse

from boostlab.data.datasets import DATASET_NAMES
from boostlab.training.train_boosting import train_and_evaluate
from boostlab.utils.training_utils import load_train_config, get_logger


def parse_args() -> argparse.Namespace:
    """
    Parse command-line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Train and evaluate boosted tree ensembles on one dataset."
    )
    parser.add_argument(
        "--dataset",
        type=str,
        required=True,
        choices=list(DATASET_NAMES),
        help="Dataset to run: iris or credit.",
    )
    parser.add_argument(
        "--data-config",
        type=str,
        default="config/data.yaml",
        help="Path to data config YAML (default: config/data.yaml).",
    )
    parser.add_argument(
        "--model-config",
        type=str,
        default="config/models.yaml",
        help="Path to model config YAML (default: config/models.yaml).",
    )
    parser.add_argument(
        "--train-config",
        type=str,
        default="config/train.yaml",
        help="Path to global train config YAML (default: config/train.yaml).",
    )
    return parser.parse_args()


def main() -> None:
    args = parse_args()

    train_cfg = load_train_config(args.train_config)
    logger = get_logger(
        name="run_experiment",
        config=train_cfg,
        log_file_suffix=f"run_{args.dataset}",
    )

    logger.info("=" * 80)
    logger.info("Starting boosting experiment on %s.", args.dataset)
    logger.info(
        "Configs: data=%s, models=%s, train=%s",
        args.data_config,
        args.model_config,
        args.train_config,
    )

    metrics_df = train_and_evaluate(
        args.dataset,
        data_config_path=args.data_config,
        model_config_path=args.model_config,
        train_config_path=args.train_config,
    )

    if not metrics_df.empty:
        logger.info("Completed %s experiment. Metrics:", args.dataset)
        logger.info("\n%s", metrics_df.sort_values("accuracy", ascending=False).to_string(index=False))
    else:
        logger.warning("%s experiment finished, but metrics DataFrame is empty.", args.dataset)


if __name__ == "__main__":
    main()
