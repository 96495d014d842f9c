"""
End-to-end runner for all boosting experiments.

This script runs, in order:

1) Iris species classification (3 classes)
2) German credit risk classification (bad / good)
3) Aggregation of all metrics into a single comparison table

Usage (from the project root):

    python scripts/run_all_experiments.py
"""

from __future__ import annotations

from boostlab.data.datasets import DATASET_NAMES
from boostlab.evaluation.analysis import CORE_COLUMNS, aggregate_all_results
from boostlab.training.train_boosting import train_and_evaluate
from boostlab.utils.training_utils import load_train_config, get_logger


def main() -> None:
    # Load global configuration for paths/logging
    train_cfg = load_train_config()
    logger = get_logger(
        name="run_all_experiments",
        config=train_cfg,
        log_file_suffix="all",
    )

    logger.info("=" * 80)
    logger.info("Starting full experimental pipeline (%s).", ", ".join(DATASET_NAMES))

    for dataset in DATASET_NAMES:
        logger.info("=" * 80)
        logger.info("Running boosting models on %s.", dataset)
        df = train_and_evaluate(dataset)
        logger.info("Finished %s.", dataset)
        if not df.empty:
            logger.info("%s summary:\n%s", dataset, df.sort_values("accuracy", ascending=False).to_string(index=False))

    logger.info("=" * 80)
    logger.info("Aggregating results into a single table.")
    combined_df = aggregate_all_results()
    logger.info("Aggregated results shape: %s", combined_df.shape)

    if not combined_df.empty:
        logger.info("Top models by accuracy:\n%s", combined_df[CORE_COLUMNS].head(20).to_string(index=False))

    logger.info("Full experimental pipeline completed.")


if __name__ == "__main__":
    main()
