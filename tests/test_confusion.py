"""
Tests for the confusion-matrix evaluator.

These tests validate that:

- the matrix counts every observation in the right (actual, predicted) cell
- accuracy and per-class precision / recall / F1 follow the row/column
  conventions, including the iris and credit worked examples
- undefined per-class metrics come back as NaN instead of raising
- bad labels and empty input raise the dedicated errors
"""

from __future__ import annotations

import math
import random

import numpy as np
import pytest

from boostlab.evaluation.confusion import (
    DISPLAY_DECIMALS,
    build_confusion_matrix,
    compute_metrics,
    evaluate,
    format_report,
)
from boostlab.evaluation.errors import EmptyInputError, EvaluationError, InvalidLabelError


IRIS_LABELS = ["setosa", "versicolor", "virginica"]
CREDIT_LABELS = ["bad", "good"]


def _iris_observations():
    obs = [("setosa", "setosa")] * 5
    obs += [("versicolor", "versicolor")] * 4 + [("versicolor", "virginica")]
    obs += [("virginica", "virginica")] * 4 + [("virginica", "versicolor")]
    return obs


def _random_observations(labels, n, seed):
    rng = random.Random(seed)
    return [(rng.choice(labels), rng.choice(labels)) for _ in range(n)]


# ---------------------------------------------------------------------------
# build_confusion_matrix
# ---------------------------------------------------------------------------


def test_matrix_cells_follow_label_order():
    cm = build_confusion_matrix(_iris_observations(), IRIS_LABELS)
    assert cm.tolist() == [[5, 0, 0], [0, 4, 1], [0, 1, 4]]


def test_matrix_axis_order_comes_from_labels_not_data():
    obs = [("good", "bad"), ("good", "good"), ("bad", "bad")]
    assert build_confusion_matrix(obs, ["bad", "good"]).tolist() == [[1, 0], [1, 1]]
    assert build_confusion_matrix(obs, ["good", "bad"]).tolist() == [[1, 1], [0, 1]]


@pytest.mark.parametrize("seed", [0, 1, 2])
def test_matrix_total_equals_number_of_observations(seed):
    obs = _random_observations(IRIS_LABELS, 57, seed)
    cm = build_confusion_matrix(obs, IRIS_LABELS)
    assert int(cm.sum()) == len(obs)
    assert cm.shape == (3, 3)
    assert (cm >= 0).all()


def test_matrix_accepts_a_generator():
    obs = ((a, a) for a in CREDIT_LABELS * 3)
    assert build_confusion_matrix(obs, CREDIT_LABELS).tolist() == [[3, 0], [0, 3]]


def test_empty_observations_give_zero_matrix():
    cm = build_confusion_matrix([], CREDIT_LABELS)
    assert cm.tolist() == [[0, 0], [0, 0]]


def test_unknown_actual_label_raises():
    with pytest.raises(InvalidLabelError, match="actual label 'medium'"):
        build_confusion_matrix([("bad", "bad"), ("medium", "good")], CREDIT_LABELS)


def test_unknown_predicted_label_raises():
    with pytest.raises(InvalidLabelError, match="predicted label"):
        build_confusion_matrix([("bad", "Bad")], CREDIT_LABELS)


def test_invalid_label_error_is_a_value_error():
    assert issubclass(InvalidLabelError, EvaluationError)
    assert issubclass(EmptyInputError, ValueError)


@pytest.mark.parametrize("labels", [[], ["bad", "good", "bad"], [1, "1"]])
def test_degenerate_label_sets_rejected(labels):
    with pytest.raises(ValueError):
        build_confusion_matrix([], labels)


# ---------------------------------------------------------------------------
# compute_metrics
# ---------------------------------------------------------------------------


def test_iris_scenario():
    cm = build_confusion_matrix(_iris_observations(), IRIS_LABELS)
    report = compute_metrics(cm, IRIS_LABELS)

    assert report.accuracy == pytest.approx(13 / 15)
    assert round(report.accuracy, DISPLAY_DECIMALS) == 0.867
    assert report.labels == tuple(IRIS_LABELS)
    assert report.precision == pytest.approx((1.0, 0.8, 0.8))
    assert report.recall == pytest.approx((1.0, 0.8, 0.8))
    assert report.f1 == pytest.approx((1.0, 0.8, 0.8))
    assert report.support == (5, 5, 5)


def test_credit_scenario():
    cm = np.array([[7, 3], [2, 18]])
    report = compute_metrics(cm, CREDIT_LABELS)

    assert report.accuracy == pytest.approx(25 / 30)
    bad = report.per_class()["bad"]
    good = report.per_class()["good"]
    assert bad["precision"] == pytest.approx(0.7)
    assert bad["recall"] == pytest.approx(7 / 9)
    assert bad["f1"] == pytest.approx(2 * 0.7 * (7 / 9) / (0.7 + 7 / 9))
    assert good["precision"] == pytest.approx(18 / 20)
    assert good["recall"] == pytest.approx(18 / 21)


@pytest.mark.parametrize("seed", [3, 4, 5, 6])
def test_accuracy_matches_direct_count(seed):
    obs = _random_observations(CREDIT_LABELS + ["unknown"], 40, seed)
    report = compute_metrics(build_confusion_matrix(obs, CREDIT_LABELS + ["unknown"]), CREDIT_LABELS + ["unknown"])
    direct = sum(1 for actual, predicted in obs if actual == predicted) / len(obs)
    assert report.accuracy == pytest.approx(direct)


def test_perfect_predictions():
    obs = [(label, label) for label in IRIS_LABELS for _ in range(4)]
    report = evaluate([a for a, _ in obs], [p for _, p in obs], IRIS_LABELS)
    assert report.accuracy == 1.0
    assert report.precision == (1.0, 1.0, 1.0)
    assert report.recall == (1.0, 1.0, 1.0)
    assert report.f1 == (1.0, 1.0, 1.0)


def test_label_without_cases_is_nan_and_accuracy_still_defined():
    obs = [("setosa", "setosa"), ("versicolor", "versicolor"), ("versicolor", "setosa")]
    report = compute_metrics(build_confusion_matrix(obs, IRIS_LABELS), IRIS_LABELS)

    assert report.accuracy == pytest.approx(2 / 3)
    assert math.isnan(report.precision[2])
    assert math.isnan(report.recall[2])
    assert math.isnan(report.f1[2])
    assert report.precision[0] == 1.0
    assert report.recall[0] == pytest.approx(0.5)


def test_predicted_but_never_actual_label():
    obs = [("bad", "good"), ("bad", "bad")]
    report = compute_metrics(build_confusion_matrix(obs, CREDIT_LABELS), CREDIT_LABELS)
    # "good" has no actual cases but one prediction.
    assert math.isnan(report.precision[1])
    assert report.recall[1] == 0.0
    assert math.isnan(report.f1[1])


def test_zero_precision_and_recall_gives_nan_f1():
    obs = [("bad", "good"), ("good", "bad")]
    report = compute_metrics(build_confusion_matrix(obs, CREDIT_LABELS), CREDIT_LABELS)
    assert report.precision == (0.0, 0.0)
    assert report.recall == (0.0, 0.0)
    assert all(math.isnan(v) for v in report.f1)
    assert report.accuracy == 0.0


def test_empty_input_raises():
    cm = build_confusion_matrix([], IRIS_LABELS)
    with pytest.raises(EmptyInputError):
        compute_metrics(cm, IRIS_LABELS)


def test_evaluate_empty_sequences_raise():
    with pytest.raises(EmptyInputError):
        evaluate([], [], CREDIT_LABELS)


def test_evaluate_length_mismatch():
    with pytest.raises(ValueError, match="Length mismatch"):
        evaluate(["bad"], ["bad", "good"], CREDIT_LABELS)


@pytest.mark.parametrize(
    "cm",
    [np.ones((2, 3), dtype=int), np.ones((3, 3), dtype=int), np.ones(4, dtype=int)],
)
def test_shape_mismatch_raises(cm):
    with pytest.raises(ValueError):
        compute_metrics(cm, CREDIT_LABELS)


def test_negative_counts_rejected():
    with pytest.raises(ValueError, match="non-negative"):
        compute_metrics(np.array([[1, -1], [0, 2]]), CREDIT_LABELS)


def test_fractional_counts_rejected():
    with pytest.raises(ValueError, match="whole numbers"):
        compute_metrics(np.array([[1.7, 0.0], [0.0, 1.2]]), CREDIT_LABELS)


def test_integral_float_counts_accepted():
    report = compute_metrics(np.array([[7.0, 3.0], [2.0, 18.0]]), CREDIT_LABELS)
    assert report.support == (10, 20)
    assert report.confusion_matrix.dtype == np.int64


def test_compute_metrics_is_idempotent_and_does_not_mutate():
    cm = np.array([[7, 3], [2, 18]])
    before = cm.copy()
    first = compute_metrics(cm, CREDIT_LABELS)
    second = compute_metrics(cm, CREDIT_LABELS)

    assert first == second
    assert np.array_equal(first.confusion_matrix, second.confusion_matrix)
    assert np.array_equal(cm, before)


def test_report_holds_a_private_copy_of_the_matrix():
    cm = np.array([[7, 3], [2, 18]])
    report = compute_metrics(cm, CREDIT_LABELS)
    cm[0, 0] = 100
    assert report.confusion_matrix[0, 0] == 7
    with pytest.raises(ValueError):
        report.confusion_matrix[0, 0] = 1


def test_report_is_frozen():
    report = compute_metrics(np.array([[1, 0], [0, 1]]), CREDIT_LABELS)
    with pytest.raises(AttributeError):
        report.accuracy = 0.5  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def test_display_rounding_leaves_report_values_untouched():
    report = compute_metrics(np.array([[7, 3], [2, 18]]), CREDIT_LABELS)

    frame = report.to_frame()
    assert list(frame.index) == CREDIT_LABELS
    assert frame.loc["bad", "recall"] == pytest.approx(0.778)
    assert report.recall[0] == pytest.approx(7 / 9)

    as_dict = report.as_dict()
    assert as_dict["accuracy"] == 0.833
    assert list(as_dict["per_class"]) == CREDIT_LABELS
    assert as_dict["per_class"]["bad"]["precision"] == 0.7
    assert as_dict["confusion_matrix"] == [[7, 3], [2, 18]]


def test_as_dict_emits_none_for_nan():
    report = compute_metrics(np.array([[2, 0], [0, 0]]), CREDIT_LABELS)
    assert report.as_dict()["per_class"]["good"]["precision"] is None


def test_format_report_contains_numbers_in_label_order():
    report = compute_metrics(build_confusion_matrix(_iris_observations(), IRIS_LABELS), IRIS_LABELS)
    text = format_report(report)

    assert "Accuracy: 0.867" in text
    assert text.index("setosa") < text.index("versicolor") < text.index("virginica")
    assert "0.800" in text
    # Formatting does not alter the report.
    assert report.accuracy == pytest.approx(13 / 15)


def test_format_report_renders_nan():
    report = compute_metrics(np.array([[2, 0], [0, 0]]), CREDIT_LABELS)
    assert "nan" in format_report(report)
