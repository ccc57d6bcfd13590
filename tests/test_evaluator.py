"""Tests for confusion-matrix evaluation."""

from __future__ import annotations

import pytest

from review_sentiment.evaluator import (
    UNDEFINED,
    ConfusionStats,
    PredictionRecord,
    evaluate,
    is_positive,
)
from review_sentiment.models import UndefinedMetricError


class TestIsPositive:
    def test_four_classes(self):
        assert [is_positive(c, 4) for c in range(4)] == [False, False, True, True]

    def test_odd_class_count(self):
        # the middle class of three sits below n/2 = 1.5
        assert [is_positive(c, 3) for c in range(3)] == [False, False, True]

    def test_two_classes(self):
        assert [is_positive(c, 2) for c in range(2)] == [False, True]


class TestEvaluate:
    PREDICTIONS = [
        PredictionRecord(actual=3, predicted=3),  # TP
        PredictionRecord(actual=2, predicted=3),  # TP (rating differs, sentiment matches)
        PredictionRecord(actual=0, predicted=2),  # FP
        PredictionRecord(actual=1, predicted=0),  # TN
        PredictionRecord(actual=0, predicted=0),  # TN
        PredictionRecord(actual=3, predicted=1),  # FN
    ]

    def test_counts(self):
        stats = evaluate(self.PREDICTIONS)
        assert stats.true_positives == 2
        assert stats.false_positives == 1
        assert stats.true_negatives == 2
        assert stats.false_negatives == 1
        assert stats.total == len(self.PREDICTIONS)

    def test_metrics(self):
        stats = evaluate(self.PREDICTIONS)
        assert stats.accuracy == pytest.approx(4 / 6 * 100)
        assert stats.precision == pytest.approx(2 / 3 * 100)
        assert stats.recall == pytest.approx(2 / 3 * 100)
        assert stats.exact_accuracy == pytest.approx(2 / 6 * 100)

    def test_matrix(self):
        stats = evaluate(self.PREDICTIONS)
        assert stats.matrix[3][3] == 1
        assert stats.matrix[2][3] == 1
        assert stats.matrix[0][2] == 1
        assert sum(sum(row) for row in stats.matrix) == len(self.PREDICTIONS)

    def test_accepts_plain_tuples(self):
        stats = evaluate([(0, 0), (3, 3)])
        assert stats.accuracy == 100.0

    def test_accuracy_in_range(self):
        for preds in ([(0, 3)] * 5, [(3, 3)] * 5, [(0, 3), (3, 3)]):
            stats = evaluate(preds)
            assert 0 <= stats.accuracy <= 100

    def test_out_of_range_index(self):
        with pytest.raises(ValueError):
            evaluate([(0, 4)])
        with pytest.raises(ValueError):
            evaluate([(-1, 0)])

    def test_custom_class_count(self):
        stats = evaluate([(0, 1), (1, 1)], n_classes=2)
        assert stats.true_positives == 1
        assert stats.false_positives == 1


class TestUndefinedMetrics:
    def test_empty_predictions(self):
        stats = evaluate([])
        assert stats.total == 0
        assert stats.accuracy is None
        assert stats.precision is None
        assert stats.recall is None

    def test_no_positive_predictions(self):
        stats = evaluate([(0, 0), (3, 1)])
        assert stats.precision is None
        assert stats.recall == 0.0
        assert stats.accuracy == 50.0

    def test_require(self):
        stats = evaluate([(0, 0)])
        assert stats.require("accuracy") == 100.0
        with pytest.raises(UndefinedMetricError):
            stats.require("precision")
        with pytest.raises(ValueError, match="Unknown metric"):
            stats.require("f1")

    def test_summary_renders_undefined(self):
        summary = evaluate([(0, 0)]).summary()
        assert "True -ves:   1" in summary
        assert f"Precision:   {UNDEFINED}" in summary
        assert "Accuracy:    100.00%" in summary

    def test_to_dict_uses_none(self):
        data = ConfusionStats().to_dict()
        assert data["accuracy"] is None
        assert data["total"] == 0
        assert len(data["matrix"]) == 4
