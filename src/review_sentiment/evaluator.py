"""Confusion-matrix evaluation of sentiment predictions.

The four-class rating problem is collapsed to positive/negative for
reporting: classes in the lower half of the ordered class set are negative,
the rest positive. With the standard classes (ratings 1, 2, 4, 5) ratings 1
and 2 are negative and 4 and 5 positive.

Metrics whose denominator is zero are *undefined* and reported as ``None``
rather than 0 or NaN, so "0% precision" stays distinguishable from "no
positive predictions at all".
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from .models import N_CLASSES, UndefinedMetricError

UNDEFINED = "UNDEFINED"

_METRICS = ("accuracy", "precision", "recall")


class PredictionRecord(NamedTuple):
    """Actual and predicted class index of one test document."""

    actual: int
    predicted: int


def is_positive(class_index: int, n_classes: int = N_CLASSES) -> bool:
    """True if ``class_index`` is at or above the midpoint ``n_classes / 2``.

    With an odd class count the middle class is below the midpoint.
    """
    return class_index * 2 >= n_classes


def _percent(numerator: int, denominator: int) -> Optional[float]:
    if denominator == 0:
        return None
    return numerator / denominator * 100


@dataclass
class ConfusionStats:
    """Binary-collapsed confusion counts and derived percentages.

    Attributes:
        true_positives: Positive documents predicted positive.
        false_positives: Negative documents predicted positive.
        true_negatives: Negative documents predicted negative.
        false_negatives: Positive documents predicted negative.
        matrix: Full class-level matrix, ``matrix[actual][predicted]``.
    """

    true_positives: int = 0
    false_positives: int = 0
    true_negatives: int = 0
    false_negatives: int = 0
    n_classes: int = N_CLASSES
    matrix: list[list[int]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.matrix:
            self.matrix = [[0] * self.n_classes for _ in range(self.n_classes)]

    @property
    def total(self) -> int:
        return (
            self.true_positives
            + self.false_positives
            + self.true_negatives
            + self.false_negatives
        )

    @property
    def accuracy(self) -> Optional[float]:
        """(TP + TN) / total * 100, or ``None`` for an empty test set."""
        return _percent(self.true_positives + self.true_negatives, self.total)

    @property
    def precision(self) -> Optional[float]:
        """TP / (TP + FP) * 100, or ``None`` with no positive predictions."""
        return _percent(self.true_positives, self.true_positives + self.false_positives)

    @property
    def recall(self) -> Optional[float]:
        """TP / (TP + FN) * 100, or ``None`` with no positive documents."""
        return _percent(self.true_positives, self.true_positives + self.false_negatives)

    @property
    def exact_accuracy(self) -> Optional[float]:
        """Share of predictions with exactly the right class, in percent."""
        correct = sum(self.matrix[c][c] for c in range(self.n_classes))
        return _percent(correct, self.total)

    def require(self, metric: str) -> float:
        """Return a metric, raising if it is undefined.

        Raises:
            ValueError: If ``metric`` is not a known metric name.
            UndefinedMetricError: If its denominator is zero.
        """
        if metric not in _METRICS:
            raise ValueError(f"Unknown metric: {metric}. Known: {list(_METRICS)}")
        value = getattr(self, metric)
        if value is None:
            raise UndefinedMetricError(f"{metric} is undefined (zero denominator)")
        return value

    def to_dict(self) -> dict:
        return {
            "true_positives": self.true_positives,
            "false_positives": self.false_positives,
            "true_negatives": self.true_negatives,
            "false_negatives": self.false_negatives,
            "total": self.total,
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "exact_accuracy": self.exact_accuracy,
            "matrix": self.matrix,
        }

    def summary(self) -> str:
        """Human-readable summary of the statistics."""

        def fmt(value: Optional[float]) -> str:
            return UNDEFINED if value is None else f"{value:.2f}%"

        return "\n".join([
            f"True +ves:   {self.true_positives}",
            f"False +ves:  {self.false_positives}",
            f"True -ves:   {self.true_negatives}",
            f"False -ves:  {self.false_negatives}",
            f"Accuracy:    {fmt(self.accuracy)}",
            f"Precision:   {fmt(self.precision)}",
            f"Recall:      {fmt(self.recall)}",
        ])


def evaluate(
    predictions: Iterable[PredictionRecord | tuple[int, int]],
    n_classes: int = N_CLASSES,
) -> ConfusionStats:
    """Tally predictions into a :class:`ConfusionStats`.

    Args:
        predictions: ``(actual, predicted)`` class index pairs.
        n_classes: Number of classes (sets the positive/negative midpoint).

    Returns:
        ConfusionStats whose four counts sum to the number of predictions.

    Raises:
        ValueError: If a class index is out of range.
    """
    stats = ConfusionStats(n_classes=n_classes)
    for actual, predicted in predictions:
        for index in (actual, predicted):
            if not 0 <= index < n_classes:
                raise ValueError(f"Class index {index} out of range for {n_classes} classes")
        stats.matrix[actual][predicted] += 1

        actual_pos = is_positive(actual, n_classes)
        if is_positive(predicted, n_classes):
            if actual_pos:
                stats.true_positives += 1
            else:
                stats.false_positives += 1
        else:
            if actual_pos:
                stats.false_negatives += 1
            else:
                stats.true_negatives += 1
    return stats
