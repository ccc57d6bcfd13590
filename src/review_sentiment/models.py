"""Data models for review sentiment classification."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


class DegenerateModelError(ValueError):
    """Training data cannot produce a usable model.

    Raised when class priors cannot be computed (no training documents) or
    when a smoothing denominator evaluates to zero.
    """


class UndefinedMetricError(ArithmeticError):
    """A requested evaluation metric has a zero denominator."""


class Rating(int, Enum):
    """Star ratings that map to sentiment classes.

    Three-star reviews are neutral and never become a class.
    """

    ONE = 1
    TWO = 2
    FOUR = 4
    FIVE = 5

    @property
    def class_index(self) -> int:
        """Dense class index (0..3) used by the model."""
        return CLASS_RATINGS.index(self)

    @classmethod
    def from_class_index(cls, index: int) -> "Rating":
        if not 0 <= index < len(CLASS_RATINGS):
            raise ValueError(f"Class index out of range: {index}")
        return CLASS_RATINGS[index]


CLASS_RATINGS: tuple[Rating, ...] = (Rating.ONE, Rating.TWO, Rating.FOUR, Rating.FIVE)
N_CLASSES = len(CLASS_RATINGS)


def parse_rating(value: Union[str, float, int]) -> int:
    """Parse a rating such as ``"4.0"`` into an integer star count.

    Fractional ratings are truncated toward zero.

    Raises:
        ValueError: If the value is not numeric.
    """
    if isinstance(value, str):
        value = value.strip()
    return int(float(value))


def rating_to_class(value: Union[str, float, int]) -> Optional[int]:
    """Map a star rating to its class index, or ``None`` if it has no class."""
    try:
        return Rating(parse_rating(value)).class_index
    except (ValueError, OverflowError):
        return None


def class_to_rating(index: int) -> int:
    """Map a class index back to its star rating."""
    return int(Rating.from_class_index(index))


@dataclass(frozen=True)
class LabeledText:
    """A raw document text with its class index."""

    text: str
    class_index: int


@dataclass
class Review:
    """A single review read from the corpus."""

    rating: float
    text: str
    unique_id: Optional[str] = None

    @property
    def class_index(self) -> Optional[int]:
        return rating_to_class(self.rating)

    def to_labeled(self) -> Optional[LabeledText]:
        """Convert to a ``LabeledText``, or ``None`` for an excluded rating."""
        index = self.class_index
        if index is None:
            return None
        return LabeledText(text=self.text, class_index=index)

    def to_dict(self) -> dict:
        return {
            "unique_id": self.unique_id,
            "rating": self.rating,
            "text": self.text,
        }
