"""Tests for the rating and review data models."""

from __future__ import annotations

import pytest

from review_sentiment.evaluator import is_positive
from review_sentiment.models import (
    CLASS_RATINGS,
    N_CLASSES,
    LabeledText,
    Rating,
    Review,
    class_to_rating,
    parse_rating,
    rating_to_class,
)


class TestRating:
    def test_class_indices(self):
        assert [r.class_index for r in CLASS_RATINGS] == [0, 1, 2, 3]
        assert N_CLASSES == 4

    def test_sentiment(self):
        positive = [r for r in CLASS_RATINGS if is_positive(r.class_index)]
        assert positive == [Rating.FOUR, Rating.FIVE]

    def test_from_class_index(self):
        assert Rating.from_class_index(2) is Rating.FOUR
        with pytest.raises(ValueError):
            Rating.from_class_index(4)

    def test_no_three_star_rating(self):
        with pytest.raises(ValueError):
            Rating(3)


class TestRatingMapping:
    @pytest.mark.parametrize("value,expected", [
        ("1.0", 0), ("2.0", 1), ("4.0", 2), ("5.0", 3),
        (" 5.0 ", 3), (4, 2), (4.9, 2), ("2.5", 1),
    ])
    def test_rating_to_class(self, value, expected):
        assert rating_to_class(value) == expected

    @pytest.mark.parametrize("value", ["3.0", 3, "0", "6.0", "abc", "", "inf", "nan"])
    def test_excluded_ratings(self, value):
        assert rating_to_class(value) is None

    def test_parse_rating_truncates(self):
        assert parse_rating("4.7") == 4
        with pytest.raises(ValueError):
            parse_rating("four")

    def test_class_to_rating(self):
        assert [class_to_rating(i) for i in range(4)] == [1, 2, 4, 5]


class TestReview:
    def test_to_labeled(self):
        assert Review(rating=5.0, text="great").to_labeled() == LabeledText("great", 3)
        assert Review(rating=3.0, text="meh").to_labeled() is None

    def test_to_dict(self):
        data = Review(rating=1.0, text="bad", unique_id="x").to_dict()
        assert data == {"unique_id": "x", "rating": 1.0, "text": "bad"}
