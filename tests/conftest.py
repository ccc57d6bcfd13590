"""Shared test fixtures for review-sentiment tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from review_sentiment.models import LabeledText


def review_block(unique_id: str, rating: str, text: str) -> str:
    """One review in the pseudo-XML corpus format."""
    return (
        "<review>\n"
        "<unique_id>\n"
        f"{unique_id}\n"
        "</unique_id>\n"
        "<rating>\n"
        f"{rating}\n"
        "</rating>\n"
        "<review_text>\n"
        f"{text}\n"
        "</review_text>\n"
        "</review>\n"
    )


NEGATIVE_REVIEWS = [
    ("n1", "1.0", "Terrible product. It broke after one day, awful and useless."),
    ("n2", "2.0", "Disappointing and boring. The battery died quickly."),
    ("n3", "1.0", "Awful quality, broken on arrival. Terrible support."),
    ("n4", "2.0", "Boring, useless and overpriced. Would not buy again."),
]

POSITIVE_REVIEWS = [
    ("p1", "5.0", "Excellent product! Works great and I love it."),
    ("p2", "4.0", "Great value, very happy with the quality."),
    ("p3", "5.0", "Wonderful and excellent. Love the design, works perfectly."),
    ("p4", "4.0", "Happy with this great purchase. Excellent battery life."),
]

UNLABELED_REVIEWS = [
    ("u1", "5.0", "Excellent, great, love it."),
    ("u2", "1.0", "Terrible and awful, broke immediately."),
    ("u3", "3.0", "It is okay I guess."),
    ("p1", "5.0", "Excellent product! Works great and I love it."),
]


@pytest.fixture
def training_documents() -> list[LabeledText]:
    """Labeled raw texts with clearly separated vocabulary."""
    docs = []
    for _, rating, text in NEGATIVE_REVIEWS + POSITIVE_REVIEWS:
        index = {"1.0": 0, "2.0": 1, "4.0": 2, "5.0": 3}[rating]
        docs.append(LabeledText(text=text, class_index=index))
    return docs


def write_category(root: Path, name: str, with_test_set: bool = True) -> Path:
    """Create a category directory with review files under ``root``."""
    category = root / name
    category.mkdir(parents=True)
    (category / "negative.review").write_text(
        "".join(review_block(*r) for r in NEGATIVE_REVIEWS), encoding="utf-8"
    )
    (category / "positive.review").write_text(
        "".join(review_block(*r) for r in POSITIVE_REVIEWS), encoding="utf-8"
    )
    (category / "unlabeled.review").write_text(
        "".join(review_block(*r) for r in UNLABELED_REVIEWS), encoding="utf-8"
    )
    if with_test_set:
        (category / "TestSet.review").write_text(
            "5.0\nExcellent and great, I love it\n"
            "1.0\nTerrible, awful and useless\n"
            "3.0\nNeutral review that is skipped\n"
            "4.0\nGreat quality, very happy\n"
            "2.0\nBoring and disappointing, it broke\n",
            encoding="utf-8",
        )
    return category


@pytest.fixture
def category_dir(tmp_path: Path) -> Path:
    """A single category directory with training files and a test set."""
    return write_category(tmp_path / "data", "electronics")


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A corpus root with two complete categories."""
    root = tmp_path / "data"
    write_category(root, "books")
    write_category(root, "electronics")
    return root


@pytest.fixture
def stopwords_file(tmp_path: Path) -> Path:
    """A stop-word file with a blank line and mixed case."""
    path = tmp_path / "stopwords.txt"
    path.write_text("the\nAnd\n\nit\ndon't\n", encoding="utf-8")
    return path
