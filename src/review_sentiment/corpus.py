"""Readers and writers for the multi-domain product review corpus.

The corpus root holds one directory per category (``books``, ``dvd``,
``electronics``, ...). Each category contains pseudo-XML review files in
which every tag sits on its own line and its value on the following
line(s)::

    <review>
    <unique_id>
    0312978189:good_read:jane_doe
    </unique_id>
    <rating>
    4.0
    </rating>
    <review_text>
    A good read from start to finish.
    </review_text>
    </review>

Labeled training reviews come from ``negative.review`` and
``positive.review``. The held-out test set is stored in ``TestSet.review``
as alternating rating and text lines; :func:`pick_test_set` builds it from
the unlabeled review files.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .models import LabeledText, Review

logger = logging.getLogger(__name__)

TRAINING_FILES: tuple[str, ...] = ("negative.review", "positive.review")
PICKING_FILES: tuple[str, ...] = ("unlabeled.review", "all.review")
TEST_SET_FILE = "TestSet.review"


# ---------------------------------------------------------------------------
# Pseudo-XML review files
# ---------------------------------------------------------------------------

def _extract_field(lines: Sequence[str], tag: str) -> Optional[str]:
    """Return the text between ``<tag>`` and ``</tag>`` lines, space-joined."""
    open_tag, close_tag = f"<{tag}>", f"</{tag}>"
    for i, line in enumerate(lines):
        if open_tag not in line:
            continue
        values: list[str] = []
        for inner in lines[i + 1:]:
            if close_tag in inner:
                return " ".join(values)
            stripped = inner.strip()
            if stripped:
                values.append(stripped)
        return None
    return None


def _parse_block(lines: Sequence[str], source: str) -> Optional[Review]:
    rating_text = _extract_field(lines, "rating")
    text = _extract_field(lines, "review_text")
    if rating_text is None or text is None:
        logger.warning(f"Skipping malformed review in {source}: missing rating or text")
        return None
    try:
        rating = float(rating_text)
    except ValueError:
        logger.warning(f"Skipping review in {source}: bad rating {rating_text!r}")
        return None
    return Review(rating=rating, text=text, unique_id=_extract_field(lines, "unique_id"))


def parse_reviews(lines: Iterable[str], source: str = "<memory>") -> Iterator[Review]:
    """Parse ``<review>`` blocks from an iterable of lines.

    Malformed blocks are skipped with a warning.
    """
    block: Optional[list[str]] = None
    for raw in lines:
        line = raw.rstrip("\r\n")
        if "</review>" in line:
            if block is not None:
                review = _parse_block(block, source)
                if review is not None:
                    yield review
            block = None
        elif "<review>" in line:
            block = []
        elif block is not None:
            block.append(line)


def parse_review_file(path: str | Path) -> list[Review]:
    """Read every review in a pseudo-XML review file.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Review file not found: {path}")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        return list(parse_reviews(f, source=str(path)))


# ---------------------------------------------------------------------------
# Test-set files
# ---------------------------------------------------------------------------

def read_test_set(path: str | Path) -> list[Review]:
    """Read a test set of alternating rating / text lines.

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Test set not found: {path}")
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        lines = f.read().splitlines()

    reviews: list[Review] = []
    for i in range(0, len(lines) - 1, 2):
        rating_line, text = lines[i], lines[i + 1]
        try:
            rating = float(rating_line.strip())
        except ValueError:
            logger.warning(f"Skipping test review at {path}:{i + 1}: bad rating {rating_line!r}")
            continue
        reviews.append(Review(rating=rating, text=text))
    if len(lines) % 2 == 1 and lines[-1].strip():
        logger.warning(f"Ignoring trailing rating line without text in {path}")
    return reviews


def write_test_set(path: str | Path, reviews: Iterable[Review]) -> int:
    """Write reviews as alternating rating / text lines.

    Returns:
        Number of reviews written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    count = 0
    with open(path, "w", encoding="utf-8") as f:
        for review in reviews:
            text = " ".join(review.text.split())
            f.write(f"{review.rating:.1f}\n{text}\n")
            count += 1
    return count


def pick_test_set(
    category_dir: str | Path,
    training_files: Sequence[str] = TRAINING_FILES,
    picking_files: Sequence[str] = PICKING_FILES,
    output_name: str = TEST_SET_FILE,
) -> list[Review]:
    """Build a held-out test set for a category.

    Reviews from the picking files (in order) whose ``unique_id`` does not
    appear in any training file are kept, de-duplicated by ``unique_id``
    with the first occurrence winning. Missing picking files are skipped.

    Returns:
        The picked reviews, also written to ``output_name``.
    """
    category_dir = Path(category_dir)
    training_ids: set[str] = set()
    for name in training_files:
        for review in parse_review_file(category_dir / name):
            if review.unique_id:
                training_ids.add(review.unique_id)

    picked: list[Review] = []
    picked_ids: set[str] = set()
    for name in picking_files:
        path = category_dir / name
        if not path.exists():
            logger.debug(f"No {name} in {category_dir.name}, skipping")
            continue
        for review in parse_review_file(path):
            uid = review.unique_id
            if uid and (uid in training_ids or uid in picked_ids):
                continue
            if uid:
                picked_ids.add(uid)
            picked.append(review)

    write_test_set(category_dir / output_name, picked)
    logger.info(f"Picked {len(picked)} test reviews for {category_dir.name}")
    return picked


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------

@dataclass
class CategoryCorpus:
    """Labeled training and test documents of one category."""

    name: str
    path: Optional[Path] = None
    training: list[LabeledText] = field(default_factory=list)
    test: list[LabeledText] = field(default_factory=list)
    skipped: int = 0

    @property
    def class_counts(self) -> dict[int, int]:
        counts: dict[int, int] = {}
        for doc in self.training:
            counts[doc.class_index] = counts.get(doc.class_index, 0) + 1
        return dict(sorted(counts.items()))


def to_labeled(reviews: Iterable[Review]) -> tuple[list[LabeledText], int]:
    """Keep reviews whose rating maps to a class.

    Returns:
        Tuple of (labeled documents, number of reviews dropped).
    """
    labeled: list[LabeledText] = []
    dropped = 0
    for review in reviews:
        doc = review.to_labeled()
        if doc is None:
            dropped += 1
        else:
            labeled.append(doc)
    return labeled, dropped


def discover_categories(root: str | Path) -> list[Path]:
    """Category directories under the corpus root, sorted by name.

    Raises:
        FileNotFoundError: If ``root`` is not a directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise FileNotFoundError(f"Corpus directory not found: {root}")
    return sorted(p for p in root.iterdir() if p.is_dir())


def load_category(
    category_dir: str | Path,
    training_files: Sequence[str] = TRAINING_FILES,
    test_file: Optional[str] = TEST_SET_FILE,
) -> CategoryCorpus:
    """Load the labeled training and test documents of a category.

    Reviews with an excluded rating (3 stars) are dropped and counted in
    ``skipped``. With ``test_file=None`` only the training files are read.

    Raises:
        FileNotFoundError: If a training file or the test set is missing.
    """
    category_dir = Path(category_dir)
    training_reviews: list[Review] = []
    for name in training_files:
        training_reviews.extend(parse_review_file(category_dir / name))

    training, dropped_train = to_labeled(training_reviews)
    test: list[LabeledText] = []
    dropped_test = 0
    if test_file is not None:
        test, dropped_test = to_labeled(read_test_set(category_dir / test_file))

    corpus = CategoryCorpus(
        name=category_dir.name,
        path=category_dir,
        training=training,
        test=test,
        skipped=dropped_train + dropped_test,
    )
    logger.debug(
        f"Loaded {corpus.name}: {len(training)} training, {len(test)} test, "
        f"{corpus.skipped} skipped"
    )
    return corpus
