"""Tests for review-file parsing, test sets and category loading."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from conftest import review_block, write_category
from review_sentiment.corpus import (
    TEST_SET_FILE,
    discover_categories,
    load_category,
    parse_review_file,
    parse_reviews,
    pick_test_set,
    read_test_set,
    to_labeled,
    write_test_set,
)
from review_sentiment.models import Review


class TestParseReviews:
    def test_single_block(self):
        reviews = list(parse_reviews(review_block("id1", "4.0", "Nice book").splitlines()))
        assert reviews == [Review(rating=4.0, text="Nice book", unique_id="id1")]

    def test_multiline_text_joined(self):
        lines = [
            "<review>",
            "<rating>", "2.0", "</rating>",
            "<review_text>", "First line.", "", "  Second line.  ", "</review_text>",
            "</review>",
        ]
        (review,) = parse_reviews(lines)
        assert review.text == "First line. Second line."
        assert review.unique_id is None

    def test_other_tags_ignored(self):
        text = (
            "<review>\n<product_name>\nWidget\n</product_name>\n"
            "<rating>\n5.0\n</rating>\n<title>\nWow\n</title>\n"
            "<review_text>\nLove it\n</review_text>\n</review>\n"
        )
        (review,) = parse_reviews(text.splitlines(keepends=True))
        assert review.rating == 5.0
        assert review.text == "Love it"

    def test_malformed_blocks_skipped(self, caplog):
        caplog.set_level(logging.WARNING, logger="review_sentiment.corpus")
        text = (
            "<review>\n<rating>\n5.0\n</rating>\n</review>\n"
            "<review>\n<rating>\nfive\n</rating>\n<review_text>\nx\n</review_text>\n</review>\n"
            + review_block("ok", "1.0", "Bad")
        )
        reviews = list(parse_reviews(text.splitlines()))
        assert [r.unique_id for r in reviews] == ["ok"]
        assert "Skipping" in caplog.text

    def test_parse_review_file(self, category_dir: Path):
        reviews = parse_review_file(category_dir / "negative.review")
        assert [r.unique_id for r in reviews] == ["n1", "n2", "n3", "n4"]
        assert reviews[1].rating == 2.0

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            parse_review_file(tmp_path / "nope.review")


class TestTestSetFiles:
    def test_write_then_read(self, tmp_path: Path):
        path = tmp_path / TEST_SET_FILE
        count = write_test_set(path, [
            Review(rating=5.0, text="Great\nproduct"),
            Review(rating=1.0, text="Awful"),
        ])
        assert count == 2
        assert path.read_text(encoding="utf-8") == "5.0\nGreat product\n1.0\nAwful\n"
        reviews = read_test_set(path)
        assert [(r.rating, r.text) for r in reviews] == [(5.0, "Great product"), (1.0, "Awful")]

    def test_bad_rating_line_skipped(self, tmp_path: Path):
        path = tmp_path / TEST_SET_FILE
        path.write_text("x\nfirst\n4.0\nsecond\n", encoding="utf-8")
        assert [r.text for r in read_test_set(path)] == ["second"]

    def test_trailing_rating_ignored(self, tmp_path: Path):
        path = tmp_path / TEST_SET_FILE
        path.write_text("4.0\nsecond\n5.0\n", encoding="utf-8")
        assert len(read_test_set(path)) == 1

    def test_missing(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            read_test_set(tmp_path / TEST_SET_FILE)


class TestPickTestSet:
    def test_excludes_training_ids(self, tmp_path: Path):
        category = write_category(tmp_path, "dvd", with_test_set=False)
        picked = pick_test_set(category)
        assert [r.unique_id for r in picked] == ["u1", "u2", "u3"]
        written = read_test_set(category / TEST_SET_FILE)
        assert [r.rating for r in written] == [5.0, 1.0, 3.0]

    def test_deduplicates_across_files(self, tmp_path: Path):
        category = write_category(tmp_path, "dvd", with_test_set=False)
        (category / "all.review").write_text(
            review_block("u1", "5.0", "Duplicate") + review_block("u9", "2.0", "New one"),
            encoding="utf-8",
        )
        picked = pick_test_set(category)
        assert [r.unique_id for r in picked] == ["u1", "u2", "u3", "u9"]
        assert picked[0].text == "Excellent, great, love it."

    def test_missing_training_file(self, tmp_path: Path):
        category = tmp_path / "empty"
        category.mkdir()
        with pytest.raises(FileNotFoundError):
            pick_test_set(category)


class TestLoadCategory:
    def test_load(self, category_dir: Path):
        corpus = load_category(category_dir)
        assert corpus.name == "electronics"
        assert len(corpus.training) == 8
        assert corpus.class_counts == {0: 2, 1: 2, 2: 2, 3: 2}
        assert [d.class_index for d in corpus.test] == [3, 0, 2, 1]
        assert corpus.skipped == 1

    def test_training_only(self, tmp_path: Path):
        category = write_category(tmp_path, "dvd", with_test_set=False)
        corpus = load_category(category, test_file=None)
        assert len(corpus.training) == 8
        assert corpus.test == []

    def test_missing_test_set(self, tmp_path: Path):
        category = write_category(tmp_path, "dvd", with_test_set=False)
        with pytest.raises(FileNotFoundError):
            load_category(category)

    def test_to_labeled_drops_three_stars(self):
        docs, dropped = to_labeled([
            Review(rating=3.0, text="meh"),
            Review(rating=4.0, text="good"),
            Review(rating=2.5, text="truncated to two"),
        ])
        assert [d.class_index for d in docs] == [2, 1]
        assert dropped == 1

    def test_discover_categories(self, data_dir: Path):
        (data_dir / "notes.txt").write_text("not a category", encoding="utf-8")
        assert [p.name for p in discover_categories(data_dir)] == ["books", "electronics"]

    def test_discover_missing_root(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            discover_categories(tmp_path / "missing")
