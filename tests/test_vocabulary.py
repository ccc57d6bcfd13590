"""Tests for the ordered vocabulary index."""

from __future__ import annotations

import pytest

from review_sentiment.vocabulary import VocabularyIndex


@pytest.fixture
def vocab() -> VocabularyIndex:
    v = VocabularyIndex(n_classes=2)
    for term, c in [("good", 0), ("bad", 1), ("great", 0), ("good", 0), ("awful", 1), ("good", 1)]:
        v.insert_or_increment(term, c)
    return v


class TestInsertOrIncrement:
    def test_terms_sorted(self, vocab: VocabularyIndex):
        assert vocab.terms == ["awful", "bad", "good", "great"]

    def test_ids_in_first_insertion_order(self, vocab: VocabularyIndex):
        assert vocab.find("good") == 0
        assert vocab.find("bad") == 1
        assert vocab.find("great") == 2
        assert vocab.find("awful") == 3

    def test_parallel_position_to_id(self, vocab: VocabularyIndex):
        assert vocab.ids == [3, 1, 0, 2]
        for pos, term in enumerate(vocab.terms):
            assert vocab.entry_at(pos).term == term
            assert vocab.entry(vocab.ids[pos]).term == term

    def test_counts(self, vocab: VocabularyIndex):
        assert vocab.entry(vocab.find("good")).counts == [2, 1]
        assert vocab.entry(vocab.find("awful")).counts == [0, 1]
        assert vocab.class_total(0) == 3
        assert vocab.class_total(1) == 3

    def test_returns_id(self):
        v = VocabularyIndex(n_classes=4)
        assert v.insert_or_increment("zebra", 0) == 0
        assert v.insert_or_increment("apple", 3) == 1
        assert v.insert_or_increment("zebra", 2) == 0

    def test_ids_stable_as_positions_shift(self):
        v = VocabularyIndex(n_classes=1)
        v.insert_or_increment("m", 0)
        assert v.position("m") == 0
        for term in ["a", "b", "c"]:
            v.insert_or_increment(term, 0)
        assert v.position("m") == 3
        assert v.find("m") == 0

    def test_find_after_every_insert(self):
        v = VocabularyIndex(n_classes=1)
        words = ["pear", "apple", "fig", "kiwi", "banana", "apple", "cherry"]
        for word in words:
            v.insert_or_increment(word, 0)
            assert v.find(word) is not None
            assert v.terms == sorted(v.terms)
        assert len(v) == 6

    def test_find_missing(self, vocab: VocabularyIndex):
        assert vocab.find("excellent") is None
        assert vocab.position("excellent") == -1
        assert "excellent" not in vocab
        assert "good" in vocab

    def test_insertion_point(self, vocab: VocabularyIndex):
        assert vocab.insertion_point("aaa") == 0
        assert vocab.insertion_point("beautiful") == 2
        assert vocab.insertion_point("zzz") == 4

    @pytest.mark.parametrize("class_index", [-1, 2, 10])
    def test_bad_class_index(self, vocab: VocabularyIndex, class_index: int):
        with pytest.raises(IndexError):
            vocab.insert_or_increment("good", class_index)

    def test_empty_term(self, vocab: VocabularyIndex):
        with pytest.raises(ValueError):
            vocab.insert_or_increment("", 0)

    def test_bad_n_classes(self):
        with pytest.raises(ValueError):
            VocabularyIndex(n_classes=0)

    def test_iteration_in_sorted_order(self, vocab: VocabularyIndex):
        assert [e.term for e in vocab] == vocab.terms
        assert [e.term_id for e in vocab.entries_by_id()] == [0, 1, 2, 3]


class TestDocumentCounting:
    def test_once_per_document(self):
        v = VocabularyIndex(n_classes=2)
        v.add_document(["good", "good", "great", "good"], 0, presence_only=True)
        v.add_document(["good"], 0, presence_only=True)
        v.add_document(["good", "bad"], 1, presence_only=True)
        assert v.entry(v.find("good")).counts == [2, 1]
        assert v.entry(v.find("great")).counts == [1, 0]

    def test_occurrence_counting(self):
        v = VocabularyIndex(n_classes=2)
        v.add_document(["good", "good", "great", "good"], 0)
        assert v.entry(v.find("good")).counts == [3, 0]

    def test_begin_document_resets_seen_set(self):
        v = VocabularyIndex(n_classes=1)
        v.insert_or_increment("x", 0, once_per_document=True)
        v.insert_or_increment("x", 0, once_per_document=True)
        assert v.entry(0).counts == [1]
        v.begin_document()
        v.insert_or_increment("x", 0, once_per_document=True)
        assert v.entry(0).counts == [2]


class TestPersistence:
    def test_round_trip_preserves_ids_and_counts(self, vocab: VocabularyIndex):
        restored = VocabularyIndex.from_dict(vocab.to_dict())
        assert restored.terms == vocab.terms
        assert restored.ids == vocab.ids
        assert [e.counts for e in restored.entries_by_id()] == [
            e.counts for e in vocab.entries_by_id()
        ]

    def test_restored_index_accepts_new_terms(self, vocab: VocabularyIndex):
        restored = VocabularyIndex.from_dict(vocab.to_dict())
        assert restored.insert_or_increment("excellent", 0) == 4
        assert restored.terms == ["awful", "bad", "excellent", "good", "great"]

    def test_non_contiguous_ids_rejected(self):
        data = {"n_classes": 1, "entries": [{"term": "a", "id": 1, "counts": [1]}]}
        with pytest.raises(ValueError, match="contiguous"):
            VocabularyIndex.from_dict(data)

    def test_wrong_count_length_rejected(self):
        data = {"n_classes": 2, "entries": [{"term": "a", "id": 0, "counts": [1]}]}
        with pytest.raises(ValueError):
            VocabularyIndex.from_dict(data)

    def test_duplicate_terms_rejected(self):
        data = {
            "n_classes": 1,
            "entries": [
                {"term": "a", "id": 0, "counts": [1]},
                {"term": "a", "id": 1, "counts": [1]},
            ],
        }
        with pytest.raises(ValueError, match="Duplicate"):
            VocabularyIndex.from_dict(data)
