"""Ordered vocabulary index with stable term ids and per-class counts.

Terms are kept in ascending lexicographic order so lookups are binary
searches. Every term also receives an integer id at first insertion; ids
never change, even though a term's position in the ordered list shifts as
new terms are spliced in ahead of it. Probability tables are keyed by id,
while listings and lookups walk the ordered positions, so the index keeps a
parallel position -> id list alongside the sorted terms.
"""

from __future__ import annotations

from bisect import bisect_left
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class VocabularyEntry:
    """A vocabulary term with its id and one occurrence count per class.

    For the Bernoulli event model the counts are document frequencies
    (documents of each class containing the term at least once).
    """

    term: str
    term_id: int
    counts: list[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts)

    def to_dict(self) -> dict:
        return {"term": self.term, "id": self.term_id, "counts": list(self.counts)}


class VocabularyIndex:
    """Sorted term index supporting incremental insert-or-increment.

    Example::

        vocab = VocabularyIndex(n_classes=2)
        vocab.insert_or_increment("good", 0)   # -> 0
        vocab.insert_or_increment("bad", 1)    # -> 1
        vocab.terms                            # ['bad', 'good']
        vocab.ids                              # [1, 0]
        vocab.find("good")                     # 0

    Args:
        n_classes: Number of classes tracked per term.
    """

    def __init__(self, n_classes: int = 4) -> None:
        if n_classes < 1:
            raise ValueError(f"n_classes must be at least 1, got {n_classes}")
        self._n_classes = n_classes
        self._terms: list[str] = []
        self._ids: list[int] = []
        self._entries: list[VocabularyEntry] = []
        self._seen_in_document: set[int] = set()

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def insertion_point(self, term: str) -> int:
        """Position at which ``term`` would be inserted to keep order."""
        return bisect_left(self._terms, term)

    def position(self, term: str) -> int:
        """Sorted position of ``term``, or ``-1`` when absent."""
        pos = self.insertion_point(term)
        if pos < len(self._terms) and self._terms[pos] == term:
            return pos
        return -1

    def find(self, term: str) -> Optional[int]:
        """Id of ``term``, or ``None`` when it is not in the vocabulary."""
        pos = self.position(term)
        if pos < 0:
            return None
        return self._ids[pos]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert_or_increment(
        self,
        term: str,
        class_index: int,
        once_per_document: bool = False,
    ) -> int:
        """Count one occurrence of ``term`` for ``class_index``.

        A new term gets the next id, a zeroed count vector with ``1`` for
        ``class_index``, and is spliced in at its ordered position.

        Args:
            term: The (stemmed) term.
            class_index: Class of the document the term occurred in.
            once_per_document: Count the term at most once until the next
                :meth:`begin_document` call (Bernoulli document counts).

        Returns:
            The term's id.

        Raises:
            IndexError: If ``class_index`` is outside ``0..n_classes-1``.
            ValueError: If ``term`` is empty.
        """
        if not 0 <= class_index < self._n_classes:
            raise IndexError(
                f"class_index {class_index} out of range for {self._n_classes} classes"
            )
        if not term:
            raise ValueError("term must be a non-empty string")

        pos = self.insertion_point(term)
        if pos < len(self._terms) and self._terms[pos] == term:
            term_id = self._ids[pos]
            if once_per_document:
                if term_id in self._seen_in_document:
                    return term_id
                self._seen_in_document.add(term_id)
            self._entries[term_id].counts[class_index] += 1
            return term_id

        term_id = len(self._entries)
        counts = [0] * self._n_classes
        counts[class_index] = 1
        self._entries.append(VocabularyEntry(term=term, term_id=term_id, counts=counts))
        self._terms.insert(pos, term)
        self._ids.insert(pos, term_id)
        if once_per_document:
            self._seen_in_document.add(term_id)
        return term_id

    def begin_document(self) -> None:
        """Start a new document for ``once_per_document`` counting.

        Counts are left untouched.
        """
        self._seen_in_document.clear()

    def add_document(
        self,
        terms: Iterable[str],
        class_index: int,
        presence_only: bool = False,
    ) -> None:
        """Count every term of one document.

        Args:
            terms: The document's terms in order.
            class_index: The document's class.
            presence_only: Count each distinct term once (Bernoulli).
        """
        self.begin_document()
        for term in terms:
            self.insert_or_increment(term, class_index, once_per_document=presence_only)
        self.begin_document()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def n_classes(self) -> int:
        return self._n_classes

    @property
    def terms(self) -> list[str]:
        """Terms in ascending order."""
        return list(self._terms)

    @property
    def ids(self) -> list[int]:
        """Ids in ordered-position order (``ids[pos]`` is the id at ``pos``)."""
        return list(self._ids)

    def entry(self, term_id: int) -> VocabularyEntry:
        """Entry by id."""
        return self._entries[term_id]

    def entry_at(self, position: int) -> VocabularyEntry:
        """Entry by sorted position."""
        return self._entries[self._ids[position]]

    def entries_by_id(self) -> Iterator[VocabularyEntry]:
        """Entries in id (first-insertion) order."""
        return iter(self._entries)

    def class_total(self, class_index: int) -> int:
        """Sum of all term counts for one class."""
        return sum(e.counts[class_index] for e in self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, term: object) -> bool:
        return isinstance(term, str) and self.position(term) >= 0

    def __iter__(self) -> Iterator[VocabularyEntry]:
        """Entries in ascending term order."""
        for term_id in self._ids:
            yield self._entries[term_id]

    def __repr__(self) -> str:
        return f"VocabularyIndex(terms={len(self)}, n_classes={self._n_classes})"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """Serialize entries in id order."""
        return {
            "n_classes": self._n_classes,
            "entries": [e.to_dict() for e in self._entries],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "VocabularyIndex":
        """Rebuild an index, preserving ids and counts.

        Raises:
            ValueError: If ids are not ``0..n-1`` in order, terms repeat, or
                a count vector has the wrong length.
        """
        vocab = cls(n_classes=data["n_classes"])
        for expected_id, raw in enumerate(data["entries"]):
            if raw["id"] != expected_id:
                raise ValueError(f"Vocabulary ids must be contiguous; got {raw['id']} at {expected_id}")
            counts = [int(c) for c in raw["counts"]]
            if len(counts) != vocab._n_classes:
                raise ValueError(f"Term {raw['term']!r} has {len(counts)} counts, expected {vocab._n_classes}")
            vocab._entries.append(VocabularyEntry(term=raw["term"], term_id=expected_id, counts=counts))

        order = sorted(range(len(vocab._entries)), key=lambda i: vocab._entries[i].term)
        vocab._terms = [vocab._entries[i].term for i in order]
        vocab._ids = order
        for prev, cur in zip(vocab._terms, vocab._terms[1:]):
            if prev == cur:
                raise ValueError(f"Duplicate vocabulary term: {cur!r}")
        return vocab
