"""Naive Bayes estimation and scoring over a vocabulary index.

Pure Python, no sklearn or numpy. Two event models share vocabulary
building, persistence and evaluation and differ only in how term
probabilities are smoothed and how documents are scored:

- Multinomial: term occurrence counts, ``P(t|c) = (n(t,c) + 1) / (N_c + |V|)``
  where ``N_c`` is the total number of term occurrences in class ``c``.
  Scores use the natural logarithm; terms missing from the vocabulary
  contribute ``log(1 / |V|)``.
- Bernoulli: term presence, ``P(t|c) = (d(t,c) + 1) / (D_c + 2)`` where
  ``d(t,c)`` counts class-``c`` documents containing ``t`` and ``D_c`` is
  the number of class-``c`` documents. Scores use base-2 logarithms and
  visit every vocabulary term, present or absent.

Class decisions take the first maximum in class order, so ties go to the
lowest class index.
"""

from __future__ import annotations

import json
import logging
import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from pathlib import Path
from typing import Callable, Optional

from .models import N_CLASSES, DegenerateModelError
from .vocabulary import VocabularyIndex

logger = logging.getLogger(__name__)

MODEL_FORMAT_VERSION = "1.0"


# ---------------------------------------------------------------------------
# Event models
# ---------------------------------------------------------------------------

class EventModel(str, Enum):
    """Generative assumption for document likelihood."""

    MULTINOMIAL = "multinomial"
    BERNOULLI = "bernoulli"

    @classmethod
    def parse(cls, value: "str | EventModel") -> "EventModel":
        """Parse a case-insensitive event model name.

        Raises:
            ValueError: If the name is unknown.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            known = ", ".join(m.value for m in cls)
            raise ValueError(f"Unknown event model: {value!r}. Known: {known}") from None


def _log(x: float, base: Optional[float] = None) -> float:
    """Logarithm with ``log(0) == -inf`` (zero-prior classes)."""
    if x <= 0:
        return -math.inf
    if base is None:
        return math.log(x)
    return math.log(x, base)


class EventModelStrategy(ABC):
    """Smoothing and scoring rules for one event model."""

    event_model: EventModel
    presence_only: bool
    log_base: Optional[float]

    @abstractmethod
    def denominator(
        self,
        vocabulary: VocabularyIndex,
        class_document_counts: Sequence[int],
        class_index: int,
    ) -> float:
        """Smoothed normalizer for all term probabilities of one class."""

    def probability(self, count: int, denominator: float) -> float:
        return (count + 1) / denominator

    @abstractmethod
    def log_scores(self, tokens: Sequence[str], model: "TrainedModel") -> list[float]:
        """Unnormalized log posterior per class."""

    def natural_log_scale(self) -> float:
        """Factor converting this model's log scores to natural logs."""
        return 1.0 if self.log_base is None else math.log(self.log_base)


class MultinomialEventModel(EventModelStrategy):
    event_model = EventModel.MULTINOMIAL
    presence_only = False
    log_base = None

    def denominator(self, vocabulary, class_document_counts, class_index):
        # sum over terms of (count + 1)
        return vocabulary.class_total(class_index) + len(vocabulary)

    def log_scores(self, tokens, model):
        vocabulary = model.vocabulary
        if len(vocabulary) == 0:
            raise DegenerateModelError("Multinomial model has an empty vocabulary")
        table = model.probabilities
        unseen = math.log(1.0 / len(vocabulary))
        term_ids = [vocabulary.find(tok) for tok in tokens]

        scores: list[float] = []
        for stats in model.priors:
            c = stats.class_index
            score = _log(stats.prior)
            for term_id in term_ids:
                if term_id is None:
                    score += unseen
                else:
                    score += math.log(table.probability(term_id, c))
            scores.append(score)
        return scores


class BernoulliEventModel(EventModelStrategy):
    event_model = EventModel.BERNOULLI
    presence_only = True
    log_base = 2.0

    def denominator(self, vocabulary, class_document_counts, class_index):
        return class_document_counts[class_index] + 2

    def log_scores(self, tokens, model):
        present = set(tokens)
        table = model.probabilities
        entries = list(model.vocabulary.entries_by_id())

        scores: list[float] = []
        for stats in model.priors:
            c = stats.class_index
            score = _log(stats.prior, 2)
            for entry in entries:
                p = table.probability(entry.term_id, c)
                if entry.term in present:
                    score += _log(p, 2)
                else:
                    score += _log(1 - p, 2)
            scores.append(score)
        return scores


_STRATEGIES: dict[EventModel, EventModelStrategy] = {
    EventModel.MULTINOMIAL: MultinomialEventModel(),
    EventModel.BERNOULLI: BernoulliEventModel(),
}


def get_event_model(event_model: "str | EventModel") -> EventModelStrategy:
    """Return the strategy object for an event model name."""
    return _STRATEGIES[EventModel.parse(event_model)]


# ---------------------------------------------------------------------------
# Estimation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ClassStatistics:
    """Document count and prior probability of one class."""

    class_index: int
    document_count: int
    prior: float

    def to_dict(self) -> dict:
        return {
            "class_index": self.class_index,
            "document_count": self.document_count,
            "prior": self.prior,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClassStatistics":
        return cls(
            class_index=int(data["class_index"]),
            document_count=int(data["document_count"]),
            prior=float(data["prior"]),
        )


class ClassDenominators:
    """Per-class smoothing denominators, computed once per class.

    Owned by a single estimation pass. Call :meth:`reset` before reusing
    the object with changed counts.

    Args:
        compute: Function mapping a class index to its denominator.
    """

    def __init__(self, compute: Callable[[int], float]) -> None:
        self._compute = compute
        self._cache: dict[int, float] = {}

    def __getitem__(self, class_index: int) -> float:
        if class_index not in self._cache:
            value = self._compute(class_index)
            if value <= 0:
                raise DegenerateModelError(
                    f"Probability denominator for class {class_index} is {value}"
                )
            self._cache[class_index] = value
        return self._cache[class_index]

    def __len__(self) -> int:
        return len(self._cache)

    def reset(self) -> None:
        self._cache.clear()


@dataclass(frozen=True)
class ProbabilityTable:
    """Smoothed ``P(term|class)`` rows indexed by vocabulary id."""

    rows: tuple[tuple[float, ...], ...] = ()

    def probability(self, term_id: int, class_index: int) -> float:
        return self.rows[term_id][class_index]

    def row(self, term_id: int) -> tuple[float, ...]:
        return self.rows[term_id]

    def __len__(self) -> int:
        return len(self.rows)

    def to_list(self) -> list[list[float]]:
        return [list(r) for r in self.rows]

    @classmethod
    def from_list(cls, data: Iterable[Iterable[float]]) -> "ProbabilityTable":
        return cls(rows=tuple(tuple(float(p) for p in row) for row in data))


def estimate_priors(class_document_counts: Sequence[int]) -> list[ClassStatistics]:
    """Compute ``prior[c] = N_c / N`` for every class.

    Raises:
        DegenerateModelError: If there are no documents at all.
    """
    total = sum(class_document_counts)
    if total <= 0:
        raise DegenerateModelError("Cannot compute priors from zero training documents")
    return [
        ClassStatistics(class_index=c, document_count=n, prior=n / total)
        for c, n in enumerate(class_document_counts)
    ]


def estimate(
    vocabulary: VocabularyIndex,
    class_document_counts: Sequence[int],
    event_model: "str | EventModel" = EventModel.MULTINOMIAL,
) -> tuple[ProbabilityTable, list[ClassStatistics]]:
    """Estimate smoothed term probabilities and class priors.

    Args:
        vocabulary: Finished vocabulary index. For the Bernoulli model its
            counts must be document frequencies.
        class_document_counts: Number of training documents per class.
        event_model: Multinomial or Bernoulli.

    Returns:
        Tuple of (probability table keyed by term id, per-class priors).

    Raises:
        ValueError: If the class counts do not match the vocabulary.
        DegenerateModelError: On zero documents or a zero denominator.
    """
    strategy = get_event_model(event_model)
    counts = list(class_document_counts)
    n_classes = vocabulary.n_classes
    if len(counts) != n_classes:
        raise ValueError(
            f"Expected {n_classes} class document counts, got {len(counts)}"
        )

    priors = estimate_priors(counts)
    denominators = ClassDenominators(partial(strategy.denominator, vocabulary, counts))
    # Touch every class so a degenerate class fails even with no terms
    for c in range(n_classes):
        denominators[c]

    rows = tuple(
        tuple(strategy.probability(entry.counts[c], denominators[c]) for c in range(n_classes))
        for entry in vocabulary.entries_by_id()
    )
    return ProbabilityTable(rows=rows), priors


# ---------------------------------------------------------------------------
# Trained model
# ---------------------------------------------------------------------------

@dataclass
class TrainedModel:
    """Vocabulary, probabilities and priors of one training run.

    Read-only once built. Use :func:`train_model` to construct one.
    """

    vocabulary: VocabularyIndex
    probabilities: ProbabilityTable
    priors: list[ClassStatistics]
    event_model: EventModel = EventModel.MULTINOMIAL

    @property
    def n_classes(self) -> int:
        return len(self.priors)

    @property
    def prior_values(self) -> list[float]:
        return [s.prior for s in self.priors]

    @property
    def document_count(self) -> int:
        return sum(s.document_count for s in self.priors)

    def log_scores(self, tokens: Sequence[str]) -> list[float]:
        return log_scores(tokens, self)

    def classify(self, tokens: Sequence[str]) -> int:
        return classify(tokens, self)

    def term_probabilities(self, term: str) -> Optional[tuple[float, ...]]:
        """Probability row for ``term``, or ``None`` if it is unseen."""
        term_id = self.vocabulary.find(term)
        if term_id is None:
            return None
        return self.probabilities.row(term_id)

    def to_dict(self) -> dict:
        """Serialize model state."""
        return {
            "version": MODEL_FORMAT_VERSION,
            "event_model": self.event_model.value,
            "priors": [s.to_dict() for s in self.priors],
            "vocabulary": self.vocabulary.to_dict(),
            "probabilities": self.probabilities.to_list(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TrainedModel":
        """Deserialize a model.

        Raises:
            ValueError: If the table and vocabulary disagree.
        """
        vocabulary = VocabularyIndex.from_dict(data["vocabulary"])
        probabilities = ProbabilityTable.from_list(data["probabilities"])
        priors = [ClassStatistics.from_dict(p) for p in data["priors"]]
        if len(probabilities) != len(vocabulary):
            raise ValueError(
                f"Probability table has {len(probabilities)} rows for "
                f"{len(vocabulary)} vocabulary terms"
            )
        if len(priors) != vocabulary.n_classes:
            raise ValueError(
                f"Model has {len(priors)} priors for {vocabulary.n_classes} classes"
            )
        return cls(
            vocabulary=vocabulary,
            probabilities=probabilities,
            priors=priors,
            event_model=EventModel.parse(data["event_model"]),
        )

    def save(self, path: str | Path) -> None:
        """Save the model to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f)

    @classmethod
    def load(cls, path: str | Path) -> "TrainedModel":
        """Load a model saved with :meth:`save`."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)


def train_model(
    documents: Iterable[tuple[Sequence[str], int]],
    n_classes: int = N_CLASSES,
    event_model: "str | EventModel" = EventModel.MULTINOMIAL,
) -> TrainedModel:
    """Build a fresh vocabulary from tokenized documents and estimate a model.

    Every call starts from an empty vocabulary; nothing is shared between
    calls.

    Args:
        documents: ``(terms, class_index)`` pairs.
        n_classes: Number of classes.
        event_model: Multinomial or Bernoulli.

    Returns:
        A complete :class:`TrainedModel`.

    Raises:
        ValueError: If a class index is out of range.
        DegenerateModelError: If the data cannot produce a model.
    """
    strategy = get_event_model(event_model)
    vocabulary = VocabularyIndex(n_classes=n_classes)
    class_document_counts = [0] * n_classes

    for terms, class_index in documents:
        if not 0 <= class_index < n_classes:
            raise ValueError(f"Class index {class_index} out of range for {n_classes} classes")
        vocabulary.add_document(terms, class_index, presence_only=strategy.presence_only)
        class_document_counts[class_index] += 1

    probabilities, priors = estimate(vocabulary, class_document_counts, strategy.event_model)
    logger.debug(
        f"Trained {strategy.event_model.value} model: {sum(class_document_counts)} documents, "
        f"{len(vocabulary)} terms"
    )
    return TrainedModel(
        vocabulary=vocabulary,
        probabilities=probabilities,
        priors=priors,
        event_model=strategy.event_model,
    )


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------

def argmax(scores: Sequence[float]) -> int:
    """Index of the first maximum; equal later scores do not replace it."""
    if not scores:
        raise ValueError("Cannot take argmax of an empty score list")
    best = 0
    for i in range(1, len(scores)):
        if scores[i] > scores[best]:
            best = i
    return best


def log_scores(tokens: Sequence[str], model: TrainedModel) -> list[float]:
    """Per-class log scores of a tokenized document under ``model``."""
    return get_event_model(model.event_model).log_scores(tokens, model)


def classify(tokens: Sequence[str], model: TrainedModel) -> int:
    """Predicted class index for a tokenized document."""
    return argmax(log_scores(tokens, model))


def posterior(tokens: Sequence[str], model: TrainedModel) -> list[float]:
    """Normalized class probabilities via log-sum-exp.

    Bernoulli scores are converted from base 2 first, so both event models
    return comparable probabilities.
    """
    strategy = get_event_model(model.event_model)
    scale = strategy.natural_log_scale()
    scores = [s * scale for s in strategy.log_scores(tokens, model)]

    max_score = max(scores)
    if max_score == -math.inf:
        return [1.0 / len(scores)] * len(scores)
    exp_scores = [math.exp(s - max_score) for s in scores]
    total = sum(exp_scores)
    return [s / total for s in exp_scores]


# ---------------------------------------------------------------------------
# Classifier (fit / predict API)
# ---------------------------------------------------------------------------

@dataclass
class NaiveBayesClassifier:
    """Naive Bayes text classifier over pre-tokenized documents.

    Each :meth:`fit` builds a brand-new model; there are no online updates.

    Example::

        nb = NaiveBayesClassifier(event_model="bernoulli", n_classes=2)
        nb.fit([["good", "great"], ["bad"]], [1, 0])
        nb.predict_one(["good"])  # 1

    Args:
        event_model: ``"multinomial"`` or ``"bernoulli"``.
        n_classes: Number of classes.
    """

    event_model: EventModel = EventModel.MULTINOMIAL
    n_classes: int = N_CLASSES

    # Learned state
    _model: Optional[TrainedModel] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        self.event_model = EventModel.parse(self.event_model)

    @property
    def is_fitted(self) -> bool:
        return self._model is not None

    @property
    def model_(self) -> TrainedModel:
        """The trained model.

        Raises:
            RuntimeError: If the classifier has not been fitted.
        """
        if self._model is None:
            raise RuntimeError("Classifier has not been fitted. Call fit() first.")
        return self._model

    def fit(
        self,
        documents: Sequence[Sequence[str]],
        labels: Sequence[int],
    ) -> "NaiveBayesClassifier":
        """Train on tokenized documents and class indices.

        Returns:
            Self (for method chaining).

        Raises:
            ValueError: If documents and labels have different lengths.
            DegenerateModelError: If the data cannot produce a model. The
                previous model, if any, is discarded.
        """
        if len(documents) != len(labels):
            raise ValueError(
                f"documents ({len(documents)}) and labels ({len(labels)}) must have same length"
            )
        self._model = None
        self._model = train_model(zip(documents, labels), self.n_classes, self.event_model)
        return self

    def predict(self, documents: Iterable[Sequence[str]]) -> list[int]:
        """Predict class indices for a batch of tokenized documents."""
        model = self.model_
        return [classify(doc, model) for doc in documents]

    def predict_one(self, tokens: Sequence[str]) -> int:
        return classify(tokens, self.model_)

    def predict_proba(self, documents: Iterable[Sequence[str]]) -> list[list[float]]:
        """Class probabilities for a batch of tokenized documents."""
        model = self.model_
        return [posterior(doc, model) for doc in documents]

    def log_scores(self, tokens: Sequence[str]) -> list[float]:
        return log_scores(tokens, self.model_)
