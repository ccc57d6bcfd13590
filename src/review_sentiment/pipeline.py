"""Per-category train, test and evaluate pipeline.

``SentimentPipeline`` is the main entry point. Each category of the corpus
is processed independently and in sequence: a fresh vocabulary and model are
built for it, the held-out reviews are classified, and the predictions are
summarized in a confusion matrix. A category whose training data cannot
produce a model fails on its own; later categories still run.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from .classifier import EventModel, TrainedModel, classify, posterior, train_model
from .corpus import CategoryCorpus, discover_categories, load_category
from .evaluator import ConfusionStats, PredictionRecord, evaluate
from .models import N_CLASSES, DegenerateModelError, LabeledText, class_to_rating
from .preprocessing import TextNormalizer

logger = logging.getLogger(__name__)


@dataclass
class CategoryReport:
    """Outcome of running one category through the pipeline."""

    category: str
    event_model: EventModel
    training_documents: int = 0
    predictions: list[PredictionRecord] = field(default_factory=list)
    stats: Optional[ConfusionStats] = None
    model: Optional[TrainedModel] = field(default=None, repr=False)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def status(self) -> str:
        return "ok" if self.ok else "failed"

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "event_model": self.event_model.value,
            "status": self.status,
            "error": self.error,
            "training_documents": self.training_documents,
            "test_documents": len(self.predictions),
            "vocabulary_size": len(self.model.vocabulary) if self.model else 0,
            "stats": self.stats.to_dict() if self.stats else None,
        }


class SentimentPipeline:
    """Train, test and evaluate Naive Bayes sentiment models per category.

    Example::

        pipeline = SentimentPipeline(event_model="multinomial")
        reports = pipeline.run_directory("sorted_data")

        for report in reports:
            print(report.category, report.stats.accuracy)

    Args:
        normalizer: Tokenizer/stop-word/stemmer chain. Defaults to a
            :class:`TextNormalizer` with no stop-words.
        event_model: ``"multinomial"`` or ``"bernoulli"``.
        n_classes: Number of sentiment classes.
    """

    def __init__(
        self,
        normalizer: TextNormalizer | None = None,
        event_model: str | EventModel = EventModel.MULTINOMIAL,
        n_classes: int = N_CLASSES,
    ) -> None:
        self._normalizer = normalizer or TextNormalizer()
        self.event_model = EventModel.parse(event_model)
        self.n_classes = n_classes

    @property
    def normalizer(self) -> TextNormalizer:
        return self._normalizer

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    def train(self, documents: Iterable[LabeledText]) -> TrainedModel:
        """Build a new model from labeled raw texts.

        Raises:
            DegenerateModelError: If the documents cannot produce a model.
        """
        tokenized = ((self._normalizer.normalize(doc.text), doc.class_index) for doc in documents)
        return train_model(tokenized, n_classes=self.n_classes, event_model=self.event_model)

    def classify_text(self, model: TrainedModel, text: str) -> int:
        """Predicted class index for one raw text."""
        return classify(self._normalizer.normalize(text), model)

    def class_probabilities(self, model: TrainedModel, text: str) -> list[float]:
        return posterior(self._normalizer.normalize(text), model)

    def test(
        self,
        model: TrainedModel,
        documents: Iterable[LabeledText],
    ) -> tuple[list[PredictionRecord], ConfusionStats]:
        """Classify held-out documents and tally the results.

        Returns:
            Tuple of (per-document predictions, confusion statistics).
        """
        predictions = [
            PredictionRecord(actual=doc.class_index, predicted=self.classify_text(model, doc.text))
            for doc in documents
        ]
        return predictions, evaluate(predictions, n_classes=model.n_classes)

    def run_category(self, corpus: CategoryCorpus) -> CategoryReport:
        """Train on a category's training set and evaluate on its test set.

        Raises:
            DegenerateModelError: If the category's training data is unusable.
        """
        logger.info(
            f"[{corpus.name}] training {self.event_model.value} model on "
            f"{len(corpus.training)} reviews"
        )
        model = self.train(corpus.training)
        logger.info(f"[{corpus.name}] vocabulary: {len(model.vocabulary)} terms")

        predictions, stats = self.test(model, corpus.test)
        logger.info(
            f"[{corpus.name}] tested {len(predictions)} reviews, accuracy: "
            f"{'undefined' if stats.accuracy is None else f'{stats.accuracy:.2f}%'}"
        )
        return CategoryReport(
            category=corpus.name,
            event_model=self.event_model,
            training_documents=len(corpus.training),
            predictions=predictions,
            stats=stats,
            model=model,
        )

    # ------------------------------------------------------------------
    # Batch runs
    # ------------------------------------------------------------------

    def run(self, corpora: Iterable[CategoryCorpus]) -> list[CategoryReport]:
        """Run every category in order.

        A :class:`DegenerateModelError` aborts only the category that raised
        it; its report carries the error and no model.
        """
        reports: list[CategoryReport] = []
        for corpus in corpora:
            try:
                reports.append(self.run_category(corpus))
            except DegenerateModelError as exc:
                logger.error(f"[{corpus.name}] model could not be built: {exc}")
                reports.append(self._failed(corpus.name, exc, len(corpus.training)))
        return reports

    def run_directory(
        self,
        root: str | Path,
        training_files: Sequence[str] | None = None,
        test_file: str | None = None,
    ) -> list[CategoryReport]:
        """Load and run every category directory under ``root``.

        Categories with missing files are reported as failed and skipped.
        """
        kwargs: dict = {}
        if training_files is not None:
            kwargs["training_files"] = training_files
        if test_file is not None:
            kwargs["test_file"] = test_file

        reports: list[CategoryReport] = []
        for category_dir in discover_categories(root):
            try:
                corpus = load_category(category_dir, **kwargs)
            except FileNotFoundError as exc:
                logger.error(f"[{category_dir.name}] {exc}")
                reports.append(self._failed(category_dir.name, exc))
                continue
            # one category at a time; its model is released before the next
            reports.extend(self.run([corpus]))
        return reports

    def _failed(self, name: str, exc: Exception, training_documents: int = 0) -> CategoryReport:
        return CategoryReport(
            category=name,
            event_model=self.event_model,
            training_documents=training_documents,
            error=str(exc),
        )


def save_report(
    report: CategoryReport,
    output_dir: str | Path,
    include_model: bool = True,
) -> Path:
    """Write a category's model, labels and statistics under ``output_dir``.

    Files written to ``<output_dir>/<category>/``:

    - ``model_<event>.json``: the trained model (skipped for failed runs
      or with ``include_model=False``)
    - ``labels_<event>.txt``: ``actual predicted`` star ratings per line
    - ``stats_<event>.json``: the report summary and confusion statistics

    Returns:
        The category output directory.
    """
    suffix = report.event_model.value
    out = Path(output_dir) / report.category
    out.mkdir(parents=True, exist_ok=True)

    if include_model and report.model is not None:
        report.model.save(out / f"model_{suffix}.json")

    with open(out / f"labels_{suffix}.txt", "w", encoding="utf-8") as f:
        for record in report.predictions:
            f.write(f"{class_to_rating(record.actual)} {class_to_rating(record.predicted)}\n")

    (out / f"stats_{suffix}.json").write_text(
        json.dumps(report.to_dict(), indent=2), encoding="utf-8"
    )
    return out
