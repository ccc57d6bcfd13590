"""Review Sentiment -- Naive Bayes sentiment classification of product reviews."""

__version__ = "0.1.0"

from .classifier import (
    BernoulliEventModel,
    ClassDenominators,
    ClassStatistics,
    EventModel,
    MultinomialEventModel,
    NaiveBayesClassifier,
    ProbabilityTable,
    TrainedModel,
    argmax,
    classify,
    estimate,
    estimate_priors,
    log_scores,
    posterior,
    train_model,
)
from .corpus import (
    CategoryCorpus,
    discover_categories,
    load_category,
    parse_review_file,
    pick_test_set,
    read_test_set,
    write_test_set,
)
from .evaluator import UNDEFINED, ConfusionStats, PredictionRecord, evaluate
from .models import (
    DegenerateModelError,
    LabeledText,
    Rating,
    Review,
    UndefinedMetricError,
    class_to_rating,
    rating_to_class,
)
from .pipeline import CategoryReport, SentimentPipeline, save_report
from .preprocessing import StopWords, TextNormalizer, load_stopwords, split_tokens
from .stemmer import PorterStemmer, stem, strip_inflection
from .vocabulary import VocabularyEntry, VocabularyIndex

__all__ = [
    # Pipeline
    "SentimentPipeline",
    "CategoryReport",
    "save_report",
    # Domain types
    "Rating",
    "Review",
    "LabeledText",
    "DegenerateModelError",
    "UndefinedMetricError",
    "rating_to_class",
    "class_to_rating",
    # Text processing
    "stem",
    "strip_inflection",
    "PorterStemmer",
    "StopWords",
    "TextNormalizer",
    "load_stopwords",
    "split_tokens",
    # Vocabulary
    "VocabularyIndex",
    "VocabularyEntry",
    # Naive Bayes
    "EventModel",
    "MultinomialEventModel",
    "BernoulliEventModel",
    "ClassDenominators",
    "ClassStatistics",
    "ProbabilityTable",
    "TrainedModel",
    "NaiveBayesClassifier",
    "estimate",
    "estimate_priors",
    "train_model",
    "log_scores",
    "classify",
    "argmax",
    "posterior",
    # Evaluation
    "PredictionRecord",
    "ConfusionStats",
    "evaluate",
    "UNDEFINED",
    # Corpus
    "CategoryCorpus",
    "discover_categories",
    "load_category",
    "parse_review_file",
    "pick_test_set",
    "read_test_set",
    "write_test_set",
]
