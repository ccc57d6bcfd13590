"""Command-line interface for review-sentiment.

Provides ``run``, ``train``, ``evaluate``, ``classify``, ``stem``, ``pick``
and ``init-config`` commands with rich terminal output using the ``click``
and ``rich`` libraries.

Usage::

    review-sentiment run sorted_data --event-model bernoulli
    review-sentiment train sorted_data/books --model-out books.json
    review-sentiment classify --model books.json "Great read, loved it"
"""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from .classifier import EventModel, TrainedModel
from .config import (
    ENV_PREFIX,
    LOG_LEVELS,
    Config,
    apply_env_overrides,
    get_default_config,
    load_config,
    save_config,
)
from .corpus import (
    TEST_SET_FILE,
    load_category,
    pick_test_set,
    read_test_set,
    to_labeled,
)
from .evaluator import UNDEFINED, ConfusionStats, is_positive
from .models import class_to_rating
from .pipeline import CategoryReport, SentimentPipeline, save_report
from .preprocessing import TextNormalizer, load_stopwords
from .stemmer import PorterStemmer, stem as stem_word

console = Console()

EVENT_MODEL_CHOICE = click.Choice([m.value for m in EventModel], case_sensitive=False)


def setup_logging(level: str = "INFO") -> None:
    """Route log records through a rich handler on stderr."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _build_normalizer(
    stopwords: Path | str | None,
    stemming: bool = True,
    cache_size: int | None = 100_000,
) -> TextNormalizer:
    words = load_stopwords(stopwords) if stopwords else None
    return TextNormalizer(words, PorterStemmer(cache_size=cache_size), stem=stemming)


def _fmt(value: float | None) -> str:
    return UNDEFINED if value is None else f"{value:.2f}%"


@click.group()
@click.version_option(package_name="review-sentiment")
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default=None,
              help="Logging level (default: $REVIEW_SENTIMENT_LOG_LEVEL or INFO).")
@click.pass_context
def main(ctx: click.Context, log_level: str | None) -> None:
    """Naive Bayes sentiment classification of product reviews.

    Train Multinomial or Bernoulli models per review category, classify
    held-out reviews and report positive/negative confusion statistics.
    """
    load_dotenv()
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    setup_logging(log_level or os.environ.get(f"{ENV_PREFIX}LOG_LEVEL", "INFO"))


@main.command()
@click.argument("data_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--event-model", "-m", type=EVENT_MODEL_CHOICE, default=None,
              help="Event model (overrides the configuration).")
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="YAML configuration file.")
@click.option("--stopwords", type=click.Path(exists=True, path_type=Path), default=None,
              help="Stop-word file, one word per line.")
@click.option("--output-dir", "-d", type=click.Path(path_type=Path), default=None,
              help="Write models, labels and statistics per category here.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
@click.pass_context
def run(
    ctx: click.Context,
    data_dir: Path,
    event_model: str | None,
    config_path: Path | None,
    stopwords: Path | None,
    output_dir: Path | None,
    output: str,
) -> None:
    """Train, test and evaluate every category under DATA_DIR.

    Example: review-sentiment run sorted_data --event-model bernoulli
    """
    try:
        config = load_config(config_path) if config_path else get_default_config()
        apply_env_overrides(config)
        if ctx.obj.get("log_level") is None:
            setup_logging(config.logging.log_level)
        if event_model:
            config.model.event_model = EventModel.parse(event_model).value
        if stopwords:
            config.data.stopwords_file = str(stopwords)
        if output_dir:
            config.output.output_dir = str(output_dir)
        pipeline = _pipeline_from_config(config)
    except Exception as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    with console.status("[bold blue]Running categories...", spinner="dots"):
        try:
            reports = pipeline.run_directory(
                data_dir,
                training_files=config.data.training_files,
                test_file=config.data.test_file,
            )
            if config.output.output_dir:
                for report in reports:
                    save_report(report, config.output.output_dir,
                                include_model=config.output.save_models)
        except Exception as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    if output == "json":
        click.echo(json.dumps([r.to_dict() for r in reports], indent=2))
    else:
        _render_reports(reports, pipeline.event_model)
        if config.output.output_dir:
            console.print(f"[dim]Reports saved to {config.output.output_dir}[/]")

    if reports and not any(r.ok for r in reports):
        sys.exit(1)


@main.command()
@click.argument("category_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--model-out", "-o", type=click.Path(path_type=Path), required=True,
              help="Where to write the trained model (JSON).")
@click.option("--event-model", "-m", type=EVENT_MODEL_CHOICE, default="multinomial",
              help="Event model.")
@click.option("--stopwords", type=click.Path(exists=True, path_type=Path), default=None,
              help="Stop-word file, one word per line.")
def train(category_dir: Path, model_out: Path, event_model: str, stopwords: Path | None) -> None:
    """Train a model on one category's labeled reviews.

    Example: review-sentiment train sorted_data/books --model-out books.json
    """
    with console.status("[bold blue]Training model...", spinner="dots"):
        try:
            pipeline = SentimentPipeline(_build_normalizer(stopwords), event_model)
            corpus = load_category(category_dir, test_file=None)
            model = pipeline.train(corpus.training)
            model.save(model_out)
        except Exception as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    counts = ", ".join(
        f"{class_to_rating(s.class_index)}★: {s.document_count}" for s in model.priors
    )
    console.print(Panel(
        f"[bold]{corpus.name}[/] ({model.event_model.value})\n"
        f"Documents: {model.document_count} ({counts})\n"
        f"Vocabulary: {len(model.vocabulary)} terms",
        title="Model trained",
        border_style="blue",
    ))
    console.print(f"[dim]Model saved to {model_out}[/]")


@main.command()
@click.argument("category_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--model", "model_path", type=click.Path(exists=True, path_type=Path),
              required=True, help="Model file written by 'train'.")
@click.option("--test-file", default=TEST_SET_FILE, show_default=True,
              help="Test-set file inside CATEGORY_DIR.")
@click.option("--stopwords", type=click.Path(exists=True, path_type=Path), default=None,
              help="Stop-word file used at training time.")
@click.option("--output", "-o", type=click.Choice(["rich", "json"]), default="rich",
              help="Output format.")
def evaluate(
    category_dir: Path,
    model_path: Path,
    test_file: str,
    stopwords: Path | None,
    output: str,
) -> None:
    """Evaluate a saved model on a category's test set.

    Example: review-sentiment evaluate sorted_data/books --model books.json
    """
    with console.status("[bold blue]Evaluating model...", spinner="dots"):
        try:
            model = TrainedModel.load(model_path)
            pipeline = SentimentPipeline(
                _build_normalizer(stopwords), model.event_model, n_classes=model.n_classes
            )
            test_docs, _ = to_labeled(read_test_set(category_dir / test_file))
            _, stats = pipeline.test(model, test_docs)
        except Exception as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    if output == "json":
        click.echo(json.dumps(stats.to_dict(), indent=2))
    else:
        _render_stats(stats, f"{category_dir.name} ({model.event_model.value})")


@main.command()
@click.argument("text")
@click.option("--model", "model_path", type=click.Path(exists=True, path_type=Path),
              required=True, help="Model file written by 'train'.")
@click.option("--stopwords", type=click.Path(exists=True, path_type=Path), default=None,
              help="Stop-word file used at training time.")
def classify(text: str, model_path: Path, stopwords: Path | None) -> None:
    """Predict the star rating of TEXT.

    Example: review-sentiment classify --model books.json "Dull and too long"
    """
    try:
        model = TrainedModel.load(model_path)
        pipeline = SentimentPipeline(
            _build_normalizer(stopwords), model.event_model, n_classes=model.n_classes
        )
        predicted = pipeline.classify_text(model, text)
        probabilities = pipeline.class_probabilities(model, text)
    except Exception as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)

    rating = class_to_rating(predicted)
    sentiment = "positive" if is_positive(predicted, model.n_classes) else "negative"
    style = "bold green" if sentiment == "positive" else "bold red"
    console.print(f"Predicted rating: [{style}]{rating}[/] ({sentiment})")

    table = Table(show_header=True)
    table.add_column("Rating", justify="center")
    table.add_column("Probability", justify="right")
    for index, p in enumerate(probabilities):
        table.add_row(str(class_to_rating(index)), f"{p:.1%}")
    console.print(table)


@main.command()
@click.argument("words", nargs=-1, required=True)
def stem(words: tuple[str, ...]) -> None:
    """Print the Porter stem of each WORD.

    Example: review-sentiment stem connected connecting
    """
    for word in words:
        click.echo(f"{word}\t{stem_word(word.lower())}")


@main.command()
@click.argument("category_dir", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("--config", "-c", "config_path", type=click.Path(exists=True, path_type=Path),
              default=None, help="YAML configuration file (corpus file names).")
def pick(category_dir: Path, config_path: Path | None) -> None:
    """Build TestSet.review for a category from its unlabeled reviews.

    Example: review-sentiment pick sorted_data/books
    """
    with console.status("[bold blue]Picking test reviews...", spinner="dots"):
        try:
            config = load_config(config_path) if config_path else get_default_config()
            apply_env_overrides(config)
            picked = pick_test_set(
                category_dir,
                training_files=config.data.training_files,
                picking_files=config.data.picking_files,
                output_name=config.data.test_file,
            )
        except Exception as e:
            console.print(f"[bold red]Error:[/] {e}")
            sys.exit(1)

    console.print(
        f"Picked [bold]{len(picked)}[/] test reviews for {category_dir.name} "
        f"into {config.data.test_file}"
    )


@main.command("init-config")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--event-model", "-m", type=EVENT_MODEL_CHOICE, default="multinomial",
              help="Event model.")
def init_config(path: Path, event_model: str) -> None:
    """Write a default YAML configuration to PATH."""
    try:
        save_config(get_default_config(event_model), path)
    except Exception as e:
        console.print(f"[bold red]Error:[/] {e}")
        sys.exit(1)
    console.print(f"[dim]Configuration written to {path}[/]")


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------

def _pipeline_from_config(config: Config) -> SentimentPipeline:
    normalizer = _build_normalizer(
        config.data.stopwords_file,
        stemming=config.model.stemming,
        cache_size=config.model.stemmer_cache_size,
    )
    return SentimentPipeline(normalizer, config.model.event_model)


def _render_reports(reports: list[CategoryReport], event_model: EventModel) -> None:
    """Render per-category results as a rich table."""
    table = Table(title=f"Sentiment evaluation ({event_model.value})", show_lines=False)
    table.add_column("Category", style="cyan")
    table.add_column("Train", justify="right")
    table.add_column("Test", justify="right")
    table.add_column("TP", justify="right")
    table.add_column("FP", justify="right")
    table.add_column("TN", justify="right")
    table.add_column("FN", justify="right")
    table.add_column("Accuracy", justify="right")
    table.add_column("Precision", justify="right")
    table.add_column("Recall", justify="right")

    for report in reports:
        if not report.ok or report.stats is None:
            table.add_row(report.category, str(report.training_documents), "-",
                          "", "", "", "", "[bold red]failed[/]", "", "")
            continue
        s = report.stats
        table.add_row(
            report.category,
            str(report.training_documents),
            str(s.total),
            str(s.true_positives),
            str(s.false_positives),
            str(s.true_negatives),
            str(s.false_negatives),
            _fmt(s.accuracy),
            _fmt(s.precision),
            _fmt(s.recall),
        )

    console.print()
    console.print(table)
    for report in reports:
        if not report.ok:
            console.print(f"  [bold red]{report.category}:[/] {report.error}")
    console.print()


def _render_stats(stats: ConfusionStats, title: str) -> None:
    console.print(Panel(stats.summary(), title=title, border_style="blue"))


if __name__ == "__main__":
    main()
