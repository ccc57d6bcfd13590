"""
Configuration management for review-sentiment runs.

Settings are grouped in dataclasses and can be loaded from or saved to YAML.
A handful of environment variables override the file values; the CLI loads a
``.env`` file into the environment before applying them.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .classifier import EventModel
from .corpus import PICKING_FILES, TEST_SET_FILE, TRAINING_FILES

logger = logging.getLogger(__name__)

ENV_PREFIX = "REVIEW_SENTIMENT_"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class DataConfig:
    """Corpus layout configuration."""

    data_dir: str = "data"
    training_files: list = field(default_factory=lambda: list(TRAINING_FILES))
    picking_files: list = field(default_factory=lambda: list(PICKING_FILES))
    test_file: str = TEST_SET_FILE
    stopwords_file: Optional[str] = None


@dataclass
class ModelConfig:
    """Naive Bayes model configuration."""

    event_model: str = EventModel.MULTINOMIAL.value  # multinomial, bernoulli
    stemming: bool = True
    stemmer_cache_size: int = 100_000

    def __post_init__(self) -> None:
        self.event_model = EventModel.parse(self.event_model).value


@dataclass
class OutputConfig:
    """Report output configuration."""

    output_dir: Optional[str] = None  # no files are written when unset
    save_models: bool = True


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = "INFO"

    def __post_init__(self) -> None:
        level = self.log_level.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Unsupported log level: {self.log_level}")
        self.log_level = level


@dataclass
class Config:
    """Main configuration class."""

    project_name: str = "review-sentiment"
    data: DataConfig = field(default_factory=DataConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def load_config(config_path: str | Path) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML configuration file

    Returns:
        Config: Loaded configuration object

    Raises:
        FileNotFoundError: If the file does not exist.
    """
    if not os.path.exists(config_path):
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        config_dict = yaml.safe_load(f) or {}

    return create_config_from_dict(config_dict)


def create_config_from_dict(config_dict: Dict[str, Any]) -> Config:
    """
    Create a configuration object from a dictionary.

    Missing sections fall back to their defaults.

    Raises:
        ValueError: On an unknown event model or log level.
        TypeError: On an unknown key inside a section.
    """
    return Config(
        project_name=config_dict.get("project_name", "review-sentiment"),
        data=DataConfig(**config_dict.get("data", {})),
        model=ModelConfig(**config_dict.get("model", {})),
        output=OutputConfig(**config_dict.get("output", {})),
        logging=LoggingConfig(**config_dict.get("logging", {})),
    )


def save_config(config: Config, config_path: str | Path) -> None:
    """
    Save configuration to a YAML file.

    Args:
        config: Configuration object to save
        config_path: Path where to save the configuration
    """
    config_dir = os.path.dirname(config_path)
    if config_dir:
        os.makedirs(config_dir, exist_ok=True)

    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

    logger.info(f"Configuration saved to {config_path}")


def get_default_config(event_model: str = "multinomial") -> Config:
    """
    Get the default configuration for an event model.

    Raises:
        ValueError: If the event model is unknown.
    """
    return Config(model=ModelConfig(event_model=event_model))


def apply_env_overrides(config: Config, environ: Optional[Mapping[str, str]] = None) -> Config:
    """
    Override configuration values from ``REVIEW_SENTIMENT_*`` variables.

    Recognized variables: ``REVIEW_SENTIMENT_DATA_DIR``,
    ``REVIEW_SENTIMENT_EVENT_MODEL``, ``REVIEW_SENTIMENT_OUTPUT_DIR`` and
    ``REVIEW_SENTIMENT_LOG_LEVEL``. The config is modified in place.

    Raises:
        ValueError: On an unknown event model or log level.
    """
    environ = os.environ if environ is None else environ

    data_dir = environ.get(f"{ENV_PREFIX}DATA_DIR")
    if data_dir:
        config.data.data_dir = data_dir

    event_model = environ.get(f"{ENV_PREFIX}EVENT_MODEL")
    if event_model:
        config.model.event_model = EventModel.parse(event_model).value

    output_dir = environ.get(f"{ENV_PREFIX}OUTPUT_DIR")
    if output_dir:
        config.output.output_dir = output_dir

    log_level = environ.get(f"{ENV_PREFIX}LOG_LEVEL")
    if log_level:
        config.logging = LoggingConfig(log_level=log_level)

    return config
