#!/usr/bin/env python3
"""
Configuration Management for the Order/Transaction Reconciler

Environment-based configuration with validation. Supports multiple
environments (development, test, production).

The matching engine never reads this module: profiles and thresholds are
explicit engine parameters. Only the CLI fills them from here.
"""

import logging
import math
import os
import tempfile
from dataclasses import dataclass, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class MatchingConfig:
    """Defaults for match runs started from the command line."""

    profile: str = "strict"
    threshold: float = 0.5
    date_window_days: int = 60
    max_workers: int = 1
    candidate_min_similarity: float = 0.3


@dataclass
class StorageConfig:
    """Record store location."""

    records_file: Path


@dataclass
class Config:
    """
    Main configuration class for the reconciler.

    Loads configuration from environment variables with defaults and
    validation for each environment type.
    """

    environment: Environment
    data_dir: Path

    matching: MatchingConfig
    storage: StorageConfig

    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        try:
            env = Environment(os.getenv("RECONCILER_ENV", "development"))
        except ValueError as e:
            raise ConfigurationError(f"Unknown RECONCILER_ENV: {os.getenv('RECONCILER_ENV')}") from e

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_reconciler"
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("RECONCILER_DATA_DIR", "./data")).expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        try:
            matching = MatchingConfig(
                profile=os.getenv("MATCH_PROFILE", "strict"),
                threshold=float(os.getenv("MATCH_THRESHOLD", "0.5")),
                date_window_days=int(os.getenv("MATCH_DATE_WINDOW_DAYS", "60")),
                max_workers=int(os.getenv("MATCH_MAX_WORKERS", "1")),
                candidate_min_similarity=float(os.getenv("CANDIDATE_MIN_SIMILARITY", "0.3")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric matching configuration: {e}") from e

        storage = StorageConfig(records_file=data_dir / "records.json")

        return cls(
            environment=env,
            data_dir=data_dir,
            matching=matching,
            storage=storage,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list[str]:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if self.matching.profile not in ("strict", "name-only", "name_only"):
            errors.append(f"MATCH_PROFILE must be 'strict' or 'name-only', got {self.matching.profile!r}")
        if not math.isfinite(self.matching.threshold) or not 0.0 <= self.matching.threshold <= 1.0:
            errors.append("MATCH_THRESHOLD must be in [0, 1]")
        if self.matching.date_window_days < 0:
            errors.append("MATCH_DATE_WINDOW_DAYS must be non-negative")
        if self.matching.max_workers < 1:
            errors.append("MATCH_MAX_WORKERS must be at least 1")
        if not 0.0 <= self.matching.candidate_min_similarity <= 1.0:
            errors.append("CANDIDATE_MIN_SIMILARITY must be in [0, 1]")

        if self.log_level not in logging.getLevelNamesMapping():
            errors.append(f"Unknown LOG_LEVEL: {self.log_level}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")
        logging.getLogger("reconciler").setLevel(logging.DEBUG if self.debug else level)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON-friendly dictionary."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if is_dataclass(field_value):
                result[field_name] = {
                    name: str(value) if isinstance(value, Path) else value
                    for name, value in field_value.__dict__.items()
                }
            elif isinstance(field_value, Path):
                result[field_name] = str(field_value)
            elif isinstance(field_value, Enum):
                result[field_name] = field_value.value
            else:
                result[field_name] = field_value

        return result


# Global configuration instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        config = Config.from_environment()

        errors = config.validate()
        if errors:
            raise ConfigurationError(f"Configuration validation failed: {'; '.join(errors)}")

        config.setup_logging()
        _config = config

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()

