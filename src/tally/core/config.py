#!/usr/bin/env python3
"""
Configuration Management for Tally

Environment-based configuration with defaults and validation. Supports
development, test and production environments; the test environment keeps
all data under a temporary directory.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Environment(Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    TEST = "test"
    PRODUCTION = "production"


@dataclass
class LedgerConfig:
    """Ledger storage settings."""

    ledger_file: Path
    seed_categories: bool = True


@dataclass
class ImportConfig:
    """Statement import settings."""

    preview_rows: int = 10
    document_preview_rows: int = 20
    min_document_chars: int = 100


@dataclass
class AnalysisConfig:
    """Batch analysis settings."""

    recurring_window_days: int = 365
    transfer_window_days: int = 90


@dataclass
class Config:
    """
    Main configuration class for Tally.

    Loads configuration from environment variables with defaults and
    validation for each environment type.
    """

    environment: Environment

    data_dir: Path

    # Component configurations
    ledger: LedgerConfig
    imports: ImportConfig
    analysis: AnalysisConfig

    # Application settings
    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("TALLY_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_tally"
            base_dir = Path(os.getenv("TALLY_DATA_DIR", str(default_test_dir)))
        else:
            base_dir = Path(os.getenv("TALLY_DATA_DIR", "./data")).expanduser().resolve()

        data_dir = base_dir
        data_dir.mkdir(parents=True, exist_ok=True)

        ledger_file = os.getenv("TALLY_LEDGER_FILE")
        ledger = LedgerConfig(
            ledger_file=Path(ledger_file) if ledger_file else data_dir / "ledger" / "ledger.json",
            seed_categories=os.getenv("TALLY_SEED_CATEGORIES", "true").lower() == "true",
        )

        imports = ImportConfig(
            preview_rows=int(os.getenv("TALLY_PREVIEW_ROWS", "10")),
            document_preview_rows=int(os.getenv("TALLY_DOCUMENT_PREVIEW_ROWS", "20")),
            min_document_chars=int(os.getenv("TALLY_MIN_DOCUMENT_CHARS", "100")),
        )

        analysis = AnalysisConfig(
            recurring_window_days=int(os.getenv("TALLY_RECURRING_WINDOW_DAYS", "365")),
            transfer_window_days=int(os.getenv("TALLY_TRANSFER_WINDOW_DAYS", "90")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            ledger=ledger,
            imports=imports,
            analysis=analysis,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if self.ledger.ledger_file.exists() and self.ledger.ledger_file.is_dir():
            errors.append(f"Ledger file is a directory: {self.ledger.ledger_file}")

        if self.imports.preview_rows <= 0:
            errors.append("Preview rows must be positive")
        if self.imports.document_preview_rows <= 0:
            errors.append("Document preview rows must be positive")
        if self.imports.min_document_chars < 0:
            errors.append("Minimum document characters must be non-negative")
        if self.analysis.recurring_window_days <= 0:
            errors.append("Recurring window days must be positive")
        if self.analysis.transfer_window_days <= 0:
            errors.append("Transfer window days must be positive")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # pdfminer is very chatty at DEBUG
        logging.getLogger("pdfminer").setLevel(logging.WARNING)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a JSON-friendly dictionary."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__") and not isinstance(field_value, Enum | Path):
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    if isinstance(nested_value, Path):
                        nested_dict[nested_name] = str(nested_value)
                    else:
                        nested_dict[nested_name] = nested_value
                result[field_name] = nested_dict
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
        _config = Config.from_environment()

        errors = _config.validate()
        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

        _config.setup_logging()

    return _config


def reload_config() -> Config:
    """Reload configuration from environment (useful for testing)."""
    global _config
    _config = None
    return get_config()


def get_data_dir() -> Path:
    """Get the data directory path."""
    return get_config().data_dir


def is_test() -> bool:
    """Check if running in test environment."""
    return get_config().environment == Environment.TEST
