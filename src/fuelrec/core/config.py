#!/usr/bin/env python3
"""
Configuration Management for Fuel Reconciliation

Handles environment-based configuration with secure defaults and validation.
Supports multiple environments (development, test, production).
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
class DatabaseConfig:
    """Relational store settings."""

    url: str
    echo: bool = False


@dataclass
class MatchingConfig:
    """Reconciliation engine settings."""

    # Settlement delay between the two card networks rarely exceeds three days
    date_tolerance_days: int = 3
    max_attempts: int = 3


@dataclass
class Config:
    """
    Main configuration class for the fuel reconciliation application.

    Loads configuration from environment variables with defaults suited to
    each environment type.
    """

    environment: Environment
    data_dir: Path

    database: DatabaseConfig
    matching: MatchingConfig

    debug: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_environment(cls) -> "Config":
        """Create configuration from environment variables."""
        env = Environment(os.getenv("FUELREC_ENV", "development"))

        if env == Environment.TEST:
            default_test_dir = Path(tempfile.gettempdir()) / "test_fuelrec"
            data_dir = Path(os.getenv("FUELREC_DATA_DIR", str(default_test_dir)))
        else:
            data_dir = Path(os.getenv("FUELREC_DATA_DIR", "./data")).expanduser().resolve()

        data_dir.mkdir(parents=True, exist_ok=True)

        database = DatabaseConfig(
            url=os.getenv("FUELREC_DATABASE_URL", f"sqlite:///{data_dir / 'fuelrec.db'}"),
            echo=os.getenv("FUELREC_DB_ECHO", "false").lower() == "true",
        )

        matching = MatchingConfig(
            date_tolerance_days=int(os.getenv("FUELREC_DATE_TOLERANCE_DAYS", "3")),
            max_attempts=int(os.getenv("FUELREC_MATCH_RETRIES", "3")),
        )

        return cls(
            environment=env,
            data_dir=data_dir,
            database=database,
            matching=matching,
            debug=os.getenv("DEBUG", "false").lower() == "true",
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )

    def validate(self) -> list:
        """Validate configuration and return list of errors."""
        errors = []

        if not self.data_dir.exists():
            errors.append(f"data_dir does not exist: {self.data_dir}")

        if not self.database.url:
            errors.append("FUELREC_DATABASE_URL must not be empty")
        elif self.environment == Environment.PRODUCTION and self.database.url.startswith("sqlite"):
            errors.append("FUELREC_DATABASE_URL must point at a server database in production")

        if self.matching.date_tolerance_days < 0:
            errors.append("Date tolerance days must be non-negative")
        if self.matching.max_attempts < 1:
            errors.append("Match retries must be at least 1")

        if self.log_level not in logging.getLevelNamesMapping():
            errors.append(f"Unknown log level: {self.log_level}")

        return errors

    def setup_logging(self) -> None:
        """Configure logging based on configuration."""
        level = getattr(logging, self.log_level, logging.INFO)

        if self.environment == Environment.DEVELOPMENT:
            format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        else:
            format_str = "%(asctime)s - %(levelname)s - %(message)s"

        logging.basicConfig(level=level, format=format_str, datefmt="%Y-%m-%d %H:%M:%S")

        # SQL echo is controlled by FUELREC_DB_ECHO, not by the root level
        if self.environment != Environment.DEVELOPMENT:
            logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

    def get_sensitive_fields(self) -> list:
        """Get list of field names that contain sensitive data."""
        return ["database.url"]

    def to_dict(self, include_sensitive: bool = False) -> dict[str, Any]:
        """Convert configuration to dictionary, optionally excluding sensitive data."""
        result: dict[str, Any] = {}

        for field_name, field_value in self.__dict__.items():
            if hasattr(field_value, "__dict__"):
                nested_dict: dict[str, Any] = {}
                for nested_name, nested_value in field_value.__dict__.items():
                    full_field_name = f"{field_name}.{nested_name}"
                    if not include_sensitive and full_field_name in self.get_sensitive_fields():
                        nested_dict[nested_name] = _redact_url(str(nested_value))
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


def _redact_url(url: str) -> str:
    """Hide the password portion of a database URL."""
    if "@" not in url or "://" not in url:
        return url
    scheme, rest = url.split("://", 1)
    credentials, host = rest.rsplit("@", 1)
    user = credentials.split(":", 1)[0]
    return f"{scheme}://{user}:***REDACTED***@{host}"


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

