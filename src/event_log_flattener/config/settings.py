"""
Application settings and configuration management.

Supports loading from:
1. YAML settings files (see loader.py)
2. Environment variables (fallback)
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from .constants import (
    COLUMN_NAME_SEPARATOR,
    DEFAULT_RECORD_TAGS,
    HEADER_SEPARATOR,
    INDEX_ATTRIBUTE,
    NAME_ATTRIBUTE,
    NAMED_VARIANT_TAG,
    OUTPUT_ENCODING,
    PARSE_CHUNK_SIZE,
    POSITIONAL_VARIANT_TAG,
    ROW_JOIN_SEPARATOR,
    ROW_QUOTE,
)

ENV_PREFIX = "EVENTLOG_"


def _env(key: str, default: str) -> str:
    return os.environ.get(f"{ENV_PREFIX}{key}", default)


def _env_int(key: str, default: int) -> int:
    """Safely parse int from env var, using default on error."""
    try:
        return int(_env(key, str(default)))
    except ValueError:
        return default


def _env_list(key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a comma-separated env var into a tuple of non-empty entries."""
    raw = os.environ.get(f"{ENV_PREFIX}{key}")
    if raw is None:
        return default
    return tuple(part.strip() for part in raw.split(",") if part.strip())


# =============================================================================
# Flattening Settings
# =============================================================================


@dataclass
class FlatteningSettings:
    """
    Configuration for record detection and column naming.

    The two marker tags select the disambiguation idiom for repeated
    elements: value lists identified by a Name attribute on each sibling,
    and positional substitution lists identified by an index attribute on
    the container.
    """

    record_tags: tuple[str, ...] = DEFAULT_RECORD_TAGS
    named_variant_tag: str = NAMED_VARIANT_TAG
    name_attribute: str = NAME_ATTRIBUTE
    positional_variant_tag: str = POSITIONAL_VARIANT_TAG
    index_attribute: str = INDEX_ATTRIBUTE
    name_separator: str = COLUMN_NAME_SEPARATOR

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if not self.record_tags:
            errors.append("record_tags must contain at least one tag")
        for name in (
            "named_variant_tag",
            "name_attribute",
            "positional_variant_tag",
            "index_attribute",
        ):
            if not getattr(self, name):
                errors.append(f"{name} must not be empty")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "record_tags": list(self.record_tags),
            "named_variant_tag": self.named_variant_tag,
            "name_attribute": self.name_attribute,
            "positional_variant_tag": self.positional_variant_tag,
            "index_attribute": self.index_attribute,
            "name_separator": self.name_separator,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "FlatteningSettings":
        """Create from configuration dictionary."""
        record_tags = config.get("record_tags", DEFAULT_RECORD_TAGS)
        if isinstance(record_tags, str):
            record_tags = (record_tags,)
        return cls(
            record_tags=tuple(record_tags),
            named_variant_tag=config.get("named_variant_tag", NAMED_VARIANT_TAG),
            name_attribute=config.get("name_attribute", NAME_ATTRIBUTE),
            positional_variant_tag=config.get(
                "positional_variant_tag", POSITIONAL_VARIANT_TAG
            ),
            index_attribute=config.get("index_attribute", INDEX_ATTRIBUTE),
            name_separator=config.get("name_separator", COLUMN_NAME_SEPARATOR),
        )

    @classmethod
    def from_env(cls) -> "FlatteningSettings":
        """Create from environment variables."""
        return cls(
            record_tags=_env_list("RECORD_TAGS", DEFAULT_RECORD_TAGS),
            named_variant_tag=_env("NAMED_VARIANT_TAG", NAMED_VARIANT_TAG),
            name_attribute=_env("NAME_ATTRIBUTE", NAME_ATTRIBUTE),
            positional_variant_tag=_env(
                "POSITIONAL_VARIANT_TAG", POSITIONAL_VARIANT_TAG
            ),
            index_attribute=_env("INDEX_ATTRIBUTE", INDEX_ATTRIBUTE),
            name_separator=_env("NAME_SEPARATOR", COLUMN_NAME_SEPARATOR),
        )


# =============================================================================
# Output Settings
# =============================================================================


@dataclass
class OutputSettings:
    """Configuration for the delimited text output."""

    header_separator: str = HEADER_SEPARATOR
    row_join_separator: str = ROW_JOIN_SEPARATOR
    row_quote: str = ROW_QUOTE
    encoding: str = OUTPUT_ENCODING

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if not self.header_separator:
            errors.append("header_separator must not be empty")
        if not self.row_join_separator:
            errors.append("row_join_separator must not be empty")
        for name in ("header_separator", "row_join_separator", "row_quote"):
            value = getattr(self, name)
            if "\n" in value or "\r" in value:
                errors.append(f"{name} must not contain line breaks")

        return errors

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "header_separator": self.header_separator,
            "row_join_separator": self.row_join_separator,
            "row_quote": self.row_quote,
            "encoding": self.encoding,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "OutputSettings":
        """Create from configuration dictionary."""
        return cls(
            header_separator=config.get("header_separator", HEADER_SEPARATOR),
            row_join_separator=config.get("row_join_separator", ROW_JOIN_SEPARATOR),
            row_quote=config.get("row_quote", ROW_QUOTE),
            encoding=config.get("encoding", OUTPUT_ENCODING),
        )

    @classmethod
    def from_env(cls) -> "OutputSettings":
        """Create from environment variables."""
        return cls(
            header_separator=_env("HEADER_SEPARATOR", HEADER_SEPARATOR),
            row_join_separator=_env("ROW_JOIN_SEPARATOR", ROW_JOIN_SEPARATOR),
            row_quote=_env("ROW_QUOTE", ROW_QUOTE),
            encoding=_env("OUTPUT_ENCODING", OUTPUT_ENCODING),
        )


# =============================================================================
# Main Settings
# =============================================================================


@dataclass
class Settings:
    """Application settings."""

    flattening: FlatteningSettings = field(default_factory=FlatteningSettings)
    output: OutputSettings = field(default_factory=OutputSettings)

    # Bytes fed to the XML parser between cancellation checks
    parse_chunk_size: int = PARSE_CHUNK_SIZE

    def validate(self) -> list[str]:
        """Validate settings values. Returns list of errors."""
        errors = []

        if self.parse_chunk_size < 1:
            errors.append(
                f"parse_chunk_size must be >= 1, got {self.parse_chunk_size}"
            )

        # Validate nested settings
        errors.extend(self.flattening.validate())
        errors.extend(self.output.validate())
        return errors

    def ensure_valid(self) -> "Settings":
        """Raise ValueError listing every problem, else return self."""
        errors = self.validate()
        if errors:
            raise ValueError("Invalid settings: " + "; ".join(errors))
        return self

    def to_dict(self) -> dict:
        return {
            "flattening": self.flattening.to_dict(),
            "output": self.output.to_dict(),
            "parse_chunk_size": self.parse_chunk_size,
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "Settings":
        """Create Settings from configuration dictionary (e.g., from YAML)."""
        return cls(
            flattening=FlatteningSettings.from_dict(config.get("flattening") or {}),
            output=OutputSettings.from_dict(config.get("output") or {}),
            parse_chunk_size=int(config.get("parse_chunk_size", PARSE_CHUNK_SIZE)),
        )

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            flattening=FlatteningSettings.from_env(),
            output=OutputSettings.from_env(),
            parse_chunk_size=_env_int("PARSE_CHUNK_SIZE", PARSE_CHUNK_SIZE),
        )


# Default config file path
DEFAULT_CONFIG_PATH = Path("eventlog.yaml")


@lru_cache
def get_settings(config_path: Optional[str] = None) -> Settings:
    """
    Get cached settings instance.

    Loads from the YAML config file if available, otherwise from env vars.

    Args:
        config_path: Optional path to a YAML config file

    Returns:
        Validated Settings instance

    Raises:
        FileNotFoundError: If an explicit config_path does not exist
        ValueError: If the loaded settings are invalid
    """
    from .loader import load_config_file

    if config_path:
        config = load_config_file(Path(config_path))
        return Settings.from_dict(config).ensure_valid()

    if DEFAULT_CONFIG_PATH.exists():
        config = load_config_file(DEFAULT_CONFIG_PATH)
        return Settings.from_dict(config).ensure_valid()

    return Settings.from_env().ensure_valid()


def clear_settings_cache() -> None:
    """Clear the cached settings (useful for testing)."""
    get_settings.cache_clear()
