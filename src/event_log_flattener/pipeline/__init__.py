"""Conversion pipeline module."""

from .converter import (
    ConversionResult,
    EventLogConverter,
    FlattenedTable,
    resolve_output_format,
    setup_logging,
)

__all__ = [
    "EventLogConverter",
    "ConversionResult",
    "FlattenedTable",
    "resolve_output_format",
    "setup_logging",
]
