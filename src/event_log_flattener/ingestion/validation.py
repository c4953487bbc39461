"""
Validation utilities for the conversion pipeline.

Provides the record forest check that runs before column discovery, plus
input and output path checks with detailed error reporting.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from lxml import etree

from .exceptions import OutputExistsError, ValidationError
from .parsers.xml_parser import ParsedDocument, local_name

logger = logging.getLogger(__name__)


# =============================================================================
# Validation Results
# =============================================================================


@dataclass
class RecordIssue:
    """A top-level element whose tag is not an allowed record tag."""

    tag: str
    line_number: Optional[int] = None
    column_number: Optional[int] = None

    def describe(self) -> str:
        """Human readable description including the source position."""
        if self.line_number is not None and self.column_number is not None:
            return f"'{self.tag}' at line {self.line_number}, column {self.column_number}"
        elif self.line_number is not None:
            return f"'{self.tag}' at line {self.line_number}"
        return f"'{self.tag}'"


@dataclass
class FileValidationResult:
    """Result of validating a file path."""

    file_path: Path
    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    file_size_bytes: Optional[int] = None


# =============================================================================
# Record Forest Validation
# =============================================================================


def find_invalid_records(
    document: ParsedDocument,
    allowed_tags: Iterable[str],
) -> list[RecordIssue]:
    """
    Collect every top-level element whose tag is not allowed.

    Tags are compared case-insensitively on their local name.
    """
    allowed = {tag.casefold() for tag in allowed_tags}
    issues = []
    for record in document.records:
        tag = local_name(record)
        if tag.casefold() not in allowed:
            line, column = document.locate(record)
            issues.append(RecordIssue(tag=tag, line_number=line, column_number=column))
    return issues


def validate_records(
    document: ParsedDocument,
    allowed_tags: Iterable[str],
) -> list[etree._Element]:
    """
    Verify every direct child of the root is an allowed record.

    Args:
        document: Parsed input
        allowed_tags: Accepted record tag names

    Returns:
        The records, in document order

    Raises:
        ValidationError: Listing every offending element with its position
    """
    allowed_tags = list(allowed_tags)
    issues = find_invalid_records(document, allowed_tags)
    if issues:
        expected = ", ".join(f"'{tag}'" for tag in allowed_tags)
        raise ValidationError(
            f"{len(issues)} top-level element(s) are not {expected} elements",
            issues=issues,
        )

    records = document.records
    logger.debug(f"Validated {len(records)} records")
    return records


# =============================================================================
# File Validation
# =============================================================================


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "1.5 MB")
    """
    if size_bytes < 0:
        return "0 B"

    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024.0:
            return f"{size:.1f} {unit}"
        size /= 1024.0
    return f"{size:.1f} PB"


# Inputs above this size are parsed but produce a warning
WARN_FILE_SIZE_BYTES = 1 * 1024 * 1024 * 1024  # 1 GB


def validate_input_path(file_path: Union[str, Path]) -> FileValidationResult:
    """
    Validate an input file path.

    Args:
        file_path: Path to validate

    Returns:
        FileValidationResult with validation status and errors
    """
    file_path = Path(file_path)
    result = FileValidationResult(file_path=file_path, is_valid=True)

    if not file_path.exists():
        result.is_valid = False
        result.errors.append(f"File does not exist: {file_path}")
        return result

    if not file_path.is_file():
        result.is_valid = False
        result.errors.append(f"Path is not a file: {file_path}")
        return result

    if not os.access(file_path, os.R_OK):
        result.is_valid = False
        result.errors.append(f"Permission denied: {file_path}")
        return result

    result.file_size_bytes = file_path.stat().st_size
    if result.file_size_bytes > WARN_FILE_SIZE_BYTES:
        result.warnings.append(
            f"File size ({format_file_size(result.file_size_bytes)}) is large. "
            "The whole document is held in memory."
        )

    return result


def ensure_input_readable(file_path: Union[str, Path]) -> Path:
    """
    Raise FileNotFoundError unless the input is a readable file.

    Warnings are logged.
    """
    result = validate_input_path(file_path)
    if not result.is_valid:
        raise FileNotFoundError("; ".join(result.errors))
    for warning in result.warnings:
        logger.warning(warning)
    return result.file_path


def ensure_output_absent(file_path: Union[str, Path]) -> Path:
    """
    Raise OutputExistsError if the destination already exists.

    The writers also open the file in create-new mode, so a file created
    between this check and the write is never overwritten.
    """
    path = Path(file_path)
    if path.exists():
        raise OutputExistsError(path)
    return path
