"""
Custom exceptions for event log flattening.

Every failure aborts the whole conversion run; the command line reports the
formatted message of the first error and exits non-zero.
"""

from pathlib import Path
from typing import Union


class FlattenerError(Exception):
    """
    Base exception for all flattening-related errors.

    All other flattener exceptions inherit from this class,
    allowing for broad exception catching when needed.
    """

    pass


class ParseError(FlattenerError):
    """
    Raised when the input document is not well-formed.

    Attributes:
        line_number: The line number where parsing failed (optional)
        column_number: The column number where parsing failed (optional)
        message: Detailed error message
    """

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        column_number: int | None = None,
    ):
        self.line_number = line_number
        self.column_number = column_number
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with position context."""
        if self.line_number is not None and self.column_number is not None:
            return (
                f"{self.message} (line {self.line_number}, "
                f"column {self.column_number})"
            )
        elif self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message


class ValidationError(FlattenerError):
    """
    Raised when top-level elements do not belong to the allowed record tags.

    Attributes:
        issues: Every offending element (see validation.RecordIssue)
        message: Detailed error message
    """

    def __init__(self, message: str, issues: list | None = None):
        self.issues = list(issues or [])
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the error message with one entry per offending element."""
        if not self.issues:
            return self.message
        details = "; ".join(issue.describe() for issue in self.issues)
        return f"{self.message}: {details}"


class SchemaError(FlattenerError):
    """
    Raised when a disambiguating attribute required for a column name is missing.

    Attributes:
        element_tag: Tag of the element that lacks the attribute
        attribute: Name of the missing attribute
        line_number: Source line of the element (optional)
    """

    def __init__(
        self,
        message: str,
        element_tag: str | None = None,
        attribute: str | None = None,
        line_number: int | None = None,
    ):
        self.element_tag = element_tag
        self.attribute = attribute
        self.line_number = line_number
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        parts = [self.message]
        if self.element_tag:
            parts.append(f"element='{self.element_tag}'")
        if self.attribute:
            parts.append(f"attribute='{self.attribute}'")
        if self.line_number is not None:
            parts.append(f"line {self.line_number}")
        return " - ".join(parts)


class OutputExistsError(FlattenerError):
    """Raised when the destination file already exists (it is never overwritten)."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        super().__init__(f"Output file already exists: {self.path}")


class ConversionCancelled(FlattenerError):
    """Raised when the cancellation signal is observed while parsing."""

    pass


class OutputLimitError(FlattenerError):
    """Raised when the table does not fit the chosen output format."""

    pass
