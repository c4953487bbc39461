"""
Input layer for XML event logs.

Parses the input into an in-memory record forest, validates the
top-level records and checks input/output paths.

Usage:
    from event_log_flattener.ingestion import parse_event_file, validate_records

    document = parse_event_file('events.xml')
    records = validate_records(document, allowed_tags=['Event'])
"""

from .exceptions import (
    ConversionCancelled,
    FlattenerError,
    OutputExistsError,
    OutputLimitError,
    ParseError,
    SchemaError,
    ValidationError,
)
from .file_utils import is_gzip_file, open_file_auto_decompress
from .parsers import (
    ParsedDocument,
    local_name,
    parse_event_file,
    parse_event_stream,
    parse_event_string,
)
from .validation import (
    FileValidationResult,
    RecordIssue,
    ensure_input_readable,
    ensure_output_absent,
    find_invalid_records,
    format_file_size,
    validate_input_path,
    validate_records,
)

__all__ = [
    # Exceptions
    "FlattenerError",
    "ParseError",
    "ValidationError",
    "SchemaError",
    "OutputExistsError",
    "OutputLimitError",
    "ConversionCancelled",
    # Parsing
    "ParsedDocument",
    "local_name",
    "parse_event_file",
    "parse_event_stream",
    "parse_event_string",
    # Validation utilities
    "RecordIssue",
    "FileValidationResult",
    "find_invalid_records",
    "validate_records",
    "validate_input_path",
    "ensure_input_readable",
    "ensure_output_absent",
    "format_file_size",
    # File utilities
    "is_gzip_file",
    "open_file_auto_decompress",
]
