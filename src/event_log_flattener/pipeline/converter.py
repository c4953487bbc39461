"""
Event log conversion pipeline.

Pipeline stages:
1. Parse: Read the XML input into an in-memory record forest
2. Validate: Check every top-level element is an allowed record
3. Discover: Build the ordered superset of column names
4. Flatten: Build one row per record
5. Write: Render the table to a new CSV or XLSX file

Output is only created after every row has been computed, so a failure in
stages 1-4 never leaves a file behind.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

from ..config.constants import SUPPORTED_OUTPUT_FORMATS
from ..config.settings import Settings
from ..flattening.rows import Row, flatten_rows
from ..flattening.rule import FlatteningRule
from ..flattening.schema import discover_columns
from ..ingestion.parsers.xml_parser import CancellationSignal, ParsedDocument, parse_event_file
from ..ingestion.validation import ensure_input_readable, ensure_output_absent, validate_records
from ..output.csv_writer import write_csv
from ..output.excel_writer import write_excel

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: int = logging.INFO) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def resolve_output_format(output_path: Union[str, Path], output_format: str = "auto") -> str:
    """
    Pick the writer for an output path.

    "auto" selects xlsx for a .xlsx suffix and csv otherwise.

    Raises:
        ValueError: For an unknown format name
    """
    output_format = output_format.lower()
    if output_format == "auto":
        return "xlsx" if Path(output_path).suffix.lower() == ".xlsx" else "csv"
    if output_format not in SUPPORTED_OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: {output_format!r}. "
            f"Supported: auto, {', '.join(SUPPORTED_OUTPUT_FORMATS)}"
        )
    return output_format


@dataclass
class FlattenedTable:
    """Columns and rows produced from one document."""

    columns: list[str]
    rows: list[Row]


@dataclass
class ConversionResult:
    """Result of a conversion run."""

    input_path: Path
    output_path: Path
    output_format: str
    started_at: datetime = field(default_factory=lambda: datetime.now().astimezone())
    completed_at: Optional[datetime] = None
    # Stats
    column_count: int = 0
    row_count: int = 0

    @property
    def duration_seconds(self) -> Optional[float]:
        """Get conversion duration in seconds."""
        if self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict:
        """Convert to dictionary for logging/serialization."""
        return {
            "input_path": str(self.input_path),
            "output_path": str(self.output_path),
            "output_format": self.output_format,
            "started_at": self.started_at.isoformat(),
            "completed_at": (
                self.completed_at.isoformat() if self.completed_at else None
            ),
            "duration_seconds": self.duration_seconds,
            "column_count": self.column_count,
            "row_count": self.row_count,
        }


class EventLogConverter:
    """
    Converts XML event logs into flat tables.

    Usage:
        converter = EventLogConverter(settings=get_settings())
        result = converter.convert('events.xml', 'events.csv')
    """

    def __init__(self, settings: Optional[Settings] = None):
        """
        Initialize converter.

        Args:
            settings: Application settings (default: built-in defaults)
        """
        self.settings = (settings or Settings()).ensure_valid()
        self.rule = FlatteningRule.from_settings(self.settings.flattening)

    def flatten_document(self, document: ParsedDocument) -> FlattenedTable:
        """
        Validate, discover columns and flatten rows for a parsed document.

        Raises:
            ValidationError: If a top-level element is not an allowed record
            SchemaError: If a disambiguating attribute is missing
        """
        records = validate_records(document, self.settings.flattening.record_tags)
        columns = discover_columns(records, self.rule)
        rows = flatten_rows(records, self.rule)
        return FlattenedTable(columns=columns, rows=rows)

    def convert(
        self,
        input_path: Union[str, Path],
        output_path: Union[str, Path],
        output_format: str = "auto",
        cancel_event: Optional[CancellationSignal] = None,
    ) -> ConversionResult:
        """
        Run the full pipeline for one file.

        Args:
            input_path: XML input (optionally gzip-compressed)
            output_path: Destination; must not exist
            output_format: "auto", "csv" or "xlsx"
            cancel_event: Optional cancellation signal checked while parsing

        Returns:
            ConversionResult with counts and timing

        Raises:
            FileNotFoundError: If the input is missing or unreadable
            OutputExistsError: If the output already exists
            ParseError, ValidationError, SchemaError, ConversionCancelled
        """
        input_path = ensure_input_readable(input_path)
        output_path = ensure_output_absent(output_path)
        result = ConversionResult(
            input_path=input_path,
            output_path=output_path,
            output_format=resolve_output_format(output_path, output_format),
        )

        logger.info(f"Parsing {input_path}")
        document = parse_event_file(
            input_path,
            cancel_event=cancel_event,
            chunk_size=self.settings.parse_chunk_size,
        )

        table = self.flatten_document(document)
        result.column_count = len(table.columns)
        result.row_count = len(table.rows)
        logger.info(
            f"Collected data columns: {result.column_count}, rows: {result.row_count}"
        )

        if result.output_format == "xlsx":
            write_excel(output_path, table.rows, table.columns)
        else:
            write_csv(output_path, table.rows, table.columns, self.settings.output)

        result.completed_at = datetime.now().astimezone()
        logger.debug(f"Conversion finished: {result.to_dict()}")
        return result
