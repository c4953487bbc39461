"""
Delimited text output.

The format is fixed for compatibility with existing consumers:

    System_Level;System_EventID
    "4";"4624"
    "";"4625"

Line 1 joins the column names with the header separator. Every data line
is a single quoted field whose values are joined by the '";"' token. This
is not RFC 4180 quoting: values are written verbatim.
"""

import logging
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

from ..config.settings import OutputSettings
from ..flattening.rows import Row
from ..ingestion.exceptions import OutputExistsError

logger = logging.getLogger(__name__)


def render_header(columns: Sequence[str], settings: Optional[OutputSettings] = None) -> str:
    """Join column names into the header line (without line ending)."""
    settings = settings or OutputSettings()
    return settings.header_separator.join(columns)


def render_row(
    row: Row,
    columns: Sequence[str],
    settings: Optional[OutputSettings] = None,
) -> str:
    """Render one record as a data line (without line ending)."""
    settings = settings or OutputSettings()
    joined = settings.row_join_separator.join(row.values_for(columns))
    return f"{settings.row_quote}{joined}{settings.row_quote}"


def iter_lines(
    rows: Iterable[Row],
    columns: Sequence[str],
    settings: Optional[OutputSettings] = None,
) -> Iterable[str]:
    """Yield the header line followed by one line per row."""
    yield render_header(columns, settings)
    for row in rows:
        yield render_row(row, columns, settings)


def write_csv(
    output_path: Union[str, Path],
    rows: Sequence[Row],
    columns: Sequence[str],
    settings: Optional[OutputSettings] = None,
) -> int:
    """
    Write the table to a new file.

    The file is opened in create-new mode and is never overwritten.

    Returns:
        Number of data rows written

    Raises:
        OutputExistsError: If the file already exists
    """
    settings = settings or OutputSettings()
    output_path = Path(output_path)

    try:
        handle = open(output_path, "x", encoding=settings.encoding, newline="")
    except FileExistsError as e:
        raise OutputExistsError(output_path) from e

    with handle:
        for line in iter_lines(rows, columns, settings):
            handle.write(line)
            handle.write("\n")

    logger.info(f"Wrote {len(rows)} rows x {len(columns)} columns to {output_path}")
    return len(rows)
