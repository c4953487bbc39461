"""
Excel workbook output.

Writes the same table as the delimited output to a single worksheet:
a header row with the column names, then one string cell per column for
every record (empty when the record lacks the column).
"""

import io
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

import pandas as pd

from ..config.constants import MAX_SHEET_COLUMNS, MAX_SHEET_NAME_LENGTH, MAX_SHEET_ROWS
from ..flattening.rows import Row
from ..ingestion.exceptions import OutputExistsError, OutputLimitError

logger = logging.getLogger(__name__)

# Characters Excel rejects in sheet names
_INVALID_SHEET_CHARS = set("[]:*?/\\")


def sheet_name_for(output_path: Union[str, Path]) -> str:
    """Derive a valid sheet name from the output file stem."""
    stem = Path(output_path).stem
    name = "".join("_" if ch in _INVALID_SHEET_CHARS else ch for ch in stem)
    return name[:MAX_SHEET_NAME_LENGTH] or "Sheet1"


def rows_to_dataframe(rows: Sequence[Row], columns: Sequence[str]) -> pd.DataFrame:
    """Build a DataFrame with one row per record and every column as strings."""
    return pd.DataFrame(
        [row.values_for(columns) for row in rows],
        columns=list(columns),
        dtype=str,
    )


def check_sheet_limits(row_count: int, column_count: int) -> None:
    """
    Raise OutputLimitError when the table exceeds a worksheet's size.

    Raises:
        OutputLimitError: If rows (plus the header) or columns do not fit
    """
    if row_count + 1 > MAX_SHEET_ROWS:
        raise OutputLimitError(
            f"{row_count} rows do not fit in a worksheet "
            f"(limit {MAX_SHEET_ROWS - 1} plus header); use CSV output"
        )
    if column_count > MAX_SHEET_COLUMNS:
        raise OutputLimitError(
            f"{column_count} columns do not fit in a worksheet "
            f"(limit {MAX_SHEET_COLUMNS}); use CSV output"
        )


def write_excel(
    output_path: Union[str, Path],
    rows: Sequence[Row],
    columns: Sequence[str],
    sheet_name: Optional[str] = None,
) -> int:
    """
    Write the table to a new .xlsx workbook.

    The workbook is rendered in memory first; the file is only created once
    rendering has succeeded.

    Returns:
        Number of data rows written

    Raises:
        OutputLimitError: If the table exceeds the worksheet limits
        OutputExistsError: If the file already exists
    """
    output_path = Path(output_path)
    sheet_name = sheet_name or sheet_name_for(output_path)
    check_sheet_limits(len(rows), len(columns))

    df = rows_to_dataframe(rows, columns)
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)

    try:
        handle = open(output_path, "xb")
    except FileExistsError as e:
        raise OutputExistsError(output_path) from e

    with handle:
        handle.write(buffer.getvalue())

    logger.info(
        f"Wrote {len(rows)} rows x {len(columns)} columns to {output_path} "
        f"(sheet {sheet_name!r})"
    )
    return len(rows)
