"""Table writers for flattened records."""

from .csv_writer import iter_lines, render_header, render_row, write_csv
from .excel_writer import check_sheet_limits, rows_to_dataframe, sheet_name_for, write_excel

__all__ = [
    # Delimited text
    "render_header",
    "render_row",
    "iter_lines",
    "write_csv",
    # Excel
    "check_sheet_limits",
    "rows_to_dataframe",
    "sheet_name_for",
    "write_excel",
]
