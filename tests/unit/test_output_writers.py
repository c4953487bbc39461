"""
Unit tests for the CSV and Excel writers.
"""

import pandas as pd
import pytest

from event_log_flattener.config import OutputSettings
from event_log_flattener.config.constants import MAX_SHEET_COLUMNS, MAX_SHEET_ROWS
from event_log_flattener.flattening import Row
from event_log_flattener.ingestion import OutputExistsError, OutputLimitError
from event_log_flattener.output import (
    check_sheet_limits,
    iter_lines,
    render_header,
    render_row,
    rows_to_dataframe,
    sheet_name_for,
    write_csv,
    write_excel,
)

COLUMNS = ["System_EventID", "System_Level", "EventData_User"]
ROWS = [
    Row(values={"System_EventID": "4624", "System_Level": "4", "EventData_User": "alice"}),
    Row(values={"System_EventID": "4625", "EventData_User": 'o"brien; jr'}),
]


class TestRendering:
    """Tests for the line format."""

    def test_header(self):
        assert render_header(COLUMNS) == "System_EventID;System_Level;EventData_User"

    def test_row_wrapped_once_and_joined(self):
        assert render_row(ROWS[0], COLUMNS) == '"4624";"4";"alice"'

    def test_absent_column_is_empty(self):
        assert render_row(ROWS[1], COLUMNS) == '"4625";"";"o"brien; jr"'

    def test_no_columns(self):
        assert render_header([]) == ""
        assert render_row(Row(), []) == '""'

    def test_custom_separators(self):
        settings = OutputSettings(header_separator=",", row_join_separator="|", row_quote="")
        assert render_header(COLUMNS, settings) == "System_EventID,System_Level,EventData_User"
        assert render_row(ROWS[0], COLUMNS, settings) == "4624|4|alice"

    def test_iter_lines(self):
        assert list(iter_lines(ROWS, COLUMNS)) == [
            "System_EventID;System_Level;EventData_User",
            '"4624";"4";"alice"',
            '"4625";"";"o"brien; jr"',
        ]


class TestWriteCSV:
    """Tests for file output."""

    def test_writes_utf8_lines(self, tmp_path):
        path = tmp_path / "out.csv"

        count = write_csv(path, ROWS, COLUMNS)

        assert count == 2
        assert path.read_bytes().decode("utf-8") == (
            "System_EventID;System_Level;EventData_User\n"
            '"4624";"4";"alice"\n'
            '"4625";"";"o"brien; jr"\n'
        )

    def test_non_ascii_values(self, tmp_path):
        path = tmp_path / "out.csv"
        write_csv(path, [Row(values={"a": "Café ✓"})], ["a"])
        assert path.read_bytes() == 'a\n"Café ✓"\n'.encode("utf-8")

    def test_never_overwrites(self, tmp_path):
        path = tmp_path / "out.csv"
        path.write_text("existing")

        with pytest.raises(OutputExistsError):
            write_csv(path, ROWS, COLUMNS)

        assert path.read_text() == "existing"

    def test_no_rows_writes_header_only(self, tmp_path):
        path = tmp_path / "out.csv"
        write_csv(path, [], COLUMNS)
        assert path.read_text(encoding="utf-8") == "System_EventID;System_Level;EventData_User\n"


class TestExcelWriter:
    """Tests for workbook output."""

    def test_sheet_name_from_stem(self, tmp_path):
        assert sheet_name_for(tmp_path / "security.xlsx") == "security"

    def test_sheet_name_sanitized_and_truncated(self):
        name = sheet_name_for("a" * 40 + "[x].xlsx")
        assert len(name) == 31
        assert "[" not in sheet_name_for("[x]:y.xlsx")

    def test_dataframe_columns_and_blanks(self):
        df = rows_to_dataframe(ROWS, COLUMNS)
        assert list(df.columns) == COLUMNS
        assert df.iloc[1]["System_Level"] == ""

    def test_write_excel(self, tmp_path):
        path = tmp_path / "events.xlsx"

        count = write_excel(path, ROWS, COLUMNS)

        assert count == 2
        df = pd.read_excel(path, sheet_name="events", dtype=str, keep_default_na=False)
        assert list(df.columns) == COLUMNS
        assert df.iloc[0].tolist() == ["4624", "4", "alice"]
        assert df.iloc[1].tolist() == ["4625", "", 'o"brien; jr']

    def test_excel_never_overwrites(self, tmp_path):
        path = tmp_path / "events.xlsx"
        path.write_bytes(b"existing")

        with pytest.raises(OutputExistsError):
            write_excel(path, ROWS, COLUMNS)

        assert path.read_bytes() == b"existing"

    def test_sheet_limits(self):
        check_sheet_limits(MAX_SHEET_ROWS - 1, MAX_SHEET_COLUMNS)

        with pytest.raises(OutputLimitError):
            check_sheet_limits(MAX_SHEET_ROWS, 1)
        with pytest.raises(OutputLimitError):
            check_sheet_limits(1, MAX_SHEET_COLUMNS + 1)

    def test_too_many_columns_leaves_no_file(self, tmp_path):
        """A table that does not fit a worksheet fails before the file is created."""
        path = tmp_path / "wide.xlsx"
        columns = [f"c{i}" for i in range(MAX_SHEET_COLUMNS + 1)]

        with pytest.raises(OutputLimitError) as exc_info:
            write_excel(path, [Row()], columns)

        assert "columns do not fit" in str(exc_info.value)
        assert not path.exists()
