"""
Unit tests for the XML event parser.

Tests cover:
- Record forest and element positions
- Malformed input
- Gzip-compressed files
- Bare sequences of top-level elements
- Cooperative cancellation
"""

import gzip
import io
import threading

import pytest

from event_log_flattener.ingestion import ConversionCancelled, ParseError
from event_log_flattener.ingestion.parsers import (
    FRAGMENT_ROOT_TAG,
    local_name,
    parse_event_file,
    parse_event_stream,
    parse_event_string,
)

SIMPLE_LOG = """\
<?xml version="1.0" encoding="utf-8"?>
<Events>
  <Event><System><EventID>1</EventID></System></Event>
  <!-- exported by wevtutil -->
  <Event><System><EventID>2</EventID></System></Event>
</Events>
"""


class TestParseEventString:
    """Tests for in-memory parsing."""

    def test_records_are_element_children(self):
        document = parse_event_string(SIMPLE_LOG)

        assert local_name(document.root) == "Events"
        assert [local_name(r) for r in document.records] == ["Event", "Event"]
        assert document.is_fragment is False

    def test_bytes_input(self):
        document = parse_event_string(SIMPLE_LOG.encode("utf-8"))
        assert len(document.records) == 2

    def test_locate_record(self):
        document = parse_event_string(SIMPLE_LOG)
        first, second = document.records

        assert document.locate(first) == (3, 3)
        assert document.locate(second) == (5, 3)

    def test_locate_several_records_on_one_line(self):
        document = parse_event_string("<Events><Event/><Other/><Event/></Events>")
        first, other, second = document.records

        assert document.locate(first) == (1, 9)
        assert document.locate(other) == (1, 17)
        assert document.locate(second) == (1, 25)

    def test_locate_namespaced_record(self):
        document = parse_event_string(
            "<e:Events xmlns:e='urn:e'>\n  <e:Event/>\n</e:Events>"
        )
        assert document.locate(document.records[0]) == (2, 3)

    def test_locate_after_unicode_line_separators(self):
        """NEL and Unicode line separators in values do not start new lines."""
        document = parse_event_string(
            "<Events>\n<Event><S><L>x\u2028y\x85z</L></S></Event>\n<Bogus/>\n</Events>"
        )

        assert document.locate(document.records[1]) == (3, 1)

    def test_crlf_line_endings(self):
        document = parse_event_string("<Events>\r\n<Event/>\r\n  <Event/>\r\n</Events>")
        assert document.locate(document.records[1]) == (3, 3)

    def test_empty_root(self):
        document = parse_event_string("<Events/>")
        assert document.records == []


class TestMalformedInput:
    """Malformed XML raises ParseError with a position."""

    def test_unclosed_element(self):
        with pytest.raises(ParseError) as exc_info:
            parse_event_string("<Events>\n  <Event>\n</Events>")

        assert exc_info.value.line_number is not None
        assert "Malformed XML" in str(exc_info.value)

    def test_empty_document(self):
        with pytest.raises(ParseError):
            parse_event_string("")

    def test_not_xml(self):
        with pytest.raises(ParseError):
            parse_event_string("just some text")


class TestFragments:
    """Top-level element sequences without a single root."""

    def test_sequence_is_wrapped(self):
        document = parse_event_string(
            "<Event><System><EventID>1</EventID></System></Event>\n"
            "<Event><System><EventID>2</EventID></System></Event>\n"
        )

        assert document.is_fragment is True
        assert local_name(document.root) == FRAGMENT_ROOT_TAG
        assert len(document.records) == 2

    def test_line_numbers_preserved(self):
        document = parse_event_string(
            '<?xml version="1.0"?>\n<Event/>\n<Event/>\n'
        )

        assert [r.sourceline for r in document.records] == [2, 3]
        assert document.locate(document.records[1]) == (3, 1)

    def test_text_between_elements_rejected(self):
        with pytest.raises(ParseError) as exc_info:
            parse_event_string("<Event/>junk<Event/>")

        assert "text after top-level element 'Event'" in str(exc_info.value)
        assert exc_info.value.line_number == 1

    def test_text_before_first_element_rejected(self):
        with pytest.raises(ParseError):
            parse_event_string("junk\n<Event/>\n<Event/>")

    def test_malformed_fragment(self):
        with pytest.raises(ParseError):
            parse_event_string("<Event></Event>\n<Event>")


class TestParseEventFile:
    """Tests for file input."""

    def test_plain_file(self, tmp_path):
        path = tmp_path / "events.xml"
        path.write_text(SIMPLE_LOG, encoding="utf-8")

        document = parse_event_file(path)
        assert len(document.records) == 2

    def test_gzip_file(self, tmp_path):
        path = tmp_path / "events.xml.gz"
        with gzip.open(path, "wt", encoding="utf-8") as f:
            f.write(SIMPLE_LOG)

        document = parse_event_file(path)
        assert len(document.records) == 2

    def test_small_chunks(self, tmp_path):
        path = tmp_path / "events.xml"
        path.write_text(SIMPLE_LOG, encoding="utf-8")

        document = parse_event_file(path, chunk_size=7)
        assert len(document.records) == 2
        assert document.locate(document.records[1]) == (5, 3)

    def test_corrupt_gzip(self, tmp_path):
        path = tmp_path / "events.xml.gz"
        path.write_bytes(b"This is not gzip content")

        with pytest.raises(ParseError):
            parse_event_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            parse_event_file(tmp_path / "missing.xml")


class TestCancellation:
    """The cancellation signal is checked while reading."""

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()

        with pytest.raises(ConversionCancelled):
            parse_event_stream(io.BytesIO(SIMPLE_LOG.encode("utf-8")), cancel_event=cancel)

    def test_unset_signal_parses_normally(self):
        cancel = threading.Event()
        document = parse_event_stream(
            io.BytesIO(SIMPLE_LOG.encode("utf-8")), cancel_event=cancel, chunk_size=16
        )
        assert len(document.records) == 2

    def test_cancelled_mid_stream(self):
        class CancelAfterReads(io.BytesIO):
            """Sets the signal after the first read."""

            def __init__(self, data, signal):
                super().__init__(data)
                self.signal = signal

            def read(self, size=-1):
                chunk = super().read(size)
                self.signal.set()
                return chunk

        cancel = threading.Event()
        handle = CancelAfterReads(SIMPLE_LOG.encode("utf-8"), cancel)

        with pytest.raises(ConversionCancelled):
            parse_event_stream(handle, cancel_event=cancel, chunk_size=8)
