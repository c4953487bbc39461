"""
XML event log parser.

Reads the whole input into an lxml element tree, keeping the raw source
lines so every element can be located by line and column for diagnostics.
Gzip-compressed inputs are supported.
"""

import codecs
import gzip
import io
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import IO, Optional, Protocol, Union

from lxml import etree

from ...config.constants import PARSE_CHUNK_SIZE
from ..exceptions import ConversionCancelled, ParseError
from ..file_utils import open_file_auto_decompress

logger = logging.getLogger(__name__)

# Synthetic root used when the input is a bare sequence of top-level elements
FRAGMENT_ROOT_TAG = "FragmentRoot"

_XML_DECLARATION = re.compile(rb"^\s*<\?xml[^>]*\?>")


class CancellationSignal(Protocol):
    """Anything with an ``is_set()`` method, e.g. ``threading.Event``."""

    def is_set(self) -> bool: ...


def local_name(node: etree._Element) -> str:
    """Return the tag of an element without its namespace."""
    return etree.QName(node).localname


def is_element(node) -> bool:
    """True for real elements (not comments, PIs or entity references)."""
    return isinstance(node.tag, str)


@dataclass
class ParsedDocument:
    """
    An in-memory record forest.

    Attributes:
        root: The document root (synthetic when the input was a fragment)
        source_lines: Decoded input lines, used to compute element columns
        is_fragment: True when the top-level elements were wrapped in a
            synthetic root
    """

    root: etree._Element
    source_lines: list[str] = field(default_factory=list)
    is_fragment: bool = False

    @property
    def records(self) -> list[etree._Element]:
        """Direct element children of the root, in document order."""
        return [child for child in self.root if is_element(child)]

    def locate(self, element: etree._Element) -> tuple[Optional[int], Optional[int]]:
        """
        Return the 1-based (line, column) of an element's start tag.

        The column is found by searching the raw source for the start tag;
        it is None when the tag cannot be found.
        """
        line = element.sourceline
        if line is None:
            return None, None

        name = local_name(element)
        pattern = re.compile(r"<(?:[\w.\-]+:)?" + re.escape(name) + r"(?=[\s/>]|$)")

        # Earlier siblings reported on the same line occupy earlier matches
        occurrence = sum(
            1
            for sibling in element.itersiblings(preceding=True)
            if is_element(sibling)
            and sibling.sourceline == line
            and local_name(sibling) == name
        )

        # A start tag spanning several lines is reported on its last line
        candidate = line
        while 0 < candidate <= len(self.source_lines):
            matches = list(pattern.finditer(self.source_lines[candidate - 1]))
            if candidate == line and len(matches) > occurrence:
                return line, matches[occurrence].start() + 1
            if candidate != line and matches:
                return candidate, matches[-1].start() + 1
            candidate -= 1

        return line, None


def _new_parser() -> etree.XMLParser:
    return etree.XMLParser(
        remove_comments=True,
        remove_pis=True,
        resolve_entities=False,
        no_network=True,
        huge_tree=True,
    )


def _syntax_error(error: etree.XMLSyntaxError) -> ParseError:
    line, column = error.position if error.position else (None, None)
    return ParseError(f"Malformed XML: {error.msg}", line_number=line, column_number=column)


def _is_extra_content(error: etree.XMLSyntaxError) -> bool:
    return error.code == etree.ErrorTypes.ERR_DOCUMENT_END


def _check_cancelled(cancel_event: Optional[CancellationSignal]) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise ConversionCancelled("Parsing cancelled")


def _wrap_fragment(raw: bytes) -> bytes:
    """
    Wrap a sequence of top-level elements in a synthetic root.

    The XML declaration is blanked with spaces and the wrapper adds no line
    breaks, so element line numbers match the input file.
    """
    if raw.startswith(codecs.BOM_UTF8):
        raw = raw[len(codecs.BOM_UTF8):]
    match = _XML_DECLARATION.match(raw)
    if match:
        blanked = re.sub(rb"[^\r\n]", b" ", match.group(0))
        raw = blanked + raw[match.end():]
    root = FRAGMENT_ROOT_TAG.encode("ascii")
    return b"<" + root + b">" + raw + b"</" + root + b">"


def _decode_lines(raw: bytes) -> list[str]:
    """
    Split the input into lines the way libxml2 numbers them.

    Only CRLF, CR and LF end a line; str.splitlines() would also split on
    form feeds and Unicode separators and shift every later line.
    """
    text = raw.decode("utf-8-sig", errors="replace")
    return text.replace("\r\n", "\n").replace("\r", "\n").split("\n")


def _reject_stray_text(root: etree._Element) -> None:
    """Raise ParseError for character data between top-level elements."""
    if root.text and root.text.strip():
        first = next((child for child in root if is_element(child)), None)
        line = first.sourceline if first is not None else 1
        raise ParseError(
            "Malformed XML: text outside of any top-level element", line_number=line
        )
    for child in root:
        if child.tail and child.tail.strip():
            raise ParseError(
                f"Malformed XML: text after top-level element '{local_name(child)}'",
                line_number=child.sourceline,
            )


def parse_event_stream(
    handle: IO[bytes],
    cancel_event: Optional[CancellationSignal] = None,
    chunk_size: int = PARSE_CHUNK_SIZE,
) -> ParsedDocument:
    """
    Parse XML from a binary file handle.

    The input is fed to lxml's incremental parser in chunks; the cancellation
    signal is checked before every chunk.

    Args:
        handle: Open binary file handle
        cancel_event: Optional cooperative cancellation signal
        chunk_size: Bytes read per chunk

    Returns:
        ParsedDocument with the element forest

    Raises:
        ParseError: If the input is not well-formed XML
        ConversionCancelled: If the cancellation signal is set
    """
    parser = _new_parser()
    buffer = bytearray()
    fragment = False
    pending_error: Optional[etree.XMLSyntaxError] = None

    try:
        while True:
            _check_cancelled(cancel_event)
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            buffer.extend(chunk)
            if fragment or pending_error is not None:
                continue
            try:
                parser.feed(chunk)
            except etree.XMLSyntaxError as e:
                if _is_extra_content(e):
                    fragment = True
                else:
                    pending_error = e
    except (gzip.BadGzipFile, EOFError) as e:
        raise ParseError(f"Cannot decompress input: {e}") from e

    if pending_error is not None:
        raise _syntax_error(pending_error) from pending_error

    raw = bytes(buffer)
    root = None
    if not fragment:
        try:
            root = parser.close()
        except etree.XMLSyntaxError as e:
            if not _is_extra_content(e):
                raise _syntax_error(e) from e
            fragment = True

    if fragment:
        logger.debug("Input has several top-level elements, wrapping in a synthetic root")
        try:
            root = etree.fromstring(_wrap_fragment(raw), parser=_new_parser())
        except etree.XMLSyntaxError as e:
            raise _syntax_error(e) from e
        _reject_stray_text(root)

    return ParsedDocument(root=root, source_lines=_decode_lines(raw), is_fragment=fragment)


def parse_event_file(
    file_path: Union[str, Path],
    cancel_event: Optional[CancellationSignal] = None,
    chunk_size: int = PARSE_CHUNK_SIZE,
) -> ParsedDocument:
    """
    Parse an XML event log file (optionally gzip-compressed).

    Raises:
        FileNotFoundError: If the file doesn't exist
        ParseError: If the input is not well-formed XML
        ConversionCancelled: If the cancellation signal is set
    """
    with open_file_auto_decompress(file_path) as handle:
        document = parse_event_stream(handle, cancel_event, chunk_size)

    logger.debug(f"Parsed {file_path}: {len(document.records)} top-level elements")
    return document


def parse_event_string(
    content: Union[str, bytes],
    cancel_event: Optional[CancellationSignal] = None,
) -> ParsedDocument:
    """Parse XML held in memory. Strings are encoded as UTF-8."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return parse_event_stream(io.BytesIO(content), cancel_event)
