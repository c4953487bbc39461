"""
Format parsers for event log input.

Currently XML only. Parsers produce a ParsedDocument holding the record
forest plus the raw source lines used for position diagnostics.

Usage:
    from event_log_flattener.ingestion.parsers import parse_event_file

    document = parse_event_file('/path/to/events.xml')
    for record in document.records:
        print(record.tag, document.locate(record))
"""

from .xml_parser import (
    FRAGMENT_ROOT_TAG,
    CancellationSignal,
    ParsedDocument,
    is_element,
    local_name,
    parse_event_file,
    parse_event_stream,
    parse_event_string,
)

__all__ = [
    "FRAGMENT_ROOT_TAG",
    "CancellationSignal",
    "ParsedDocument",
    "is_element",
    "local_name",
    "parse_event_file",
    "parse_event_stream",
    "parse_event_string",
]
