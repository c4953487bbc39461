"""
Pytest configuration and shared fixtures for unit tests.
"""

import os

import pytest

from event_log_flattener.config import clear_settings_cache
from event_log_flattener.ingestion.parsers import parse_event_string

WINDOWS_EVENT = """\
<Events>
<Event xmlns="http://schemas.microsoft.com/win/2004/08/events/event">
  <System>
    <Provider Name="Microsoft-Windows-Security-Auditing" Guid="{54849625-5478-4994-a5ba-3e3b0328c30d}"/>
    <EventID>4624</EventID>
    <Level>0</Level>
    <TimeCreated SystemTime="2024-01-15T10:00:00.000Z"/>
    <Security/>
  </System>
  <EventData>
    <Data Name="SubjectUserSid">S-1-5-18</Data>
    <Data Name="TargetUserName">alice</Data>
    <Data Name="LogonType">2</Data>
  </EventData>
</Event>
</Events>
"""


@pytest.fixture
def parse_record():
    """Factory fixture: parse an XML document and return its first record."""

    def _parse(xml: str):
        return parse_event_string(xml).records[0]

    return _parse


@pytest.fixture
def windows_event(parse_record):
    """A Security log event with attribute bags and named Data values."""
    return parse_record(WINDOWS_EVENT)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch):
    """Isolate tests from EVENTLOG_* variables and the settings cache."""
    for key in list(os.environ):
        if key.startswith("EVENTLOG_"):
            monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()
