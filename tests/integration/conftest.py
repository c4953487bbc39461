"""
Shared fixtures for integration tests.

Provides:
- Sample event log files (plain, gzip, invalid)
- Isolation from EVENTLOG_* environment variables
"""

import gzip
import os
from pathlib import Path

import pytest

from event_log_flattener.config import clear_settings_cache

# =============================================================================
# SAMPLE DATA
# =============================================================================

SECURITY_LOG = """\
<?xml version="1.0" encoding="utf-8"?>
<Events>
<Event xmlns="http://schemas.microsoft.com/win/2004/08/events/event">
  <System>
    <Provider Name="Microsoft-Windows-Security-Auditing"/>
    <EventID>4624</EventID>
    <Level>4</Level>
    <Security/>
  </System>
  <EventData>
    <Data Name="TargetUserName">alice</Data>
    <Data Name="LogonType">2</Data>
    <Data Name="Message">Logon succeeded.
Second line</Data>
  </EventData>
</Event>
<Event xmlns="http://schemas.microsoft.com/win/2004/08/events/event">
  <System>
    <Provider Name="Service Control Manager"/>
    <EventID>7036</EventID>
  </System>
  <UserData>
    <Substitution index="0"><String>Windows Update</String></Substitution>
  </UserData>
</Event>
</Events>
"""

EXPECTED_CSV = (
    "Provider_Name;System_EventID;System_Level;EventData_TargetUserName;"
    "EventData_LogonType;EventData_Message;Substitution_index_0_String\n"
    '"Microsoft-Windows-Security-Auditing";"4624";"4";"alice";"2";'
    '"Logon succeeded. Second line";""\n'
    '"Service Control Manager";"7036";"";"";"";"";"Windows Update"\n'
)


@pytest.fixture(autouse=True)
def fresh_settings(monkeypatch, tmp_path):
    """Isolate tests from EVENTLOG_* variables, eventlog.yaml and the settings cache."""
    for key in list(os.environ):
        if key.startswith("EVENTLOG_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def security_log(tmp_path) -> Path:
    """A two-event Security/System log export."""
    path = tmp_path / "security.xml"
    path.write_text(SECURITY_LOG, encoding="utf-8")
    return path


@pytest.fixture
def security_log_gz(tmp_path) -> Path:
    """The same log, gzip-compressed."""
    path = tmp_path / "security.xml.gz"
    with gzip.open(path, "wt", encoding="utf-8") as f:
        f.write(SECURITY_LOG)
    return path


@pytest.fixture
def log_file_factory(tmp_path):
    """Factory fixture for writing arbitrary XML logs."""

    def _write(content: str, name: str = "input.xml") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def expected_csv() -> str:
    """CSV output expected for security_log."""
    return EXPECTED_CSV
