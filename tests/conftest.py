"""
Pytest fixtures for mood-journal tests.

Fixture Categories:
    1. Record fixtures (plain MoodRecord / ExternalMoodRecord values)
    2. CSV fixtures (documents in the current and legacy formats)
    3. Store fixtures (a fresh SQLite journal under tmp_path)

Design Notes:
    - Fixtures use tmp_path for isolation between tests
    - Times are fixed naive datetimes so CSV output is deterministic
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List

import pytest

from mood_journal.config import set_config
from mood_journal.models import ExternalMoodRecord, MoodRecord
from mood_journal.store import JournalStore

BASE_TIME = datetime(2024, 1, 15, 10, 0, 0)
CREATED_AT = datetime(2024, 1, 15, 10, 5, 0)

CSV_HEADER = "记录时间,心情,活动,笔记,开始时间,结束时间,创建时间"


def pytest_configure(config):
    config.addinivalue_line("markers", "property: property-based tests (hypothesis)")


@pytest.fixture(autouse=True)
def reset_global_config(monkeypatch):
    """Keep the global Config and env-driven settings from leaking between tests."""
    monkeypatch.delenv("MOOD_JOURNAL_DB_PATH", raising=False)
    monkeypatch.delenv("MOOD_JOURNAL_LOOSE_TIER", raising=False)
    monkeypatch.delenv("MOOD_JOURNAL_LOG_FILE", raising=False)
    monkeypatch.delenv("MOOD_JOURNAL_SOURCE_PATH", raising=False)
    set_config(None)
    yield
    set_config(None)


# =============================================================================
# Record fixtures
# =============================================================================


@pytest.fixture
def sample_record() -> MoodRecord:
    """A fully populated record."""
    return MoodRecord(
        id="rec-1",
        event_time=BASE_TIME,
        mood="开心",
        activity="运动",
        note="morning run",
        start_time=datetime(2024, 1, 15, 9, 30, 0),
        end_time=datetime(2024, 1, 15, 10, 0, 0),
        created_at=CREATED_AT,
    )


@pytest.fixture
def sample_records() -> List[MoodRecord]:
    """A small journal, newest first."""
    return [
        MoodRecord(
            id="rec-3",
            event_time=datetime(2024, 1, 17, 20, 0, 0),
            mood="难过",
            activity="工作",
            note="long day",
            created_at=datetime(2024, 1, 17, 20, 1, 0),
        ),
        MoodRecord(
            id="rec-2",
            event_time=datetime(2024, 1, 16, 12, 0, 0),
            mood="平静",
            activity=None,
            note="",
            created_at=datetime(2024, 1, 16, 12, 0, 30),
        ),
        MoodRecord(
            id="rec-1",
            event_time=BASE_TIME,
            mood="开心",
            activity="运动",
            note="morning run",
            start_time=datetime(2024, 1, 15, 9, 30, 0),
            end_time=datetime(2024, 1, 15, 10, 0, 0),
            created_at=CREATED_AT,
            external_ref="ext-1",
        ),
    ]


@pytest.fixture
def external_record() -> ExternalMoodRecord:
    """An external sample starting at BASE_TIME."""
    return ExternalMoodRecord(
        external_id="ext-100",
        start_time=BASE_TIME,
        end_time=datetime(2024, 1, 15, 10, 30, 0),
        mood="开心",
        note="from the watch",
    )


# =============================================================================
# CSV fixtures
# =============================================================================


@pytest.fixture
def current_csv() -> str:
    """A two-row document in the 7-field format."""
    return (
        f"{CSV_HEADER}\n"
        "2024-01-15 10:00:00,开心,运动,morning run,2024-01-15 09:30:00,"
        "2024-01-15 10:00:00,2024-01-15 10:05:00\n"
        "2024-01-16 12:00:00,平静,,,,,2024-01-16 12:00:30\n"
    )


@pytest.fixture
def legacy_csv() -> str:
    """A one-row document in the 5-field format."""
    return (
        "记录时间,心情,活动,笔记,创建时间\n"
        "2023-06-01 08:00:00,难过,工作,deadline,2023-06-01 08:10:00\n"
    )


# =============================================================================
# Store fixtures
# =============================================================================


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Location for a journal database that doesn't exist yet."""
    return tmp_path / "journal" / "journal.db"


@pytest.fixture
def store(store_path: Path):
    """An open, empty journal store."""
    with JournalStore(store_path) as journal:
        yield journal


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging(): drop the handlers it added and restore levels."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    logging.getLogger("mood_journal.csvio").setLevel(logging.NOTSET)
