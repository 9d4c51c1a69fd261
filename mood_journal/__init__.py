"""
mood-journal - a local-first mood journal with CSV and health-data sync.

This package provides functionality to:
- Store mood records locally (SQLite)
- Export and import records as CSV, skipping duplicates
- Reconcile records with external mood sources
- Summarize and chart the journal
"""

__version__ = "0.1.0"

from mood_journal.config import get_config, Config
from mood_journal.models import MoodRecord, ExternalMoodRecord
from mood_journal.store import JournalStore

__all__ = [
    "get_config",
    "Config",
    "MoodRecord",
    "ExternalMoodRecord",
    "JournalStore",
]
