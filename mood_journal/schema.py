"""
Schema definitions for the journal store.

Design Decisions:
    1. TEXT UUIDs for record ids, so imported and synced records never need
       renumbering
    2. Timestamps stored as ISO-8601 TEXT (local time, no offset), which
       sorts correctly and stays human-readable
    3. external_ref is nullable and indexed; it is how delete/update
       propagation finds the linked external sample
    4. journal_state is a key-value table for metadata such as
       schema_version and last sync times
"""

import sqlite3
from pathlib import Path
from typing import List
import logging

logger = logging.getLogger(__name__)

# Schema version for migration tracking
SCHEMA_VERSION = "2.0.0"

SCHEMA_DDL = """
-- =============================================================================
-- mood_record: One journal entry
-- =============================================================================
-- start_time / end_time are independently optional.
-- created_at is preserved verbatim when records are imported.
--
CREATE TABLE IF NOT EXISTS mood_record (
    record_id TEXT PRIMARY KEY,
    event_time TEXT NOT NULL,
    start_time TEXT,
    end_time TEXT,
    mood TEXT NOT NULL,
    activity TEXT,
    note TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    external_ref TEXT
);

CREATE INDEX IF NOT EXISTS idx_record_event_time
    ON mood_record(event_time);

CREATE INDEX IF NOT EXISTS idx_record_external_ref
    ON mood_record(external_ref);

-- =============================================================================
-- journal_state: Store metadata
-- =============================================================================
-- Common keys:
--   - 'schema_version': Current schema version
--   - 'last_import': Timestamp of the last CSV import
--   - 'last_pull': Timestamp of the last pull from an external source
--
CREATE TABLE IF NOT EXISTS journal_state (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

INSERT OR REPLACE INTO journal_state (key, value, updated_at)
VALUES ('schema_version', '{schema_version}', datetime('now'));
""".format(
    schema_version=SCHEMA_VERSION
)

REQUIRED_TABLES = {"mood_record", "journal_state"}


def create_schema(db_path: Path) -> None:
    """
    Create the journal schema if it doesn't exist.

    Idempotent: every statement uses IF NOT EXISTS.

    Args:
        db_path: Path to the journal database. Parent directories are created.

    Raises:
        sqlite3.Error: If schema creation fails.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)

    logger.info(f"Creating/verifying schema at: {db_path}")

    conn = sqlite3.connect(str(db_path))
    try:
        conn.executescript(SCHEMA_DDL)
        conn.commit()
        logger.info(f"Schema created/verified successfully (version {SCHEMA_VERSION})")
    except sqlite3.Error as e:
        logger.error(f"Schema creation failed: {e}")
        raise
    finally:
        conn.close()


def get_table_names(db_path: Path) -> List[str]:
    """Get all table names in the journal database."""
    conn = sqlite3.connect(str(db_path))
    try:
        cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;")
        return [row[0] for row in cursor.fetchall()]
    finally:
        conn.close()


def verify_schema(db_path: Path) -> bool:
    """
    Verify that the schema exists and has all required tables.

    Returns:
        True if schema is valid, False otherwise.
    """
    if not db_path.exists():
        return False

    return REQUIRED_TABLES.issubset(set(get_table_names(db_path)))
