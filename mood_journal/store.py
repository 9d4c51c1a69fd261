"""
Local record store.

SQLite-backed mapping from record id to MoodRecord, supporting insert,
delete and full enumeration. The CSV engine and reconciliation never write
here themselves; the CLI and API insert whatever those layers hand back.
"""

import sqlite3
from contextlib import closing
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Any
import logging

from mood_journal.models import MoodRecord
from mood_journal.schema import create_schema

logger = logging.getLogger(__name__)

_COLUMNS = (
    "record_id, event_time, start_time, end_time, mood, activity, note, created_at, external_ref"
)


class RecordNotFoundError(KeyError):
    """No record with the requested id exists in the store."""


def _to_db_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat(sep=" ") if value is not None else None


def _from_db_time(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


def _row_to_record(row: Tuple[Any, ...]) -> MoodRecord:
    return MoodRecord(
        id=row[0],
        event_time=datetime.fromisoformat(row[1]),
        start_time=_from_db_time(row[2]),
        end_time=_from_db_time(row[3]),
        mood=row[4],
        activity=row[5],
        note=row[6] or "",
        created_at=datetime.fromisoformat(row[7]),
        external_ref=row[8],
    )


def _record_to_row(record: MoodRecord) -> Tuple[Any, ...]:
    return (
        record.id,
        _to_db_time(record.event_time),
        _to_db_time(record.start_time),
        _to_db_time(record.end_time),
        record.mood,
        record.activity,
        record.note or "",
        _to_db_time(record.created_at),
        record.external_ref,
    )


class JournalStore:
    """
    Connection manager and record access for the journal database.

    Usage:
        with JournalStore(path) as store:
            store.insert_many(result.imported)
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._connection: Optional[sqlite3.Connection] = None

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def connect(self) -> sqlite3.Connection:
        """
        Open the store, creating the schema on first use.

        Raises:
            sqlite3.Error: If the database cannot be opened.
        """
        if self._connection is not None:
            return self._connection

        create_schema(self.db_path)
        try:
            self._connection = sqlite3.connect(str(self.db_path))
        except sqlite3.Error as e:
            logger.error(f"Failed to open journal store: {e}")
            raise

        logger.debug(f"Connected to journal store: {self.db_path}")
        return self._connection

    def close(self) -> None:
        """Close the connection."""
        if self._connection:
            self._connection.close()
            self._connection = None
            logger.debug("Journal store closed")

    @property
    def connection(self) -> sqlite3.Connection:
        """
        Get the open connection.

        Raises:
            RuntimeError: If connect() has not been called.
        """
        if self._connection is None:
            raise RuntimeError("Journal store not open. Call connect() first.")
        return self._connection

    def insert(self, record: MoodRecord) -> None:
        """
        Insert one record.

        Raises:
            sqlite3.IntegrityError: If a record with the same id exists.
        """
        query = f"INSERT INTO mood_record ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);"
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(query, _record_to_row(record))
        self.connection.commit()

    def insert_many(self, records: Iterable[MoodRecord]) -> int:
        """
        Insert records in one transaction.

        Returns:
            Number of records inserted.
        """
        rows = [_record_to_row(record) for record in records]
        if not rows:
            return 0

        query = f"INSERT INTO mood_record ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);"
        with closing(self.connection.cursor()) as cursor:
            cursor.executemany(query, rows)
        self.connection.commit()

        logger.info(f"Inserted {len(rows)} records")
        return len(rows)

    def get(self, record_id: str) -> MoodRecord:
        """
        Fetch one record by id.

        Raises:
            RecordNotFoundError: If the id is unknown.
        """
        query = f"SELECT {_COLUMNS} FROM mood_record WHERE record_id = ?;"
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(query, (record_id,))
            row = cursor.fetchone()
        if row is None:
            raise RecordNotFoundError(record_id)
        return _row_to_record(row)

    def delete(self, record_id: str) -> bool:
        """
        Delete a record by id.

        Returns:
            True if a record was deleted, False if the id was unknown.
        """
        with closing(self.connection.cursor()) as cursor:
            cursor.execute("DELETE FROM mood_record WHERE record_id = ?;", (record_id,))
            deleted = cursor.rowcount > 0
        self.connection.commit()
        return deleted

    def all_records(self, newest_first: bool = True) -> List[MoodRecord]:
        """Enumerate every record ordered by event time."""
        direction = "DESC" if newest_first else "ASC"
        query = f"SELECT {_COLUMNS} FROM mood_record ORDER BY event_time {direction};"
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(query)
            return [_row_to_record(row) for row in cursor.fetchall()]

    def count(self) -> int:
        """Number of records in the store."""
        with closing(self.connection.cursor()) as cursor:
            cursor.execute("SELECT COUNT(*) FROM mood_record;")
            result = cursor.fetchone()
            return result[0] if result else 0

    def update_external_ref(self, record_id: str, external_ref: Optional[str]) -> bool:
        """
        Re-link a record to an external sample (or unlink with None).

        Returns:
            True if the record exists.
        """
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(
                "UPDATE mood_record SET external_ref = ? WHERE record_id = ?;",
                (external_ref, record_id),
            )
            updated = cursor.rowcount > 0
        self.connection.commit()
        return updated

    def link_external_refs(self, links: Dict[str, str]) -> int:
        """Apply record id → external id links. Returns how many records were updated."""
        updated = [rid for rid, ref in links.items() if self.update_external_ref(rid, ref)]
        return len(updated)

    def set_state(self, key: str, value: str) -> None:
        """Write a journal_state entry."""
        with closing(self.connection.cursor()) as cursor:
            cursor.execute(
                """
                INSERT OR REPLACE INTO journal_state (key, value, updated_at)
                VALUES (?, ?, datetime('now'));
                """,
                (key, value),
            )
        self.connection.commit()

    def get_state(self, key: str) -> Optional[str]:
        """Read a journal_state entry."""
        with closing(self.connection.cursor()) as cursor:
            cursor.execute("SELECT value FROM journal_state WHERE key = ?;", (key,))
            result = cursor.fetchone()
            return result[0] if result else None
