"""
Backups of the journal store.

The CLI takes a backup before every import so a bad file can be rolled back
by hand. Backups are consistent SQLite copies made with the backup API and
named after their source and creation time:

    journal.db  →  backups/journal_20240115_103045.db
"""

from __future__ import annotations

import logging
import re
import sqlite3
from contextlib import closing
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BackupInfo:
    """An existing backup file."""

    path: Path
    created_at: datetime
    source_stem: str

    @property
    def age_days(self) -> float:
        """Get the age of the backup in days."""
        delta = datetime.now() - self.created_at
        return delta.total_seconds() / (24 * 60 * 60)


# journal_YYYYmmdd_HHMMSS.db
_BACKUP_PATTERN = re.compile(r"^(.+)_(\d{8})_(\d{6})\.db$")


def _backup_filename(source: Path, created_at: datetime) -> str:
    ts = created_at.strftime("%Y%m%d_%H%M%S")
    stem = source.stem or "journal"
    return f"{stem}_{ts}.db"


def _parse_backup_filename(path: Path) -> Optional[BackupInfo]:
    match = _BACKUP_PATTERN.match(path.name)
    if not match:
        return None

    try:
        created_at = datetime.strptime(f"{match.group(2)}_{match.group(3)}", "%Y%m%d_%H%M%S")
    except ValueError:
        return None

    return BackupInfo(path=path, created_at=created_at, source_stem=match.group(1))


def create_timestamped_backup(store_path: Path, backups_dir: Path) -> BackupInfo:
    """
    Create a consistent, timestamped copy of the journal database.

    Args:
        store_path: Path to the journal database.
        backups_dir: Directory to write the backup into (created if needed).

    Returns:
        BackupInfo for the new backup.

    Raises:
        FileNotFoundError: If store_path does not exist.
    """
    store_path = Path(store_path).expanduser().resolve()
    backups_dir = Path(backups_dir).expanduser().resolve()

    if not store_path.exists():
        raise FileNotFoundError(f"Journal database not found: {store_path}")

    created_at = datetime.now().replace(microsecond=0)
    backups_dir.mkdir(parents=True, exist_ok=True)
    backup_path = backups_dir / _backup_filename(store_path, created_at)

    logger.info(f"Creating backup: {backup_path}")
    with closing(sqlite3.connect(f"file:{store_path}?mode=ro", uri=True)) as src_conn:
        with closing(sqlite3.connect(str(backup_path))) as dst_conn:
            src_conn.backup(dst_conn)

    return BackupInfo(path=backup_path, created_at=created_at, source_stem=store_path.stem)


def list_backups(backups_dir: Path, source_stem: str = "journal") -> List[BackupInfo]:
    """
    List backups for a source, newest first.

    Args:
        backups_dir: Directory containing backups.
        source_stem: Only include backups of this database (default 'journal').
    """
    backups_dir = Path(backups_dir).expanduser().resolve()
    if not backups_dir.exists():
        return []

    backups = [
        info
        for info in (_parse_backup_filename(f) for f in backups_dir.iterdir() if f.is_file())
        if info is not None and info.source_stem == source_stem
    ]
    backups.sort(key=lambda b: b.created_at, reverse=True)
    return backups


def get_latest_backup(backups_dir: Path, source_stem: str = "journal") -> Optional[BackupInfo]:
    """Get the most recent backup, or None."""
    backups = list_backups(backups_dir, source_stem)
    return backups[0] if backups else None


def cleanup_old_backups(
    backups_dir: Path,
    keep_count: int = 5,
    source_stem: str = "journal",
) -> List[Path]:
    """
    Remove old backups, keeping only the most recent ones.

    Returns:
        Paths that were deleted.
    """
    deleted: List[Path] = []

    for backup in list_backups(backups_dir, source_stem)[keep_count:]:
        try:
            backup.path.unlink()
            deleted.append(backup.path)
            logger.info(f"Deleted old backup: {backup.path.name}")
        except OSError as e:
            logger.warning(f"Failed to delete backup {backup.path}: {e}")

    return deleted
