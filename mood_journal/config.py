"""
Configuration module for mood-journal.

Handles the store location, duplicate-detection tolerances, sync settings
and the default tag lists.

Environment Variables:
    MOOD_JOURNAL_DB_PATH:     Path to the journal database.
    MOOD_JOURNAL_LOOSE_TIER:  "1"/"true" enables the loose duplicate tier.
    MOOD_JOURNAL_SOURCE_PATH: JSON file used as the external mood source.

Engines never read the global instance; the CLI and API build a Config and
pass its values down explicitly.
"""

import os
from pathlib import Path
from typing import List, Optional, Sequence

from mood_journal.csvio.duplicates import DuplicatePolicy

DEFAULT_MOOD_TAGS = ("开心", "平静", "难过", "激动", "疲惫", "其他")
DEFAULT_ACTIVITY_TAGS = ("工作", "学习", "休息", "娱乐", "家务", "运动", "餐饮", "旅行", "其他")

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUE_VALUES


class Config:
    """Configuration class for mood-journal."""

    # Default path for the journal database
    DEFAULT_STORE_DIR = Path.home() / ".mood_journal"
    DEFAULT_STORE_NAME = "journal.db"
    BACKUPS_DIR_NAME = "backups"

    def __init__(
        self,
        store_path: Optional[str] = None,
        duplicate_policy: Optional[DuplicatePolicy] = None,
        mood_tags: Optional[Sequence[str]] = None,
        activity_tags: Optional[Sequence[str]] = None,
        sync_activity_placeholder: str = "synced",
        sync_window_seconds: float = 60.0,
        sync_lookback_days: int = 30,
        source_path: Optional[str] = None,
    ):
        """
        Initialize configuration.

        Args:
            store_path: Optional path to the journal database. Falls back to
                    MOOD_JOURNAL_DB_PATH, then ~/.mood_journal/journal.db.
            duplicate_policy: Duplicate tolerances. Defaults to the exact
                    tier only, plus the loose tier if MOOD_JOURNAL_LOOSE_TIER
                    is set.
            mood_tags: Built-in mood labels (never cleaned up as unused).
            activity_tags: Built-in activity labels.
            sync_activity_placeholder: Activity given to synced records that
                    carry none.
            sync_window_seconds: Match window used when pulling records.
            sync_lookback_days: How far back a pull looks by default.
            source_path: Optional JSON file used as the external mood
                    source. Falls back to MOOD_JOURNAL_SOURCE_PATH; None
                    when neither is set.

        Raises:
            ValueError: If the sync window or lookback is not positive.
        """
        if sync_window_seconds <= 0:
            raise ValueError(f"sync_window_seconds must be positive, got {sync_window_seconds}")
        if sync_lookback_days < 1:
            raise ValueError(f"sync_lookback_days must be at least 1, got {sync_lookback_days}")

        if store_path:
            self._store_path = Path(store_path).expanduser()
        elif os.getenv("MOOD_JOURNAL_DB_PATH"):
            self._store_path = Path(os.environ["MOOD_JOURNAL_DB_PATH"]).expanduser()
        else:
            self._store_path = self.DEFAULT_STORE_DIR / self.DEFAULT_STORE_NAME

        if duplicate_policy is None:
            duplicate_policy = DuplicatePolicy(
                loose_tier_enabled=_env_flag("MOOD_JOURNAL_LOOSE_TIER")
            )
        self._duplicate_policy = duplicate_policy

        self._mood_tags: List[str] = list(mood_tags or DEFAULT_MOOD_TAGS)
        self._activity_tags: List[str] = list(activity_tags or DEFAULT_ACTIVITY_TAGS)
        self.sync_activity_placeholder = sync_activity_placeholder
        self.sync_window_seconds = sync_window_seconds
        self.sync_lookback_days = sync_lookback_days

        source_path = source_path or os.getenv("MOOD_JOURNAL_SOURCE_PATH")
        self._source_path = Path(source_path).expanduser() if source_path else None

    @property
    def store_path(self) -> Path:
        """Get the journal database path."""
        return self._store_path

    @property
    def store_path_str(self) -> str:
        """Get the journal database path as a string."""
        return str(self._store_path)

    @property
    def backups_dir(self) -> Path:
        """Directory for store backups, next to the database."""
        return self._store_path.parent / self.BACKUPS_DIR_NAME

    @property
    def source_path(self) -> Optional[Path]:
        """Get the external source file, if one is configured."""
        return self._source_path

    @property
    def duplicate_policy(self) -> DuplicatePolicy:
        """Get the duplicate-detection tolerances."""
        return self._duplicate_policy

    @property
    def mood_tags(self) -> List[str]:
        """Get the built-in mood labels."""
        return list(self._mood_tags)

    @property
    def activity_tags(self) -> List[str]:
        """Get the built-in activity labels."""
        return list(self._activity_tags)

    def validate(self) -> bool:
        """
        Validate that the journal database exists and is readable.

        Returns:
            True if the database exists and is readable, False otherwise.
        """
        return self._store_path.exists() and os.access(self._store_path, os.R_OK)


# Global configuration instance
_config: Optional[Config] = None


def get_config(store_path: Optional[str] = None) -> Config:
    """
    Get or create the global configuration instance.

    Args:
        store_path: Optional path to the journal database.

    Returns:
        Config instance.
    """
    global _config
    if _config is None or store_path is not None:
        _config = Config(store_path)
    return _config


def set_config(config: Optional[Config]) -> None:
    """
    Set (or with None, reset) the global configuration instance.

    Args:
        config: Config instance to use.
    """
    global _config
    _config = config
