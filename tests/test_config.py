"""
Tests for configuration.
"""

from pathlib import Path

import pytest

from mood_journal.config import (
    DEFAULT_ACTIVITY_TAGS,
    DEFAULT_MOOD_TAGS,
    Config,
    get_config,
    set_config,
)
from mood_journal.csvio.duplicates import DuplicatePolicy


class TestStorePath:
    """Tests for store path resolution."""

    def test_explicit_path(self, tmp_path: Path):
        config = Config(store_path=str(tmp_path / "j.db"))
        assert config.store_path == tmp_path / "j.db"
        assert config.store_path_str == str(tmp_path / "j.db")

    def test_env_var(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MOOD_JOURNAL_DB_PATH", str(tmp_path / "env.db"))
        assert Config().store_path == tmp_path / "env.db"

    def test_explicit_beats_env(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("MOOD_JOURNAL_DB_PATH", str(tmp_path / "env.db"))
        assert Config(store_path=str(tmp_path / "arg.db")).store_path == tmp_path / "arg.db"

    def test_default_under_home(self):
        config = Config()
        assert config.store_path == Path.home() / ".mood_journal" / "journal.db"

    def test_backups_dir_next_to_store(self, tmp_path: Path):
        config = Config(store_path=str(tmp_path / "j.db"))
        assert config.backups_dir == tmp_path / "backups"


class TestSourcePath:
    """Tests for the external source path."""

    def test_none_by_default(self):
        assert Config().source_path is None

    def test_explicit(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        assert Config(source_path=str(path)).source_path == path

    def test_env_var(self, tmp_path: Path, monkeypatch):
        path = tmp_path / "samples.json"
        monkeypatch.setenv("MOOD_JOURNAL_SOURCE_PATH", str(path))
        assert Config().source_path == path


class TestDuplicatePolicy:
    """Tests for the configured duplicate policy."""

    def test_default_is_exact_only(self):
        assert Config().duplicate_policy == DuplicatePolicy()

    @pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
    def test_env_enables_loose_tier(self, value, monkeypatch):
        monkeypatch.setenv("MOOD_JOURNAL_LOOSE_TIER", value)
        assert Config().duplicate_policy.loose_tier_enabled is True

    def test_env_falsey(self, monkeypatch):
        monkeypatch.setenv("MOOD_JOURNAL_LOOSE_TIER", "0")
        assert Config().duplicate_policy.loose_tier_enabled is False

    def test_explicit_policy(self):
        policy = DuplicatePolicy(exact_time_tolerance_seconds=60.0)
        assert Config(duplicate_policy=policy).duplicate_policy is policy


class TestTags:
    """Tests for tag lists."""

    def test_defaults(self):
        config = Config()
        assert config.mood_tags == list(DEFAULT_MOOD_TAGS)
        assert config.activity_tags == list(DEFAULT_ACTIVITY_TAGS)

    def test_custom_tags(self):
        config = Config(mood_tags=["a"], activity_tags=["b"])
        assert config.mood_tags == ["a"]
        assert config.activity_tags == ["b"]

    def test_tags_are_copies(self):
        config = Config()
        config.mood_tags.append("mutated")
        assert "mutated" not in config.mood_tags


class TestValidation:
    """Tests for validate()."""

    def test_validate_missing(self, tmp_path: Path):
        assert Config(store_path=str(tmp_path / "missing.db")).validate() is False

    def test_validate_existing(self, tmp_path: Path):
        path = tmp_path / "j.db"
        path.write_bytes(b"")
        assert Config(store_path=str(path)).validate() is True


class TestGlobalConfig:
    """Tests for get_config() / set_config()."""

    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_explicit_path_replaces_instance(self, tmp_path: Path):
        first = get_config()
        second = get_config(store_path=str(tmp_path / "j.db"))
        assert first is not second
        assert get_config() is second

    def test_set_config(self, tmp_path: Path):
        config = Config(store_path=str(tmp_path / "j.db"))
        set_config(config)
        assert get_config() is config

    def test_sync_defaults(self):
        config = Config()
        assert config.sync_activity_placeholder == "synced"
        assert config.sync_window_seconds == 60.0
        assert config.sync_lookback_days == 30

    @pytest.mark.parametrize(
        "kwargs", [{"sync_window_seconds": 0}, {"sync_lookback_days": 0}]
    )
    def test_invalid_sync_settings(self, kwargs):
        with pytest.raises(ValueError):
            Config(**kwargs)
