"""
Tests for the external mood source adapters.
"""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from mood_journal.models import ExternalMoodRecord, MoodRecord
from mood_journal.sync.reconcile import pull_from_source
from mood_journal.sync.source import (
    ExternalMoodSource,
    ExternalSourceError,
    ExternalSourceUnavailable,
    InMemoryMoodSource,
    JsonFileMoodSource,
)

T0 = datetime(2024, 5, 10, 8, 0, 0)
WIDE_START = datetime(2000, 1, 1)
WIDE_END = datetime(2100, 1, 1)


def _write_samples(path: Path, samples) -> None:
    path.write_text(json.dumps({"samples": samples}), encoding="utf-8")


class TestErrors:
    """Tests for the error hierarchy."""

    def test_unavailable_is_source_error(self):
        assert issubclass(ExternalSourceUnavailable, ExternalSourceError)

    def test_interface_is_abstract(self):
        with pytest.raises(TypeError):
            ExternalMoodSource()


class TestInMemoryMoodSource:
    """Tests for InMemoryMoodSource."""

    def test_fetch_newest_first_within_range(self):
        source = InMemoryMoodSource(
            [
                ExternalMoodRecord("a", T0, T0, "开心"),
                ExternalMoodRecord("b", T0 + timedelta(hours=1), T0, "难过"),
                ExternalMoodRecord("c", T0 - timedelta(days=5), T0, "平静"),
            ]
        )

        result = asyncio.run(source.fetch(T0 - timedelta(days=1), T0 + timedelta(days=1)))

        assert [r.external_id for r in result] == ["b", "a"]

    def test_save_uses_time_range_and_valence(self):
        source = InMemoryMoodSource()
        record = MoodRecord(
            event_time=T0,
            mood="开心",
            start_time=T0 - timedelta(minutes=30),
            end_time=T0,
        )

        external_id = asyncio.run(source.save(record))

        saved = source.records[0]
        assert saved.external_id == external_id
        assert saved.start_time == T0 - timedelta(minutes=30)
        assert saved.end_time == T0
        assert saved.valence == 0.4

    def test_save_falls_back_to_event_time(self):
        source = InMemoryMoodSource()
        asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))
        assert source.records[0].start_time == T0
        assert source.records[0].end_time == T0

    def test_delete(self):
        source = InMemoryMoodSource([ExternalMoodRecord("a", T0, T0, "开心")])
        assert asyncio.run(source.delete("a")) is True
        assert asyncio.run(source.delete("a")) is False

    def test_unavailable_raises(self):
        source = InMemoryMoodSource()
        source.available = False
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.fetch(WIDE_START, WIDE_END))
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.delete("a"))


class TestJsonFileMoodSource:
    """Tests for JsonFileMoodSource."""

    def test_missing_file_is_empty(self, tmp_path: Path):
        source = JsonFileMoodSource(tmp_path / "missing.json")
        assert asyncio.run(source.fetch(WIDE_START, WIDE_END)) == []

    def test_fetch_maps_valence_to_mood(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        _write_samples(
            path,
            [
                {
                    "id": "s1",
                    "start": "2024-05-10T08:00:00",
                    "end": "2024-05-10T08:20:00",
                    "valence": -0.9,
                    "reflection": "rough morning | 标签: tired",
                    "labels": ["tired"],
                }
            ],
        )

        records = asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

        assert len(records) == 1
        record = records[0]
        assert record.external_id == "s1"
        assert record.start_time == T0
        assert record.end_time == T0 + timedelta(minutes=20)
        assert record.mood == "非常难过"
        assert record.valence == -0.9
        assert record.note == "rough morning"
        assert record.labels == ["tired"]

    def test_fetch_skips_malformed_samples(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        _write_samples(
            path,
            [
                {"id": "ok", "start": "2024-05-10T08:00:00", "valence": 0.5},
                {"id": "bad", "start": "yesterday"},
                {"start": "2024-05-10T09:00:00"},
            ],
        )

        records = asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

        assert [r.external_id for r in records] == ["ok"]
        assert records[0].end_time == records[0].start_time

    def test_fetch_clamps_valence(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        _write_samples(path, [{"id": "s", "start": "2024-05-10T08:00:00", "valence": 4}])

        records = asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

        assert records[0].valence == 1.0
        assert records[0].mood == "非常开心"

    def test_corrupt_file_is_unavailable(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

    def test_unexpected_layout_is_unavailable(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

    def test_save_then_fetch(self, tmp_path: Path):
        path = tmp_path / "nested" / "samples.json"
        source = JsonFileMoodSource(path, labels=["journal"])
        record = MoodRecord(event_time=T0, mood="开心", note="sunny", activity="运动")

        external_id = asyncio.run(source.save(record))
        fetched = asyncio.run(source.fetch(WIDE_START, WIDE_END))

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["samples"][0]["reflection"] == "sunny | 标签: journal"
        assert data["samples"][0]["valence"] == 0.4
        assert fetched[0].external_id == external_id
        assert fetched[0].mood == "开心"
        assert fetched[0].note == "sunny"
        assert fetched[0].activity == "运动"

    def test_delete(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        source = JsonFileMoodSource(path)
        external_id = asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))

        assert asyncio.run(source.delete(external_id)) is True
        assert asyncio.run(source.delete(external_id)) is False
        assert json.loads(path.read_text(encoding="utf-8")) == {"samples": []}

    def test_offset_times_become_naive_local(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        _write_samples(
            path,
            [
                {"id": "naive", "start": "2024-05-10T08:00:00", "valence": 0.5},
                {"id": "utc", "start": "2024-05-11T08:00:00+00:00", "valence": 0.5},
            ],
        )

        records = asyncio.run(JsonFileMoodSource(path).fetch(WIDE_START, WIDE_END))

        expected = datetime(2024, 5, 11, 8, 0, 0, tzinfo=timezone.utc).astimezone()
        assert [r.external_id for r in records] == ["utc", "naive"]
        assert records[0].start_time == expected.replace(tzinfo=None)
        assert records[0].start_time.tzinfo is None
        assert records[0].end_time.tzinfo is None

    def test_pull_keeps_batch_with_offset_sample(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        _write_samples(
            path,
            [
                {"id": "naive", "start": "2024-05-10T08:00:00"},
                {"id": "utc", "start": "2024-05-11T08:00:00+00:00"},
            ],
        )

        pulled = asyncio.run(
            pull_from_source(JsonFileMoodSource(path), [], start=WIDE_START, end=WIDE_END)
        )

        assert sorted(r.external_ref for r in pulled) == ["naive", "utc"]

    def test_samples_not_a_list_is_unavailable(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        original = {"version": 3, "samples": {"s1": {"start": "2024-05-10T08:00:00"}}}
        path.write_text(json.dumps(original), encoding="utf-8")
        source = JsonFileMoodSource(path)

        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.fetch(WIDE_START, WIDE_END))
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))
        with pytest.raises(ExternalSourceUnavailable):
            asyncio.run(source.delete("s1"))
        assert json.loads(path.read_text(encoding="utf-8")) == original

    def test_writes_keep_other_top_level_keys(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        path.write_text(
            json.dumps({"version": 3, "owner": "watch", "samples": []}), encoding="utf-8"
        )
        source = JsonFileMoodSource(path)

        external_id = asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 3
        assert data["owner"] == "watch"
        assert [s["id"] for s in data["samples"]] == [external_id]

        asyncio.run(source.delete(external_id))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data == {"version": 3, "owner": "watch", "samples": []}

    def test_missing_samples_key_is_empty(self, tmp_path: Path):
        path = tmp_path / "samples.json"
        path.write_text(json.dumps({"version": 3}), encoding="utf-8")
        source = JsonFileMoodSource(path)

        assert asyncio.run(source.fetch(WIDE_START, WIDE_END)) == []
        asyncio.run(source.save(MoodRecord(event_time=T0, mood="开心")))
        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 3
        assert len(data["samples"]) == 1
