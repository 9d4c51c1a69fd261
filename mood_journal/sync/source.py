"""
External mood source interface and adapters.

An external mood source is anything outside the journal that supplies or
accepts mood samples, typically a platform health-data service. Every
variant is reached through the same three async operations:

    fetch(start, end)   -> List[ExternalMoodRecord]
    save(record)        -> external id of the new sample
    delete(external_id) -> True if a sample was removed

All three may raise ExternalSourceError. The reconciliation layer catches
these; nothing here is expected to be fatal for the caller.

Adapters:
    InMemoryMoodSource  - dict-backed, can be switched "unavailable"
    JsonFileMoodSource  - valence-based samples persisted in a JSON file
"""

import json
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional
import logging

from mood_journal.models import ExternalMoodRecord, MoodRecord
from mood_journal.sync.valence import (
    LABELS_PREFIX,
    REFLECTION_SEPARATOR,
    build_reflection,
    clamp_valence,
    mood_to_valence,
    valence_to_mood,
)

logger = logging.getLogger(__name__)


class ExternalSourceError(Exception):
    """An operation against an external mood source failed."""


class ExternalSourceUnavailable(ExternalSourceError):
    """The source cannot be reached or the app is not authorized to use it."""


def _new_external_id() -> str:
    return str(uuid.uuid4())


class ExternalMoodSource(ABC):
    """Abstract external mood source."""

    name: str = "external"

    @abstractmethod
    async def fetch(self, start: datetime, end: datetime) -> List[ExternalMoodRecord]:
        """Return samples whose start time falls within [start, end], newest first."""

    @abstractmethod
    async def save(self, record: MoodRecord) -> str:
        """Store a local record as a new sample and return its external id."""

    @abstractmethod
    async def delete(self, external_id: str) -> bool:
        """Remove a sample. Returns False if no such sample exists."""


class InMemoryMoodSource(ExternalMoodSource):
    """
    Dict-backed source.

    Setting ``available = False`` makes every operation raise
    ExternalSourceUnavailable, the same way an unauthorized health service
    behaves.
    """

    name = "memory"

    def __init__(self, records: Optional[List[ExternalMoodRecord]] = None):
        self.available = True
        self._records: Dict[str, ExternalMoodRecord] = {
            record.external_id: record for record in records or []
        }

    def _require_available(self) -> None:
        if not self.available:
            raise ExternalSourceUnavailable(f"{self.name} source is not available")

    @property
    def records(self) -> List[ExternalMoodRecord]:
        return list(self._records.values())

    async def fetch(self, start: datetime, end: datetime) -> List[ExternalMoodRecord]:
        self._require_available()
        matching = [r for r in self._records.values() if start <= r.start_time <= end]
        return sorted(matching, key=lambda r: r.start_time, reverse=True)

    async def save(self, record: MoodRecord) -> str:
        self._require_available()
        external_id = _new_external_id()
        self._records[external_id] = ExternalMoodRecord(
            external_id=external_id,
            start_time=record.start_time or record.event_time,
            end_time=record.end_time or record.start_time or record.event_time,
            mood=record.mood,
            note=record.note,
            activity=record.activity,
            valence=mood_to_valence(record.mood),
        )
        return external_id

    async def delete(self, external_id: str) -> bool:
        self._require_available()
        return self._records.pop(external_id, None) is not None


class JsonFileMoodSource(ExternalMoodSource):
    """
    Valence-based samples stored in a JSON file.

    File layout::

        {"samples": [{"id": "...", "start": "2024-01-01T10:00:00",
                      "end": "2024-01-01T10:30:00", "valence": 0.4,
                      "reflection": "walked | 标签: calm", "labels": ["calm"]}]}

    Samples carry a valence, not a label: fetch maps valence → mood, save maps
    mood → valence and folds note and labels into the reflection. A missing
    file is an empty source; unreadable or corrupt files, or a "samples"
    value that is not a list, make the source unavailable. Times with a UTC
    offset are converted to naive local time. Writes keep every other
    top-level key of the file.
    """

    name = "json-file"

    def __init__(self, path: Path, labels: Optional[List[str]] = None):
        self.path = Path(path)
        self.labels = list(labels or [])

    def _read_data(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {"samples": []}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, json.JSONDecodeError) as e:
            raise ExternalSourceUnavailable(f"Cannot read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise ExternalSourceUnavailable(f"Unexpected layout in {self.path}")
        data.setdefault("samples", [])
        if not isinstance(data["samples"], list):
            raise ExternalSourceUnavailable(f"'samples' is not a list in {self.path}")
        return data

    def _read_samples(self) -> List[Dict[str, Any]]:
        return self._read_data()["samples"]

    def _write_samples(self, data: Dict[str, Any], samples: List[Dict[str, Any]]) -> None:
        # Keys other than "samples" are written back unchanged
        payload = json.dumps({**data, "samples": samples}, indent=2, ensure_ascii=False) + "\n"
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(payload, encoding="utf-8")
        except OSError as e:
            raise ExternalSourceUnavailable(f"Cannot write {self.path}: {e}") from e

    @staticmethod
    def _parse_time(value: str) -> datetime:
        parsed = datetime.fromisoformat(value)
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    @staticmethod
    def _note_from_reflection(reflection: str) -> str:
        # Labels are kept separately; drop the label suffix added on save
        parts = reflection.split(REFLECTION_SEPARATOR)
        return REFLECTION_SEPARATOR.join(p for p in parts if not p.startswith(LABELS_PREFIX))

    def _to_external(self, sample: Dict[str, Any]) -> Optional[ExternalMoodRecord]:
        try:
            start_time = self._parse_time(sample["start"])
            end_time = self._parse_time(sample.get("end") or sample["start"])
            valence = clamp_valence(float(sample.get("valence", 0.0)))
            external_id = str(sample["id"])
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed sample in {self.path}: {e}")
            return None

        return ExternalMoodRecord(
            external_id=external_id,
            start_time=start_time,
            end_time=end_time,
            mood=valence_to_mood(valence),
            note=self._note_from_reflection(sample.get("reflection") or ""),
            activity=sample.get("activity"),
            valence=valence,
            labels=list(sample.get("labels") or []),
        )

    async def fetch(self, start: datetime, end: datetime) -> List[ExternalMoodRecord]:
        records = []
        for sample in self._read_samples():
            record = self._to_external(sample)
            if record is not None and start <= record.start_time <= end:
                records.append(record)
        records.sort(key=lambda r: r.start_time, reverse=True)
        return records

    async def save(self, record: MoodRecord) -> str:
        data = self._read_data()
        samples = list(data["samples"])
        external_id = _new_external_id()
        start_time = record.start_time or record.event_time
        end_time = record.end_time or start_time
        samples.append(
            {
                "id": external_id,
                "start": start_time.isoformat(),
                "end": end_time.isoformat(),
                "valence": mood_to_valence(record.mood),
                "reflection": build_reflection(record.note, self.labels),
                "labels": self.labels,
                "activity": record.activity,
            }
        )
        self._write_samples(data, samples)
        logger.debug(f"Saved sample {external_id} to {self.path}")
        return external_id

    async def delete(self, external_id: str) -> bool:
        data = self._read_data()
        samples = data["samples"]
        remaining = [
            s for s in samples if not (isinstance(s, dict) and str(s.get("id")) == external_id)
        ]
        if len(remaining) == len(samples):
            return False
        self._write_samples(data, remaining)
        return True
