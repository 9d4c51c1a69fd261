"""
Data model for mood-journal records.

Two record shapes flow through the package:
    - MoodRecord: a journal entry owned by the local store
    - ExternalMoodRecord: a sample owned by an external mood source
      (e.g. a platform health-data service)

Datetimes are naive and interpreted as local wall-clock time.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional


def new_record_id() -> str:
    """Generate a new UUID for a record."""
    return str(uuid.uuid4())


def now_local() -> datetime:
    """Current local time, truncated to whole seconds."""
    return datetime.now().replace(microsecond=0)


@dataclass
class MoodRecord:
    """A single journal entry."""

    event_time: datetime
    mood: str
    note: str = ""
    activity: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    external_ref: Optional[str] = None
    id: str = field(default_factory=new_record_id)
    created_at: datetime = field(default_factory=now_local)

    @property
    def anchor_times(self) -> List[datetime]:
        """Timestamps this record can be matched on (event time, then start time)."""
        times = [self.event_time]
        if self.start_time is not None:
            times.append(self.start_time)
        return times

    @property
    def duration_seconds(self) -> float:
        """Length of the explicit time range, or 0.0 if the range is incomplete."""
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()


@dataclass
class ExternalMoodRecord:
    """A mood sample as supplied by an external mood source."""

    external_id: str
    start_time: datetime
    end_time: datetime
    mood: str
    note: str = ""
    activity: Optional[str] = None
    valence: Optional[float] = None
    labels: List[str] = field(default_factory=list)
