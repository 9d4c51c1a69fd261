"""
Summary statistics for journal records.

Works on plain lists of MoodRecord so it can be fed from the store, an
import preview, or a test fixture alike.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from mood_journal.models import MoodRecord

logger = logging.getLogger(__name__)


def summarize_records(records: Sequence[MoodRecord]) -> Dict[str, Any]:
    """
    Summarize a set of records.

    Args:
        records: Records to summarize (any order).

    Returns:
        Dictionary with keys: total_records, total_duration_seconds,
        records_with_time_range, linked_records, mood_counts,
        activity_counts, first_event, last_event.
    """
    mood_counts = Counter(record.mood for record in records)
    activity_counts = Counter(record.activity or "" for record in records)
    ranged = [r for r in records if r.start_time is not None and r.end_time is not None]
    event_times = [record.event_time for record in records]

    summary: Dict[str, Any] = {
        "total_records": len(records),
        "total_duration_seconds": sum(r.duration_seconds for r in ranged),
        "records_with_time_range": len(ranged),
        "linked_records": sum(1 for r in records if r.external_ref),
        "mood_counts": dict(mood_counts.most_common()),
        "activity_counts": dict(activity_counts.most_common()),
        "first_event": min(event_times) if event_times else None,
        "last_event": max(event_times) if event_times else None,
    }

    logger.debug(f"Summarized {len(records)} records")
    return summary


def find_unused_tags(
    records: Iterable[MoodRecord],
    mood_tags: Iterable[str],
    activity_tags: Iterable[str],
    default_mood_tags: Iterable[str] = (),
    default_activity_tags: Iterable[str] = (),
) -> Tuple[List[str], List[str]]:
    """
    Find custom tags that no record uses.

    Default tags are never reported, even when unused.

    Args:
        records: All records in the store.
        mood_tags: Every known mood tag (defaults and custom).
        activity_tags: Every known activity tag.
        default_mood_tags: Built-in mood tags to keep.
        default_activity_tags: Built-in activity tags to keep.

    Returns:
        Tuple of (unused mood tags, unused activity tags), in input order.
    """
    records = list(records)
    used_moods = {record.mood for record in records}
    used_activities = {record.activity for record in records if record.activity}
    keep_moods = set(default_mood_tags)
    keep_activities = set(default_activity_tags)

    unused_moods = [t for t in mood_tags if t not in used_moods and t not in keep_moods]
    unused_activities = [
        t for t in activity_tags if t not in used_activities and t not in keep_activities
    ]
    return unused_moods, unused_activities


def get_latest_records(records: Iterable[MoodRecord], limit: int = 10) -> List[Dict[str, Any]]:
    """
    Get the newest records as display dictionaries.

    Returns:
        List of dicts with keys: id, event_time, mood, activity, note,
        start_time, end_time, external_ref. Times are ISO strings or None.
    """
    newest = sorted(records, key=lambda r: r.event_time, reverse=True)[:limit]
    return [record_to_dict(record) for record in newest]


def record_to_dict(record: MoodRecord) -> Dict[str, Any]:
    """JSON-friendly view of a record."""

    def iso(value):
        return value.isoformat(sep=" ") if value is not None else None

    return {
        "id": record.id,
        "event_time": iso(record.event_time),
        "mood": record.mood,
        "activity": record.activity,
        "note": record.note,
        "start_time": iso(record.start_time),
        "end_time": iso(record.end_time),
        "created_at": iso(record.created_at),
        "external_ref": record.external_ref,
    }
