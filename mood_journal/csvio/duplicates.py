"""
Duplicate classification for imported records.

A candidate record is compared against existing records with a cascade of
matching tiers, evaluated top to bottom, first match wins.

Matching Tiers:
    1. Exact tier: event times within exact_time_tolerance_seconds (1s),
       identical mood and activity, identical trimmed notes.
    2. Loose tier (disabled by default): event times within
       loose_time_tolerance_seconds (300s), identical mood and activity, and
       notes that are either both empty or similar above
       similarity_threshold (0.8).

Tolerances live in DuplicatePolicy rather than in the code: the right
window is a product decision that has changed between app versions.
"""

from dataclasses import dataclass
from typing import Iterable, Optional
import logging

from mood_journal.csvio.similarity import similarity
from mood_journal.models import MoodRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicatePolicy:
    """Tolerances for duplicate detection."""

    exact_time_tolerance_seconds: float = 1.0
    loose_tier_enabled: bool = False
    loose_time_tolerance_seconds: float = 300.0
    similarity_threshold: float = 0.8


DEFAULT_POLICY = DuplicatePolicy()


def _time_difference(existing: MoodRecord, candidate: MoodRecord) -> float:
    return abs((existing.event_time - candidate.event_time).total_seconds())


def _same_labels(existing: MoodRecord, candidate: MoodRecord) -> bool:
    # An absent activity and an empty one are the same thing on disk
    return existing.mood == candidate.mood and (existing.activity or "") == (
        candidate.activity or ""
    )


def _notes_similar(existing_note: str, candidate_note: str, threshold: float) -> bool:
    if not existing_note and not candidate_note:
        return True
    if not existing_note or not candidate_note:
        return False
    return similarity(existing_note, candidate_note) > threshold


def is_duplicate(
    existing: MoodRecord,
    candidate: MoodRecord,
    policy: DuplicatePolicy = DEFAULT_POLICY,
) -> bool:
    """
    Decide whether candidate duplicates a single existing record.

    Args:
        existing: A record already in the store.
        candidate: The record being imported.
        policy: Tolerances to apply.

    Returns:
        True if either enabled tier matches.
    """
    if not _same_labels(existing, candidate):
        return False

    delta = _time_difference(existing, candidate)
    existing_note = (existing.note or "").strip()
    candidate_note = (candidate.note or "").strip()

    # Tier 1: exact
    if delta <= policy.exact_time_tolerance_seconds and existing_note == candidate_note:
        return True

    # Tier 2: loose
    if policy.loose_tier_enabled and delta <= policy.loose_time_tolerance_seconds:
        return _notes_similar(existing_note, candidate_note, policy.similarity_threshold)

    return False


def find_duplicate(
    candidate: MoodRecord,
    existing_records: Iterable[MoodRecord],
    policy: DuplicatePolicy = DEFAULT_POLICY,
) -> Optional[MoodRecord]:
    """
    Return the first existing record that candidate duplicates, if any.
    """
    for existing in existing_records:
        if is_duplicate(existing, candidate, policy):
            logger.debug(f"Duplicate of {existing.id} at {candidate.event_time}")
            return existing
    return None
