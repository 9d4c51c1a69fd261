"""
Reconciliation between the local journal and an external mood source.

Pull (external → local):
    fetch samples → reconcile_incoming → new local records for the caller
    to insert. A sample is skipped when any local record is anchored
    (event time or start time) strictly within window_seconds of the
    sample's start time, or is already linked to it.

Push (local → external):
    save each unlinked record, count successes and failures per item, and
    report the new record → external id links for the caller to persist.

Design Decisions:
    1. The pull match is a single-field time window with no mood/activity/
       note comparison. It guards against importing the *same* external
       event twice, not against semantically similar user entries (that is
       the duplicate classifier's job).
    2. Sync is best-effort. Source failures are logged and turned into
       empty results or failure counts; nothing is raised to the caller and
       nothing already done is rolled back.
    3. Nothing here writes to the store except delete_with_external, which
       exists to pair the local delete with the external one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from mood_journal.models import ExternalMoodRecord, MoodRecord, now_local
from mood_journal.sync.source import ExternalMoodSource, ExternalSourceError

logger = logging.getLogger(__name__)

DEFAULT_ACTIVITY_PLACEHOLDER = "synced"
DEFAULT_WINDOW_SECONDS = 60.0
DEFAULT_LOOKBACK_DAYS = 30


@dataclass
class SyncResult:
    """Per-item outcome of pushing records to an external source."""

    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    linked: Dict[str, str] = field(default_factory=dict)

    def __str__(self) -> str:
        return (
            f"Sync: {self.succeeded} succeeded, {self.failed} failed, "
            f"{self.skipped} already linked"
        )


def _matches_local(
    external: ExternalMoodRecord,
    local_records: Iterable[MoodRecord],
    window_seconds: float,
) -> bool:
    for local in local_records:
        if local.external_ref and local.external_ref == external.external_id:
            return True
        for anchor in local.anchor_times:
            if abs((anchor - external.start_time).total_seconds()) < window_seconds:
                return True
    return False


def _to_local(external: ExternalMoodRecord, activity_placeholder: str) -> MoodRecord:
    return MoodRecord(
        event_time=external.start_time,
        mood=external.mood,
        activity=external.activity or activity_placeholder,
        note=external.note,
        start_time=external.start_time,
        end_time=external.end_time,
        external_ref=external.external_id,
    )


def reconcile_incoming(
    external_records: Iterable[ExternalMoodRecord],
    local_records: Sequence[MoodRecord],
    activity_placeholder: str = DEFAULT_ACTIVITY_PLACEHOLDER,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
) -> List[MoodRecord]:
    """
    Work out which external records need a new local record.

    Args:
        external_records: Samples fetched from the external source.
        local_records: Everything currently in the local store.
        activity_placeholder: Activity for samples that carry none.
        window_seconds: Match window around the sample's start time.

    Returns:
        New local records (linked via external_ref) to insert, in the order
        the external records were given.
    """
    to_insert: List[MoodRecord] = []
    seen_ids = set()

    for external in external_records:
        if external.external_id in seen_ids:
            continue
        seen_ids.add(external.external_id)

        if _matches_local(external, local_records, window_seconds):
            logger.debug(f"Skipping {external.external_id}: already present locally")
            continue

        to_insert.append(_to_local(external, activity_placeholder))

    logger.info(f"Reconciliation produced {len(to_insert)} new records")
    return to_insert


async def pull_from_source(
    source: ExternalMoodSource,
    local_records: Sequence[MoodRecord],
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    activity_placeholder: str = DEFAULT_ACTIVITY_PLACEHOLDER,
    window_seconds: float = DEFAULT_WINDOW_SECONDS,
    lookback_days: int = DEFAULT_LOOKBACK_DAYS,
) -> List[MoodRecord]:
    """
    Fetch from an external source and reconcile against the local records.

    Defaults to the last lookback_days days. Never raises: an unavailable
    source yields an empty list.
    """
    end = end or now_local()
    start = start or end - timedelta(days=lookback_days)

    try:
        external_records = await source.fetch(start, end)
    except ExternalSourceError as e:
        logger.warning(f"Pull from {source.name} skipped: {e}")
        return []
    except Exception as e:
        logger.error(f"Pull from {source.name} failed: {e}")
        return []

    logger.info(f"Fetched {len(external_records)} records from {source.name}")
    return reconcile_incoming(
        external_records,
        local_records,
        activity_placeholder=activity_placeholder,
        window_seconds=window_seconds,
    )


async def push_to_source(
    source: ExternalMoodSource,
    records: Iterable[MoodRecord],
) -> SyncResult:
    """
    Save local records to an external source, one at a time.

    Records that already carry an external_ref are skipped. A failed save
    does not stop the batch and earlier saves are kept.

    Returns:
        SyncResult with counts and the record id → external id links.
    """
    result = SyncResult()

    for record in records:
        if record.external_ref:
            result.skipped += 1
            continue
        try:
            external_id = await source.save(record)
        except ExternalSourceError as e:
            logger.warning(f"Could not save record {record.id} to {source.name}: {e}")
            result.failed += 1
            continue
        except Exception as e:
            logger.error(f"Unexpected error saving record {record.id}: {e}")
            result.failed += 1
            continue

        result.succeeded += 1
        result.linked[record.id] = external_id

    logger.info(str(result))
    return result


async def delete_with_external(
    store,
    record: MoodRecord,
    source: Optional[ExternalMoodSource] = None,
) -> bool:
    """
    Delete a record locally and, best-effort, its linked external sample.

    Args:
        store: Local record store (anything with delete(record_id)).
        record: Record to delete.
        source: External source holding the linked sample, if any.

    Returns:
        True if the external sample was deleted too, False otherwise. The
        local delete happens regardless.
    """
    store.delete(record.id)

    if not record.external_ref or source is None:
        return False

    try:
        deleted = await source.delete(record.external_ref)
    except ExternalSourceError as e:
        logger.warning(f"Linked sample {record.external_ref} not deleted: {e}")
        return False
    except Exception as e:
        logger.error(f"Unexpected error deleting sample {record.external_ref}: {e}")
        return False

    if not deleted:
        logger.info(f"Linked sample {record.external_ref} was already gone")
    return deleted
