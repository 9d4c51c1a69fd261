"""
Synchronization with external mood sources.

    valence    - mood label ⇄ valence mapping for valence-based services
    source     - ExternalMoodSource interface and adapters
    reconcile  - pull (reconcile_incoming), push and delete propagation
"""

from mood_journal.sync.source import (
    ExternalMoodSource,
    ExternalSourceError,
    ExternalSourceUnavailable,
    InMemoryMoodSource,
    JsonFileMoodSource,
)
from mood_journal.sync.reconcile import (
    SyncResult,
    delete_with_external,
    pull_from_source,
    push_to_source,
    reconcile_incoming,
)
from mood_journal.sync.valence import build_reflection, mood_to_valence, valence_to_mood

__all__ = [
    # Sources
    "ExternalMoodSource",
    "ExternalSourceError",
    "ExternalSourceUnavailable",
    "InMemoryMoodSource",
    "JsonFileMoodSource",
    # Reconciliation
    "SyncResult",
    "delete_with_external",
    "pull_from_source",
    "push_to_source",
    "reconcile_incoming",
    # Valence
    "build_reflection",
    "mood_to_valence",
    "valence_to_mood",
]
