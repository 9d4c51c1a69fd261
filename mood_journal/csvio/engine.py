"""
Import/export orchestration.

Export:
    records → encode_row per record → header + rows (one per line)

Import:
    text → data lines → decode_row → classify against existing records →
    ImportResult(imported, skipped, malformed)

Neither direction touches the store. The caller inserts
ImportResult.imported itself, which keeps the engine safe to call in chunks:
pass the full set of existing records (plus anything accepted from earlier
chunks, if wanted) on every call.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from mood_journal.csvio.codec import decode_row, encode_header, encode_row, iter_data_lines
from mood_journal.csvio.duplicates import DEFAULT_POLICY, DuplicatePolicy, find_duplicate
from mood_journal.models import MoodRecord

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    """Outcome of an import run."""

    imported: List[MoodRecord] = field(default_factory=list)
    skipped: int = 0
    malformed: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the file held nothing importable or duplicate."""
        return not self.imported and self.skipped == 0

    def __str__(self) -> str:
        return (
            f"Import: {len(self.imported)} imported, "
            f"{self.skipped} duplicates skipped, {self.malformed} malformed rows"
        )


def export_all(records: Iterable[MoodRecord]) -> str:
    """
    Serialize records to a complete CSV document.

    Records are written in the order given; the engine does not sort.

    Args:
        records: Records to export.

    Returns:
        Header line followed by one line per record, each newline-terminated.
    """
    lines = [encode_header()]
    lines.extend(encode_row(record) for record in records)
    logger.info(f"Exported {len(lines) - 1} records")
    return "\n".join(lines) + "\n"


def parse_records(text: str) -> Tuple[List[MoodRecord], int]:
    """
    Decode every data line of a CSV document.

    Returns:
        Tuple of (decoded records in file order, number of malformed lines).
    """
    records: List[MoodRecord] = []
    malformed = 0

    for line_number, line in iter_data_lines(text):
        record = decode_row(line)
        if record is None:
            logger.debug(f"Line {line_number}: could not be decoded")
            malformed += 1
            continue
        records.append(record)

    return records, malformed


def import_with_duplicate_check(
    text: str,
    existing_records: Sequence[MoodRecord],
    policy: Optional[DuplicatePolicy] = None,
) -> ImportResult:
    """
    Parse a CSV document and drop rows that duplicate existing records.

    Candidates are classified only against existing_records, never against
    rows accepted earlier in the same file.

    Args:
        text: Full CSV document, header first.
        existing_records: Records already in the store.
        policy: Duplicate tolerances (defaults to DEFAULT_POLICY).

    Returns:
        ImportResult with non-duplicates in file order and the skipped and
        malformed counts.
    """
    policy = policy or DEFAULT_POLICY
    candidates, malformed = parse_records(text)

    result = ImportResult(malformed=malformed)
    for candidate in candidates:
        if find_duplicate(candidate, existing_records, policy) is not None:
            result.skipped += 1
        else:
            result.imported.append(candidate)

    logger.info(str(result))
    return result
