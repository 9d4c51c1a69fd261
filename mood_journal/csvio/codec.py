"""
CSV row codec for mood records.

Converts a MoodRecord to one delimited line and back. Two on-disk formats
are understood when decoding:

    Current (7 fields):
        event_time, mood, activity, note, start_time, end_time, created_at
    Legacy (5 fields, import only):
        event_time, mood, activity, note, created_at
    Range (6 fields, import only):
        start_time, end_time, mood, activity, note, created_at
        event_time is taken from start_time.

Design Decisions:
    1. Plain comma splitting, no quoting. Notes are escaped instead:
       line breaks become a space, commas become ';'. Decoding turns ';'
       back into ','. Semicolons typed by the user therefore come back as
       commas (known, accepted loss).
    2. Mood and activity labels get the same escaping on encode but are not
       reversed on decode; a label cannot be allowed to shift the columns.
    3. Timestamps use a fixed, locale-independent format with seconds
       precision: %Y-%m-%d %H:%M:%S.
    4. The format is picked by field count: >= 7 is current, 5-6 is legacy,
       anything shorter is rejected. Extra trailing fields are ignored.
       A 6-field row whose second field is a timestamp is the range format
       written by older exports, which lead with the start and end times.
"""

import re
from datetime import datetime
from typing import Iterator, Optional, Tuple
import logging

from mood_journal.models import MoodRecord

logger = logging.getLogger(__name__)

FIELD_DELIMITER = ","
DELIMITER_SUBSTITUTE = ";"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

HEADER_FIELDS = ("记录时间", "心情", "活动", "笔记", "开始时间", "结束时间", "创建时间")

CURRENT_FIELD_COUNT = 7
RANGE_FIELD_COUNT = 6
LEGACY_FIELD_COUNT = 5

# Everything str.splitlines() treats as a line boundary
_LINE_BREAK_PATTERN = re.compile(r"\r\n|[\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029]")


def format_timestamp(value: Optional[datetime]) -> str:
    """Format a datetime for CSV output; None becomes an empty field."""
    if value is None:
        return ""
    return value.strftime(TIMESTAMP_FORMAT)


def parse_timestamp(value: str) -> Optional[datetime]:
    """
    Parse a CSV timestamp field.

    Returns:
        The parsed datetime, or None if the field is empty or not in
        TIMESTAMP_FORMAT.
    """
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return None


def escape_note(note: str) -> str:
    """Make a note safe for a single CSV field."""
    return _LINE_BREAK_PATTERN.sub(" ", note).replace(FIELD_DELIMITER, DELIMITER_SUBSTITUTE)


def unescape_note(field: str) -> str:
    """Reverse the delimiter substitution applied by escape_note."""
    return field.replace(DELIMITER_SUBSTITUTE, FIELD_DELIMITER)


def _escape_label(label: Optional[str]) -> str:
    if not label:
        return ""
    return escape_note(label)


def encode_header() -> str:
    """Header row matching the field order of encode_row."""
    return FIELD_DELIMITER.join(HEADER_FIELDS)


def encode_row(record: MoodRecord) -> str:
    """
    Serialize one record to a CSV line (without the trailing newline).

    Args:
        record: Record to encode.

    Returns:
        Delimited line in the current 7-field format.
    """
    fields = [
        format_timestamp(record.event_time),
        _escape_label(record.mood),
        _escape_label(record.activity),
        escape_note(record.note or ""),
        format_timestamp(record.start_time),
        format_timestamp(record.end_time),
        format_timestamp(record.created_at),
    ]
    return FIELD_DELIMITER.join(fields)


def decode_row(line: str) -> Optional[MoodRecord]:
    """
    Parse one CSV line into a new MoodRecord.

    The decoded record gets a fresh id; created_at is taken from the row so
    the original provenance survives a re-import.

    Args:
        line: A single data line (not the header).

    Returns:
        The decoded record, or None if the line is blank, has fewer than
        5 fields, or its event time / creation time cannot be parsed. For
        range-format rows the event time is the start time.
    """
    stripped = line.strip()
    if not stripped:
        return None

    fields = stripped.split(FIELD_DELIMITER)

    if len(fields) >= CURRENT_FIELD_COUNT:
        event_raw, mood, activity, note, start_raw, end_raw, created_raw = fields[
            :CURRENT_FIELD_COUNT
        ]
    elif len(fields) == RANGE_FIELD_COUNT and parse_timestamp(fields[1]) is not None:
        start_raw, end_raw, mood, activity, note, created_raw = fields
        event_raw = start_raw
    elif len(fields) >= LEGACY_FIELD_COUNT:
        event_raw, mood, activity, note, created_raw = fields[:LEGACY_FIELD_COUNT]
        start_raw = end_raw = ""
    else:
        logger.debug(f"Rejected row with {len(fields)} fields: {stripped[:60]!r}")
        return None

    event_time = parse_timestamp(event_raw)
    created_at = parse_timestamp(created_raw)
    if event_time is None or created_at is None:
        logger.debug(f"Rejected row with unparseable timestamps: {stripped[:60]!r}")
        return None

    return MoodRecord(
        event_time=event_time,
        mood=mood,
        activity=activity or None,
        note=unescape_note(note),
        start_time=parse_timestamp(start_raw),
        end_time=parse_timestamp(end_raw),
        created_at=created_at,
    )


def iter_data_lines(text: str) -> Iterator[Tuple[int, str]]:
    """
    Yield (line_number, line) for every data line of a CSV document.

    Line 0 is always treated as the header and skipped, as are blank lines.
    Line numbers are zero-based positions in the original text.
    """
    for line_number, line in enumerate(text.splitlines()):
        if line_number == 0:
            continue
        if not line.strip():
            continue
        yield line_number, line
