"""
CSV import/export for mood-journal.

Layers, leaf to root:
    similarity  - Levenshtein distance and normalized similarity
    codec       - one record ⇄ one CSV line (current and legacy formats)
    duplicates  - tiered duplicate classification
    engine      - whole-document export and duplicate-checked import
"""

from mood_journal.csvio.similarity import edit_distance, similarity
from mood_journal.csvio.codec import (
    HEADER_FIELDS,
    TIMESTAMP_FORMAT,
    decode_row,
    encode_header,
    encode_row,
)
from mood_journal.csvio.duplicates import (
    DEFAULT_POLICY,
    DuplicatePolicy,
    find_duplicate,
    is_duplicate,
)
from mood_journal.csvio.engine import ImportResult, export_all, import_with_duplicate_check

__all__ = [
    # Similarity
    "edit_distance",
    "similarity",
    # Codec
    "HEADER_FIELDS",
    "TIMESTAMP_FORMAT",
    "decode_row",
    "encode_header",
    "encode_row",
    # Duplicates
    "DEFAULT_POLICY",
    "DuplicatePolicy",
    "find_duplicate",
    "is_duplicate",
    # Engine
    "ImportResult",
    "export_all",
    "import_with_duplicate_check",
]
