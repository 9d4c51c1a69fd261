"""
Text similarity utilities.

Levenshtein edit distance and a normalized similarity score, used by the
duplicate classifier to compare notes.
"""


def edit_distance(a: str, b: str) -> int:
    """
    Compute the Levenshtein distance between two strings.

    Insertions, deletions and substitutions each cost 1. Works over code
    points, so non-ASCII text (e.g. Chinese notes) is compared per character.

    Args:
        a: First string.
        b: Second string.

    Returns:
        Minimum number of single-character edits turning a into b.

    Examples:
        >>> edit_distance("kitten", "sitting")
        3
        >>> edit_distance("", "abc")
        3
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    # Keep the shorter string in the inner loop
    if len(a) < len(b):
        a, b = b, a

    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current.append(
                min(
                    previous[j] + 1,  # deletion
                    current[j - 1] + 1,  # insertion
                    previous[j - 1] + cost,  # substitution
                )
            )
        previous = current

    return previous[-1]


def similarity(a: str, b: str) -> float:
    """
    Normalized similarity in [0, 1].

    Defined as ``1 - edit_distance(a, b) / max(len(a), len(b))``; two empty
    strings are identical (1.0).

    Examples:
        >>> similarity("abc", "abc")
        1.0
        >>> similarity("", "")
        1.0
    """
    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0

    score = 1.0 - edit_distance(a, b) / longest
    return max(0.0, min(1.0, score))
