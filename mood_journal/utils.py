"""
Utility functions and classes for mood-journal.
"""


class Colors:
    """ANSI color codes for terminal output."""

    HEADER = "\033[95m"
    OKBLUE = "\033[94m"
    OKCYAN = "\033[96m"
    OKGREEN = "\033[92m"
    WARNING = "\033[93m"
    FAIL = "\033[91m"
    ENDC = "\033[0m"
    BOLD = "\033[1m"


def format_duration(seconds: float) -> str:
    """
    Format a duration as hours and minutes.

    Args:
        seconds: Duration in seconds. Negative values count as zero.

    Returns:
        "Xh Ym", or "Ym" under an hour.

    Examples:
        >>> format_duration(3900)
        '1h 5m'
        >>> format_duration(59)
        '0m'
    """
    total = max(0, int(seconds))
    hours, remainder = divmod(total, 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def format_record_count(count: int) -> str:
    """
    Format a record count with appropriate units.

    Returns:
        Formatted string (e.g., "999" or "1.2K").
    """
    if count < 1000:
        return str(count)
    elif count < 1_000_000:
        return f"{count / 1000:.1f}K"
    else:
        return f"{count / 1_000_000:.1f}M"
