"""
Formatting utilities for display.

Used by the histogram engine (bin labels), race stats and the CLI scripts.
"""

import math


def format_time(seconds: float | None) -> str:
    """
    Format elapsed seconds as 'H:MM:SS'.

    Args:
        seconds: Elapsed time in seconds (None = not recorded)

    Returns:
        Formatted string (e.g., '4:52:10'), '' when not recorded
    """
    if seconds is None:
        return ""

    total = int(seconds)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def format_seconds_short(seconds: float) -> str:
    """
    Short label for a histogram bin start.

    3600 → '1:00', 5400 → '1:30', 540 → '9m'
    """
    total = int(seconds)
    hours = total // 3600
    minutes = (total % 3600) // 60
    if hours > 0:
        return f"{hours}:{minutes:02d}"
    return f"{minutes}m"


def parse_time(value: str | None) -> int | None:
    """
    Parse 'H:MM:SS' / 'MM:SS' into seconds.

    Returns None for empty or malformed strings.
    """
    text = (value or "").strip()
    if not text:
        return None
    seconds = 0
    for part in text.split(":"):
        if not part.isdigit():
            return None
        seconds = seconds * 60 + int(part)
    return seconds


def round_half_up(value: float) -> int:
    """Round a non-negative number to the nearest integer, halves away from zero."""
    return int(math.floor(value + 0.5))
