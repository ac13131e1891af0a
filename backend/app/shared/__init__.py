"""
Shared utilities (NOT business logic).

Usage:
    from app.shared import format_time, round_half_up
    from app.shared.formatters import format_seconds_short
"""
from .formatters import (
    format_time,
    format_seconds_short,
    parse_time,
    round_half_up,
)

__all__ = [
    # formatters
    "format_time",
    "format_seconds_short",
    "parse_time",
    "round_half_up",
]
