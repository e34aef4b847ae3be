"""Time-window sightseeing scheduler."""

from .service import (
    SightseeingScheduler,
    format_clock,
    hour_of,
    parse_clock,
    parse_time_window,
)

__all__ = [
    "SightseeingScheduler",
    "format_clock",
    "hour_of",
    "parse_clock",
    "parse_time_window",
]
