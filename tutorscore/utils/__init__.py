"""Shared utility functions for the tutor scoring core."""

from .stats import average, median, percentile, percentile_rank, rate, round_to, standard_deviation, trend
from .time_utils import (
    early_end_minutes,
    ended_early,
    is_late,
    is_no_show,
    lateness_minutes,
    session_duration_minutes,
    time_window,
)
from .timestamps import as_utc, parse_timestamp

__all__ = [
    "as_utc",
    "average",
    "early_end_minutes",
    "ended_early",
    "is_late",
    "is_no_show",
    "lateness_minutes",
    "median",
    "parse_timestamp",
    "percentile",
    "percentile_rank",
    "rate",
    "round_to",
    "session_duration_minutes",
    "standard_deviation",
    "time_window",
    "trend",
]
