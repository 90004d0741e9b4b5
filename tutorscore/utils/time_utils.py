"""Time utilities for lateness, early-end and window calculations.

All helpers take ``datetime`` values. Minute differences are rounded to the
nearest whole minute.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone


def _minutes_between(earlier: datetime, later: datetime) -> int:
    """Whole minutes from ``earlier`` to ``later`` (negative if reversed).

    Half minutes round up, so 4m30s is 5 and -2m30s is -2.
    """
    return math.floor((later - earlier).total_seconds() / 60 + 0.5)


def lateness_minutes(scheduled_start: datetime, actual_join: datetime | None) -> int | None:
    """Calculate lateness in minutes.

    Args:
        scheduled_start: When the session was scheduled to start
        actual_join: When the tutor actually joined (None for a no-show)

    Returns:
        Minutes late, negative for an early arrival, or None for a no-show.
    """
    if actual_join is None:
        return None
    return _minutes_between(scheduled_start, actual_join)


def early_end_minutes(scheduled_end: datetime, actual_leave: datetime | None) -> int | None:
    """Minutes the tutor left before the scheduled end.

    Returns 0 when the tutor stayed until (or past) the scheduled end, and
    None when there is no leave time.
    """
    if actual_leave is None:
        return None
    return max(0, _minutes_between(actual_leave, scheduled_end))


def ended_early(
    scheduled_end: datetime,
    actual_leave: datetime | None,
    threshold_minutes: int = 10,
) -> bool:
    """Check if a session ended at least ``threshold_minutes`` early.

    Leaving after the scheduled end never counts as early.
    """
    if actual_leave is None:
        return False
    return _minutes_between(actual_leave, scheduled_end) >= threshold_minutes


def is_no_show(join_time: datetime | None) -> bool:
    return join_time is None


def is_late(
    scheduled_start: datetime,
    actual_join: datetime | None,
    threshold_minutes: int = 5,
) -> bool:
    """Check if the join happened ``threshold_minutes`` or more after start."""
    minutes = lateness_minutes(scheduled_start, actual_join)
    return minutes is not None and minutes >= threshold_minutes


def session_duration_minutes(start: datetime | None, end: datetime | None) -> int | None:
    if start is None or end is None:
        return None
    return _minutes_between(start, end)


def time_window(days: int, window_end: datetime | None = None) -> tuple[datetime, datetime]:
    """Return ``(window_start, window_end)`` covering the last ``days`` days.

    ``window_end`` defaults to the current UTC time.
    """
    end = window_end or datetime.now(timezone.utc)
    return end - timedelta(days=days), end
