"""Tutor quality rules organized by category."""

from __future__ import annotations

from .aggregate_rules import (
    detect_chronic_lateness,
    detect_declining_rating_trend,
    detect_high_reschedule_rate,
)
from .session_rules import (
    detect_early_end,
    detect_lateness,
    detect_no_show,
    detect_poor_first_session,
)

__all__ = [
    # Session rules
    "detect_no_show",
    "detect_lateness",
    "detect_early_end",
    "detect_poor_first_session",
    # Aggregate rules
    "detect_high_reschedule_rate",
    "detect_chronic_lateness",
    "detect_declining_rating_trend",
]
