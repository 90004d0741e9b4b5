"""Enumerations shared by rules, statistics and flag records."""
from __future__ import annotations

from enum import Enum, IntEnum


class Severity(IntEnum):
    """Flag severity. Ordering is numeric: LOW < MEDIUM < HIGH < CRITICAL."""

    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        return self.name.lower()

    @classmethod
    def from_label(cls, label: str) -> Severity:
        try:
            return cls[label.upper()]
        except KeyError:
            raise ValueError(f"Unknown severity: {label!r}") from None


class FlagType(str, Enum):
    """Coaching flag categories."""

    NO_SHOW = "no_show"
    CHRONIC_LATENESS = "chronic_lateness"
    POOR_FIRST_SESSION = "poor_first_session"
    HIGH_RESCHEDULE_RATE = "high_reschedule_rate"
    EARLY_END = "early_end"
    LOW_RATINGS = "low_ratings"
    OTHER = "other"


class RatingTrend(str, Enum):
    """Direction of a metric between two periods."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


class RescheduledBy(str, Enum):
    """Party that asked for a reschedule."""

    TUTOR = "tutor"
    STUDENT = "student"
    SYSTEM = "system"
