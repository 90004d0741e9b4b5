"""Severity helpers shared by rules."""
from __future__ import annotations

from .enums import Severity


def determine_severity(
    value: float,
    *,
    critical: float | None = None,
    high: float | None = None,
    medium: float | None = None,
) -> Severity:
    """Map ``value`` to a severity using lower bounds for each level.

    Values below every supplied bound are LOW.
    """
    if critical is not None and value >= critical:
        return Severity.CRITICAL
    if high is not None and value >= high:
        return Severity.HIGH
    if medium is not None and value >= medium:
        return Severity.MEDIUM
    return Severity.LOW


def determine_severity_by_rating(rating: float) -> Severity:
    """Lower ratings are more severe: 1 critical, 2 high, 3 medium."""
    if rating <= 1:
        return Severity.CRITICAL
    if rating <= 2:
        return Severity.HIGH
    if rating <= 3:
        return Severity.MEDIUM
    return Severity.LOW
