"""Default tutor quality rule sets.

Session rules and aggregate rules are independent passes, so they live in
separate registries.
"""

from __future__ import annotations

from .categories import (
    detect_chronic_lateness,
    detect_declining_rating_trend,
    detect_early_end,
    detect_high_reschedule_rate,
    detect_lateness,
    detect_no_show,
    detect_poor_first_session,
)
from .registry import RuleCallable, RuleRegistry

SESSION_RULES: tuple[RuleCallable, ...] = (
    detect_no_show,
    detect_lateness,
    detect_early_end,
    detect_poor_first_session,
)

AGGREGATE_RULES: tuple[RuleCallable, ...] = (
    detect_high_reschedule_rate,
    detect_chronic_lateness,
    detect_declining_rating_trend,
)


def session_registry() -> RuleRegistry:
    """Fresh registry holding the default session-level rules."""
    return RuleRegistry(SESSION_RULES)


def aggregate_registry() -> RuleRegistry:
    """Fresh registry holding the default aggregate rules."""
    return RuleRegistry(AGGREGATE_RULES)


__all__ = [
    "AGGREGATE_RULES",
    "SESSION_RULES",
    "aggregate_registry",
    "session_registry",
]
