"""Threshold configuration for rules and quality tiers."""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from typing import Any


@dataclass(frozen=True)
class RulesEngineConfig:
    """Named thresholds consumed by the rules and the aggregator.

    Instances are immutable; use ``with_overrides`` for per-tenant tuning.
    """

    # Sessions joined this many minutes late (or more) count as late
    lateness_threshold_minutes: int = 5
    # Sessions left this many minutes early (or more) count as ended early
    early_end_threshold_minutes: int = 10
    # First sessions rated at or below this trigger a flag
    poor_first_session_rating_threshold: int = 2
    # Reschedule rate strictly above this triggers a flag
    high_reschedule_rate_threshold: float = 0.15
    # Late rate strictly above this triggers a flag
    chronic_lateness_rate_threshold: float = 0.30
    aggregate_window_days: int = 30
    # Aggregate rules never fire below this many sessions in the window
    min_sessions_for_aggregate_rules: int = 5
    # Declining-rating windows: short < aggregate window < long
    rating_trend_short_window_days: int = 7
    rating_trend_long_window_days: int = 90
    trend_threshold_fraction: float = 0.05

    def with_overrides(self, **overrides: Any) -> RulesEngineConfig:
        return replace(self, **overrides)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


DEFAULT_RULES_ENGINE_CONFIG = RulesEngineConfig()


@dataclass(frozen=True)
class ScoreTierThresholds:
    excellent: float = 85
    good: float = 70
    average: float = 50

    def tier(self, score: float) -> str:
        if score >= self.excellent:
            return "excellent"
        if score >= self.good:
            return "good"
        if score >= self.average:
            return "average"
        return "below_average"


DEFAULT_SCORE_TIER_THRESHOLDS = ScoreTierThresholds()


def quality_tier(score: float, thresholds: ScoreTierThresholds = DEFAULT_SCORE_TIER_THRESHOLDS) -> str:
    """Map an overall score (0-100) to a quality tier label."""
    return thresholds.tier(score)


def clamp(value: float, lower: float, upper: float) -> float:
    if value < lower:
        return lower
    if value > upper:
        return upper
    return value
