"""Rules engine for tutor session quality."""

from .enums import FlagType, RatingTrend, RescheduledBy, Severity
from .thresholds import (
    DEFAULT_RULES_ENGINE_CONFIG,
    DEFAULT_SCORE_TIER_THRESHOLDS,
    RulesEngineConfig,
    ScoreTierThresholds,
    quality_tier,
)
from .models import (
    RatingWindows,
    RuleContext,
    RuleResult,
    Session,
    SessionReference,
    SupportingData,
    TutorStats,
    create_no_trigger_result,
    create_rule_result,
)
from .engine import evaluate_aggregate, evaluate_session, evaluate_sessions, triggered
from .registry import RuleRegistry

__all__ = [
    "DEFAULT_RULES_ENGINE_CONFIG",
    "DEFAULT_SCORE_TIER_THRESHOLDS",
    "FlagType",
    "RatingTrend",
    "RatingWindows",
    "RescheduledBy",
    "RuleContext",
    "RuleRegistry",
    "RuleResult",
    "RulesEngineConfig",
    "ScoreTierThresholds",
    "Session",
    "SessionReference",
    "Severity",
    "SupportingData",
    "TutorStats",
    "create_no_trigger_result",
    "create_rule_result",
    "evaluate_aggregate",
    "evaluate_session",
    "evaluate_sessions",
    "quality_tier",
    "triggered",
]
