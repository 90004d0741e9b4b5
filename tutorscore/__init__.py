"""Tutor Session Quality Scoring Package.

This package scores tutoring-session quality from behavioral signals and
raises coaching flags, including:

- Session-level rules (no-show, lateness, early end, poor first session)
- Aggregate rules over a tutor's time window (reschedule rate, chronic
  lateness, declining ratings)
- Tutor statistics aggregation
- Weighted score calculation with confidence

Usage:
    from tutorscore import Session, process_session, InMemorySessionSource

    source = InMemorySessionSource(sessions)
    outcome = process_session(session, source)

Modules:
    rules: Rule functions, thresholds and the evaluation engine
    scoring: Tutor statistics aggregator and score calculator
    flags: Flag record contract for downstream persistence
    pipeline: Per-session and per-tutor orchestration
    config_loader: YAML/JSON threshold overrides
"""

from .flags import FlagRecord, flags_from_rule_results, rule_result_to_flag, score_snapshot
from .logging_config import configure_logging
from .pipeline import ProcessingOutcome, calculate_tutor_score, process_session
from .repository import InMemorySessionSource, SessionSource
from .rules import (
    DEFAULT_RULES_ENGINE_CONFIG,
    FlagType,
    RuleContext,
    RuleResult,
    RulesEngineConfig,
    Session,
    Severity,
    TutorStats,
)
from .scoring import DEFAULT_SCORE_WEIGHTS, ScoreWeights, TutorScores, calculate_all_scores

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_RULES_ENGINE_CONFIG",
    "DEFAULT_SCORE_WEIGHTS",
    "FlagRecord",
    "FlagType",
    "InMemorySessionSource",
    "ProcessingOutcome",
    "RuleContext",
    "RuleResult",
    "RulesEngineConfig",
    "ScoreWeights",
    "Session",
    "SessionSource",
    "Severity",
    "TutorScores",
    "TutorStats",
    "calculate_all_scores",
    "calculate_tutor_score",
    "configure_logging",
    "flags_from_rule_results",
    "process_session",
    "rule_result_to_flag",
    "score_snapshot",
]
