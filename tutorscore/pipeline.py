"""Session and tutor processing.

Runs one evaluation cycle for a completed session: window statistics,
session rules, aggregate rules and flag records. Fetching the session and
storing the flags stay with the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from .exceptions import SessionContractError
from .flags import FlagRecord, flags_from_rule_results
from .repository import SessionSource
from .rules.engine import RuleOverrides, evaluate_aggregate, evaluate_session
from .rules.enums import FlagType
from .rules.models import RuleResult, Session, TutorStats
from .rules.thresholds import DEFAULT_RULES_ENGINE_CONFIG, RulesEngineConfig
from .scoring.aggregator import get_rating_windows, get_tutor_stats
from .scoring.calculator import DEFAULT_SCORE_WEIGHTS, ScoreWeights, TutorScores, calculate_all_scores

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProcessingOutcome:
    """Everything one evaluation cycle produced for a session."""

    session_id: str
    tutor_id: str
    tutor_stats: TutorStats
    session_results: list[RuleResult] = field(default_factory=list)
    aggregate_results: list[RuleResult] = field(default_factory=list)
    flags: list[FlagRecord] = field(default_factory=list)

    @property
    def triggered_results(self) -> list[RuleResult]:
        return [r for r in (*self.session_results, *self.aggregate_results) if r.triggered]


def process_session(
    session: Session,
    source: SessionSource,
    config: RulesEngineConfig | None = None,
    as_of: datetime | None = None,
    open_flag_types: Iterable[FlagType | str] = (),
    rule_overrides: RuleOverrides | None = None,
) -> ProcessingOutcome:
    """Evaluate a completed session and build the flags it warrants.

    Args:
        session: The completed session
        source: Read-only access to the tutor's sessions
        config: Thresholds (defaults to DEFAULT_RULES_ENGINE_CONFIG)
        as_of: End of the aggregate window (defaults to now, UTC)
        open_flag_types: Flag types already open for the tutor
        rule_overrides: Per-rule enable/severity overrides

    Returns:
        ProcessingOutcome with every rule result and the flag records

    Raises:
        SessionContractError: If the session breaks an ingestion invariant
    """
    try:
        session.check_contract()
    except SessionContractError as e:
        logger.warning("Rejected session %s: %s", session.session_id, "; ".join(e.problems))
        raise
    config = config or DEFAULT_RULES_ENGINE_CONFIG
    window_end = as_of or datetime.now(timezone.utc)
    window_start = window_end - timedelta(days=config.aggregate_window_days)

    tutor_stats = get_tutor_stats(
        source,
        session.tutor_id,
        window_start,
        window_end,
        config.lateness_threshold_minutes,
        config.early_end_threshold_minutes,
    )
    rating_windows = get_rating_windows(source, session.tutor_id, window_end, config)

    session_results = evaluate_session(session, config, rule_overrides)
    aggregate_results = evaluate_aggregate(tutor_stats, config, rating_windows, rule_overrides)

    flags = flags_from_rule_results(
        [*session_results, *aggregate_results],
        session.tutor_id,
        session.session_id,
        open_flag_types,
    )

    logger.info(
        "Processed session %s for tutor %s: %d rules triggered, %d flags",
        session.session_id,
        session.tutor_id,
        sum(r.triggered for r in (*session_results, *aggregate_results)),
        len(flags),
    )

    return ProcessingOutcome(
        session_id=session.session_id,
        tutor_id=session.tutor_id,
        tutor_stats=tutor_stats,
        session_results=session_results,
        aggregate_results=aggregate_results,
        flags=flags,
    )


def calculate_tutor_score(
    source: SessionSource,
    tutor_id: str,
    as_of: datetime | None = None,
    config: RulesEngineConfig | None = None,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> tuple[TutorStats, TutorScores]:
    """Score a tutor over the aggregate window ending at ``as_of``."""
    config = config or DEFAULT_RULES_ENGINE_CONFIG
    window_end = as_of or datetime.now(timezone.utc)
    window_start = window_end - timedelta(days=config.aggregate_window_days)

    stats = get_tutor_stats(
        source,
        tutor_id,
        window_start,
        window_end,
        config.lateness_threshold_minutes,
        config.early_end_threshold_minutes,
    )
    scores = calculate_all_scores(stats, weights)
    logger.info(
        "Tutor %s scored %d (confidence %.2f) over %d sessions",
        tutor_id,
        scores.overall_score,
        scores.confidence_score,
        stats.total_sessions,
    )
    return stats, scores
