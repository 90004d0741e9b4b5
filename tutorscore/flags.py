"""Flag emission contract.

Converts triggered ``RuleResult`` values into flag records and scores into
tutor-score snapshots, shaped for an external storage layer. Nothing here
writes to storage.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from .rules.enums import FlagType, Severity
from .rules.models import RuleResult, TutorStats
from .rules.thresholds import DEFAULT_SCORE_TIER_THRESHOLDS, ScoreTierThresholds
from .scoring.calculator import TutorScores

logger = logging.getLogger(__name__)

OPEN_STATUS = "open"


@dataclass(frozen=True)
class FlagRecord:
    """One triggered rule result, ready to persist as a coaching flag."""

    tutor_id: str
    session_id: str | None
    flag_type: FlagType
    severity: Severity
    title: str
    description: str
    recommended_action: str | None
    supporting_data: dict[str, Any] | None
    confidence: float
    status: str = OPEN_STATUS

    def to_dict(self) -> dict[str, Any]:
        return {
            "tutorId": self.tutor_id,
            "sessionId": self.session_id,
            "flagType": self.flag_type.value,
            "severity": self.severity.label,
            "title": self.title,
            "description": self.description,
            "recommendedAction": self.recommended_action,
            "supportingData": self.supporting_data,
            "confidence": self.confidence,
            "status": self.status,
        }


def rule_result_to_flag(
    result: RuleResult,
    tutor_id: str,
    session_id: str | None = None,
) -> FlagRecord:
    """Convert a triggered result into a flag record.

    Raises:
        ValueError: If the result did not trigger
    """
    if not result.triggered:
        raise ValueError(f"Cannot create a flag from a non-triggered {result.flag_type.value} result")

    return FlagRecord(
        tutor_id=tutor_id,
        session_id=session_id,
        flag_type=result.flag_type,
        severity=result.severity,
        title=result.title,
        description=result.description,
        recommended_action=result.recommended_action,
        supporting_data=result.supporting_data.to_dict() if result.supporting_data else None,
        confidence=result.confidence,
    )


def flags_from_rule_results(
    results: Iterable[RuleResult],
    tutor_id: str,
    session_id: str | None = None,
    open_flag_types: Iterable[FlagType | str] = (),
) -> list[FlagRecord]:
    """Build flag records for triggered results, skipping duplicates.

    A flag type already open for the tutor (``open_flag_types``, supplied by
    the caller from storage) or already emitted earlier in this batch is
    skipped. When two results of the same type trigger together, the more
    severe one wins.

    Args:
        results: Rule results from one evaluation cycle
        tutor_id: Tutor the results belong to
        session_id: Session that prompted the evaluation, if any
        open_flag_types: Flag types with an open flag for this tutor

    Returns:
        Flag records in rule order
    """
    already_open = {FlagType(t) for t in open_flag_types}
    best: dict[FlagType, RuleResult] = {}

    for result in results:
        if not result.triggered:
            continue
        if result.flag_type in already_open:
            logger.info(
                "Flag already open for tutor %s, type %s; skipping",
                tutor_id,
                result.flag_type.value,
            )
            continue
        current = best.get(result.flag_type)
        if current is None or result.severity > current.severity:
            best[result.flag_type] = result

    flags = [rule_result_to_flag(r, tutor_id, session_id) for r in best.values()]
    logger.info("Created %d flag record(s) for tutor %s", len(flags), tutor_id)
    return flags


def score_snapshot(
    tutor_stats: TutorStats,
    scores: TutorScores,
    tiers: ScoreTierThresholds = DEFAULT_SCORE_TIER_THRESHOLDS,
) -> dict[str, Any]:
    """Tutor-score row for the window covered by ``tutor_stats``."""
    return {
        "tutorId": tutor_stats.tutor_id,
        "windowStart": tutor_stats.window_start.isoformat(),
        "windowEnd": tutor_stats.window_end.isoformat(),
        "totalSessions": tutor_stats.total_sessions,
        "firstSessions": tutor_stats.first_sessions,
        "noShowCount": tutor_stats.no_show_count,
        "noShowRate": tutor_stats.no_show_rate,
        "lateCount": tutor_stats.late_count,
        "lateRate": tutor_stats.late_rate,
        "avgLatenessMinutes": tutor_stats.avg_lateness_minutes,
        "earlyEndCount": tutor_stats.early_end_count,
        "earlyEndRate": tutor_stats.early_end_rate,
        "rescheduleCount": tutor_stats.reschedule_count,
        "rescheduleRate": tutor_stats.reschedule_rate,
        "tutorInitiatedReschedules": tutor_stats.tutor_initiated_reschedules,
        "avgStudentRating": tutor_stats.avg_student_rating,
        "avgFirstSessionRating": tutor_stats.avg_first_session_rating,
        "ratingTrend": tutor_stats.rating_trend.value if tutor_stats.rating_trend else None,
        "breakdown": scores.breakdown.to_dict(),
        "overallScore": scores.overall_score,
        "confidenceScore": scores.confidence_score,
        "qualityTier": tiers.tier(scores.overall_score),
    }
