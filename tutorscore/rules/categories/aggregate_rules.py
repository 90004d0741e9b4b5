"""Aggregate rules: evaluated over a tutor's statistics for a time window.

All of them share the same minimum-sessions gate. Below
``min_sessions_for_aggregate_rules`` a rule reports not-triggered whatever
the computed rate is.
"""

from __future__ import annotations

from tutorscore.rules.enums import FlagType, RatingTrend, Severity
from tutorscore.rules.models import (
    RuleContext,
    RuleResult,
    SessionReference,
    SupportingData,
    TutorStats,
    create_no_trigger_result,
    create_rule_result,
)
from tutorscore.rules.severity import determine_severity
from tutorscore.utils import is_late, lateness_minutes, trend

MAX_CITED_SESSIONS = 10


def _has_enough_sessions(context: RuleContext) -> bool:
    stats = context.tutor_stats
    return stats is not None and stats.total_sessions >= context.config.min_sessions_for_aggregate_rules


def detect_high_reschedule_rate(context: RuleContext) -> RuleResult:
    """Flag a tutor whose reschedule rate is above the configured ceiling."""
    stats = context.tutor_stats
    config = context.config
    if not _has_enough_sessions(context):
        return create_no_trigger_result(FlagType.HIGH_RESCHEDULE_RATE)

    if stats.reschedule_rate is None or stats.reschedule_rate <= config.high_reschedule_rate_threshold:
        return create_no_trigger_result(FlagType.HIGH_RESCHEDULE_RATE)

    reschedule_percent = stats.reschedule_rate * 100
    severity = determine_severity(reschedule_percent, critical=30, high=25, medium=20)
    tutor_initiated_percent = stats.tutor_initiated_reschedules / stats.total_sessions * 100

    cited = tuple(
        SessionReference.for_session(
            s, f"Rescheduled by {s.rescheduled_by.value if s.rescheduled_by else 'unknown'}"
        )
        for s in stats.recent_sessions
        if s.was_rescheduled
    )[:MAX_CITED_SESSIONS]

    return create_rule_result(
        FlagType.HIGH_RESCHEDULE_RATE,
        severity,
        f"High reschedule rate: {reschedule_percent:.1f}% "
        f"({stats.reschedule_count}/{stats.total_sessions} sessions)",
        f"Tutor {stats.tutor_id} has rescheduled {stats.reschedule_count} out of "
        f"{stats.total_sessions} sessions ({reschedule_percent:.1f}%) in the last "
        f"{config.aggregate_window_days} days. {tutor_initiated_percent:.1f}% were tutor-initiated. "
        "High reschedule rates can indicate scheduling issues or reliability problems.",
        recommended_action=(
            "Review tutor's schedule management and availability. Discuss rescheduling "
            "patterns and identify root causes. Consider coaching on time management and "
            "commitment if tutor-initiated reschedules are high."
        ),
        supporting_data=SupportingData(
            sessions=cited,
            metrics={
                "rescheduleRate": stats.reschedule_rate,
                "rescheduleCount": stats.reschedule_count,
                "totalSessions": stats.total_sessions,
                "tutorInitiatedReschedules": stats.tutor_initiated_reschedules,
                "tutorInitiatedPercent": tutor_initiated_percent,
                "threshold": config.high_reschedule_rate_threshold,
                "windowDays": config.aggregate_window_days,
            },
            trend=stats.rating_trend,
        ),
        confidence=0.9,
    )


def detect_chronic_lateness(context: RuleContext) -> RuleResult:
    """Flag a tutor who is late to more than the configured share of sessions."""
    stats = context.tutor_stats
    config = context.config
    if not _has_enough_sessions(context):
        return create_no_trigger_result(FlagType.CHRONIC_LATENESS)

    if stats.late_rate is None or stats.late_rate <= config.chronic_lateness_rate_threshold:
        return create_no_trigger_result(FlagType.CHRONIC_LATENESS)

    late_percent = stats.late_rate * 100
    avg_lateness = stats.avg_lateness_minutes or 0.0
    # Either a high share of late sessions or a large average escalates
    severity = max(
        determine_severity(late_percent, critical=50, high=40, medium=35),
        determine_severity(avg_lateness, critical=15, high=10, medium=7),
    )

    cited = tuple(
        SessionReference.for_session(
            s, f"Late by {lateness_minutes(s.session_start_time, s.tutor_join_time)} minutes"
        )
        for s in stats.recent_sessions
        if is_late(s.session_start_time, s.tutor_join_time, config.lateness_threshold_minutes)
    )[:MAX_CITED_SESSIONS]

    return create_rule_result(
        FlagType.CHRONIC_LATENESS,
        severity,
        f"Chronic lateness: {late_percent:.1f}% late ({stats.late_count}/{stats.total_sessions} sessions)",
        f"Tutor {stats.tutor_id} was late to {stats.late_count} out of {stats.total_sessions} "
        f"sessions ({late_percent:.1f}%) in the last {config.aggregate_window_days} days. "
        f"Average lateness: {avg_lateness:.1f} minutes. Chronic lateness impacts student "
        "experience and indicates time management issues.",
        recommended_action=(
            "Discuss punctuality expectations with tutor. Review their schedule management "
            "and identify root causes. Provide coaching on time management and consider "
            "adjusting their schedule if needed."
        ),
        supporting_data=SupportingData(
            sessions=cited,
            metrics={
                "lateRate": stats.late_rate,
                "lateCount": stats.late_count,
                "totalSessions": stats.total_sessions,
                "avgLatenessMinutes": avg_lateness,
                "threshold": config.chronic_lateness_rate_threshold,
                "latenessThresholdMinutes": config.lateness_threshold_minutes,
                "windowDays": config.aggregate_window_days,
            },
            trend=stats.rating_trend,
        ),
        confidence=0.9,
    )


def _window_average(stats: TutorStats | None) -> float | None:
    return stats.avg_student_rating if stats is not None else None


def detect_declining_rating_trend(context: RuleContext) -> RuleResult:
    """Flag ratings falling across nested windows (short < medium < long).

    A lower rating is the unfavorable direction, so the trend helper must
    classify the move from the long-window baseline to the short window as
    DECLINING.
    """
    stats = context.tutor_stats
    config = context.config
    windows = context.rating_windows
    if not _has_enough_sessions(context) or windows is None:
        return create_no_trigger_result(FlagType.LOW_RATINGS)

    avg_short = _window_average(windows.short)
    avg_medium = _window_average(windows.medium)
    avg_long = _window_average(windows.long)
    if avg_short is None or avg_medium is None or avg_long is None:
        return create_no_trigger_result(FlagType.LOW_RATINGS)

    if not avg_short < avg_medium < avg_long:
        return create_no_trigger_result(FlagType.LOW_RATINGS)

    if trend(avg_long, avg_short, config.trend_threshold_fraction) is not RatingTrend.DECLINING:
        return create_no_trigger_result(FlagType.LOW_RATINGS)

    decline = avg_long - avg_short
    decline_percent = decline / avg_long * 100
    # A steep decline or a low current average escalates; lower rating is worse
    severity = max(
        determine_severity(decline_percent, critical=20, high=15, medium=10),
        determine_severity(-avg_short, critical=-2.5, high=-3.0, medium=-3.5),
    )

    short_days = config.rating_trend_short_window_days
    medium_days = config.aggregate_window_days
    long_days = config.rating_trend_long_window_days

    cited = tuple(
        SessionReference.for_session(s, f"Rating: {s.student_feedback_rating}/5")
        for s in stats.recent_sessions
        if s.student_feedback_rating is not None
    )[:MAX_CITED_SESSIONS]

    return create_rule_result(
        FlagType.LOW_RATINGS,
        severity,
        f"Declining rating trend: {avg_short:.2f} ({short_days}d) < {avg_medium:.2f} ({medium_days}d) "
        f"< {avg_long:.2f} ({long_days}d)",
        f"Tutor {stats.tutor_id} shows a declining rating trend: {avg_short:.2f} stars "
        f"({short_days}-day avg) < {avg_medium:.2f} stars ({medium_days}-day avg) < "
        f"{avg_long:.2f} stars ({long_days}-day avg). This represents a {decline_percent:.1f}% "
        f"decline from the {long_days}-day average and may indicate quality issues.",
        recommended_action=(
            "Review recent session recordings if available. Discuss feedback patterns with "
            "tutor. Identify specific areas of concern and provide targeted coaching. "
            "Consider pairing with a mentor or additional training."
        ),
        supporting_data=SupportingData(
            sessions=cited,
            metrics={
                "avgRatingShort": avg_short,
                "avgRatingMedium": avg_medium,
                "avgRatingLong": avg_long,
                "declineFromLong": decline,
                "declinePercent": decline_percent,
                "totalSessionsShort": windows.short.total_sessions,
                "totalSessionsMedium": windows.medium.total_sessions,
                "totalSessionsLong": windows.long.total_sessions,
                "shortWindowDays": short_days,
                "mediumWindowDays": medium_days,
                "longWindowDays": long_days,
            },
            trend=RatingTrend.DECLINING,
        ),
        confidence=0.85,
    )
