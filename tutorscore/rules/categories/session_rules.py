"""Session-level rules: each inspects a single completed session."""

from __future__ import annotations

from tutorscore.rules.enums import FlagType, Severity
from tutorscore.rules.models import (
    RuleContext,
    RuleResult,
    SessionReference,
    SupportingData,
    create_no_trigger_result,
    create_rule_result,
)
from tutorscore.rules.severity import determine_severity, determine_severity_by_rating
from tutorscore.utils import early_end_minutes, ended_early, lateness_minutes


def _session_date(context: RuleContext) -> str:
    return context.session.session_start_time.date().isoformat()


def detect_no_show(context: RuleContext) -> RuleResult:
    """Flag a session the tutor never joined."""
    session = context.session
    if session is None or session.tutor_join_time is not None:
        return create_no_trigger_result(FlagType.NO_SHOW)

    session_date = _session_date(context)
    return create_rule_result(
        FlagType.NO_SHOW,
        Severity.CRITICAL,
        f"Tutor no-show on {session_date}",
        f"Tutor {session.tutor_id} did not join the scheduled session on {session_date}. "
        "This impacts student experience and may indicate reliability issues.",
        recommended_action=(
            "Contact tutor to understand reason for no-show. Review tutor's attendance "
            "history and consider coaching if this is a pattern."
        ),
        supporting_data=SupportingData(
            sessions=(SessionReference.for_session(session, "Tutor did not join session"),),
            metrics={
                "scheduledStartTime": session.session_start_time.isoformat(),
                "studentId": session.student_id,
            },
        ),
        confidence=1.0,
    )


def detect_lateness(context: RuleContext) -> RuleResult:
    """Flag a session the tutor joined ``lateness_threshold_minutes`` late or more.

    No-shows are left to ``detect_no_show``.
    """
    session = context.session
    config = context.config
    if session is None or session.tutor_join_time is None:
        return create_no_trigger_result(FlagType.CHRONIC_LATENESS)

    minutes = lateness_minutes(session.session_start_time, session.tutor_join_time)
    if minutes is None or minutes < config.lateness_threshold_minutes:
        return create_no_trigger_result(FlagType.CHRONIC_LATENESS)

    severity = determine_severity(minutes, high=15, medium=10)
    session_date = _session_date(context)

    return create_rule_result(
        FlagType.CHRONIC_LATENESS,
        severity,
        f"Tutor {minutes} minutes late on {session_date}",
        f"Tutor {session.tutor_id} joined the session {minutes} minutes late on {session_date}. "
        "This impacts student experience and may indicate time management issues.",
        recommended_action=(
            "Discuss punctuality expectations with tutor. Review their schedule management "
            "and provide coaching on time management if this is a pattern."
        ),
        supporting_data=SupportingData(
            sessions=(SessionReference.for_session(session, f"Joined {minutes} minutes late"),),
            metrics={
                "scheduledStartTime": session.session_start_time.isoformat(),
                "actualJoinTime": session.tutor_join_time.isoformat(),
                "latenessMinutes": minutes,
                "thresholdMinutes": config.lateness_threshold_minutes,
            },
        ),
        confidence=0.95,
    )


def detect_early_end(context: RuleContext) -> RuleResult:
    """Flag a session the tutor left ``early_end_threshold_minutes`` early or more."""
    session = context.session
    config = context.config
    if session is None or session.tutor_join_time is None or session.tutor_leave_time is None:
        return create_no_trigger_result(FlagType.EARLY_END)

    if not ended_early(session.session_end_time, session.tutor_leave_time, config.early_end_threshold_minutes):
        return create_no_trigger_result(FlagType.EARLY_END)

    minutes = early_end_minutes(session.session_end_time, session.tutor_leave_time)
    severity = determine_severity(minutes, high=20, medium=15)
    session_date = _session_date(context)

    return create_rule_result(
        FlagType.EARLY_END,
        severity,
        f"Tutor ended session {minutes} minutes early on {session_date}",
        f"Tutor {session.tutor_id} ended the session {minutes} minutes early on {session_date}. "
        "This may indicate incomplete coverage of material or time management issues.",
        recommended_action=(
            "Review session content to ensure all material was covered. Discuss session "
            "completion expectations with tutor. Check if this is a pattern."
        ),
        supporting_data=SupportingData(
            sessions=(SessionReference.for_session(session, f"Ended {minutes} minutes early"),),
            metrics={
                "scheduledEndTime": session.session_end_time.isoformat(),
                "actualLeaveTime": session.tutor_leave_time.isoformat(),
                "earlyMinutes": minutes,
                "thresholdMinutes": config.early_end_threshold_minutes,
            },
        ),
        confidence=0.95,
    )


def detect_poor_first_session(context: RuleContext) -> RuleResult:
    """Flag a low student rating on a tutor's first session with a student.

    First sessions drive a disproportionate share of student churn, so a
    single low rating here is worth a coaching conversation.
    """
    session = context.session
    config = context.config
    if session is None or not session.is_first_session:
        return create_no_trigger_result(FlagType.POOR_FIRST_SESSION)

    rating = session.student_feedback_rating
    if rating is None or rating > config.poor_first_session_rating_threshold:
        return create_no_trigger_result(FlagType.POOR_FIRST_SESSION)

    # Anything at or under the threshold is at least MEDIUM
    severity = max(determine_severity_by_rating(rating), Severity.MEDIUM)
    session_date = _session_date(context)

    return create_rule_result(
        FlagType.POOR_FIRST_SESSION,
        severity,
        f"Poor first session rating ({rating}/5) on {session_date}",
        f"Tutor {session.tutor_id} received a {rating}-star rating on their first session "
        f"with student {session.student_id} on {session_date}. "
        "Poor first sessions are a major churn driver.",
        recommended_action=(
            "Review session recording if available. Discuss first session best practices "
            "with tutor. Consider pairing tutor with a mentor for first session coaching. "
            "Follow up with student to understand concerns."
        ),
        supporting_data=SupportingData(
            sessions=(SessionReference.for_session(session, f"First session rating: {rating}/5"),),
            metrics={
                "studentRating": rating,
                "threshold": config.poor_first_session_rating_threshold,
                "isFirstSession": True,
                "studentId": session.student_id,
            },
        ),
        confidence=0.9,
    )
