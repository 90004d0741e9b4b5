"""Tutor statistics aggregation.

Turns a tutor's sessions for a time window into a ``TutorStats`` snapshot
used by the aggregate rules and the score calculator. Every snapshot is
computed fresh; nothing is cached or mutated.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from ..repository import SessionSource
from ..rules.enums import RescheduledBy
from ..rules.models import RatingWindows, Session, TutorStats
from ..rules.thresholds import DEFAULT_RULES_ENGINE_CONFIG, RulesEngineConfig
from ..utils import average, early_end_minutes, ended_early, is_late, lateness_minutes, rate, trend

logger = logging.getLogger(__name__)

RECENT_SESSIONS_SAMPLE = 10


def compute_tutor_stats(
    tutor_id: str,
    sessions: Iterable[Session],
    window_start: datetime,
    window_end: datetime,
    lateness_threshold_minutes: int = 5,
    early_end_threshold_minutes: int = 10,
) -> TutorStats:
    """Aggregate ``sessions`` for ``tutor_id`` starting in ``[window_start, window_end)``.

    Sessions for other tutors or outside the window are ignored. An empty
    set is a valid result with every rate and average left as None.

    Args:
        tutor_id: Tutor to aggregate
        sessions: Candidate sessions (any order)
        window_start: Inclusive window start
        window_end: Exclusive window end
        lateness_threshold_minutes: Minutes late for a session to count as late
        early_end_threshold_minutes: Minutes early for a session to count as ended early

    Returns:
        TutorStats snapshot
    """
    in_window = sorted(
        (
            s
            for s in sessions
            if s.tutor_id == tutor_id and window_start <= s.session_start_time < window_end
        ),
        key=lambda s: s.session_start_time,
    )

    first_sessions = 0
    no_show_count = 0
    late_count = 0
    early_end_count = 0
    reschedule_count = 0
    tutor_initiated = 0
    positive_lateness: list[int] = []
    early_minutes: list[int] = []
    ratings: list[int] = []
    first_session_ratings: list[int] = []

    for s in in_window:
        if s.is_first_session:
            first_sessions += 1

        if s.tutor_join_time is None:
            no_show_count += 1
        else:
            minutes = lateness_minutes(s.session_start_time, s.tutor_join_time)
            if minutes > 0:
                positive_lateness.append(minutes)
            if is_late(s.session_start_time, s.tutor_join_time, lateness_threshold_minutes):
                late_count += 1

        if ended_early(s.session_end_time, s.tutor_leave_time, early_end_threshold_minutes):
            early_end_count += 1
            early_minutes.append(early_end_minutes(s.session_end_time, s.tutor_leave_time))

        if s.was_rescheduled:
            reschedule_count += 1
            if s.rescheduled_by is RescheduledBy.TUTOR:
                tutor_initiated += 1

        if s.student_feedback_rating is not None:
            ratings.append(s.student_feedback_rating)
            if s.is_first_session:
                first_session_ratings.append(s.student_feedback_rating)

    total = len(in_window)

    # Rating trend: older half vs. recent half, chronologically
    midpoint = total // 2
    older_ratings = [
        s.student_feedback_rating for s in in_window[:midpoint] if s.student_feedback_rating is not None
    ]
    recent_ratings = [
        s.student_feedback_rating for s in in_window[midpoint:] if s.student_feedback_rating is not None
    ]

    return TutorStats(
        tutor_id=tutor_id,
        window_start=window_start,
        window_end=window_end,
        total_sessions=total,
        first_sessions=first_sessions,
        no_show_count=no_show_count,
        no_show_rate=rate(no_show_count, total),
        late_count=late_count,
        late_rate=rate(late_count, total),
        avg_lateness_minutes=average(positive_lateness),
        early_end_count=early_end_count,
        early_end_rate=rate(early_end_count, total),
        avg_early_end_minutes=average(early_minutes),
        reschedule_count=reschedule_count,
        reschedule_rate=rate(reschedule_count, total),
        tutor_initiated_reschedules=tutor_initiated,
        avg_student_rating=average(ratings),
        avg_first_session_rating=average(first_session_ratings),
        rating_trend=trend(average(older_ratings), average(recent_ratings)),
        recent_sessions=tuple(reversed(in_window[-RECENT_SESSIONS_SAMPLE:])),
    )


def get_tutor_stats(
    source: SessionSource,
    tutor_id: str,
    window_start: datetime,
    window_end: datetime,
    lateness_threshold_minutes: int = 5,
    early_end_threshold_minutes: int = 10,
) -> TutorStats:
    """Fetch a tutor's sessions for the window from ``source`` and aggregate them.

    Performs exactly one read against ``source``.
    """
    sessions = source.sessions_for_tutor(tutor_id, window_start, window_end)
    stats = compute_tutor_stats(
        tutor_id,
        sessions,
        window_start,
        window_end,
        lateness_threshold_minutes,
        early_end_threshold_minutes,
    )
    logger.info(
        "Aggregated %d sessions for tutor %s (no-show rate=%s, late rate=%s)",
        stats.total_sessions,
        tutor_id,
        stats.no_show_rate,
        stats.late_rate,
    )
    return stats


def get_rating_windows(
    source: SessionSource,
    tutor_id: str,
    as_of: datetime | None = None,
    config: RulesEngineConfig = DEFAULT_RULES_ENGINE_CONFIG,
) -> RatingWindows:
    """Build the short/medium/long windows ending at ``as_of``.

    Window lengths come from ``config``: ``rating_trend_short_window_days``,
    ``aggregate_window_days`` and ``rating_trend_long_window_days``. The
    windows are nested, all ending at ``as_of``. The long window is read
    once and sliced for the shorter ones.
    """
    window_end = as_of or datetime.now(timezone.utc)
    long_start = window_end - timedelta(days=config.rating_trend_long_window_days)
    sessions = list(source.sessions_for_tutor(tutor_id, long_start, window_end))

    def _window(days: int) -> TutorStats:
        return compute_tutor_stats(
            tutor_id,
            sessions,
            window_end - timedelta(days=days),
            window_end,
            config.lateness_threshold_minutes,
            config.early_end_threshold_minutes,
        )

    return RatingWindows(
        short=_window(config.rating_trend_short_window_days),
        medium=_window(config.aggregate_window_days),
        long=_window(config.rating_trend_long_window_days),
    )
