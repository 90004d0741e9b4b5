"""Data models for the rules engine."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Union

from ..exceptions import SessionContractError
from ..utils.timestamps import as_utc, parse_timestamp
from .enums import FlagType, RatingTrend, RescheduledBy, Severity
from .thresholds import DEFAULT_RULES_ENGINE_CONFIG, RulesEngineConfig

MetricValue = Union[int, float, str, bool]

MIN_RATING = 1
MAX_RATING = 5

TIMESTAMP_FIELDS = (
    "session_start_time",
    "session_end_time",
    "tutor_join_time",
    "student_join_time",
    "tutor_leave_time",
    "student_leave_time",
)


def _pick(data: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    if snake in data:
        return data[snake]
    return data.get(camel, default)


def _as_bool(value: Any, name: str) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip().lower() in ("true", "false"):
        return value.strip().lower() == "true"
    raise ValueError(f"{name} must be a boolean, got {value!r}")


@dataclass(frozen=True)
class Session:
    """One completed tutoring appointment. Immutable once ingested.

    A missing ``tutor_join_time`` denotes a tutor no-show.
    """

    session_id: str
    tutor_id: str
    student_id: str
    session_start_time: datetime
    session_end_time: datetime
    tutor_join_time: datetime | None = None
    student_join_time: datetime | None = None
    tutor_leave_time: datetime | None = None
    student_leave_time: datetime | None = None
    is_first_session: bool = False
    was_rescheduled: bool = False
    rescheduled_by: RescheduledBy | None = None
    student_feedback_rating: int | None = None
    tutor_feedback_rating: int | None = None

    def __post_init__(self) -> None:
        # Naive timestamps are UTC
        for name in TIMESTAMP_FIELDS:
            value = getattr(self, name)
            if isinstance(value, datetime):
                object.__setattr__(self, name, as_utc(value))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Session:
        """Build a session from an ingestion record.

        Accepts snake_case or camelCase keys and ISO 8601 timestamp strings.
        Flags accept booleans, 0/1 or "true"/"false"; anything else raises
        ValueError.
        """
        rescheduled_by = _pick(data, "rescheduled_by", "rescheduledBy")
        return cls(
            session_id=str(_pick(data, "session_id", "sessionId")),
            tutor_id=str(_pick(data, "tutor_id", "tutorId")),
            student_id=str(_pick(data, "student_id", "studentId")),
            session_start_time=parse_timestamp(_pick(data, "session_start_time", "sessionStartTime")),
            session_end_time=parse_timestamp(_pick(data, "session_end_time", "sessionEndTime")),
            tutor_join_time=parse_timestamp(_pick(data, "tutor_join_time", "tutorJoinTime")),
            student_join_time=parse_timestamp(_pick(data, "student_join_time", "studentJoinTime")),
            tutor_leave_time=parse_timestamp(_pick(data, "tutor_leave_time", "tutorLeaveTime")),
            student_leave_time=parse_timestamp(_pick(data, "student_leave_time", "studentLeaveTime")),
            is_first_session=_as_bool(_pick(data, "is_first_session", "isFirstSession"), "is_first_session"),
            was_rescheduled=_as_bool(_pick(data, "was_rescheduled", "wasRescheduled"), "was_rescheduled"),
            rescheduled_by=RescheduledBy(rescheduled_by) if rescheduled_by else None,
            student_feedback_rating=_pick(data, "student_feedback_rating", "studentFeedbackRating"),
            tutor_feedback_rating=_pick(data, "tutor_feedback_rating", "tutorFeedbackRating"),
        )

    def contract_problems(self) -> list[str]:
        """List the ingestion invariants this record breaks (empty if none)."""
        problems: list[str] = []
        if self.session_start_time is None or self.session_end_time is None:
            problems.append("scheduled start and end times are required")
        elif self.session_end_time <= self.session_start_time:
            problems.append("session_end_time must be after session_start_time")
        if self.tutor_join_time is None and self.tutor_leave_time is not None:
            problems.append("tutor_leave_time set without tutor_join_time")
        for name in ("student_feedback_rating", "tutor_feedback_rating"):
            rating = getattr(self, name)
            if rating is None:
                continue
            if isinstance(rating, bool) or not isinstance(rating, int) or not MIN_RATING <= rating <= MAX_RATING:
                problems.append(f"{name} must be an integer in [{MIN_RATING}, {MAX_RATING}], got {rating!r}")
        return problems

    def check_contract(self) -> None:
        """Raise SessionContractError if the record breaks an invariant."""
        problems = self.contract_problems()
        if problems:
            raise SessionContractError(self.session_id, problems)


@dataclass(frozen=True)
class SessionReference:
    """A session cited as evidence for a flag."""

    session_id: str
    date: str
    reason: str | None = None

    @classmethod
    def for_session(cls, session: Session, reason: str | None = None) -> SessionReference:
        return cls(session_id=session.session_id, date=session.session_start_time.isoformat(), reason=reason)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"sessionId": self.session_id, "date": self.date}
        if self.reason is not None:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class SupportingData:
    """Evidence attached to a flag: cited sessions plus named metrics."""

    sessions: tuple[SessionReference, ...] = ()
    metrics: Mapping[str, MetricValue] = field(default_factory=dict)
    trend: RatingTrend | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "sessions": [ref.to_dict() for ref in self.sessions],
            "metrics": dict(self.metrics),
        }
        if self.trend is not None:
            data["trend"] = self.trend.value
        return data


@dataclass(frozen=True)
class TutorStats:
    """Aggregated facts for one tutor over ``[window_start, window_end)``.

    Every ``*_rate`` is None when ``total_sessions`` is 0, so "no data"
    stays distinct from a perfect record.
    """

    tutor_id: str
    window_start: datetime
    window_end: datetime
    total_sessions: int = 0
    first_sessions: int = 0
    no_show_count: int = 0
    no_show_rate: float | None = None
    late_count: int = 0
    late_rate: float | None = None
    avg_lateness_minutes: float | None = None
    early_end_count: int = 0
    early_end_rate: float | None = None
    avg_early_end_minutes: float | None = None
    reschedule_count: int = 0
    reschedule_rate: float | None = None
    tutor_initiated_reschedules: int = 0
    avg_student_rating: float | None = None
    avg_first_session_rating: float | None = None
    rating_trend: RatingTrend | None = None
    recent_sessions: tuple[Session, ...] = ()


@dataclass(frozen=True)
class RatingWindows:
    """Tutor statistics over nested look-back windows ending at the same time.

    ``short`` is the most recent slice (7 days by default), ``medium`` the
    aggregate window (30 days) and ``long`` the baseline (90 days).
    """

    short: TutorStats
    medium: TutorStats
    long: TutorStats


@dataclass(frozen=True)
class RuleContext:
    """Inputs required to evaluate a rule.

    Session-level rules read ``session``; aggregate rules read
    ``tutor_stats`` (and ``rating_windows`` for the trend rule).
    """

    session: Session | None = None
    tutor_stats: TutorStats | None = None
    config: RulesEngineConfig = DEFAULT_RULES_ENGINE_CONFIG
    rating_windows: RatingWindows | None = None


@dataclass(frozen=True)
class RuleResult:
    """Outcome of one rule evaluation.

    When ``triggered`` is False the severity, title and description carry
    no meaning.
    """

    triggered: bool
    flag_type: FlagType
    severity: Severity
    title: str
    description: str
    recommended_action: str | None = None
    supporting_data: SupportingData | None = None
    confidence: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggered": self.triggered,
            "flagType": self.flag_type.value,
            "severity": self.severity.label,
            "title": self.title,
            "description": self.description,
            "recommendedAction": self.recommended_action,
            "supportingData": self.supporting_data.to_dict() if self.supporting_data else None,
            "confidence": self.confidence,
        }


def create_rule_result(
    flag_type: FlagType,
    severity: Severity,
    title: str,
    description: str,
    *,
    recommended_action: str | None = None,
    supporting_data: SupportingData | None = None,
    confidence: float = 1.0,
) -> RuleResult:
    """Build the result for a rule that fired."""
    return RuleResult(
        triggered=True,
        flag_type=flag_type,
        severity=severity,
        title=title,
        description=description,
        recommended_action=recommended_action,
        supporting_data=supporting_data,
        confidence=min(1.0, max(0.0, confidence)),
    )


def create_no_trigger_result(flag_type: FlagType) -> RuleResult:
    """Build the result for a rule that did not fire."""
    return RuleResult(
        triggered=False,
        flag_type=flag_type,
        severity=Severity.LOW,  # unused when not triggered
        title="",
        description="",
    )
