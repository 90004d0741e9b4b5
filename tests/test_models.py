"""Tests for rule data models."""

from __future__ import annotations

from dataclasses import FrozenInstanceError, replace
from datetime import datetime, timedelta, timezone

import pytest

from tutorscore.exceptions import SessionContractError
from tutorscore.rules import (
    DEFAULT_RULES_ENGINE_CONFIG,
    FlagType,
    RescheduledBy,
    RuleContext,
    Session,
    SessionReference,
    Severity,
    SupportingData,
    create_no_trigger_result,
    create_rule_result,
)


class TestSeverity:
    """Severity must compare as an ordered enum, not as strings."""

    def test_ordering(self):
        assert Severity.LOW < Severity.MEDIUM < Severity.HIGH < Severity.CRITICAL

    def test_medium_or_higher(self):
        assert Severity.HIGH >= Severity.MEDIUM
        assert not Severity.LOW >= Severity.MEDIUM

    def test_labels_round_trip(self):
        assert Severity.CRITICAL.label == "critical"
        assert Severity.from_label("High") is Severity.HIGH

    def test_unknown_label(self):
        with pytest.raises(ValueError):
            Severity.from_label("urgent")


class TestSessionFromDict:
    """Test building sessions from ingestion records."""

    def test_camel_case_record(self):
        session = Session.from_dict(
            {
                "sessionId": "S-100",
                "tutorId": "T-1",
                "studentId": "ST-1",
                "sessionStartTime": "2024-05-01T15:00:00Z",
                "sessionEndTime": "2024-05-01T16:00:00Z",
                "tutorJoinTime": "2024-05-01T15:06:00Z",
                "tutorLeaveTime": "2024-05-01T16:00:00Z",
                "isFirstSession": True,
                "wasRescheduled": True,
                "rescheduledBy": "tutor",
                "studentFeedbackRating": 2,
            }
        )

        assert session.session_id == "S-100"
        assert session.tutor_join_time == datetime(2024, 5, 1, 15, 6, tzinfo=timezone.utc)
        assert session.is_first_session is True
        assert session.rescheduled_by is RescheduledBy.TUTOR
        assert session.student_feedback_rating == 2
        assert session.student_join_time is None

    def test_snake_case_no_show(self):
        session = Session.from_dict(
            {
                "session_id": "S-101",
                "tutor_id": "T-1",
                "student_id": "ST-2",
                "session_start_time": "2024-05-01T15:00:00+00:00",
                "session_end_time": "2024-05-01T16:00:00+00:00",
                "tutor_join_time": None,
            }
        )

        assert session.tutor_join_time is None
        assert session.rescheduled_by is None
        assert session.was_rescheduled is False

    @pytest.mark.parametrize(
        "raw,expected",
        [("false", False), ("False", False), ("true", True), (0, False), (1, True), (None, False)],
    )
    def test_flag_strings_parsed(self, raw, expected):
        """String flags from ingestion are parsed, not truth-tested."""
        session = Session.from_dict(
            {
                "sessionId": "S-102",
                "tutorId": "T-1",
                "studentId": "ST-3",
                "sessionStartTime": "2024-05-01T15:00:00Z",
                "sessionEndTime": "2024-05-01T16:00:00Z",
                "isFirstSession": raw,
                "wasRescheduled": raw,
            }
        )
        assert session.is_first_session is expected
        assert session.was_rescheduled is expected

    def test_unrecognised_flag_rejected(self):
        with pytest.raises(ValueError, match="is_first_session"):
            Session.from_dict(
                {
                    "sessionId": "S-103",
                    "tutorId": "T-1",
                    "studentId": "ST-3",
                    "sessionStartTime": "2024-05-01T15:00:00Z",
                    "sessionEndTime": "2024-05-01T16:00:00Z",
                    "isFirstSession": "maybe",
                }
            )

    def test_naive_timestamps_become_utc(self):
        start = datetime(2024, 5, 1, 15, 0)
        session = Session(
            session_id="S-104",
            tutor_id="T-1",
            student_id="ST-4",
            session_start_time=start,
            session_end_time=start + timedelta(hours=1),
            tutor_join_time=start,
        )

        assert session.session_start_time == datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc)
        assert session.session_end_time.tzinfo is timezone.utc
        assert session.tutor_join_time.tzinfo is timezone.utc
        assert session.tutor_leave_time is None

    def test_sessions_are_immutable(self, sample_session):
        with pytest.raises(FrozenInstanceError):
            sample_session.tutor_id = "someone_else"


class TestSessionContract:
    """Ingestion invariants are checked only on request."""

    def test_valid_session(self, sample_session):
        assert sample_session.contract_problems() == []
        sample_session.check_contract()

    def test_end_before_start(self, make_session):
        session = make_session(duration_minutes=-30)
        with pytest.raises(SessionContractError) as exc_info:
            session.check_contract()
        assert "session_end_time" in str(exc_info.value)

    def test_leave_without_join(self, sample_session):
        broken = replace(sample_session, tutor_join_time=None)
        assert any("tutor_leave_time" in p for p in broken.contract_problems())

    @pytest.mark.parametrize("rating", [0, 6, 3.5])
    def test_rating_out_of_range(self, make_session, rating):
        session = make_session(rating=rating)
        with pytest.raises(SessionContractError):
            session.check_contract()


class TestRuleResultConstructors:
    """Test the two rule result constructors."""

    def test_create_rule_result_defaults(self):
        result = create_rule_result(FlagType.NO_SHOW, Severity.CRITICAL, "Title", "Description")

        assert result.triggered is True
        assert result.confidence == 1.0
        assert result.recommended_action is None
        assert result.supporting_data is None

    def test_confidence_is_clamped(self):
        result = create_rule_result(FlagType.OTHER, Severity.LOW, "t", "d", confidence=1.7)
        assert result.confidence == 1.0

    def test_no_trigger_result(self):
        result = create_no_trigger_result(FlagType.EARLY_END)

        assert result.triggered is False
        assert result.flag_type is FlagType.EARLY_END
        assert result.title == ""
        assert result.description == ""

    def test_to_dict(self, sample_session):
        result = create_rule_result(
            FlagType.CHRONIC_LATENESS,
            Severity.MEDIUM,
            "Late",
            "Joined late",
            recommended_action="Talk to tutor",
            supporting_data=SupportingData(
                sessions=(SessionReference.for_session(sample_session, "Joined 12 minutes late"),),
                metrics={"latenessMinutes": 12},
            ),
            confidence=0.95,
        )
        data = result.to_dict()

        assert data["flagType"] == "chronic_lateness"
        assert data["severity"] == "medium"
        assert data["supportingData"]["sessions"][0]["sessionId"] == sample_session.session_id
        assert data["supportingData"]["metrics"] == {"latenessMinutes": 12}
        assert "trend" not in data["supportingData"]


class TestRuleContext:
    def test_defaults_to_default_config(self):
        context = RuleContext()
        assert context.config is DEFAULT_RULES_ENGINE_CONFIG
        assert context.session is None
        assert context.tutor_stats is None

    def test_config_overrides_do_not_touch_default(self):
        tuned = DEFAULT_RULES_ENGINE_CONFIG.with_overrides(lateness_threshold_minutes=8)
        assert tuned.lateness_threshold_minutes == 8
        assert DEFAULT_RULES_ENGINE_CONFIG.lateness_threshold_minutes == 5

    def test_session_reference_date_is_iso(self, make_session):
        start = datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc)
        ref = SessionReference.for_session(make_session(start=start))
        assert ref.date == "2024-05-01T15:00:00+00:00"
        assert ref.to_dict() == {"sessionId": "S-001", "date": "2024-05-01T15:00:00+00:00"}
