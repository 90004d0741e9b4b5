"""Tests for the score calculator."""

from __future__ import annotations

from datetime import timedelta

import pytest

from conftest import NOW
from tutorscore.rules import TutorStats
from tutorscore.scoring import (
    DEFAULT_SCORE_WEIGHTS,
    ScoreBreakdown,
    ScoreWeights,
    calculate_all_scores,
    calculate_attendance_score,
    calculate_completion_score,
    calculate_confidence_score,
    calculate_overall_score,
    calculate_ratings_score,
    calculate_reliability_score,
)


def make_stats(total_sessions: int = 20, **kwargs) -> TutorStats:
    return TutorStats(
        tutor_id="tutor_1",
        window_start=NOW - timedelta(days=30),
        window_end=NOW,
        total_sessions=total_sessions,
        **kwargs,
    )


class TestComponentScores:
    def test_perfect_record(self):
        stats = make_stats(
            no_show_rate=0.0, late_rate=0.0, early_end_rate=0.0, reschedule_rate=0.0, avg_student_rating=5.0
        )
        scores = calculate_all_scores(stats)

        assert scores.breakdown == ScoreBreakdown(100.0, 100.0, 100.0, 100.0)
        assert scores.overall_score == 100

    def test_attendance_penalizes_no_shows_harder(self):
        no_shows = calculate_attendance_score(make_stats(no_show_rate=0.2, late_rate=0.0))
        lateness = calculate_attendance_score(make_stats(no_show_rate=0.0, late_rate=0.2))

        assert no_shows == pytest.approx(96.0)
        assert lateness == pytest.approx(99.0)

    @pytest.mark.parametrize("avg_rating,expected", [(1.0, 0.0), (3.0, 50.0), (4.8, 95.0), (5.0, 100.0)])
    def test_ratings_linear_map(self, avg_rating, expected):
        assert calculate_ratings_score(make_stats(avg_student_rating=avg_rating)) == pytest.approx(expected)

    def test_no_ratings_is_neutral(self):
        """Missing ratings score exactly 50, not 0 or 100."""
        assert calculate_ratings_score(make_stats(avg_student_rating=None)) == 50.0

    def test_completion_and_reliability(self):
        stats = make_stats(early_end_rate=0.5, reschedule_rate=0.4)

        assert calculate_completion_score(stats) == pytest.approx(95.0)
        assert calculate_reliability_score(stats) == pytest.approx(98.0)

    def test_missing_rates_cost_nothing(self):
        stats = make_stats(total_sessions=0)

        assert calculate_attendance_score(stats) == 100.0
        assert calculate_completion_score(stats) == 100.0
        assert calculate_reliability_score(stats) == 100.0

    def test_scores_are_clamped(self):
        """Out-of-contract inputs never push a score outside 0-100."""
        stats = make_stats(avg_student_rating=0.0, no_show_rate=6.0)

        assert calculate_ratings_score(stats) == 0.0
        assert calculate_attendance_score(stats) == 0.0

    def test_attendance_monotonic_in_no_show_rate(self):
        scores = [calculate_attendance_score(make_stats(no_show_rate=r / 10, late_rate=0.1)) for r in range(11)]
        assert scores == sorted(scores, reverse=True)


class TestOverallScore:
    def test_empty_window(self):
        """0 sessions: 100/50/100/100 weighted is 82.5, rounded half up to 83."""
        scores = calculate_all_scores(make_stats(total_sessions=0))

        assert scores.breakdown.ratings == 50.0
        assert scores.overall_score == 83
        assert scores.confidence_score == 0.0

    def test_rounds_half_up(self):
        breakdown = ScoreBreakdown(attendance=50, ratings=51, completion=50, reliability=51)
        weights = ScoreWeights(attendance=0.25, ratings=0.25, completion=0.25, reliability=0.25)
        assert calculate_overall_score(breakdown, weights) == 51

    def test_rounds_down_below_half(self):
        breakdown = ScoreBreakdown(attendance=70.4, ratings=70.4, completion=70.4, reliability=70.4)
        assert calculate_overall_score(breakdown) == 70

    def test_is_an_integer_in_range(self):
        scores = calculate_all_scores(make_stats(no_show_rate=1.0, late_rate=1.0, avg_student_rating=1.0))
        assert isinstance(scores.overall_score, int)
        assert 0 <= scores.overall_score <= 100

    def test_custom_weights(self):
        breakdown = ScoreBreakdown(attendance=100, ratings=0, completion=100, reliability=100)
        weights = ScoreWeights(attendance=0.25, ratings=0.25, completion=0.25, reliability=0.25)
        assert calculate_overall_score(breakdown, weights) == 75

    def test_to_dict(self):
        data = calculate_all_scores(make_stats(total_sessions=15, avg_student_rating=5.0)).to_dict()

        assert set(data) == {"breakdown", "overallScore", "confidenceScore"}
        assert set(data["breakdown"]) == {"attendance", "ratings", "completion", "reliability"}


class TestConfidence:
    @pytest.mark.parametrize(
        "total_sessions,expected",
        [(0, 0.0), (3, 0.1), (15, 0.5), (30, 1.0), (100, 1.0)],
    )
    def test_linear_ramp(self, total_sessions, expected):
        assert calculate_confidence_score(total_sessions) == pytest.approx(expected)


class TestScoreWeights:
    def test_defaults_sum_to_one(self):
        assert DEFAULT_SCORE_WEIGHTS.validate() is DEFAULT_SCORE_WEIGHTS

    def test_bad_sum(self):
        with pytest.raises(ValueError, match="sum to 1.0"):
            ScoreWeights(attendance=0.5, ratings=0.5, completion=0.5, reliability=0.0).validate()

    def test_negative_weight(self):
        with pytest.raises(ValueError, match="non-negative"):
            ScoreWeights(attendance=1.2, ratings=-0.2, completion=0.0, reliability=0.0).validate()
