"""Score calculator.

Maps a ``TutorStats`` snapshot to four component scores (0-100), a
weighted overall score and a confidence score (0-1):

- Attendance: penalizes no-shows 4x harder than lateness
- Ratings: linear map of the 1-5 average rating, neutral 50 without ratings
- Completion: penalizes early ends
- Reliability: penalizes reschedules

A missing rate means no events of that kind and costs nothing. A missing
average rating is ambiguous and scores neutral instead.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass

from ..rules.models import TutorStats
from ..rules.thresholds import clamp

NEUTRAL_RATINGS_SCORE = 50.0
FULL_CONFIDENCE_SESSIONS = 30


@dataclass(frozen=True)
class ScoreWeights:
    """Weights applied when combining component scores. Must sum to 1.0."""

    attendance: float = 0.35
    ratings: float = 0.35
    completion: float = 0.15
    reliability: float = 0.15

    def validate(self) -> ScoreWeights:
        values = asdict(self)
        negative = [name for name, value in values.items() if value < 0]
        if negative:
            raise ValueError(f"Score weights must be non-negative: {', '.join(negative)}")
        total = sum(values.values())
        if not math.isclose(total, 1.0, abs_tol=1e-6):
            raise ValueError(f"Score weights must sum to 1.0, got {total:.6f}")
        return self


DEFAULT_SCORE_WEIGHTS = ScoreWeights()


@dataclass(frozen=True)
class ScoreBreakdown:
    attendance: float
    ratings: float
    completion: float
    reliability: float

    def to_dict(self) -> dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class TutorScores:
    breakdown: ScoreBreakdown
    overall_score: int
    confidence_score: float

    def to_dict(self) -> dict[str, object]:
        return {
            "breakdown": self.breakdown.to_dict(),
            "overallScore": self.overall_score,
            "confidenceScore": self.confidence_score,
        }


def _bounded(score: float) -> float:
    return clamp(score, 0.0, 100.0)


def calculate_attendance_score(tutor_stats: TutorStats) -> float:
    no_show_rate = tutor_stats.no_show_rate or 0.0
    late_rate = tutor_stats.late_rate or 0.0
    return _bounded(100 - no_show_rate * 20 - late_rate * 5)


def calculate_ratings_score(tutor_stats: TutorStats) -> float:
    """Map the 1-5 average rating onto 0-100 (1 -> 0, 5 -> 100).

    Returns exactly 50 when the tutor has no ratings yet.
    """
    avg_rating = tutor_stats.avg_student_rating
    if avg_rating is None:
        return NEUTRAL_RATINGS_SCORE
    return _bounded((avg_rating - 1) / 4 * 100)


def calculate_completion_score(tutor_stats: TutorStats) -> float:
    early_end_rate = tutor_stats.early_end_rate or 0.0
    return _bounded(100 - early_end_rate * 10)


def calculate_reliability_score(tutor_stats: TutorStats) -> float:
    reschedule_rate = tutor_stats.reschedule_rate or 0.0
    return _bounded(100 - reschedule_rate * 5)


def calculate_overall_score(
    breakdown: ScoreBreakdown,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> int:
    """Weighted sum of the component scores, rounded half up and clamped to 0-100."""
    weighted_sum = (
        breakdown.attendance * weights.attendance
        + breakdown.ratings * weights.ratings
        + breakdown.completion * weights.completion
        + breakdown.reliability * weights.reliability
    )
    return int(clamp(math.floor(weighted_sum + 0.5), 0, 100))


def calculate_confidence_score(total_sessions: int) -> float:
    """Linear ramp reaching full confidence at 30 sessions.

    This discounts early judgments about new tutors. It does not gate flags.
    """
    return clamp(min(1.0, total_sessions / FULL_CONFIDENCE_SESSIONS), 0.0, 1.0)


def calculate_all_scores(
    tutor_stats: TutorStats,
    weights: ScoreWeights = DEFAULT_SCORE_WEIGHTS,
) -> TutorScores:
    """Compute the breakdown, overall score and confidence in one call."""
    breakdown = ScoreBreakdown(
        attendance=calculate_attendance_score(tutor_stats),
        ratings=calculate_ratings_score(tutor_stats),
        completion=calculate_completion_score(tutor_stats),
        reliability=calculate_reliability_score(tutor_stats),
    )
    return TutorScores(
        breakdown=breakdown,
        overall_score=calculate_overall_score(breakdown, weights),
        confidence_score=calculate_confidence_score(tutor_stats.total_sessions),
    )
