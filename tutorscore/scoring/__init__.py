"""Tutor statistics aggregation and score calculation."""

from .aggregator import compute_tutor_stats, get_rating_windows, get_tutor_stats
from .calculator import (
    DEFAULT_SCORE_WEIGHTS,
    ScoreBreakdown,
    ScoreWeights,
    TutorScores,
    calculate_all_scores,
    calculate_attendance_score,
    calculate_completion_score,
    calculate_confidence_score,
    calculate_overall_score,
    calculate_ratings_score,
    calculate_reliability_score,
)

__all__ = [
    "DEFAULT_SCORE_WEIGHTS",
    "ScoreBreakdown",
    "ScoreWeights",
    "TutorScores",
    "calculate_all_scores",
    "calculate_attendance_score",
    "calculate_completion_score",
    "calculate_confidence_score",
    "calculate_overall_score",
    "calculate_ratings_score",
    "calculate_reliability_score",
    "compute_tutor_stats",
    "get_rating_windows",
    "get_tutor_stats",
]
