"""Pytest configuration and fixtures."""

from __future__ import annotations

import random
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

import pytest

from tutorscore.rules import RescheduledBy, Session

# Fixed evaluation time so window boundaries are reproducible
NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

SessionFactory = Callable[..., Session]


def build_session(
    session_id: str = "S-001",
    tutor_id: str = "tutor_1",
    student_id: str = "student_1",
    start: datetime | None = None,
    duration_minutes: int = 60,
    late_minutes: float | None = 0,
    left_early_minutes: float | None = 0,
    rating: int | None = None,
    is_first_session: bool = False,
    rescheduled_by: RescheduledBy | None = None,
) -> Session:
    """Build a session relative to its scheduled start.

    ``late_minutes=None`` makes a no-show (no join and no leave).
    ``left_early_minutes=None`` leaves the tutor leave time unset.
    """
    start = start or NOW - timedelta(days=1)
    end = start + timedelta(minutes=duration_minutes)
    join = None if late_minutes is None else start + timedelta(minutes=late_minutes)
    leave = None
    if join is not None and left_early_minutes is not None:
        leave = end - timedelta(minutes=left_early_minutes)
    return Session(
        session_id=session_id,
        tutor_id=tutor_id,
        student_id=student_id,
        session_start_time=start,
        session_end_time=end,
        tutor_join_time=join,
        student_join_time=start,
        tutor_leave_time=leave,
        student_leave_time=end,
        is_first_session=is_first_session,
        was_rescheduled=rescheduled_by is not None,
        rescheduled_by=rescheduled_by,
        student_feedback_rating=rating,
    )


@pytest.fixture
def make_session() -> SessionFactory:
    """Factory for sessions with sensible defaults."""
    return build_session


@pytest.fixture
def sample_session() -> Session:
    """On-time, full-length, well-rated session."""
    return build_session(rating=5)


def _start_times(count: int, spacing_hours: int = 6) -> list[datetime]:
    # Oldest first, all inside the default 30-day window ending at NOW
    return [NOW - timedelta(hours=spacing_hours * (count - i)) for i in range(count)]


def _pick_indices(rng: random.Random, count: int, fraction: float) -> set[int]:
    return set(rng.sample(range(count), round(count * fraction)))


def generate_chronic_no_show_sessions(count: int = 100, no_show_rate: float = 0.16, seed: int = 10000) -> list[Session]:
    """Tutor missing ``no_show_rate`` of sessions, otherwise on time."""
    rng = random.Random(seed)
    no_shows = _pick_indices(rng, count, no_show_rate)
    return [
        build_session(
            session_id=f"noshow-{i:03d}",
            tutor_id="tutor_no_show",
            student_id=f"student_{rng.randint(1, 20)}",
            start=start,
            late_minutes=None if i in no_shows else rng.randint(0, 2),
            rating=None if i in no_shows else rng.choice([3, 4, 4, 5]),
        )
        for i, start in enumerate(_start_times(count))
    ]


def generate_always_late_sessions(count: int = 60, seed: int = 10001) -> list[Session]:
    """Tutor joining 12-18 minutes late (15 on average) to every session."""
    rng = random.Random(seed)
    return [
        build_session(
            session_id=f"late-{i:03d}",
            tutor_id="tutor_late",
            student_id=f"student_{rng.randint(1, 20)}",
            start=start,
            late_minutes=rng.randint(12, 18),
            rating=rng.choice([3, 4, 4, 5]),
        )
        for i, start in enumerate(_start_times(count))
    ]


def generate_excellent_sessions(count: int = 40, seed: int = 10004) -> list[Session]:
    """Tutor with no no-shows, rare lateness and reschedules, and high ratings."""
    rng = random.Random(seed)
    late = _pick_indices(rng, count, 0.025)
    rescheduled = _pick_indices(rng, count, 0.025)
    four_star = _pick_indices(rng, count, 0.2)
    return [
        build_session(
            session_id=f"excellent-{i:03d}",
            tutor_id="tutor_excellent",
            student_id=f"student_{rng.randint(1, 20)}",
            start=start,
            late_minutes=6 if i in late else rng.randint(-2, 1),
            left_early_minutes=0,
            rating=4 if i in four_star else 5,
            is_first_session=i % 10 == 0,
            rescheduled_by=RescheduledBy.STUDENT if i in rescheduled else None,
        )
        for i, start in enumerate(_start_times(count))
    ]


@pytest.fixture
def chronic_no_show_sessions() -> list[Session]:
    return generate_chronic_no_show_sessions()


@pytest.fixture
def always_late_sessions() -> list[Session]:
    return generate_always_late_sessions()


@pytest.fixture
def excellent_sessions() -> list[Session]:
    return generate_excellent_sessions()
