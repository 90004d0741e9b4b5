"""Read-only session access used by the aggregator.

The scoring core does not own persistence. Callers hand it anything that
satisfies ``SessionSource``; ``InMemorySessionSource`` covers tests and
batch jobs that already hold the sessions.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import Protocol, runtime_checkable

from .rules.models import Session

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionSource(Protocol):
    def sessions_for_tutor(
        self, tutor_id: str, window_start: datetime, window_end: datetime
    ) -> list[Session]:
        """Sessions for ``tutor_id`` starting in ``[window_start, window_end)``."""
        ...


class InMemorySessionSource:
    """Session source backed by an in-memory index keyed by tutor."""

    def __init__(self, sessions: Iterable[Session] = ()):
        self._by_tutor: dict[str, list[Session]] = {}
        self._ids: set[str] = set()
        for session in sessions:
            self.add(session)

    def add(self, session: Session) -> None:
        """Append a session. Session IDs must be unique."""
        if session.session_id in self._ids:
            raise ValueError(f"Duplicate session_id: {session.session_id}")
        self._ids.add(session.session_id)
        self._by_tutor.setdefault(session.tutor_id, []).append(session)

    def get(self, session_id: str) -> Session | None:
        for sessions in self._by_tutor.values():
            for session in sessions:
                if session.session_id == session_id:
                    return session
        return None

    def tutor_ids(self) -> list[str]:
        return sorted(self._by_tutor)

    def sessions_for_tutor(
        self, tutor_id: str, window_start: datetime, window_end: datetime
    ) -> list[Session]:
        matches = [
            s
            for s in self._by_tutor.get(tutor_id, [])
            if window_start <= s.session_start_time < window_end
        ]
        matches.sort(key=lambda s: s.session_start_time)
        logger.debug(
            "Fetched %d sessions for tutor %s in [%s, %s)",
            len(matches),
            tutor_id,
            window_start.isoformat(),
            window_end.isoformat(),
        )
        return matches

    def __len__(self) -> int:
        return len(self._ids)
