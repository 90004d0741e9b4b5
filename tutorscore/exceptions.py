"""Exceptions raised by the tutor scoring core."""

from __future__ import annotations

from typing import Any


class TutorScoreError(Exception):
    """Base class for scoring core errors."""


class SessionContractError(TutorScoreError):
    """Raised when a session record breaks the ingestion contract.

    Sessions are validated upstream before they reach the rules. Seeing one
    of these means bad data slipped through, not a normal runtime condition.
    """

    def __init__(self, session_id: str, problems: list[str]):
        super().__init__(f"Session {session_id} violates contract: {'; '.join(problems)}")
        self.session_id = session_id
        self.problems = problems


class ConfigValidationError(TutorScoreError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []
