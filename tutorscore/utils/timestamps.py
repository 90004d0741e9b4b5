"""Timestamp parsing for session records handed over by ingestion."""

from __future__ import annotations

from datetime import datetime, timezone

# Reasonable bounds for tutoring session timestamps
MIN_VALID_YEAR = 2000
MAX_VALID_YEAR = 2100


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse a session timestamp into a timezone-aware datetime.

    Supports the following inputs:
    - ``datetime`` objects (naive values are taken as UTC)
    - ISO 8601 strings, with or without offset (e.g., 2024-01-15T14:00:00Z)
    - Date-only ISO strings (e.g., 2024-01-15), taken as midnight UTC

    Args:
        value: Timestamp to parse, or None

    Returns:
        Aware datetime, or None if ``value`` is None or empty

    Raises:
        ValueError: If the string is not ISO 8601 or the year is out of range

    Examples:
        >>> parse_timestamp("2024-01-15T14:00:00Z")
        datetime.datetime(2024, 1, 15, 14, 0, tzinfo=datetime.timezone.utc)
        >>> parse_timestamp(None) is None
        True
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        parsed = value
    else:
        text = value.strip()
        # fromisoformat rejects a trailing "Z" before Python 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)

    if parsed.year < MIN_VALID_YEAR or parsed.year > MAX_VALID_YEAR:
        raise ValueError(f"Timestamp year out of range: {value!r}")

    return as_utc(parsed)


def as_utc(value: datetime | None) -> datetime | None:
    """Attach UTC to a naive datetime. Aware values and None pass through."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)
