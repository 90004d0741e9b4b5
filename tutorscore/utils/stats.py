"""Statistical utilities used by the aggregator and the rules.

Helpers return None rather than raising when there is no data, so callers
can tell "no data" apart from a real zero.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from ..rules.enums import RatingTrend


def average(values: Sequence[float]) -> float | None:
    """Mean of ``values``, or None for an empty sequence."""
    if not values:
        return None
    return sum(values) / len(values)


def rate(count: int, total: int) -> float | None:
    """``count / total`` as a decimal, or None when ``total`` is 0."""
    if total == 0:
        return None
    return count / total


def trend(
    old_value: float | None,
    new_value: float | None,
    threshold: float = 0.05,
) -> RatingTrend | None:
    """Classify the relative change from ``old_value`` to ``new_value``.

    A relative change smaller than ``threshold`` is STABLE. Otherwise a rise
    is IMPROVING and a fall is DECLINING. The helper does not know what the
    metric means: for defect rates the caller must read a rise as a
    regression.

    Returns None if either value is missing or ``old_value`` is 0.
    """
    if old_value is None or new_value is None or old_value == 0:
        return None

    change = (new_value - old_value) / old_value

    if abs(change) < threshold:
        return RatingTrend.STABLE
    return RatingTrend.IMPROVING if change > 0 else RatingTrend.DECLINING


def percentile(values: Sequence[float], pct: float) -> float | None:
    """Linearly interpolated percentile (0-100) of ``values``."""
    if not values:
        return None
    ordered = sorted(values)
    if pct <= 0:
        return ordered[0]
    if pct >= 100:
        return ordered[-1]

    index = (pct / 100) * (len(ordered) - 1)
    lower = math.floor(index)
    upper = math.ceil(index)
    if lower == upper:
        return ordered[lower]

    weight = index - lower
    return ordered[lower] * (1 - weight) + ordered[upper] * weight


def percentile_rank(value: float, distribution: Sequence[float]) -> float | None:
    """Percentile rank (0-100) of ``value`` within ``distribution``."""
    if not distribution:
        return None
    below = sum(1 for v in distribution if v < value)
    equal = sum(1 for v in distribution if v == value)
    return ((below + equal / 2) / len(distribution)) * 100


def median(values: Sequence[float]) -> float | None:
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2
    return ordered[mid]


def standard_deviation(values: Sequence[float]) -> float | None:
    """Population standard deviation, or None for an empty sequence."""
    avg = average(values)
    if avg is None:
        return None
    return math.sqrt(sum((v - avg) ** 2 for v in values) / len(values))


def round_to(value: float, decimals: int = 2) -> float:
    """Round half away from zero to ``decimals`` places."""
    factor = 10**decimals
    return math.floor(abs(value) * factor + 0.5) / factor * (1 if value >= 0 else -1)
