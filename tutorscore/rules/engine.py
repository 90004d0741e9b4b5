"""Core rules evaluation engine.

Two independent passes: session rules against one ``Session`` and
aggregate rules against a ``TutorStats`` snapshot. Neither pass reads the
other's output.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from typing import Any

from .enums import Severity
from .models import RatingWindows, RuleContext, RuleResult, Session, TutorStats
from .registry import RuleRegistry
from .ruleset import aggregate_registry, session_registry
from .thresholds import DEFAULT_RULES_ENGINE_CONFIG, RulesEngineConfig

logger = logging.getLogger(__name__)

RuleOverrides = Mapping[str, Mapping[str, Any]]


def _run_rules(
    registry: RuleRegistry,
    context: RuleContext,
    rule_overrides: RuleOverrides | None,
) -> list[RuleResult]:
    rule_overrides = rule_overrides or {}
    results: list[RuleResult] = []

    for rule in registry.active_rules():
        override = rule_overrides.get(rule.__name__)
        if override and not override.get("enabled", True):
            continue

        result = rule(context)
        if result.triggered and override and "severity" in override:
            severity = override["severity"]
            if not isinstance(severity, Severity):
                severity = Severity.from_label(str(severity))
            result = replace(result, severity=severity)
        results.append(result)

    return results


def evaluate_session(
    session: Session,
    config: RulesEngineConfig | None = None,
    rule_overrides: RuleOverrides | None = None,
    registry: RuleRegistry | None = None,
) -> list[RuleResult]:
    """Run every session-level rule against ``session``.

    Args:
        session: Session to evaluate
        config: Thresholds (defaults to DEFAULT_RULES_ENGINE_CONFIG)
        rule_overrides: Per-rule ``{"enabled": bool, "severity": str}`` keyed
            by rule function name
        registry: Custom rule set (defaults to the session rules)

    Returns:
        One RuleResult per active rule, triggered or not, in rule order.
    """
    context = RuleContext(session=session, config=config or DEFAULT_RULES_ENGINE_CONFIG)
    results = _run_rules(registry or session_registry(), context, rule_overrides)
    logger.debug(
        "Session %s: %d of %d rules triggered",
        session.session_id,
        sum(r.triggered for r in results),
        len(results),
    )
    return results


def evaluate_aggregate(
    tutor_stats: TutorStats,
    config: RulesEngineConfig | None = None,
    rating_windows: RatingWindows | None = None,
    rule_overrides: RuleOverrides | None = None,
    registry: RuleRegistry | None = None,
) -> list[RuleResult]:
    """Run every aggregate rule against ``tutor_stats``.

    ``rating_windows`` feeds the declining-rating rule; without it that rule
    reports not-triggered.
    """
    context = RuleContext(
        tutor_stats=tutor_stats,
        config=config or DEFAULT_RULES_ENGINE_CONFIG,
        rating_windows=rating_windows,
    )
    results = _run_rules(registry or aggregate_registry(), context, rule_overrides)
    logger.debug(
        "Tutor %s aggregate pass over %d sessions: %d rules triggered",
        tutor_stats.tutor_id,
        tutor_stats.total_sessions,
        sum(r.triggered for r in results),
    )
    return results


def evaluate_sessions(
    sessions: Sequence[Session],
    config: RulesEngineConfig | None = None,
    rule_overrides: RuleOverrides | None = None,
    max_workers: int | None = None,
) -> list[list[RuleResult]]:
    """Evaluate many sessions concurrently.

    Rules are pure, so the output matches sequential evaluation and keeps
    the input order.
    """
    if not sessions:
        return []

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(
            executor.map(lambda s: evaluate_session(s, config, rule_overrides), sessions)
        )


def triggered(results: Sequence[RuleResult]) -> list[RuleResult]:
    return [r for r in results if r.triggered]
