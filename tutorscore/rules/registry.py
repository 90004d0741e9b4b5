"""Rule registry for managing active rules."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .models import RuleContext, RuleResult

RuleCallable = Callable[[RuleContext], RuleResult]


class RuleRegistry:
    def __init__(self, rules: Iterable[RuleCallable] = ()) -> None:
        self._rules: list[RuleCallable] = []
        self.extend(rules)

    def register(self, rule: RuleCallable) -> None:
        if rule not in self._rules:
            self._rules.append(rule)

    def extend(self, rules: Iterable[RuleCallable]) -> None:
        for rule in rules:
            self.register(rule)

    def active_rules(self) -> tuple[RuleCallable, ...]:
        return tuple(self._rules)

    def __len__(self) -> int:
        return len(self._rules)
