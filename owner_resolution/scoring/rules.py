"""Ordered additive rules with a textual audit trail.

A rule is a predicate over an evaluation context, the points it adds and the
reason recorded when it fires. `source` optionally names the data source the
evidence comes from. Rules are evaluated in table order; the caller
clamps the total.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Sequence, TypeVar

Ctx = TypeVar("Ctx")


@dataclass(frozen=True)
class Rule(Generic[Ctx]):
    name: str
    predicate: Callable[[Ctx], bool]
    delta: int | Callable[[Ctx], int]
    reason: str | Callable[[Ctx], str]
    source: str = ""

    def points(self, ctx: Ctx) -> int:
        return self.delta(ctx) if callable(self.delta) else self.delta

    def explain(self, ctx: Ctx) -> str:
        if callable(self.reason):
            return self.reason(ctx)
        return self.reason.format(ctx=ctx)


def evaluate(rules: Sequence[Rule[Any]], ctx: Any) -> tuple[int, list[str]]:
    total = 0
    reasons: list[str] = []
    for rule in rules:
        if rule.predicate(ctx):
            total += rule.points(ctx)
            reasons.append(rule.explain(ctx))
    return total, reasons


def clamp(n: int, lo: int = 0, hi: int = 100) -> int:
    return max(lo, min(hi, n))
