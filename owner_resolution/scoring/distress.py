"""Distress score: regulatory, legal and financial signals that an owner may sell."""

from __future__ import annotations

from ..models import DistressInputs, DistressScore, FeedResults
from .rules import Rule, clamp, evaluate


def units_lost(d: DistressInputs) -> bool:
    base, latest = d.regulated_units_baseline, d.regulated_units_latest
    if base <= 0 or latest <= 0:
        return False
    return (base - latest) * 100 >= 30 * base


def _pct_lost(d: DistressInputs) -> int:
    return round((1 - d.regulated_units_latest / d.regulated_units_baseline) * 100)


DISTRESS_RULES: list[Rule[DistressInputs]] = [
    Rule(
        "many_open_violations",
        lambda d: d.open_violations > 10,
        20,
        "{ctx.open_violations} open HPD violations",
    ),
    Rule(
        "open_violations",
        lambda d: 5 < d.open_violations <= 10,
        10,
        "{ctx.open_violations} open HPD violations",
    ),
    Rule(
        "hazardous_violations",
        lambda d: d.hazardous_violations > 3,
        15,
        "{ctx.hazardous_violations} hazardous (Class C) violations",
    ),
    Rule("open_litigation", lambda d: d.open_litigation > 0, 25, "{ctx.open_litigation} open HPD lawsuits"),
    Rule("harassment_finding", lambda d: d.harassment_finding, 20, "Finding of harassment"),
    Rule(
        "large_penalty_balance",
        lambda d: d.penalty_balance > 10_000,
        20,
        lambda d: f"${round(d.penalty_balance):,} in ECB penalties",
    ),
    Rule(
        "penalty_balance",
        lambda d: 1_000 < d.penalty_balance <= 10_000,
        10,
        lambda d: f"${round(d.penalty_balance):,} in ECB penalties",
    ),
    Rule("speculation_watch_list", lambda d: d.on_watch_list, 15, "On HPD Speculation Watch List"),
    Rule(
        "regulated_units_lost",
        units_lost,
        10,
        lambda d: f"Lost {_pct_lost(d)}% of rent-stabilized units",
    ),
    Rule(
        "recent_complaints",
        lambda d: d.recent_complaints > 15,
        10,
        "{ctx.recent_complaints} complaints in last 3 years",
    ),
]


def distress_score(inputs: DistressInputs) -> DistressScore:
    total, signals = evaluate(DISTRESS_RULES, inputs)
    return DistressScore(total=clamp(total), signals=signals)


def distress_inputs_from(feeds: FeedResults) -> DistressInputs:
    rent = feeds.rent_stabilization
    return DistressInputs(
        open_violations=feeds.violations.open,
        hazardous_violations=feeds.violations.class_c,
        open_litigation=feeds.litigation.open,
        harassment_finding=feeds.litigation.harassment_finding,
        penalty_balance=feeds.penalties.total_penalty,
        on_watch_list=bool(feeds.speculation and feeds.speculation.on_watch_list),
        regulated_units_baseline=rent.baseline() if rent else 0,
        regulated_units_latest=rent.latest() if rent else 0,
        recent_complaints=feeds.complaints.recent,
    )
