"""Phone number ranking: which number is most likely to reach the owner.

Raw entries from every filing feed are grouped on their last ten digits and
each group is scored from a base of 50 by the rule table below. The single
best group is flagged primary.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Iterable

from ..models import PhoneGroup, RawContactEntry, RegisteredContact, RegistrationType
from ..utils.logger import get_logger
from ..utils.normalize import parse_date, phone_digits, years_before
from .rules import Rule, clamp, evaluate

BASE_SCORE = 50
MIN_SIGNIFICANT_DIGITS = 7
MAX_EXTRA_APPEARANCES = 3

INDIVIDUAL_TYPES = {RegistrationType.INDIVIDUAL_OWNER, RegistrationType.HEAD_OFFICER}


@dataclass
class OwnerNames:
    """Registered owner names every phone group is matched against."""

    individuals: list[str]
    corporations: list[str]
    tax_roll: str = ""

    @classmethod
    def collect(
        cls, registered: Iterable[RegisteredContact], tax_roll_owner: str = ""
    ) -> OwnerNames:
        individuals: list[str] = []
        corporations: list[str] = []
        for c in registered:
            if c.type in INDIVIDUAL_TYPES:
                name = c.full_name.upper()
                if len(name) > 2:
                    individuals.append(name)
            elif c.type is RegistrationType.CORPORATE_OWNER:
                name = c.corporate_name.upper()
                if len(name) > 2:
                    corporations.append(name)
        return cls(individuals, corporations, (tax_roll_owner or "").strip().upper())

    def matches_individual(self, name: str) -> bool:
        name_up = name.upper()
        for owner in self.individuals:
            last = owner.split(" ")[-1]
            if name_up == owner or (len(last) > 2 and last in name_up):
                return True
        return False

    def matches_entity(self, name: str) -> bool:
        name_up = name.upper()
        if any(name_up in corp or corp in name_up for corp in self.corporations):
            return True
        tax = self.tax_roll
        return len(tax) > 3 and (name_up in tax or tax in name_up)


@dataclass
class GroupEvidence:
    has_owner_role: bool
    individual_match: bool
    entity_match: bool
    most_recent: date | None
    two_years_ago: date
    five_years_ago: date
    appearances: int

    @property
    def recent(self) -> bool:
        return self.most_recent is not None and self.most_recent >= self.two_years_ago

    @property
    def within_five_years(self) -> bool:
        return self.most_recent is not None and self.most_recent >= self.five_years_ago

    @property
    def extra_appearances(self) -> int:
        return min(self.appearances - 1, MAX_EXTRA_APPEARANCES)


PHONE_RULES: list[Rule[GroupEvidence]] = [
    Rule("owner_role", lambda e: e.has_owner_role, 20, "Owner phone on filing"),
    Rule("applicant_role", lambda e: not e.has_owner_role, 0, "Applicant/contractor phone"),
    Rule(
        "individual_owner_name",
        lambda e: e.individual_match,
        25,
        "Name matches HPD registered owner",
    ),
    Rule(
        "entity_owner_name",
        lambda e: not e.individual_match and e.entity_match,
        15,
        "Name matches entity owner",
    ),
    Rule("recent_filing", lambda e: e.recent, 15, "Recent filing (last 2 years)"),
    Rule(
        "filing_within_five_years",
        lambda e: not e.recent and e.within_five_years,
        10,
        "Filing within last 5 years",
    ),
    Rule(
        "multiple_appearances",
        lambda e: e.extra_appearances > 0,
        lambda e: 10 * e.extra_appearances,
        "Found in {ctx.appearances} filings",
    ),
]


def group_phones(entries: Iterable[RawContactEntry]) -> dict[str, list[RawContactEntry]]:
    groups: dict[str, list[RawContactEntry]] = {}
    for entry in entries:
        if not entry.phone:
            continue
        digits = phone_digits(entry.phone)
        if len(digits) < MIN_SIGNIFICANT_DIGITS:
            continue
        groups.setdefault(digits, []).append(entry)
    return groups


def gather_evidence(
    members: list[RawContactEntry], owners: OwnerNames, today: date
) -> GroupEvidence:
    names = [m.name for m in members if m.name]
    dates = [d for d in (parse_date(m.event_date) for m in members) if d is not None]
    return GroupEvidence(
        has_owner_role=any(m.is_owner_role for m in members),
        individual_match=any(owners.matches_individual(n) for n in names),
        entity_match=any(owners.matches_entity(n) for n in names),
        most_recent=max(dates) if dates else None,
        two_years_ago=years_before(today, 2),
        five_years_ago=years_before(today, 5),
        appearances=len(members),
    )


def score_group(
    normalized: str, members: list[RawContactEntry], owners: OwnerNames, today: date
) -> PhoneGroup:
    delta, reasons = evaluate(PHONE_RULES, gather_evidence(members, owners, today))
    return PhoneGroup(
        normalized_phone=normalized,
        display_phone=members[0].phone,
        members=list(members),
        score=clamp(BASE_SCORE + delta),
        reasons=reasons,
    )


def rank_phones(
    entries: Iterable[RawContactEntry],
    registered: Iterable[RegisteredContact] = (),
    tax_roll_owner: str = "",
    today: date | None = None,
) -> list[PhoneGroup]:
    """Group, score and order phone entries; the top group becomes primary."""
    today = today or datetime.now(UTC).date()
    owners = OwnerNames.collect(registered, tax_roll_owner)
    ranked = [
        score_group(normalized, members, owners, today)
        for normalized, members in group_phones(entries).items()
    ]
    ranked.sort(key=lambda g: g.score, reverse=True)
    if ranked:
        ranked[0].is_primary = True
        get_logger().debug(
            f"{len(ranked)} unique phones scored, top {ranked[0].display_phone} score={ranked[0].score}"
        )
    return ranked
