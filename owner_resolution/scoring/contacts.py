"""Tiered contact ranking.

Tiers are evaluated in a fixed order and each keeps its own seen-set, so a
person listed both on a filing with a phone and on the HPD registration shows
up once per tier. Within one tier the first record for a key wins.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Iterator

from ..models import (
    ContactRole,
    OwnerContact,
    RankedContact,
    RegisteredContact,
    RegistrationType,
    Source,
)
from ..utils.logger import get_logger

MIN_NAME_LENGTH = 3

REGISTERED_ROLES = {
    RegistrationType.INDIVIDUAL_OWNER: ContactRole.INDIVIDUAL_OWNER,
    RegistrationType.HEAD_OFFICER: ContactRole.HEAD_OFFICER,
    RegistrationType.SITE_MANAGER: ContactRole.SITE_MANAGER,
    RegistrationType.MANAGING_AGENT: ContactRole.MANAGING_AGENT,
    RegistrationType.CORPORATE_OWNER: ContactRole.CORPORATE_OWNER,
}


@dataclass(frozen=True)
class Tier:
    name: str
    score: int
    candidates: Callable[[list[OwnerContact], list[RegisteredContact], int], Iterator[RankedContact]]
    dedup_key: Callable[[RankedContact], str]


def _owners_with_phone(
    owners: list[OwnerContact], _: list[RegisteredContact], score: int
) -> Iterator[RankedContact]:
    for c in owners:
        if c.phone:
            yield RankedContact(
                name=c.name,
                phone=c.phone,
                role=ContactRole.OWNER_APPLICANT,
                source=c.source,
                score=score,
                address=c.address,
            )


def _registered(types: set[RegistrationType], use_corporate_fallback: bool):
    def candidates(
        _: list[OwnerContact], registered: list[RegisteredContact], score: int
    ) -> Iterator[RankedContact]:
        for c in registered:
            if c.type not in types:
                continue
            if c.type is RegistrationType.CORPORATE_OWNER:
                name = c.corporate_name
            elif use_corporate_fallback:
                name = c.full_name or c.corporate_name
            else:
                name = c.full_name
            if len(name) < MIN_NAME_LENGTH:
                continue
            yield RankedContact(
                name=name,
                role=REGISTERED_ROLES[c.type],
                source=Source.HPD_REGISTRATION,
                score=score,
                address=c.address,
            )

    return candidates


def _owners_without_phone(
    owners: list[OwnerContact], _: list[RegisteredContact], score: int
) -> Iterator[RankedContact]:
    for c in owners:
        if not c.phone and len(c.name) >= MIN_NAME_LENGTH:
            yield RankedContact(
                name=c.name,
                role=ContactRole.PERMIT_APPLICANT,
                source=c.source,
                score=score,
                address=c.address,
            )


def _by_phone(c: RankedContact) -> str:
    return c.phone


def _by_name(c: RankedContact) -> str:
    return c.name.upper()


TIERS: list[Tier] = [
    Tier("owner_with_phone", 90, _owners_with_phone, _by_phone),
    Tier(
        "individual_owner",
        75,
        _registered({RegistrationType.INDIVIDUAL_OWNER, RegistrationType.HEAD_OFFICER}, False),
        _by_name,
    ),
    Tier(
        "site_manager",
        65,
        _registered({RegistrationType.SITE_MANAGER, RegistrationType.MANAGING_AGENT}, True),
        _by_name,
    ),
    Tier("corporate_owner", 55, _registered({RegistrationType.CORPORATE_OWNER}, False), _by_name),
    Tier("owner_without_phone", 40, _owners_without_phone, _by_name),
]


def rank_contacts(
    owner_contacts: Iterable[OwnerContact], registered: Iterable[RegisteredContact]
) -> list[RankedContact]:
    owners = list(owner_contacts)
    regs = list(registered)
    ranked: list[RankedContact] = []
    for tier in TIERS:
        seen: set[str] = set()
        for contact in tier.candidates(owners, regs, tier.score):
            key = tier.dedup_key(contact)
            if key in seen:
                continue
            seen.add(key)
            ranked.append(contact)
    ranked.sort(key=lambda c: c.score, reverse=True)
    get_logger().debug(
        f"{len(ranked)} ranked contacts, {sum(1 for c in ranked if c.phone)} with phone"
    )
    return ranked
