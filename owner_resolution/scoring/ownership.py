from __future__ import annotations

from typing import Iterable

from ..models import ContactRole, OwnershipResolution, RankedContact
from ..utils.normalize import last_name_token

MAX_CONFIDENCE = 95

INDIVIDUAL_ROLES = {ContactRole.INDIVIDUAL_OWNER, ContactRole.HEAD_OFFICER}


def resolve_ownership(
    ranked: list[RankedContact],
    tax_roll_owner: str = "",
    litigation_respondents: Iterable[str] = (),
) -> OwnershipResolution:
    """Pick the most likely owner from the ranked contacts.

    A registered individual beats a corporate owner. Confidence is built from
    corroborating evidence and never reaches certainty.
    """
    individual = next((c for c in ranked if c.role in INDIVIDUAL_ROLES), None)
    corporate = next((c for c in ranked if c.role is ContactRole.CORPORATE_OWNER), None)

    reasoning: list[str] = []
    if individual is not None:
        candidate = individual
        confidence = 75
        reasoning.append(f"Named as {individual.role.value} in HPD registration")
        if corporate is not None:
            reasoning.append(f"Controls via {corporate.name}")
    elif corporate is not None:
        candidate = corporate
        confidence = 55
        reasoning.append("Only corporate owner registered, individual unresolved")
        reasoning.append("Consider NYS Secretary of State search for LLC members")
    else:
        return OwnershipResolution()

    last = last_name_token(candidate.name)

    if any(c.phone for c in ranked):
        confidence += 10
        reasoning.append("Phone number found in filings")

    if last and any(last in (r or "").upper() for r in litigation_respondents):
        confidence += 10
        reasoning.append("Name matches litigation respondent")

    if last and last in (tax_roll_owner or "").upper():
        confidence += 5
        reasoning.append("Name aligns with tax roll owner")

    return OwnershipResolution(
        best_guess_name=candidate.name,
        confidence=min(MAX_CONFIDENCE, confidence),
        reasoning=reasoning,
    )
