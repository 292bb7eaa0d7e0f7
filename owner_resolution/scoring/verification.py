"""Lead verification: does the named owner hold up across the public records
and the enrichment providers?

The lead is the top individual on the ranked list (the top corporate name when
no individual is known). Each factor is a rule with a fixed weight and the
source its evidence comes from; the clamped total maps to a letter grade and
an outreach recommendation.
"""

from __future__ import annotations

from typing import Any

from ..models import (
    Enrichment,
    FeedResults,
    LeadVerification,
    PhoneGroup,
    RankedContact,
    RegistrationType,
    VerificationFactor,
    VerificationInputs,
)
from ..utils.logger import get_logger
from ..utils.matching import ORG_PATTERN, looks_corporate
from ..utils.normalize import last_name_token, phone_digits
from .rules import Rule, clamp

MIN_LEAD_NAME_LENGTH = 4
MIN_PHONE_DIGITS = 7

VERIFICATION_RULES: list[Rule[VerificationInputs]] = [
    Rule("hpd_owner_match", lambda v: v.hpd_owner_match, 15, "HPD Registration Match", "HPD"),
    Rule("pluto_owner_match", lambda v: v.pluto_owner_match, 10, "PLUTO Owner Match", "PLUTO"),
    Rule("dob_filing_match", lambda v: v.dob_filing_match, 5, "DOB Filing Match", "DOB"),
    Rule("phone_found", lambda v: v.phone_found, 5, "Phone Found", "Skip Trace"),
    Rule("phone_verified", lambda v: v.phone_verified, 10, "Phone Verified (2+ sources)", "Multi-Source"),
    Rule("dob_phone_found", lambda v: v.dob_phone_found, 5, "DOB Phone Found", "DOB"),
    Rule("dob_phone_cross_match", lambda v: v.dob_phone_cross_match, 5, "DOB Phone Cross-Match", "Multi-Source"),
    # Agreeing emails replace the two single-provider email factors.
    Rule("emails_agree", lambda v: v.emails_agree, 12, "Email Confirmed (PDL + Apollo)", "PDL + Apollo"),
    Rule("pdl_email", lambda v: v.pdl_email_found and not v.emails_agree, 5, "PDL Email Found", "PDL"),
    Rule("apollo_email", lambda v: v.apollo_email_found and not v.emails_agree, 8, "Apollo Email Found", "Apollo"),
    Rule("apollo_person_match", lambda v: v.apollo_person_match, 10, "Apollo Person Match", "Apollo"),
    Rule("apollo_org_match", lambda v: v.apollo_org_match, 5, "Apollo Org Match", "Apollo"),
    Rule("pdl_person_match", lambda v: v.pdl_person_match, 5, "PDL Person Match", "PDL"),
    Rule("linkedin_found", lambda v: v.linkedin_found, 5, "LinkedIn Found", "Apollo/PDL"),
]

GRADES: list[tuple[int, str, str]] = [
    (
        85,
        "A",
        "High confidence: ownership and contact data verified across multiple "
        "authoritative sources. Safe to initiate outreach.",
    ),
    (
        70,
        "B",
        "Good confidence: most key data points confirmed. Minor gaps remain but "
        "outreach is well-supported.",
    ),
    (
        50,
        "C",
        "Moderate confidence: some data verified but significant gaps exist. "
        "Verify key details before outreach.",
    ),
    (
        30,
        "D",
        "Low confidence: limited verification. Cross-reference with additional "
        "sources before relying on this data.",
    ),
    (
        0,
        "F",
        "Insufficient data: unable to verify ownership or contact information. "
        "Additional research required.",
    ),
]


def grade_for(total: int) -> tuple[str, str]:
    """Letter grade and recommendation for a verification total."""
    for floor, grade, recommendation in GRADES:
        if total >= floor:
            return grade, recommendation
    return GRADES[-1][1], GRADES[-1][2]


def _first_token(name: str | None) -> str:
    tokens = (name or "").upper().split()
    return tokens[0] if tokens else ""


def _token_in(token: str, text: str) -> bool:
    return len(token) > 2 and token in text


def _pdl_hit(enrichment: Enrichment) -> dict[str, Any] | None:
    return enrichment.pdl if enrichment.pdl and "error" not in enrichment.pdl else None


def verification_inputs_from(
    ranked: list[RankedContact],
    feeds: FeedResults,
    phone_rankings: list[PhoneGroup],
    enrichment: Enrichment,
) -> VerificationInputs | None:
    """Collect the evidence for the lead; None when there is no usable lead name."""
    individual = next((c.name for c in ranked if not looks_corporate(c.name)), "")
    company = next((c.name for c in ranked if ORG_PATTERN.search(c.name.upper())), "")
    owner = individual or company
    if len(owner.strip()) < MIN_LEAD_NAME_LENGTH:
        return None

    owner_up = owner.upper()
    owner_last = last_name_token(owner)
    tax_roll = (feeds.tax_roll_owner or "").upper()

    hpd_match = False
    for c in feeds.registered_contacts:
        if c.full_name and _token_in(last_name_token(c.full_name), owner_up):
            hpd_match = True
        elif len(c.corporate_name) > 2 and _token_in(_first_token(c.corporate_name), owner_up):
            hpd_match = True

    dob_batches = [feeds.permits, feeds.job_filings, feeds.dob_now_filings]
    dob_match = any(
        _token_in(last_name_token(c.name), owner_up) for b in dob_batches for c in b.owner_contacts
    )

    pdl_hit = _pdl_hit(enrichment) or {}
    person = enrichment.apollo_person or {}
    pdl_phones = [p.get("number", "") for p in pdl_hit.get("phones") or []]
    phone_sources = [
        any(c.phone for c in feeds.owner_contacts),
        bool(pdl_phones),
        bool(person.get("phone")),
    ]
    known = {g.normalized_phone for g in phone_rankings}
    enriched_digits = [phone_digits(p) for p in [person.get("phone"), *pdl_phones]]

    pdl_emails = [e.lower() for e in pdl_hit.get("emails") or []]
    apollo_email = (person.get("email") or "").lower()

    org_token = _first_token((enrichment.apollo_org or {}).get("name"))
    corps = [
        c.corporate_name.upper()
        for c in feeds.registered_contacts
        if c.type is RegistrationType.CORPORATE_OWNER and len(c.corporate_name) > 2
    ]

    return VerificationInputs(
        owner_name=owner,
        company_name=company,
        hpd_owner_match=hpd_match,
        pluto_owner_match=len(tax_roll) > 2
        and (_token_in(owner_last, tax_roll) or _token_in(_first_token(tax_roll), owner_up)),
        dob_filing_match=dob_match,
        phone_found=any(phone_sources),
        phone_verified=sum(phone_sources) >= 2,
        dob_phone_found=bool(phone_rankings),
        dob_phone_cross_match=any(len(d) >= MIN_PHONE_DIGITS and d in known for d in enriched_digits),
        pdl_email_found=bool(pdl_emails),
        apollo_email_found=bool(apollo_email),
        emails_agree=bool(apollo_email) and apollo_email in pdl_emails,
        apollo_person_match=bool(person),
        apollo_org_match=any(
            _token_in(org_token, corp) or _token_in(_first_token(corp), org_token) for corp in corps
        ),
        pdl_person_match=bool(pdl_hit),
        linkedin_found=bool(pdl_hit.get("linkedin_url") or person.get("linkedin_url")),
    )


def score_lead(inputs: VerificationInputs) -> LeadVerification:
    factors: list[VerificationFactor] = []
    for rule in VERIFICATION_RULES:
        matched = bool(rule.predicate(inputs))
        weight = rule.points(inputs)
        factors.append(
            VerificationFactor(
                name=rule.explain(inputs),
                points=weight if matched else 0,
                max_points=weight,
                source=rule.source,
                matched=matched,
            )
        )
    total = clamp(sum(f.points for f in factors))
    grade, recommendation = grade_for(total)
    return LeadVerification(
        owner_name=inputs.owner_name,
        company_name=inputs.company_name,
        total=total,
        grade=grade,
        recommendation=recommendation,
        verified=inputs.pdl_person_match or inputs.apollo_person_match,
        factors=factors,
    )


def _details(inputs: VerificationInputs, enrichment: Enrichment) -> list[str]:
    details: list[str] = []
    pdl_hit = _pdl_hit(enrichment)
    if pdl_hit:
        details.append(f"Matched via People Data Labs (likelihood: {pdl_hit.get('likelihood', 'n/a')})")
        company_token = _first_token(pdl_hit.get("job_company"))
        if inputs.company_name and _token_in(company_token, inputs.company_name.upper()):
            details.append("Company matches across PDL + NYC records")
    elif looks_corporate(inputs.owner_name):
        details.append("Corporate entity, individual behind LLC not yet identified")
    else:
        details.append("No PDL match found, limited verification")

    person = enrichment.apollo_person
    if person:
        email = "found" if person.get("email") else "none"
        phone = "found" if person.get("phone") else "none"
        details.append(f"Matched via Apollo.io (email: {email}, phone: {phone})")
    if inputs.apollo_org_match:
        details.append("Apollo company matches NYC entity records")
    org = enrichment.apollo_org
    if org and org.get("name"):
        industry = f" ({org['industry']})" if org.get("industry") else ""
        details.append(f"Organization enriched via Apollo: {org['name']}{industry}")
    if enrichment.apollo_key_people:
        details.append(f"Found {len(enrichment.apollo_key_people)} key people at organization via Apollo")
    if inputs.dob_phone_cross_match:
        details.append("Enriched phone matches DOB filing phone, high confidence")
    return details


def verify_lead(
    ranked: list[RankedContact],
    feeds: FeedResults,
    phone_rankings: list[PhoneGroup],
    enrichment: Enrichment,
) -> LeadVerification | None:
    inputs = verification_inputs_from(ranked, feeds, phone_rankings, enrichment)
    if inputs is None:
        get_logger().debug("No lead name to verify")
        return None
    result = score_lead(inputs)
    result.details = _details(inputs, enrichment)
    get_logger().debug(f"Lead {result.owner_name!r} verification total={result.total} grade={result.grade}")
    return result
