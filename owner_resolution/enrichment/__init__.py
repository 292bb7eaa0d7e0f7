"""Third-party contact enrichment, run after the ranked list is settled.

Lookups are gated on the ranked contacts: PDL only when the filings gave
no phone at all, Apollo for the top individual and the top corporate
name. Results are merged into a new list once every lookup has finished
or timed out.
"""

from __future__ import annotations

import concurrent.futures as cf
from dataclasses import replace
from typing import Any, Callable

from ..config import Settings
from ..models import ContactRole, Enrichment, RankedContact, TaxLot
from ..utils.logger import get_logger
from ..utils.matching import ORG_PATTERN, looks_corporate
from ..utils.normalize import to_e164
from . import apollo, pdl

PDL_MATCH_SCORE = 95
APOLLO_PHONE_BONUS = 10


def _pdl_target(ranked: list[RankedContact]) -> RankedContact | None:
    skip = {ContactRole.CORPORATE_OWNER, ContactRole.PERMIT_APPLICANT}
    return next((c for c in ranked if c.role not in skip and not looks_corporate(c.name)), None)


def _apollo_person_target(ranked: list[RankedContact]) -> RankedContact | None:
    for c in ranked:
        name = c.name.strip()
        if looks_corporate(name) or c.role is ContactRole.PERMIT_APPLICANT:
            continue
        if " " in name and len(name) > 3:
            return c
    return None


def _corporate_target(ranked: list[RankedContact]) -> RankedContact | None:
    return next((c for c in ranked if ORG_PATTERN.search(c.name.upper()) and len(c.name) > 3), None)


def _plan(ranked: list[RankedContact], tax_lot: TaxLot | None, settings: Settings) -> dict[str, Callable[[], Any]]:
    lot = tax_lot or TaxLot()
    corp = _corporate_target(ranked)
    tasks: dict[str, Callable[[], Any]] = {}

    person = _pdl_target(ranked)
    if settings.pdl_api_key and person and not any(c.phone for c in ranked):
        tasks["pdl"] = lambda: pdl.skip_trace(
            person.name, settings.pdl_api_key, address=lot.address, city=lot.borough, zipcode=lot.zip_code
        )

    individual = _apollo_person_target(ranked)
    if settings.apollo_api_key and individual:
        tasks["apollo_person"] = lambda: apollo.enrich_person(
            individual.name,
            settings.apollo_api_key,
            location=lot.borough or None,
            organization=corp.name if corp else None,
        )
    if settings.apollo_api_key and corp:
        tasks["apollo_org"] = lambda: apollo.enrich_organization(corp.name, settings.apollo_api_key)
        tasks["apollo_key_people"] = lambda: apollo.find_people_at_org(corp.name, settings.apollo_api_key)
    return tasks


def _run(tasks: dict[str, Callable[[], Any]], timeout: float) -> dict[str, Any]:
    log = get_logger()
    results: dict[str, Any] = {}
    if not tasks:
        return results
    pool = cf.ThreadPoolExecutor(max_workers=len(tasks), thread_name_prefix="enrich")
    try:
        futures = {pool.submit(fn): name for name, fn in tasks.items()}
        done, pending = cf.wait(futures, timeout=timeout)
        for fut in done:
            name = futures[fut]
            try:
                results[name] = fut.result()
            except Exception as e:
                log.warning(f"Enrichment lookup {name} failed: {e}")
        for fut in pending:
            log.warning(f"Enrichment lookup {futures[fut]} timed out after {timeout}s")
    finally:
        pool.shutdown(wait=False, cancel_futures=True)
    return results


def _merge(
    ranked: list[RankedContact],
    targets: dict[str, RankedContact | None],
    enrichment: Enrichment,
) -> list[RankedContact]:
    merged = [replace(c, enriched_by=list(c.enriched_by)) for c in ranked]
    index = {id(c): i for i, c in enumerate(ranked)}

    pdl_hit = enrichment.pdl if enrichment.pdl and "error" not in enrichment.pdl else None
    target = targets.get("pdl")
    if pdl_hit and target is not None:
        i = index[id(target)]
        c = merged[i]
        if pdl_hit.get("phones"):
            number = pdl_hit["phones"][0]["number"]
            c.phone = to_e164(number) or number
            c.score = PDL_MATCH_SCORE
            c.enriched_by.append("PDL")
        if pdl_hit.get("emails") and not c.email:
            c.email = pdl_hit["emails"][0]

    person = enrichment.apollo_person
    target = targets.get("apollo_person")
    if person and target is not None:
        c = merged[index[id(target)]]
        if person.get("phone") and not c.phone:
            c.phone = to_e164(person["phone"]) or person["phone"]
            c.score = min(100, c.score + APOLLO_PHONE_BONUS)
            c.enriched_by.append("Apollo")
        if person.get("email") and not c.email:
            c.email = person["email"]

    merged.sort(key=lambda c: c.score, reverse=True)
    return merged


def enrich_contacts(
    ranked: list[RankedContact],
    tax_lot: TaxLot | None,
    settings: Settings,
) -> tuple[list[RankedContact], Enrichment]:
    """Run the gated lookups and return a new ranked list plus the raw results.

    The input list is left untouched.
    """
    log = get_logger()
    tasks = _plan(ranked, tax_lot, settings)
    if not tasks:
        log.info("No enrichment lookups applicable")
        return list(ranked), Enrichment()

    log.info(f"Running enrichment lookups: {', '.join(tasks)}")
    results = _run(tasks, settings.enrichment_timeout)
    enrichment = Enrichment(
        pdl=results.get("pdl"),
        apollo_person=results.get("apollo_person"),
        apollo_org=results.get("apollo_org"),
        apollo_key_people=results.get("apollo_key_people") or [],
    )
    targets = {
        "pdl": _pdl_target(ranked) if "pdl" in tasks else None,
        "apollo_person": _apollo_person_target(ranked) if "apollo_person" in tasks else None,
    }
    return _merge(ranked, targets, enrichment), enrichment


__all__ = ["enrich_contacts"]
