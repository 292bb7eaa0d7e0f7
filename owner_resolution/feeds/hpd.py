"""HPD datasets: violations, complaints, registrations, litigation, speculation."""

from __future__ import annotations

from collections import Counter
from datetime import UTC, date, datetime
from typing import Any

from ..models import (
    ComplaintSummary,
    ContactBatch,
    LitigationSummary,
    PropertyKey,
    RegisteredContact,
    RegistrationType,
    SpeculationListing,
    ViolationSummary,
)
from ..utils.normalize import clean, join_address, parse_date, safe_float, years_before
from .client import OpenDataClient, bbl_where

HPD_VIOLATIONS = "wvxf-dwi5"
HPD_COMPLAINTS = "uwyv-629c"
HPD_REG = "tesw-yqqr"
HPD_CONTACTS = "feu5-w2e2"
HPD_LITIGATION = "59kj-x8nc"
SPECULATION = "adax-9x2w"


def _where(key: PropertyKey) -> str:
    return bbl_where("boroid", key.boro, key.block, key.lot)


def summarize_violations(rows: list[dict[str, Any]]) -> ViolationSummary:
    classes = Counter(clean(v.get("class")).upper() for v in rows)
    return ViolationSummary(
        total=len(rows),
        open=sum(
            1
            for v in rows
            if v.get("currentstatus") == "VIOLATION OPEN" or v.get("violationstatus") == "Open"
        ),
        class_a=classes.get("A", 0),
        class_b=classes.get("B", 0),
        class_c=classes.get("C", 0),
    )


def fetch_violations(client: OpenDataClient, key: PropertyKey) -> ViolationSummary:
    rows = client.query(HPD_VIOLATIONS, _where(key), order="inspectiondate DESC", limit=200)
    return summarize_violations(rows)


def summarize_complaints(rows: list[dict[str, Any]], today: date | None = None) -> ComplaintSummary:
    today = today or datetime.now(UTC).date()
    cutoff = years_before(today, 3)
    recent = 0
    for c in rows:
        received = parse_date(c.get("receiveddate"))
        if received and received > cutoff:
            recent += 1
    types = Counter(
        clean(c.get("majorcategory") or c.get("majorcategoryid")) or "Unknown" for c in rows
    )
    return ComplaintSummary(total=len(rows), recent=recent, top_types=types.most_common(5))


def fetch_complaints(
    client: OpenDataClient, key: PropertyKey, today: date | None = None
) -> ComplaintSummary:
    rows = client.query(HPD_COMPLAINTS, _where(key), order="receiveddate DESC", limit=200)
    return summarize_complaints(rows, today)


def normalize_registration_contacts(rows: list[dict[str, Any]]) -> ContactBatch:
    batch = ContactBatch()
    for c in rows:
        contact = RegisteredContact(
            type=RegistrationType.from_label(c.get("type") or c.get("contactdescription")),
            corporate_name=clean(c.get("corporationname")),
            first_name=clean(c.get("firstname")),
            last_name=clean(c.get("lastname")),
            title=clean(c.get("title")),
            business_address=join_address(c.get("businesshousenumber"), c.get("businessstreetname")),
            business_city=clean(c.get("businesscity")),
            business_state=clean(c.get("businessstate")),
            business_zip=clean(c.get("businesszip")),
        )
        batch.registered_contacts.append(contact)
    return batch


def fetch_registrations(client: OpenDataClient, key: PropertyKey) -> ContactBatch:
    regs = client.query(HPD_REG, _where(key), order="registrationenddate DESC", limit=5)
    reg_ids = [clean(r.get("registrationid")) for r in regs if r.get("registrationid")]
    if not reg_ids:
        return ContactBatch()
    # Registration ids are numeric; anything else is dropped before it reaches SoQL.
    id_list = ",".join(f"'{rid}'" for rid in reg_ids if rid.isdigit())
    if not id_list:
        return ContactBatch()
    rows = client.query(HPD_CONTACTS, f"registrationid in({id_list})", limit=30)
    return normalize_registration_contacts(rows)


def summarize_litigation(rows: list[dict[str, Any]]) -> LitigationSummary:
    statuses = [clean(row.get("casestatus")).upper() for row in rows]
    types = Counter(clean(row.get("casetype")) or "Unknown" for row in rows)
    return LitigationSummary(
        total=len(rows),
        open=sum(1 for s in statuses if s == "OPEN"),
        harassment_finding=any(
            clean(row.get("findingofharassment")).upper() == "YES" for row in rows
        ),
        respondents=[clean(row.get("respondent")) for row in rows if clean(row.get("respondent"))],
        types=types.most_common(),
    )


def fetch_litigation(client: OpenDataClient, key: PropertyKey) -> LitigationSummary:
    rows = client.query(HPD_LITIGATION, _where(key), order="caseopendate DESC", limit=50)
    return summarize_litigation(rows)


def fetch_speculation(client: OpenDataClient, key: PropertyKey) -> SpeculationListing | None:
    rows = client.query(SPECULATION, _where(key), limit=5)
    if not rows:
        return None
    first = rows[0]
    return SpeculationListing(
        on_watch_list=True,
        deed_date=clean(first.get("deeddate")),
        sale_price=safe_float(first.get("saleprice")),
        cap_rate=clean(first.get("caprate")),
        borough_median_cap=clean(first.get("boroughmedian")),
    )
