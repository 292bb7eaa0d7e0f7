"""DOB datasets: permit issuance, BIS job filings, DOB NOW filings, ECB penalties.

Permit and filing records are the only feeds that carry phone numbers, so
they produce the raw phone entries as well as owner contacts.
"""

from __future__ import annotations

from typing import Any

from ..models import (
    ContactBatch,
    Filing,
    OwnerContact,
    PenaltySummary,
    PropertyKey,
    RawContactEntry,
    Source,
)
from ..utils.normalize import clean, display_name, is_placeholder, join_address, join_name, safe_float, safe_int
from .client import OpenDataClient, bbl_where

DOB_PERMITS = "83x8-shf7"
DOB_JOBS = "ic3t-wcy2"
DOB_NOW = "w9ak-ipjd"
DOB_ECB = "6bgk-3dad"

PERMIT_FIELDS = [
    "owner_s_first_name",
    "owner_s_last_name",
    "owner_s_phone__",
    "owner_s_business_name",
    "permittee_s_first_name",
    "permittee_s_last_name",
    "permittee_s_phone__",
    "permit_type",
    "permit_status",
    "filing_date",
    "job_description",
]

JOB_FIELDS = [
    "owner_s_first_name",
    "owner_s_last_name",
    "owner_sphone__",
    "owner_s_business_name",
    "owner_type",
    "latest_action_date",
    "job_type",
    "house__",
    "street_name",
]

DOB_NOW_FIELDS = [
    "job_filing_number",
    "job_type",
    "filing_date",
    "filing_status",
    "owner_first_name",
    "owner_last_name",
    "owner_business_name",
    "owner_phone",
    "permittee_first_name",
    "permittee_last_name",
    "permittee_business_name",
    "permittee_phone",
    "proposed_dwelling_units",
    "proposed_no_of_stories",
    "estimated_job_costs",
    "job_description",
]


def _borough_where(key: PropertyKey) -> str:
    return bbl_where("borough", key.borough_name, key.padded_block(5), key.padded_lot(5))


def _add_owner_contact(
    batch: ContactBatch,
    seen: set[str],
    name: str,
    phone: str,
    source: Source,
    address: str = "",
    key: str | None = None,
) -> None:
    # Keys of 3 characters or fewer are blank or placeholder rows.
    dedup_key = name + phone if key is None else key
    if len(dedup_key) <= 3 or dedup_key in seen:
        return
    seen.add(dedup_key)
    batch.owner_contacts.append(OwnerContact(name=name, phone=phone, source=source, address=address))


def normalize_permits(rows: list[dict[str, Any]]) -> ContactBatch:
    batch = ContactBatch()
    seen: set[str] = set()
    for p in rows:
        owner_name = join_name(p.get("owner_s_first_name"), p.get("owner_s_last_name"))
        business = clean(p.get("owner_s_business_name"))
        if is_placeholder(business):
            business = ""
        owner_phone = clean(p.get("owner_s_phone__"))
        filing_date = clean(p.get("filing_date")) or None
        name = owner_name or business

        # Permits key on the individual owner; a bare business name with no phone is not a lead.
        _add_owner_contact(batch, seen, name, owner_phone, Source.DOB_PERMIT, key=owner_name + owner_phone)
        if owner_phone:
            batch.phone_entries.append(
                RawContactEntry(
                    phone=owner_phone,
                    name=name,
                    is_owner_role=True,
                    event_date=filing_date,
                    source=Source.DOB_PERMIT_OWNER,
                )
            )

        # The permittee is usually the contractor, so it is tracked apart from the owner.
        applicant_phone = clean(p.get("permittee_s_phone__"))
        if applicant_phone and applicant_phone != owner_phone:
            batch.phone_entries.append(
                RawContactEntry(
                    phone=applicant_phone,
                    name=join_name(p.get("permittee_s_first_name"), p.get("permittee_s_last_name")),
                    is_owner_role=False,
                    event_date=filing_date,
                    source=Source.DOB_PERMIT_APPLICANT,
                )
            )
    return batch


def fetch_permits(client: OpenDataClient, key: PropertyKey) -> ContactBatch:
    rows = client.query(
        DOB_PERMITS,
        _borough_where(key),
        select=",".join(PERMIT_FIELDS),
        order="filing_date DESC",
        limit=20,
    )
    return normalize_permits(rows)


def normalize_job_filings(rows: list[dict[str, Any]]) -> ContactBatch:
    batch = ContactBatch()
    seen: set[str] = set()
    for d in rows:
        name = display_name(
            d.get("owner_s_business_name"), d.get("owner_s_first_name"), d.get("owner_s_last_name")
        )
        phone = clean(d.get("owner_sphone__"))
        address = join_address(d.get("house__"), d.get("street_name"))
        filing_date = clean(d.get("latest_action_date"))

        _add_owner_contact(batch, seen, name, phone, Source.DOB_JOB_FILING, address)
        batch.filings.append(
            Filing(
                job_type=clean(d.get("job_type")),
                filing_date=filing_date,
                owner_name=join_name(d.get("owner_s_first_name"), d.get("owner_s_last_name")),
                owner_business=clean(d.get("owner_s_business_name")),
                owner_phone=phone,
                source="DOB BIS",
            )
        )
        # BIS job filings only list the owner's phone.
        if phone:
            batch.phone_entries.append(
                RawContactEntry(
                    phone=phone,
                    name=name,
                    is_owner_role=True,
                    event_date=filing_date or None,
                    source=Source.DOB_JOB_FILING,
                )
            )
    return batch


def fetch_job_filings(client: OpenDataClient, key: PropertyKey) -> ContactBatch:
    rows = client.query(
        DOB_JOBS,
        _borough_where(key),
        select=",".join(JOB_FIELDS),
        order="latest_action_date DESC",
        limit=10,
    )
    return normalize_job_filings(rows)


def normalize_dob_now_filings(rows: list[dict[str, Any]]) -> ContactBatch:
    batch = ContactBatch()
    seen: set[str] = set()
    for d in rows:
        owner_name = display_name(
            d.get("owner_business_name"), d.get("owner_first_name"), d.get("owner_last_name")
        )
        owner_phone = clean(d.get("owner_phone"))
        permittee = display_name(
            d.get("permittee_business_name"),
            d.get("permittee_first_name"),
            d.get("permittee_last_name"),
        )
        permittee_phone = clean(d.get("permittee_phone"))
        filing_date = clean(d.get("filing_date"))

        batch.filings.append(
            Filing(
                job_type=clean(d.get("job_type")),
                filing_date=filing_date,
                owner_name=owner_name,
                owner_business=clean(d.get("owner_business_name")),
                owner_phone=owner_phone,
                source="DOB NOW",
                permittee=permittee,
                permittee_phone=permittee_phone,
                units=safe_int(d.get("proposed_dwelling_units")),
                stories=safe_int(d.get("proposed_no_of_stories")),
                status=clean(d.get("filing_status")),
                cost=clean(d.get("estimated_job_costs")),
                description=clean(d.get("job_description")),
            )
        )
        _add_owner_contact(batch, seen, owner_name, owner_phone, Source.DOB_NOW_FILING)

        if owner_phone:
            batch.phone_entries.append(
                RawContactEntry(
                    phone=owner_phone,
                    name=owner_name,
                    is_owner_role=True,
                    event_date=filing_date or None,
                    source=Source.DOB_NOW_OWNER,
                )
            )
        if permittee_phone and permittee_phone != owner_phone:
            batch.phone_entries.append(
                RawContactEntry(
                    phone=permittee_phone,
                    name=permittee,
                    is_owner_role=False,
                    event_date=filing_date or None,
                    source=Source.DOB_NOW_PERMITTEE,
                )
            )
    return batch


def fetch_dob_now_filings(client: OpenDataClient, key: PropertyKey) -> ContactBatch:
    rows = client.query(
        DOB_NOW,
        _borough_where(key),
        select=",".join(DOB_NOW_FIELDS),
        order="filing_date DESC",
        limit=15,
    )
    return normalize_dob_now_filings(rows)


def summarize_penalties(rows: list[dict[str, Any]]) -> PenaltySummary:
    return PenaltySummary(
        total=len(rows),
        active=sum(1 for e in rows if clean(e.get("ecbviolationstatus")).upper() != "RESOLVE"),
        total_penalty=sum(safe_float(e.get("penaltybalancedue")) for e in rows),
    )


def fetch_penalties(client: OpenDataClient, key: PropertyKey) -> PenaltySummary:
    where = bbl_where("boro", key.boro, key.padded_block(5), key.padded_lot(4))
    rows = client.query(DOB_ECB, where, order="issueddate DESC", limit=50)
    return summarize_penalties(rows)
