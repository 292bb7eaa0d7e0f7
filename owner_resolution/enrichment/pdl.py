from __future__ import annotations

import re
from typing import Any

import requests

from ..utils.logger import get_logger

PDL_ENRICH_URL = "https://api.peopledatalabs.com/v5/person/enrich"

# People Data Labs only resolves natural persons.
ENTITY_PATTERN = re.compile(
    r"LLC|CORP|INC|L\.P\.|ASSOCIATES|PARTNERS|HOLDINGS|TRUST|REALTY|PROPERTIES|MANAGEMENT|GROUP|CAPITAL"
)


def _pdl_request(params: dict[str, str], api_key: str, timeout: float = 15) -> requests.Response:
    return requests.get(PDL_ENRICH_URL, params=params, headers={"X-Api-Key": api_key}, timeout=timeout)


def _extract(data: dict[str, Any]) -> tuple[list[dict[str, str]], list[str]]:
    phones: list[dict[str, str]] = []
    if data.get("mobile_phone"):
        phones.append({"number": data["mobile_phone"], "type": "Mobile"})
    for number in data.get("phone_numbers") or []:
        if number and all(p["number"] != number for p in phones):
            phones.append({"number": number, "type": "Phone"})

    emails: list[str] = []
    if data.get("work_email"):
        emails.append(data["work_email"])
    for e in [*(data.get("personal_emails") or []), *(data.get("emails") or [])]:
        address = e if isinstance(e, str) else (e or {}).get("address")
        if address and address not in emails:
            emails.append(address)
    return phones, emails


def skip_trace(
    owner_name: str,
    api_key: str | None,
    address: str = "",
    city: str = "",
    state: str = "NY",
    zipcode: str = "",
) -> dict[str, Any]:
    """Look up phones and emails for a person; failures come back as {"error": ...}."""
    log = get_logger()
    if not api_key:
        return {"error": "PDL_API_KEY not set"}
    if ENTITY_PATTERN.search((owner_name or "").upper()):
        return {"error": "Cannot skip trace corporate entities"}

    first, _, last = (owner_name or "").strip().partition(" ")
    params = {"first_name": first, "last_name": last.strip(), "min_likelihood": "4"}
    optional = {"locality": city, "region": state, "postal_code": zipcode, "street_address": address}
    params.update({k: v for k, v in optional.items() if v})

    try:
        resp = _pdl_request(params, api_key)
    except requests.RequestException as e:
        log.warning(f"PDL request failed for {owner_name}: {e}")
        return {"error": f"PDL request failed: {e}"}

    if resp.status_code == 404:
        return {"error": f"No match found for {owner_name}"}
    if resp.status_code == 402:
        return {"error": "PDL credits exhausted"}
    if not resp.ok:
        return {"error": f"PDL error: {resp.status_code}"}
    try:
        payload = resp.json()
    except ValueError:
        return {"error": "PDL returned invalid JSON"}

    data = payload.get("data") or {}
    phones, emails = _extract(data)
    log.info(f"PDL matched {owner_name}: {len(phones)} phones, {len(emails)} emails")
    return {
        "name": data.get("full_name") or owner_name,
        "phones": phones,
        "emails": emails,
        "likelihood": payload.get("likelihood") or 0,
        "job_title": data.get("job_title"),
        "job_company": data.get("job_company_name"),
        "linkedin_url": data.get("linkedin_url"),
    }
