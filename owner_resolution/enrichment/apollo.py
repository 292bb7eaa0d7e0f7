"""Apollo.io person and organization lookups.

Each public function returns structured data, or None / [] when Apollo has
no match, the key is missing or the call fails.
"""

from __future__ import annotations

from typing import Any

import requests
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential_jitter

from ..utils.logger import get_logger
from ..utils.matching import org_result_relevant

APOLLO_BASE = "https://api.apollo.io/api/v1"

KEY_PERSON_TITLES = [
    "Owner",
    "Principal",
    "CEO",
    "Property Manager",
    "Managing Director",
    "VP Operations",
    "Leasing Director",
]
NYC_LOCATION = "New York, New York, United States"


def _should_retry(exc: BaseException) -> bool:
    if isinstance(exc, requests.HTTPError):
        status = exc.response.status_code if exc.response is not None else 0
        return status in {429, 500, 502, 503, 504}
    return isinstance(exc, (requests.ConnectionError, requests.Timeout))


@retry(
    retry=retry_if_exception(_should_retry),
    wait=wait_exponential_jitter(initial=1, max=4),
    stop=stop_after_attempt(3),
    reraise=True,
)
def _post(path: str, body: dict[str, Any], api_key: str, timeout: float = 15) -> dict[str, Any]:
    resp = requests.post(
        f"{APOLLO_BASE}{path}",
        json=body,
        headers={"Content-Type": "application/json", "X-Api-Key": api_key},
        timeout=timeout,
    )
    resp.raise_for_status()
    return resp.json()


def _sanitized(phone: dict[str, Any] | None) -> str | None:
    if isinstance(phone, dict):
        return phone.get("sanitized_number") or None
    return None


def enrich_person(
    name: str,
    api_key: str | None,
    location: str | None = None,
    organization: str | None = None,
) -> dict[str, Any] | None:
    log = get_logger()
    if not api_key:
        return None
    first, _, last = (name or "").strip().partition(" ")
    last = last.strip()
    if not first or not last:
        log.info(f"Apollo person match skipped, need first and last name: {name!r}")
        return None

    body: dict[str, Any] = {
        "first_name": first,
        "last_name": last,
        "city": location or "New York",
        "state": "New York",
        "country": "United States",
        "reveal_personal_emails": True,
    }
    if organization:
        body["organization_name"] = organization
    try:
        data = _post("/people/match", body, api_key)
    except (requests.RequestException, ValueError) as e:
        log.warning(f"Apollo person match failed for {name}: {e}")
        return None

    person = data.get("person")
    if not person:
        log.info(f"Apollo has no person match for {name}")
        return None
    org = person.get("organization") or {}
    phones = [p.get("sanitized_number") for p in person.get("phone_numbers") or [] if p.get("sanitized_number")]
    return {
        "first_name": person.get("first_name") or first,
        "last_name": person.get("last_name") or last,
        "title": person.get("title"),
        "email": person.get("email"),
        "personal_emails": person.get("personal_emails") or [],
        "phone": phones[0] if phones else _sanitized(org.get("primary_phone")),
        "phones": phones,
        "linkedin_url": person.get("linkedin_url"),
        "company": org.get("name"),
        "company_phone": _sanitized(org.get("primary_phone")),
        "company_address": org.get("raw_address"),
        "city": person.get("city"),
        "state": person.get("state"),
        "seniority": person.get("seniority"),
    }


def enrich_organization(company_name: str, api_key: str | None) -> dict[str, Any] | None:
    log = get_logger()
    if not api_key or not company_name or len(company_name.strip()) < 3:
        return None
    body = {
        "organization_name": company_name,
        "organization_locations": [NYC_LOCATION],
        "per_page": 3,
    }
    try:
        data = _post("/mixed_companies/search", body, api_key)
    except (requests.RequestException, ValueError) as e:
        log.warning(f"Apollo organization search failed for {company_name}: {e}")
        return None

    orgs = [*(data.get("organizations") or []), *(data.get("accounts") or [])]
    match = next((o for o in orgs if org_result_relevant(company_name, o.get("name") or "")), None)
    if match is None:
        if orgs:
            log.info(f"Apollo organization results not relevant to {company_name!r}, discarding")
        return None
    return {
        "name": match.get("name") or company_name,
        "website": match.get("website_url"),
        "industry": match.get("industry"),
        "employee_count": match.get("estimated_num_employees"),
        "phone": _sanitized(match.get("primary_phone")),
        "address": match.get("raw_address"),
        "city": match.get("city"),
        "state": match.get("state"),
        "linkedin_url": match.get("linkedin_url"),
        "founded_year": match.get("founded_year"),
    }


def find_people_at_org(org_name: str, api_key: str | None) -> list[dict[str, Any]]:
    log = get_logger()
    if not api_key or not org_name:
        return []
    body = {
        "organization_name": [org_name],
        "person_titles": KEY_PERSON_TITLES,
        "person_locations": [NYC_LOCATION],
        "per_page": 5,
    }
    try:
        data = _post("/mixed_people/search", body, api_key)
    except (requests.RequestException, ValueError) as e:
        log.warning(f"Apollo people search failed for {org_name}: {e}")
        return []

    people = []
    for p in data.get("people") or []:
        phones = p.get("phone_numbers") or []
        people.append(
            {
                "apollo_id": p.get("id"),
                "first_name": p.get("first_name") or "",
                "last_name": p.get("last_name") or "",
                "title": p.get("title"),
                "seniority": p.get("seniority"),
                "email": p.get("email"),
                "phone": _sanitized(phones[0]) if phones else None,
                "org_name": (p.get("organization") or {}).get("name"),
            }
        )
    log.info(f"Apollo found {len(people)} people at {org_name}")
    return people
