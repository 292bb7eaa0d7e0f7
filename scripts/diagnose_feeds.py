from __future__ import annotations

import json

import requests
from dotenv import load_dotenv

from owner_resolution.config import Settings
from owner_resolution.enrichment.apollo import APOLLO_BASE
from owner_resolution.enrichment.pdl import PDL_ENRICH_URL
from owner_resolution.feeds import dob, hpd, pluto


def status(ok: bool, name: str, detail: str = "") -> dict:
    return {"ok": ok, "service": name, "detail": detail}


DATASETS = {
    "PLUTO": pluto.PLUTO,
    "Rent stabilization": pluto.RENT_STAB,
    "HPD violations": hpd.HPD_VIOLATIONS,
    "HPD complaints": hpd.HPD_COMPLAINTS,
    "HPD registrations": hpd.HPD_REG,
    "HPD contacts": hpd.HPD_CONTACTS,
    "HPD litigation": hpd.HPD_LITIGATION,
    "Speculation watch list": hpd.SPECULATION,
    "DOB permits": dob.DOB_PERMITS,
    "DOB job filings": dob.DOB_JOBS,
    "DOB NOW": dob.DOB_NOW,
    "DOB ECB": dob.DOB_ECB,
}


def main() -> None:
    load_dotenv()
    settings = Settings.from_env()
    headers = {"X-App-Token": settings.app_token} if settings.app_token else {}
    results = []

    for name, dataset in DATASETS.items():
        try:
            r = requests.get(
                f"{settings.open_data_url}/{dataset}.json",
                params={"$limit": 1},
                headers=headers,
                timeout=settings.feed_timeout,
            )
            results.append(status(r.ok, name, f"HTTP {r.status_code}"))
        except Exception as e:
            results.append(status(False, name, str(e)))

    # Apollo - auth health check
    if settings.apollo_api_key:
        try:
            r = requests.get(
                f"{APOLLO_BASE}/auth/health", headers={"X-Api-Key": settings.apollo_api_key}, timeout=20
            )
            results.append(status(r.ok, "Apollo", f"HTTP {r.status_code}"))
        except Exception as e:
            results.append(status(False, "Apollo", str(e)))
    else:
        results.append(status(False, "Apollo", "APOLLO_API_KEY not set"))

    # PDL - no free ping; a 404 still proves the key is accepted
    if settings.pdl_api_key:
        try:
            r = requests.get(
                PDL_ENRICH_URL,
                params={"first_name": "zz", "last_name": "zz", "min_likelihood": "10"},
                headers={"X-Api-Key": settings.pdl_api_key},
                timeout=20,
            )
            results.append(status(r.status_code in (200, 404), "People Data Labs", f"HTTP {r.status_code}"))
        except Exception as e:
            results.append(status(False, "People Data Labs", str(e)))
    else:
        results.append(status(False, "People Data Labs", "PDL_API_KEY not set"))

    print(json.dumps(results, indent=2))


if __name__ == "__main__":
    main()
