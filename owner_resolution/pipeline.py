"""One building lookup: concurrent feed fetch, then ranking and scoring.

Every feed runs in its own worker and owns one slot of FeedResults. A feed
that fails or misses the deadline leaves its slot empty; the lookup only
fails when no feed produced anything.
"""

from __future__ import annotations

import concurrent.futures as cf
import time
from datetime import date
from typing import Any

from .config import Settings
from .enrichment import enrich_contacts
from .feeds import FEEDS, FeedError, FeedFetcher, OpenDataClient
from .models import BuildingProfile, Enrichment, FeedResults, PropertyKey
from .scoring import (
    distress_inputs_from,
    distress_score,
    rank_contacts,
    rank_phones,
    resolve_ownership,
    verify_lead,
)
from .utils.logger import bind_request, get_logger, new_request_id


class NoDataError(RuntimeError):
    """Raised when every upstream feed failed for a property."""


def _timed(fetch: FeedFetcher, client: OpenDataClient, key: PropertyKey) -> tuple[Any, float]:
    t0 = time.perf_counter()
    value = fetch(client, key)
    return value, time.perf_counter() - t0


def fetch_feeds(
    client: OpenDataClient,
    key: PropertyKey,
    settings: Settings,
    feeds: dict[str, FeedFetcher] | None = None,
    log: Any = None,
) -> tuple[FeedResults, dict[str, dict[str, Any]]]:
    """Fan out one task per feed and collect whatever settles before the deadline."""
    log = log or get_logger()
    feeds = FEEDS if feeds is None else feeds
    results = FeedResults()
    status: dict[str, dict[str, Any]] = {}

    pool = cf.ThreadPoolExecutor(max_workers=settings.max_workers, thread_name_prefix="feed")
    t0 = time.perf_counter()
    try:
        futures = {pool.submit(_timed, fetch, client, key): slot for slot, fetch in feeds.items()}
        done, pending = cf.wait(futures, timeout=settings.feed_deadline)

        for fut in done:
            slot = futures[fut]
            try:
                value, elapsed = fut.result()
            except FeedError as e:
                status[slot] = {"ok": False, "seconds": round(time.perf_counter() - t0, 3), "error": str(e)}
                log.warning(f"Feed {slot} failed for {key}: {e}")
                continue
            except Exception as e:
                status[slot] = {"ok": False, "seconds": round(time.perf_counter() - t0, 3), "error": str(e)}
                log.exception(f"Feed {slot} raised while processing {key}: {e}")
                continue
            if value is not None:
                setattr(results, slot, value)
            status[slot] = {"ok": True, "seconds": round(elapsed, 3)}
            log.info(f"Feed {slot} ok for {key} seconds={elapsed:.2f}")

        for fut in pending:
            slot = futures[fut]
            fut.cancel()
            status[slot] = {
                "ok": False,
                "seconds": round(settings.feed_deadline, 3),
                "error": f"timed out after {settings.feed_deadline}s",
                "timed_out": True,
            }
            log.warning(f"Feed {slot} missed the {settings.feed_deadline}s deadline for {key}")
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    return results, status


def fetch_building_profile(
    key: PropertyKey,
    settings: Settings | None = None,
    client: OpenDataClient | None = None,
    enrich: bool = True,
    today: date | None = None,
) -> BuildingProfile:
    settings = settings or Settings.from_env()
    log = bind_request(get_logger(), new_request_id())
    owns_client = client is None
    client = client or OpenDataClient.from_settings(settings)

    log.info(f"Building profile lookup for {key}")
    abandoned: list[str] = []
    try:
        feeds, status = fetch_feeds(client, key, settings, log=log)
        abandoned = [slot for slot, s in status.items() if s.get("timed_out")]
    finally:
        # Workers past the deadline may still be using the session.
        if owns_client and not abandoned:
            client.close()
        elif owns_client:
            log.debug(f"Leaving feed session open for abandoned feeds: {abandoned}")

    if not any(s["ok"] for s in status.values()):
        raise NoDataError(f"No upstream feed returned data for {key}")

    phones = rank_phones(feeds.phone_entries, feeds.registered_contacts, feeds.tax_roll_owner, today=today)
    ranked = rank_contacts(feeds.owner_contacts, feeds.registered_contacts)
    ownership = resolve_ownership(ranked, feeds.tax_roll_owner, feeds.litigation.respondents)
    distress = distress_score(distress_inputs_from(feeds))

    enrichment = Enrichment()
    if enrich and settings.enrichment_enabled:
        ranked, enrichment = enrich_contacts(ranked, feeds.tax_lot, settings)

    verification = verify_lead(ranked, feeds, phones, enrichment)

    failed = [slot for slot, s in status.items() if not s["ok"]]
    log.info(
        f"Profile for {key}: phones={len(phones)} contacts={len(ranked)} "
        f"owner={ownership.best_guess_name!r} confidence={ownership.confidence} "
        f"distress={distress.total} lead_grade={verification.grade if verification else None} "
        f"failed_feeds={failed}"
    )
    return BuildingProfile(
        key=key,
        feeds=feeds,
        phone_rankings=phones,
        ranked_contacts=ranked,
        ownership=ownership,
        distress=distress,
        enrichment=enrichment,
        verification=verification,
        feed_status=status,
    )
