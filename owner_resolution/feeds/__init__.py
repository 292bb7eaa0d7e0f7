"""Upstream public-record feeds, one fetch function per accumulator slot."""

from __future__ import annotations

from typing import Any, Callable

from ..models import PropertyKey
from . import dob, hpd, pluto
from .client import FeedError, OpenDataClient

FeedFetcher = Callable[[OpenDataClient, PropertyKey], Any]

# Slot name on FeedResults -> fetcher.
FEEDS: dict[str, FeedFetcher] = {
    "tax_lot": pluto.fetch_tax_lot,
    "violations": hpd.fetch_violations,
    "complaints": hpd.fetch_complaints,
    "permits": dob.fetch_permits,
    "registrations": hpd.fetch_registrations,
    "litigation": hpd.fetch_litigation,
    "penalties": dob.fetch_penalties,
    "rent_stabilization": pluto.fetch_rent_stabilization,
    "speculation": hpd.fetch_speculation,
    "job_filings": dob.fetch_job_filings,
    "dob_now_filings": dob.fetch_dob_now_filings,
}

__all__ = ["FEEDS", "FeedError", "FeedFetcher", "OpenDataClient"]
