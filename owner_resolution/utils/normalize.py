"""Field-level helpers shared by every feed module.

Upstream records are loosely typed: numbers arrive as strings, dates come in
several formats, names are split across columns and padded with placeholders.
Everything here falls back to an empty value instead of raising.
"""

from __future__ import annotations

import re
from datetime import date, datetime

import phonenumbers

PLACEHOLDERS = {"N/A", "NA", "NONE", "NULL", "-"}

_DATE_FORMATS = ("%m/%d/%Y", "%m/%d/%y", "%Y%m%d", "%Y-%m-%d")


def phone_digits(raw_phone: str | None) -> str:
    """Strip formatting and keep the trailing ten significant digits.

    Applying it twice gives the same value as applying it once.
    """
    digits = re.sub(r"\D", "", raw_phone or "")
    return digits[-10:]


def to_e164(raw_phone: str | None, default_region: str = "US") -> str | None:
    if not raw_phone:
        return None
    try:
        parsed = phonenumbers.parse(raw_phone, default_region)
    except phonenumbers.NumberParseException:
        return None
    if not phonenumbers.is_possible_number(parsed) or not phonenumbers.is_valid_number(parsed):
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def clean(value: object) -> str:
    if value is None:
        return ""
    return re.sub(r"\s+", " ", str(value)).strip()


def is_placeholder(value: str | None) -> bool:
    return clean(value).upper() in PLACEHOLDERS


def join_name(first: str | None, last: str | None) -> str:
    parts = [clean(p) for p in (first, last)]
    return " ".join(p for p in parts if p)


def display_name(business: str | None, first: str | None, last: str | None) -> str:
    """Business name wins unless the filing left the "N/A" placeholder in it."""
    business_name = clean(business)
    if business_name and not is_placeholder(business_name):
        return business_name
    return join_name(first, last)


def join_address(*parts: str | None, sep: str = " ") -> str:
    return sep.join(p for p in (clean(x) for x in parts) if p)


def last_name_token(name: str | None) -> str:
    tokens = clean(name).upper().split(" ")
    return tokens[-1] if tokens else ""


def safe_int(value: object) -> int:
    if value is None or value == "":
        return 0
    try:
        return int(float(str(value).replace(",", "")))
    except (TypeError, ValueError):
        return 0


def safe_float(value: object) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(str(value).replace(",", "").replace("$", ""))
    except (TypeError, ValueError):
        return 0.0


def parse_date(value: object) -> date | None:
    """Parse the ISO timestamps and US-style dates the open data feeds emit."""
    text = clean(value)
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(text[:10], fmt).date()
        except ValueError:
            continue
    return None


def years_before(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        # Feb 29 in a non-leap target year
        return day.replace(year=day.year - years, day=28)
