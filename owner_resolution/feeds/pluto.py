"""PLUTO tax lot and rent stabilization unit counts."""

from __future__ import annotations

import re
from typing import Any

from ..models import PropertyKey, RentStabilization, TaxLot
from ..utils.normalize import clean, safe_int
from .client import OpenDataClient, bbl_where

PLUTO = "64uk-42ks"
RENT_STAB = "35ss-ekc5"

_UNIT_COUNT_COLUMN = re.compile(r"^uc(\d{4})$")


def parse_tax_lot(row: dict[str, Any], key: PropertyKey) -> TaxLot:
    return TaxLot(
        address=clean(row.get("address")),
        owner_name=clean(row.get("ownername")),
        borough=key.borough_name.title(),
        units_res=safe_int(row.get("unitsres")),
        units_total=safe_int(row.get("unitstotal")),
        year_built=safe_int(row.get("yearbuilt")),
        num_floors=safe_int(row.get("numfloors")),
        bldg_area=safe_int(row.get("bldgarea")),
        lot_area=safe_int(row.get("lotarea")),
        assess_total=safe_int(row.get("assesstot")),
        zone_dist=clean(row.get("zonedist1")),
        bldg_class=clean(row.get("bldgclass")),
        zip_code=clean(row.get("zipcode")),
    )


def fetch_tax_lot(client: OpenDataClient, key: PropertyKey) -> TaxLot | None:
    rows = client.query(PLUTO, bbl_where("borocode", key.boro, key.block, key.lot), limit=1)
    if not rows:
        return None
    return parse_tax_lot(rows[0], key)


def parse_rent_stabilization(row: dict[str, Any]) -> RentStabilization:
    counts: dict[int, int] = {}
    for column, value in row.items():
        match = _UNIT_COUNT_COLUMN.match(column)
        if match:
            counts[int(match.group(1))] = safe_int(value)
    return RentStabilization(building_id=clean(row.get("buildingid")), unit_counts=counts)


def fetch_rent_stabilization(client: OpenDataClient, key: PropertyKey) -> RentStabilization | None:
    rows = client.query(RENT_STAB, bbl_where("boroid", key.boro, key.block, key.lot), limit=5)
    if not rows:
        return None
    return parse_rent_stabilization(rows[0])
