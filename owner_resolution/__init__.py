"""Building owner resolution from NYC public records.

Given a borough/block/lot, pulls the city's property, housing and building
feeds concurrently and turns them into ranked phones, ranked contacts, a
best-guess owner and a distress score.
"""

from __future__ import annotations

from .config import ConfigurationError, Settings
from .models import BuildingProfile, PropertyKey
from .pipeline import NoDataError, fetch_building_profile

__all__: list[str] = [
    "BuildingProfile",
    "ConfigurationError",
    "NoDataError",
    "PropertyKey",
    "Settings",
    "fetch_building_profile",
]
