from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_OPEN_DATA_URL = "https://data.cityofnewyork.us/resource"


class ConfigurationError(RuntimeError):
    """Raised when an environment setting cannot be used."""


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive, got {raw!r}")
    return value


def _env_int(name: str, default: int) -> int:
    return int(_env_float(name, default))


@dataclass
class Settings:
    open_data_url: str = DEFAULT_OPEN_DATA_URL
    app_token: str | None = None
    feed_timeout: float = 8.0
    feed_deadline: float = 10.0
    max_workers: int = 12
    enrichment_enabled: bool = True
    enrichment_timeout: float = 15.0
    apollo_api_key: str | None = None
    pdl_api_key: str | None = None

    @classmethod
    def from_env(cls) -> Settings:
        feed_timeout = _env_float("FEED_TIMEOUT_SECONDS", 8.0)
        return cls(
            open_data_url=os.getenv("NYC_OPEN_DATA_URL", DEFAULT_OPEN_DATA_URL).rstrip("/"),
            app_token=os.getenv("NYC_OPEN_DATA_APP_TOKEN") or None,
            feed_timeout=feed_timeout,
            feed_deadline=_env_float("FEED_DEADLINE_SECONDS", feed_timeout + 2.0),
            max_workers=_env_int("FEED_MAX_WORKERS", 12),
            enrichment_enabled=os.getenv("ENRICHMENT_ENABLED", "1") != "0",
            enrichment_timeout=_env_float("ENRICHMENT_TIMEOUT_SECONDS", 15.0),
            apollo_api_key=os.getenv("APOLLO_API_KEY") or None,
            pdl_api_key=os.getenv("PDL_API_KEY") or None,
        )
