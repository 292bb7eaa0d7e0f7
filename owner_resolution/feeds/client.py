from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests

from ..config import Settings


class FeedError(Exception):
    pass


@dataclass
class OpenDataClient:
    """Thin SODA client for the NYC Open Data resource API.

    Feed calls are never retried: a failed or slow dataset yields no data for
    the current lookup.
    """

    base_url: str
    session: requests.Session
    timeout: float = 8.0

    @classmethod
    def from_settings(cls, settings: Settings) -> OpenDataClient:
        session = requests.Session()
        session.headers.update({"Accept": "application/json"})
        if settings.app_token:
            session.headers["X-App-Token"] = settings.app_token
        return cls(base_url=settings.open_data_url, session=session, timeout=settings.feed_timeout)

    def _resource_url(self, dataset: str) -> str:
        return f"{self.base_url}/{dataset}.json"

    def query(
        self,
        dataset: str,
        where: str,
        *,
        select: str | None = None,
        order: str | None = None,
        limit: int = 50,
    ) -> list[dict[str, Any]]:
        url = self._resource_url(dataset)
        params: dict[str, Any] = {"$where": where, "$limit": limit}
        if select:
            params["$select"] = select
        if order:
            params["$order"] = order
        try:
            resp = self.session.get(url, params=params, timeout=self.timeout)
        except requests.Timeout as e:
            raise FeedError(f"Timed out after {self.timeout}s for {dataset}") from e
        except requests.RequestException as e:
            raise FeedError(f"Request failed for {dataset}: {e}") from e
        if not resp.ok:
            body = (resp.text or "")[:200]
            raise FeedError(f"HTTP {resp.status_code} for {dataset}: {body}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise FeedError(f"Invalid JSON from {dataset}") from e
        if not isinstance(payload, list):
            raise FeedError(f"Unexpected payload shape from {dataset}")
        return [row for row in payload if isinstance(row, dict)]

    def close(self) -> None:
        self.session.close()


def bbl_where(boro_field: str, boro: str, block: str, lot: str) -> str:
    return f"{boro_field}='{boro}' AND block='{block}' AND lot='{lot}'"
