"""HTTP client for bulk postcode lookups against postcodes.io."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

import httpx

from ...config import settings
from ...errors import GeocodingError
from ...models.domain import Coordinate
from .postcodes import postcode_key

logger = logging.getLogger(__name__)


class Geocoder(Protocol):
    def resolve(self, keys: Iterable[str]) -> dict[str, Coordinate | None]:
        """Return an entry for every submitted key; ``None`` marks "not found"."""
        ...


class PostcodesIOClient:
    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        batch_limit: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self.batch_limit = batch_limit or settings.geocoder_batch_limit
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def resolve(self, keys: Iterable[str]) -> dict[str, Coordinate | None]:
        """Resolve canonical postcode keys to coordinates.

        Keys are re-canonicalised and de-duplicated. Up to ``batch_limit`` keys
        go out in a single bulk request. Keys the service does not mention in
        its reply are reported as ``None`` rather than dropped.
        """
        unique: list[str] = []
        for key in keys:
            canonical = postcode_key(key)
            if canonical and canonical not in unique:
                unique.append(canonical)
        if not unique:
            return {}

        results: dict[str, Coordinate | None] = {}
        with self._get_client() as client:
            for start in range(0, len(unique), self.batch_limit):
                batch = unique[start : start + self.batch_limit]
                results.update(self._lookup_batch(client, batch))

        for key in unique:
            results.setdefault(key, None)
        missing = sum(1 for key in unique if results[key] is None)
        logger.info(f"Geocoded {len(unique)} postcode(s), {missing} not found")
        return {key: results[key] for key in unique}

    def _lookup_batch(self, client: httpx.Client, batch: list[str]) -> dict[str, Coordinate | None]:
        url = f"{self.base_url}/postcodes"
        try:
            response = client.post(url, json={"postcodes": batch})
        except httpx.HTTPError as exc:
            raise GeocodingError(f"Geocoding service is not reachable at {self.base_url}: {exc}") from exc

        if response.is_error:
            raise GeocodingError(
                f"postcodes.io failed ({response.status_code}): {response.text[:200]}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise GeocodingError("postcodes.io returned a response that is not JSON") from exc

        items = payload.get("result") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise GeocodingError("postcodes.io response is missing the result list")

        resolved: dict[str, Coordinate | None] = {}
        for item in items:
            if not isinstance(item, dict):
                continue
            query = postcode_key(str(item.get("query") or ""))
            if not query:
                continue
            hit = item.get("result")
            if not hit:
                resolved[query] = None
                continue
            try:
                resolved[query] = Coordinate(float(hit["latitude"]), float(hit["longitude"]))
            except (KeyError, TypeError, ValueError) as exc:
                raise GeocodingError(f"postcodes.io returned malformed coordinates for {query}") from exc
        return resolved


def check_health(base_url: str | None = None) -> bool:
    """Look up a known postcode to confirm the geocoder answers."""
    base = (base_url or settings.geocoder_base_url).rstrip("/")
    try:
        response = httpx.get(f"{base}/postcodes/SW1A1AA", timeout=5.0)
        response.raise_for_status()
        return response.json().get("status") == 200
    except httpx.HTTPError:
        return False
    except ValueError:
        return False
