"""HTTP client for road distances from an OSRM service."""

from __future__ import annotations

import logging
from typing import Protocol, Sequence

import httpx

from ...config import settings
from ...errors import RoutingError, ValidationError
from ...models.domain import Coordinate

METERS_PER_MILE = 1609.344

logger = logging.getLogger(__name__)


class RouteDistanceClient(Protocol):
    def route_distance(self, coordinates: Sequence[Coordinate]) -> float:
        """Total road distance in meters along the coordinates, in order."""
        ...


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds
        self._transport = transport

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def route_distance(self, coordinates: Sequence[Coordinate]) -> float:
        """Get the driving distance in meters through the waypoints in the given order.

        Single provider, single attempt. Raises ``RoutingError`` when OSRM
        reports no route, answers with an error status, or omits the distance.
        """
        if len(coordinates) < 2:
            raise ValidationError("At least two coordinates are required for a route.")

        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat;..."
        coordinate_str = ";".join(f"{c.longitude},{c.latitude}" for c in coordinates)
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        with self._get_client() as client:
            try:
                response = client.get(url, params={"overview": "false"})
            except httpx.HTTPError as exc:
                raise RoutingError(f"Failed to connect to OSRM service at {self.base_url}: {exc}") from exc

        try:
            data = response.json()
        except ValueError:
            data = None

        if isinstance(data, dict) and data.get("code") not in (None, "Ok"):
            message = data.get("message") or data.get("code")
            raise RoutingError(f"OSRM could not find a route: {message}")
        if response.is_error:
            raise RoutingError(f"OSRM failed ({response.status_code}): {response.text[:200]}")
        if not isinstance(data, dict):
            raise RoutingError("OSRM returned a response that is not JSON")

        routes = data.get("routes") or []
        meters = routes[0].get("distance") if routes and isinstance(routes[0], dict) else None
        if isinstance(meters, bool) or not isinstance(meters, (int, float)):
            raise RoutingError("OSRM did not return a distance")

        logger.info(f"OSRM route through {len(coordinates)} waypoint(s): {meters:.0f} m")
        return float(meters)


def meters_to_miles(meters: float) -> float:
    """Convert meters to miles rounded to one decimal place."""
    return round(meters / METERS_PER_MILE, 1)


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM service health with a minimal two-point route request."""
    base = (base_url or settings.osrm_base_url).rstrip("/")
    if not base:
        return False
    try:
        # Two points in central Manchester
        test_coords = "-2.2426,53.4808;-2.2374,53.4772"
        url = f"{base}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except httpx.HTTPError:
        return False
    except ValueError:
        return False
