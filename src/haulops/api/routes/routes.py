"""Route planning endpoints."""

from __future__ import annotations

import math

from fastapi import APIRouter, HTTPException, status

from ... import providers
from ...errors import HaulopsError
from ...models.domain import Coordinate
from ...schemas.routing import (
    CoordinateModel,
    GeocodeRequest,
    GeocodeResponse,
    RouteMilesRequest,
    RouteMilesResponse,
    RoutePlanRequest,
    RoutePlanResponse,
    RouteStopModel,
)
from ...services.routing.osrm_client import meters_to_miles
from ...services.routing.postcodes import postcode_key
from ..errors import to_http_exception

router = APIRouter(tags=["routes"])


def _coordinate(raw: object) -> Coordinate | None:
    if not isinstance(raw, dict):
        return None
    try:
        lat = float(raw.get("lat"))
        lng = float(raw.get("lng"))
    except (TypeError, ValueError):
        return None
    if not (math.isfinite(lat) and math.isfinite(lng)):
        return None
    return Coordinate(lat, lng)


@router.post("/geocode", response_model=GeocodeResponse, status_code=status.HTTP_200_OK)
def geocode(payload: GeocodeRequest) -> GeocodeResponse:
    if not payload.postcodes:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="postcodes[] is required")

    keys = [postcode_key("" if item is None else str(item)) for item in payload.postcodes]
    keys = [key for key in keys if key]
    if not keys:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No valid postcodes provided")

    try:
        results = providers.get_geocoder().resolve(keys)
    except Exception as exc:
        raise to_http_exception(exc, "Geocoding failed") from exc

    return GeocodeResponse(
        results={
            key: CoordinateModel(lat=hit.latitude, lng=hit.longitude) if hit else None
            for key, hit in results.items()
        }
    )


@router.post("/route-miles", response_model=RouteMilesResponse, status_code=status.HTTP_200_OK)
def route_miles(payload: RouteMilesRequest) -> RouteMilesResponse:
    if len(payload.coords) < 2:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="coords[] (length >= 2) is required")

    coords = [c for c in (_coordinate(raw) for raw in payload.coords) if c is not None]
    if len(coords) < 2:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="coords[] must contain valid lat/lng values"
        )

    try:
        meters = providers.get_route_client().route_distance(coords)
    except Exception as exc:
        raise to_http_exception(exc, "Road distance failed") from exc
    return RouteMilesResponse(miles=meters_to_miles(meters))


@router.post("/routes/plan", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def plan_route(payload: RoutePlanRequest) -> RoutePlanResponse:
    """Geocode the drafted stops and measure the road distance. Nothing is saved."""
    try:
        result = providers.get_route_assembler().assemble(
            [stop.to_domain() for stop in payload.stops],
            tz=payload.timezone,
        )
    except Exception as exc:
        raise to_http_exception(exc, "Failed to confirm route") from exc
    return RoutePlanResponse.from_domain(result)


@router.put("/jobs/{job_id}/route", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def save_job_route(job_id: str, payload: RoutePlanRequest) -> RoutePlanResponse:
    """Plan the route and, only if every step succeeded, replace the job's stops."""
    try:
        result = providers.get_route_assembler().assemble(
            [stop.to_domain() for stop in payload.stops],
            tz=payload.timezone,
        )
        providers.get_job_route_store().replace_stops(job_id, result)
    except Exception as exc:
        raise to_http_exception(exc, "Failed to save job route") from exc
    return RoutePlanResponse.from_domain(result)


@router.get("/jobs/{job_id}/route", response_model=RoutePlanResponse, status_code=status.HTTP_200_OK)
def get_job_route(job_id: str) -> RoutePlanResponse:
    try:
        stops = providers.get_job_route_store().get_stops(job_id)
    except HaulopsError as exc:
        raise to_http_exception(exc, "Failed to load job route") from exc
    return RoutePlanResponse(stops=[RouteStopModel.from_domain(stop) for stop in stops], total_miles=None)
