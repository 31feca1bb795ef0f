"""Route planning request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..models.domain import ResolvedStop, RouteResult, StopDraft


class CoordinateModel(BaseModel):
    lat: float
    lng: float


class GeocodeRequest(BaseModel):
    postcodes: List[Any] = Field(default_factory=list)


class GeocodeResponse(BaseModel):
    results: Dict[str, Optional[CoordinateModel]]


class RouteMilesRequest(BaseModel):
    coords: List[Any] = Field(default_factory=list)


class RouteMilesResponse(BaseModel):
    miles: float


class StopDraftModel(BaseModel):
    postcode: str = ""
    name: Optional[str] = None
    planned_time: Optional[str] = Field(
        default=None,
        description="Local wall-clock time as entered, e.g. 2025-12-21T09:30.",
    )

    @field_validator("postcode", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> str:
        return "" if value is None else str(value)

    def to_domain(self) -> StopDraft:
        return StopDraft(postcode=self.postcode, display_name=self.name, planned_local_time=self.planned_time)


class RoutePlanRequest(BaseModel):
    stops: List[StopDraftModel] = Field(..., description="Collection first, delivery last, waypoints between.")
    timezone: Optional[str] = Field(
        default=None,
        description="IANA timezone the planned times were entered in. Defaults to the configured local timezone.",
    )


class RouteStopModel(BaseModel):
    stop_order: int
    postcode: str
    name: Optional[str] = None
    planned_time: Optional[datetime] = None
    lat: Optional[float] = None
    lng: Optional[float] = None

    @classmethod
    def from_domain(cls, stop: ResolvedStop) -> "RouteStopModel":
        return cls(
            stop_order=stop.sequence,
            postcode=stop.postcode,
            name=stop.display_name,
            planned_time=stop.planned_time_utc,
            lat=stop.latitude,
            lng=stop.longitude,
        )


class RoutePlanResponse(BaseModel):
    stops: List[RouteStopModel]
    total_miles: Optional[float] = None

    @classmethod
    def from_domain(cls, result: RouteResult) -> "RoutePlanResponse":
        return cls(
            stops=[RouteStopModel.from_domain(stop) for stop in result.stops],
            total_miles=result.total_distance_miles,
        )
