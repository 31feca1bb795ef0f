"""Persistence of planned job routes (ordered stops plus planned road miles)."""

from __future__ import annotations

from typing import Any, Protocol

from ..models.domain import ResolvedStop, RouteResult
from .common import execute, optional_float, parse_datetime, require_client


class JobRouteStore(Protocol):
    def replace_stops(self, job_id: str, result: RouteResult) -> None:
        """Swap the job's stops for ``result`` and record its planned distance."""
        ...

    def get_stops(self, job_id: str) -> list[ResolvedStop]:
        ...


class InMemoryJobRouteStore:
    def __init__(self) -> None:
        self.stops: dict[str, list[ResolvedStop]] = {}
        self.planned_miles: dict[str, float | None] = {}

    def replace_stops(self, job_id: str, result: RouteResult) -> None:
        self.stops[job_id] = list(result.stops)
        self.planned_miles[job_id] = result.total_distance_miles

    def get_stops(self, job_id: str) -> list[ResolvedStop]:
        return sorted(self.stops.get(job_id, []), key=lambda stop: stop.sequence)


def stop_to_row(job_id: str, stop: ResolvedStop) -> dict[str, Any]:
    return {
        "job_id": job_id,
        "stop_order": stop.sequence,
        "postcode": stop.postcode,
        "name": stop.display_name,
        "planned_time": stop.planned_time_utc.isoformat() if stop.planned_time_utc else None,
        "lat": stop.latitude,
        "lng": stop.longitude,
    }


def stop_from_row(row: dict[str, Any]) -> ResolvedStop:
    return ResolvedStop(
        sequence=int(row["stop_order"]),
        postcode=str(row.get("postcode") or ""),
        display_name=row.get("name"),
        planned_time_utc=parse_datetime(row.get("planned_time")),
        latitude=optional_float(row.get("lat")),
        longitude=optional_float(row.get("lng")),
    )


class SupabaseJobRouteStore:
    def __init__(self, client: Any = None) -> None:
        self._client = client

    def replace_stops(self, job_id: str, result: RouteResult) -> None:
        # Three separate writes; a failure part way leaves earlier writes in place.
        client = require_client(self._client)
        execute(client.table("job_stops").delete().eq("job_id", job_id), "remove existing job stops")
        rows = [stop_to_row(job_id, stop) for stop in result.stops]
        execute(client.table("job_stops").insert(rows), "save job stops")
        execute(
            client.table("jobs").update({"planned_distance_miles": result.total_distance_miles}).eq("id", job_id),
            "save planned distance",
        )

    def get_stops(self, job_id: str) -> list[ResolvedStop]:
        client = require_client(self._client)
        query = (
            client.table("job_stops")
            .select("stop_order, postcode, name, planned_time, lat, lng")
            .eq("job_id", job_id)
            .order("stop_order")
        )
        return [stop_from_row(row) for row in execute(query, "load job stops")]
