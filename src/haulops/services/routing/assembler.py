"""Route assembly: postcodes in, ordered geocoded stops and road miles out."""

from __future__ import annotations

import logging
from datetime import datetime, timezone, tzinfo
from typing import Sequence
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ...config import settings
from ...errors import GeocodingError, ValidationError
from ...models.domain import Coordinate, ResolvedStop, RouteResult, StopDraft
from .geocoding import Geocoder
from .osrm_client import RouteDistanceClient, meters_to_miles
from .postcodes import format_postcode, postcode_key

logger = logging.getLogger(__name__)

TimezoneLike = tzinfo | str | None


def resolve_timezone(tz: TimezoneLike) -> tzinfo:
    if isinstance(tz, tzinfo):
        return tz
    name = tz or settings.local_timezone
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValidationError(f"Unknown timezone '{name}'.") from exc


def local_time_to_utc(value: str | None, tz: TimezoneLike = None) -> datetime | None:
    """Interpret a wall-clock ``YYYY-MM-DDTHH:MM`` value in ``tz`` and return the UTC instant.

    Values that already carry an offset are converted as-is. Blank values
    mean "no planned time".
    """
    text = (value or "").strip()
    if not text:
        return None
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise ValidationError(f"Invalid planned time '{text}'.") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=resolve_timezone(tz))
    return parsed.astimezone(timezone.utc)


def local_time_from_utc(instant: datetime | None, tz: TimezoneLike = None) -> str:
    """Inverse of :func:`local_time_to_utc`, for pre-filling an edit form."""
    if instant is None:
        return ""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    local = instant.astimezone(resolve_timezone(tz))
    if local.second:
        return local.strftime("%Y-%m-%dT%H:%M:%S")
    return local.strftime("%Y-%m-%dT%H:%M")


class RouteAssembler:
    """Turns drafted stops into a resolved route.

    The geocoder and routing client are passed in so the assembler never
    reaches for a global client. Nothing is written to storage here; the
    caller saves or discards the whole ``RouteResult``.
    """

    def __init__(self, geocoder: Geocoder, router: RouteDistanceClient, tz: TimezoneLike = None) -> None:
        self.geocoder = geocoder
        self.router = router
        self.tz = tz

    def assemble(self, drafts: Sequence[StopDraft], tz: TimezoneLike = None) -> RouteResult:
        if len(drafts) < 2:
            raise ValidationError("Please enter at least collection and delivery postcodes.")

        keys = [postcode_key(draft.postcode) for draft in drafts]
        if sum(1 for key in keys if key) < 2:
            raise ValidationError("Please enter at least collection and delivery postcodes.")

        zone = resolve_timezone(tz if tz is not None else self.tz)
        planned_times = [local_time_to_utc(draft.planned_local_time, zone) for draft in drafts]

        unique_keys = list(dict.fromkeys(key for key in keys if key))
        coordinates = self.geocoder.resolve(unique_keys)
        missing = [format_postcode(key) for key in unique_keys if coordinates.get(key) is None]
        if missing:
            raise GeocodingError.for_missing(missing)

        stops: list[ResolvedStop] = []
        for index, (draft, key, planned) in enumerate(zip(drafts, keys, planned_times)):
            hit = coordinates.get(key) if key else None
            stops.append(
                ResolvedStop(
                    sequence=index + 1,
                    postcode=format_postcode(key),
                    display_name=draft.display_name,
                    planned_time_utc=planned,
                    latitude=hit.latitude if hit else None,
                    longitude=hit.longitude if hit else None,
                )
            )

        bad = next((stop for stop in stops if stop.coordinate is None), None)
        if bad is not None:
            label = bad.postcode or f"stop {bad.sequence} (no postcode)"
            raise GeocodingError(f"Missing coordinates for: {label}", missing=[label])

        path: list[Coordinate] = [stop.coordinate for stop in stops]
        meters = self.router.route_distance(path)
        miles = meters_to_miles(meters)
        logger.info(f"Assembled route with {len(stops)} stop(s), {miles} mi")
        return RouteResult(stops=stops, total_distance_miles=miles)
