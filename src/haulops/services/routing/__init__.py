"""Route planning services."""

from .assembler import RouteAssembler, local_time_from_utc, local_time_to_utc
from .geocoding import PostcodesIOClient
from .osrm_client import OSRMClient, meters_to_miles
from .postcodes import format_postcode, postcode_key

__all__ = [
    "RouteAssembler",
    "PostcodesIOClient",
    "OSRMClient",
    "format_postcode",
    "postcode_key",
    "meters_to_miles",
    "local_time_to_utc",
    "local_time_from_utc",
]
