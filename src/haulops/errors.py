"""Error taxonomy shared by the route planning and payroll workflows.

Every error is terminal for the operation in progress. Nothing in this package
retries automatically; the API layer turns these into HTTP responses and the
user resubmits.
"""

from __future__ import annotations

from typing import Sequence


class HaulopsError(Exception):
    """Base class for all domain errors raised by this package."""


class ValidationError(HaulopsError):
    """Input was rejected before any network or storage call was made."""


class GeocodingError(HaulopsError):
    """One or more postcodes could not be resolved, or the geocoder failed."""

    def __init__(self, message: str, missing: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.missing = list(missing)

    @classmethod
    def for_missing(cls, postcodes: Sequence[str]) -> "GeocodingError":
        return cls(f"Postcode(s) not found: {', '.join(postcodes)}", missing=postcodes)


class RoutingError(HaulopsError):
    """The routing service found no drivable path or returned unusable data."""


class PersistenceError(HaulopsError):
    """The backing store rejected a read or write (including authorization denial)."""


class OwnerRequiredError(HaulopsError):
    """A shared store was used without naming the owner whose rows it may touch."""
