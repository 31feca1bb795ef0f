"""Domain models for routes, drivers and payroll records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class PayType(str, Enum):
    HOURLY = "hourly"
    SHIFT = "shift"


class DayStatus(str, Enum):
    WORK = "work"
    LEAVE = "leave"
    OFF = "off"
    SICK = "sick"

    @property
    def is_protected(self) -> bool:
        """Statuses the completed-job sync must never overwrite."""
        return self in (DayStatus.LEAVE, DayStatus.OFF, DayStatus.SICK)

    @property
    def is_paid(self) -> bool:
        return self in (DayStatus.WORK, DayStatus.LEAVE)


class EntryProvenance(str, Enum):
    """Who created a day entry: a person on the payroll screen, or the sync."""

    MANUAL = "manual"
    AUTO = "auto"


@dataclass(slots=True, frozen=True)
class Coordinate:
    latitude: float
    longitude: float


@dataclass(slots=True)
class StopDraft:
    """A stop as typed by the user, before geocoding."""

    postcode: str
    display_name: Optional[str] = None
    planned_local_time: Optional[str] = None


@dataclass(slots=True)
class ResolvedStop:
    sequence: int
    postcode: str
    display_name: Optional[str]
    planned_time_utc: Optional[datetime]
    latitude: Optional[float]
    longitude: Optional[float]

    @property
    def coordinate(self) -> Coordinate | None:
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinate(self.latitude, self.longitude)


@dataclass(slots=True)
class RouteResult:
    """Ordered stops (collection first, delivery last) and the road distance."""

    stops: List[ResolvedStop]
    total_distance_miles: Optional[float]

    @property
    def collection(self) -> ResolvedStop:
        return self.stops[0]

    @property
    def delivery(self) -> ResolvedStop:
        return self.stops[-1]


@dataclass(slots=True, frozen=True)
class Driver:
    id: str
    full_name: str
    pay_type: PayType
    pay_rate: float


@dataclass(slots=True, frozen=True)
class DriverDayEntry:
    """Classification of one driver's calendar day, keyed by (driver_id, entry_date)."""

    driver_id: str
    entry_date: date
    status: DayStatus
    shifts: int = 0
    hours: Optional[float] = None
    notes: Optional[str] = None
    provenance: EntryProvenance = EntryProvenance.MANUAL

    @property
    def key(self) -> tuple[str, date]:
        return (self.driver_id, self.entry_date)


@dataclass(slots=True, frozen=True)
class DriverWeekPayroll:
    """Manual "paid" checkpoint for a driver's week. The amount is never stored."""

    driver_id: str
    week_start: date
    paid: bool
    paid_at: Optional[datetime] = None
    paid_note: Optional[str] = None


@dataclass(slots=True, frozen=True)
class CompletedJobSignal:
    driver_id: str
    entry_date: date
