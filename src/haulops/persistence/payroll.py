"""Stores for drivers, weekly paid checkpoints and completed-job evidence."""

from __future__ import annotations

import logging
from datetime import date, datetime
from typing import Any, Protocol

from ..models.domain import CompletedJobSignal, Driver, DriverWeekPayroll, PayType
from .common import execute, parse_date, parse_datetime, require_client, require_owner

logger = logging.getLogger(__name__)


class DriverDirectory(Protocol):
    def list_drivers(self) -> list[Driver]:
        ...

    def get_driver(self, driver_id: str) -> Driver | None:
        ...


class PayrollStore(Protocol):
    def list_for_week(self, week_start: date) -> list[DriverWeekPayroll]:
        ...

    def set_paid(self, record: DriverWeekPayroll) -> None:
        """Upsert keyed by (driver_id, week_start)."""
        ...


class CompletedJobSource(Protocol):
    def completed_job_days(self, start: date, end: date) -> list[CompletedJobSignal]:
        ...


class InMemoryDriverDirectory:
    def __init__(self, drivers: list[Driver] | None = None) -> None:
        self._drivers = {driver.id: driver for driver in drivers or []}

    def list_drivers(self) -> list[Driver]:
        return sorted(self._drivers.values(), key=lambda driver: driver.full_name)

    def get_driver(self, driver_id: str) -> Driver | None:
        return self._drivers.get(driver_id)


class InMemoryPayrollStore:
    def __init__(self) -> None:
        self._records: dict[tuple[str, date], DriverWeekPayroll] = {}

    def list_for_week(self, week_start: date) -> list[DriverWeekPayroll]:
        return [record for (_, start), record in self._records.items() if start == week_start]

    def set_paid(self, record: DriverWeekPayroll) -> None:
        self._records[(record.driver_id, record.week_start)] = record


class InMemoryCompletedJobSource:
    def __init__(self, signals: list[CompletedJobSignal] | None = None) -> None:
        self.signals = list(signals or [])

    def completed_job_days(self, start: date, end: date) -> list[CompletedJobSignal]:
        return sorted(
            (signal for signal in self.signals if start <= signal.entry_date <= end),
            key=lambda signal: signal.entry_date,
        )


def driver_from_row(row: dict[str, Any]) -> Driver:
    return Driver(
        id=str(row["id"]),
        full_name=str(row.get("full_name") or ""),
        pay_type=PayType(str(row.get("pay_type") or "shift").strip().lower()),
        pay_rate=max(0.0, float(row.get("pay_rate") or 0.0)),
    )


class SupabaseDriverDirectory:
    def __init__(self, client: Any = None) -> None:
        self._client = client

    def _rows(self, query: Any, action: str) -> list[Driver]:
        drivers: list[Driver] = []
        for row in execute(query, action):
            try:
                drivers.append(driver_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid driver row: {e}")
        return drivers

    def list_drivers(self) -> list[Driver]:
        client = require_client(self._client)
        query = client.table("drivers").select("id, full_name, pay_type, pay_rate").order("full_name")
        return self._rows(query, "load drivers")

    def get_driver(self, driver_id: str) -> Driver | None:
        client = require_client(self._client)
        query = client.table("drivers").select("id, full_name, pay_type, pay_rate").eq("id", driver_id).limit(1)
        drivers = self._rows(query, "load driver")
        return drivers[0] if drivers else None


class SupabasePayrollStore:
    TABLE = "driver_week_payroll"

    def __init__(self, owner_id: str | None = None, client: Any = None) -> None:
        self.owner_id = require_owner(owner_id)
        self._client = client

    def list_for_week(self, week_start: date) -> list[DriverWeekPayroll]:
        client = require_client(self._client)
        query = (
            client.table(self.TABLE)
            .select("driver_id, week_start, paid, paid_at, paid_note")
            .eq("week_start", week_start.isoformat())
            .eq("owner_id", self.owner_id)
        )
        return [
            DriverWeekPayroll(
                driver_id=str(row["driver_id"]),
                week_start=parse_date(row["week_start"]),
                paid=bool(row.get("paid")),
                paid_at=parse_datetime(row.get("paid_at")),
                paid_note=row.get("paid_note"),
            )
            for row in execute(query, "load weekly payroll")
        ]

    def set_paid(self, record: DriverWeekPayroll) -> None:
        client = require_client(self._client)
        payload: dict[str, Any] = {
            "driver_id": record.driver_id,
            "week_start": record.week_start.isoformat(),
            "paid": record.paid,
            "paid_at": record.paid_at.isoformat() if isinstance(record.paid_at, datetime) else None,
            "paid_note": record.paid_note,
            "owner_id": self.owner_id,
        }
        query = client.table(self.TABLE).upsert(payload, on_conflict="owner_id,driver_id,week_start")
        execute(query, "update paid status")


class SupabaseCompletedJobSource:
    """Reads the ``v_driver_completed_job_days`` view (one row per driver per day)."""

    VIEW = "v_driver_completed_job_days"

    def __init__(self, owner_id: str | None = None, client: Any = None) -> None:
        self.owner_id = require_owner(owner_id)
        self._client = client

    def completed_job_days(self, start: date, end: date) -> list[CompletedJobSignal]:
        client = require_client(self._client)
        query = (
            client.table(self.VIEW)
            .select("driver_id, entry_date")
            .gte("entry_date", start.isoformat())
            .lte("entry_date", end.isoformat())
            .eq("owner_id", self.owner_id)
            .order("entry_date")
        )
        signals: list[CompletedJobSignal] = []
        for row in execute(query, "load completed jobs"):
            if not row.get("driver_id") or not row.get("entry_date"):
                continue
            signals.append(CompletedJobSignal(driver_id=str(row["driver_id"]), entry_date=parse_date(row["entry_date"])))
        return signals
