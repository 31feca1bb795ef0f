"""Driver day entry stores keyed by (driver_id, entry_date)."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Protocol

from ..models.domain import DayStatus, DriverDayEntry, EntryProvenance
from .common import execute, optional_float, parse_date, require_client, require_owner

TABLE = "driver_day_entries"

logger = logging.getLogger(__name__)


class DayEntryStore(Protocol):
    def list_entries(self, start: date, end: date) -> list[DriverDayEntry]:
        ...

    def get(self, driver_id: str, entry_date: date) -> DriverDayEntry | None:
        ...

    def upsert(self, entry: DriverDayEntry) -> None:
        """Insert or replace the whole record for ``entry.key``."""
        ...

    def delete(self, driver_id: str, entry_date: date) -> bool:
        ...


class InMemoryDayEntryStore:
    """Dictionary-backed store with replace-whole-record upsert."""

    def __init__(self, entries: list[DriverDayEntry] | None = None) -> None:
        self._entries: dict[tuple[str, date], DriverDayEntry] = {}
        for entry in entries or []:
            self.upsert(entry)

    def list_entries(self, start: date, end: date) -> list[DriverDayEntry]:
        return sorted(
            (entry for entry in self._entries.values() if start <= entry.entry_date <= end),
            key=lambda entry: (entry.entry_date, entry.driver_id),
        )

    def get(self, driver_id: str, entry_date: date) -> DriverDayEntry | None:
        return self._entries.get((driver_id, entry_date))

    def upsert(self, entry: DriverDayEntry) -> None:
        self._entries[entry.key] = entry

    def delete(self, driver_id: str, entry_date: date) -> bool:
        return self._entries.pop((driver_id, entry_date), None) is not None

    def snapshot(self) -> dict[tuple[str, date], DriverDayEntry]:
        return dict(self._entries)


def provenance_from_notes(notes: str | None) -> EntryProvenance | None:
    """Recover provenance from the legacy ``Manual:`` / ``Auto:`` notes prefix."""
    text = (notes or "").strip().lower()
    if text.startswith("manual:"):
        return EntryProvenance.MANUAL
    if text.startswith("auto:"):
        return EntryProvenance.AUTO
    return None


def entry_from_row(row: dict[str, Any]) -> DriverDayEntry:
    status = DayStatus(str(row["status"]).strip().lower())
    notes = row.get("notes")
    raw_provenance = row.get("provenance")
    if raw_provenance:
        provenance = EntryProvenance(str(raw_provenance).strip().lower())
    else:
        # NULL provenance: rows written before the column was populated
        provenance = provenance_from_notes(notes) or EntryProvenance.MANUAL
    return DriverDayEntry(
        driver_id=str(row["driver_id"]),
        entry_date=parse_date(row["entry_date"]),
        status=status,
        shifts=int(row.get("shifts") or 0),
        hours=optional_float(row.get("hours")),
        notes=notes,
        provenance=provenance,
    )


def entry_to_row(entry: DriverDayEntry) -> dict[str, Any]:
    return {
        "driver_id": entry.driver_id,
        "entry_date": entry.entry_date.isoformat(),
        "status": entry.status.value,
        "shifts": entry.shifts,
        "hours": entry.hours,
        "notes": entry.notes,
        "provenance": entry.provenance.value,
    }


class SupabaseDayEntryStore:
    """Store backed by the ``driver_day_entries`` table.

    Every query is scoped to ``owner_id`` and upserts target the
    ``(owner_id, driver_id, entry_date)`` unique key, so an owner is required.
    Authorization itself is enforced by the database policies.

    The table must have the ``provenance`` column. Rows where it is NULL fall
    back to the legacy ``Manual:``/``Auto:`` notes prefix.
    """

    def __init__(self, owner_id: str | None = None, client: Any = None) -> None:
        self.owner_id = require_owner(owner_id)
        self._client = client

    @property
    def client(self) -> Any:
        return require_client(self._client)

    def _scoped(self, query: Any) -> Any:
        return query.eq("owner_id", self.owner_id)

    def list_entries(self, start: date, end: date) -> list[DriverDayEntry]:
        query = (
            self.client.table(TABLE)
            .select("driver_id, entry_date, status, shifts, hours, notes, provenance")
            .gte("entry_date", start.isoformat())
            .lte("entry_date", end.isoformat())
            .order("entry_date")
        )
        rows = execute(self._scoped(query), "load day entries")
        entries: list[DriverDayEntry] = []
        for row in rows:
            try:
                entries.append(entry_from_row(row))
            except (KeyError, ValueError, TypeError) as e:
                logger.warning(f"Skipping invalid day entry row: {e}")
        return entries

    def get(self, driver_id: str, entry_date: date) -> DriverDayEntry | None:
        query = (
            self.client.table(TABLE)
            .select("driver_id, entry_date, status, shifts, hours, notes, provenance")
            .eq("driver_id", driver_id)
            .eq("entry_date", entry_date.isoformat())
            .limit(1)
        )
        rows = execute(self._scoped(query), "load day entry")
        return entry_from_row(rows[0]) if rows else None

    def upsert(self, entry: DriverDayEntry) -> None:
        payload = {**entry_to_row(entry), "owner_id": self.owner_id}
        query = self.client.table(TABLE).upsert(payload, on_conflict="owner_id,driver_id,entry_date")
        execute(query, "save day entry")

    def delete(self, driver_id: str, entry_date: date) -> bool:
        query = (
            self.client.table(TABLE)
            .delete()
            .eq("driver_id", driver_id)
            .eq("entry_date", entry_date.isoformat())
        )
        rows = execute(self._scoped(query), "clear day entry")
        return bool(rows)
