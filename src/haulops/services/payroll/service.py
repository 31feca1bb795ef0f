"""Payroll screen operations: classify days, edit hours, mark weeks paid, sync."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone

from ...config import settings
from ...models.domain import (
    DayStatus,
    Driver,
    DriverDayEntry,
    DriverWeekPayroll,
    EntryProvenance,
    PayType,
)
from ...persistence.day_entries import DayEntryStore
from ...persistence.payroll import CompletedJobSource, DriverDirectory, PayrollStore
from .calculator import WeekSummary, summarize_week
from .calendar import start_of_week, week_dates, week_end
from .reconciler import AUTO_WORK_NOTE, SyncReport, reconcile

MANUAL_REASONS = (
    "Standby",
    "Yard work",
    "Training",
    "Vehicle checks",
    "Maintenance support",
    "Ferry/Waiting",
    "Other",
)

DEFAULT_NOTES = {
    DayStatus.WORK: AUTO_WORK_NOTE,
    DayStatus.LEAVE: "Annual leave",
    DayStatus.OFF: "Off (unpaid)",
    DayStatus.SICK: "Sick (unpaid)",
}

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ManualReason:
    reason: str = "Standby"
    free_text: str = ""


def build_manual_note(status: DayStatus, reason: str = "", free_text: str = "") -> str:
    """``"Work (Training)"``, ``"Sick - flu"``, or ``"Work (free text)"`` when the reason is Other."""
    reason = (reason or "").strip()
    text = (free_text or "").strip()
    parts = [status.value.capitalize()]
    if reason and reason != "Other":
        parts.append(f"({reason})")
    if reason == "Other" and text:
        parts.append(f"({text})")
    elif text:
        parts.append(f"- {text}")
    return " ".join(parts)


def set_day_status(
    store: DayEntryStore,
    driver: Driver,
    day: date,
    status: DayStatus,
    manual: ManualReason | None = None,
    hours_override: float | None = None,
    leave_hours: float | None = None,
) -> DriverDayEntry:
    """Classify a driver's day, replacing any entry already stored for it."""
    existing = store.get(driver.id, day)

    if driver.pay_type is PayType.SHIFT:
        shifts = 1 if status.is_paid else 0
    else:
        shifts = 1

    hours: float | None = None
    if driver.pay_type is PayType.HOURLY:
        if status is DayStatus.WORK:
            base = (existing.hours or 0.0) if existing and existing.status is DayStatus.WORK else 0.0
            hours = max(0.0, hours_override) if hours_override is not None else base
        elif status is DayStatus.LEAVE:
            default_leave = leave_hours if leave_hours is not None else settings.default_leave_hours
            hours = max(0.0, hours_override if hours_override is not None else default_leave)
        else:
            hours = 0.0

    if manual is not None:
        notes = build_manual_note(status, manual.reason, manual.free_text)
        provenance = EntryProvenance.MANUAL
    elif existing is not None:
        notes = existing.notes or DEFAULT_NOTES[status]
        provenance = existing.provenance
    else:
        notes = DEFAULT_NOTES[status]
        provenance = EntryProvenance.AUTO if status is DayStatus.WORK else EntryProvenance.MANUAL

    entry = DriverDayEntry(
        driver_id=driver.id,
        entry_date=day,
        status=status,
        shifts=shifts,
        hours=hours,
        notes=notes,
        provenance=provenance,
    )
    store.upsert(entry)
    return entry


def update_work_hours(store: DayEntryStore, driver: Driver, day: date, hours: float) -> DriverDayEntry | None:
    """Set hours on an hourly driver's existing work day. Anything else is left untouched."""
    if driver.pay_type is not PayType.HOURLY:
        return None
    existing = store.get(driver.id, day)
    if existing is None or existing.status is not DayStatus.WORK:
        return None

    entry = DriverDayEntry(
        driver_id=driver.id,
        entry_date=day,
        status=DayStatus.WORK,
        shifts=1,
        hours=max(0.0, float(hours)),
        notes=existing.notes,
        provenance=existing.provenance,
    )
    store.upsert(entry)
    return entry


def clear_day(store: DayEntryStore, driver_id: str, day: date) -> bool:
    return store.delete(driver_id, day)


def mark_week_paid(
    store: PayrollStore,
    driver_id: str,
    day: date,
    paid: bool,
    now: datetime | None = None,
    note: str | None = None,
) -> DriverWeekPayroll:
    record = DriverWeekPayroll(
        driver_id=driver_id,
        week_start=start_of_week(day),
        paid=paid,
        paid_at=(now or datetime.now(timezone.utc)) if paid else None,
        paid_note=note,
    )
    store.set_paid(record)
    logger.info(f"Driver {driver_id} week {record.week_start} marked {'paid' if paid else 'unpaid'}")
    return record


def load_week(
    directory: DriverDirectory,
    entries: DayEntryStore,
    payroll: PayrollStore,
    day: date,
) -> WeekSummary:
    monday = start_of_week(day)
    return summarize_week(
        directory.list_drivers(),
        entries.list_entries(monday, week_end(monday)),
        payroll.list_for_week(monday),
        week_dates(monday),
    )


def sync_week(entries: DayEntryStore, jobs: CompletedJobSource, day: date) -> SyncReport:
    monday = start_of_week(day)
    signals = jobs.completed_job_days(monday, week_end(monday))
    return reconcile(entries, signals)
