"""Completed-job sync: create work days from completed jobs without clobbering anything.

Rules per (driver, date) with at least one completed job:

1. an existing leave/off/sick entry is left alone;
2. an existing manual entry is left alone;
3. an existing auto work entry is already correct, so nothing is written;
4. otherwise an auto work entry (one shift, no hours) is upserted.

Running the sync again over the same evidence writes nothing new.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping

from ...errors import PersistenceError
from ...models.domain import CompletedJobSignal, DayStatus, DriverDayEntry, EntryProvenance
from ...persistence.day_entries import DayEntryStore

AUTO_WORK_NOTE = "From completed job"

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SyncReport:
    created: list[DriverDayEntry] = field(default_factory=list)
    skipped_protected: int = 0
    skipped_manual: int = 0
    skipped_existing: int = 0

    @property
    def signals_considered(self) -> int:
        return len(self.created) + self.skipped_protected + self.skipped_manual + self.skipped_existing


def auto_work_entry(driver_id: str, entry_date: date) -> DriverDayEntry:
    return DriverDayEntry(
        driver_id=driver_id,
        entry_date=entry_date,
        status=DayStatus.WORK,
        shifts=1,
        hours=None,
        notes=AUTO_WORK_NOTE,
        provenance=EntryProvenance.AUTO,
    )


def plan_sync(
    existing: Mapping[tuple[str, date], DriverDayEntry],
    signals: Iterable[CompletedJobSignal],
) -> SyncReport:
    """Decide which entries the sync would write. Pure; touches no store."""
    report = SyncReport()
    seen: set[tuple[str, date]] = set()
    for signal in signals:
        key = (signal.driver_id, signal.entry_date)
        if not signal.driver_id or key in seen:
            continue
        seen.add(key)

        current = existing.get(key)
        if current is not None and current.status.is_protected:
            report.skipped_protected += 1
        elif current is not None and current.provenance is EntryProvenance.MANUAL:
            report.skipped_manual += 1
        elif current is not None and current.status is DayStatus.WORK:
            report.skipped_existing += 1
        else:
            report.created.append(auto_work_entry(signal.driver_id, signal.entry_date))
    return report


def reconcile(store: DayEntryStore, signals: Iterable[CompletedJobSignal]) -> SyncReport:
    """Apply the sync plan to ``store`` one upsert at a time.

    The plan is computed from a single read before anything is written. A
    failed upsert stops the run; the entries already written stay written and
    the error says how many there were. Re-running the sync finishes the rest.
    """
    signal_list = [signal for signal in signals if signal.driver_id]
    if not signal_list:
        return SyncReport()

    start = min(signal.entry_date for signal in signal_list)
    end = max(signal.entry_date for signal in signal_list)
    existing = {entry.key: entry for entry in store.list_entries(start, end)}

    report = plan_sync(existing, signal_list)
    for applied, entry in enumerate(report.created):
        try:
            store.upsert(entry)
        except PersistenceError as exc:
            raise PersistenceError(
                f"Sync stopped after {applied} of {len(report.created)} new work day(s): {exc}"
            ) from exc

    logger.info(
        f"Completed-job sync: {len(report.created)} created, {report.skipped_protected} protected, "
        f"{report.skipped_manual} manual, {report.skipped_existing} already work"
    )
    return report
