"""Weekly pay computation for shift and hourly drivers.

Pay is always recomputed from the day entries. The "paid" checkpoint on
``DriverWeekPayroll`` stores no amount, so editing a day after marking the
week paid changes the amount shown without touching the checkpoint.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Mapping, Sequence

from ...models.domain import DayStatus, Driver, DriverDayEntry, DriverWeekPayroll, PayType


@dataclass(slots=True)
class WeekPay:
    work_units: int = 0
    leave_units: int = 0
    unpaid_units: int = 0
    hours_work: float = 0.0
    hours_leave: float = 0.0
    hours_unpaid: float = 0.0
    amount: float = 0.0

    @property
    def has_activity(self) -> bool:
        return any(
            (
                self.work_units,
                self.leave_units,
                self.unpaid_units,
                self.hours_work,
                self.hours_leave,
                self.hours_unpaid,
            )
        )


@dataclass(slots=True)
class DriverWeekRow:
    driver: Driver
    pay: WeekPay
    entries: dict[date, DriverDayEntry]
    payroll: DriverWeekPayroll | None = None

    @property
    def paid(self) -> bool:
        return bool(self.payroll and self.payroll.paid)

    @property
    def outstanding(self) -> bool:
        """Has paid work recorded but has not been marked paid yet."""
        return not self.paid and self.pay.has_activity and self.pay.amount > 0


@dataclass(slots=True)
class WeekSummary:
    week_start: date
    rows: list[DriverWeekRow] = field(default_factory=list)

    @property
    def total_due(self) -> float:
        return sum(row.pay.amount for row in self.rows)

    @property
    def unpaid_drivers(self) -> int:
        return sum(1 for row in self.rows if row.outstanding)


def compute_driver_week(
    driver: Driver,
    entries_by_date: Mapping[date, DriverDayEntry],
    week: Sequence[date],
) -> WeekPay:
    """Compute paid and unpaid units for one driver over ``week``.

    Shift drivers earn one unit per work or leave day regardless of hours.
    Hourly drivers earn the recorded hours on work and leave days; off and sick
    days count zero hours even when a stray value is stored. Days with no
    entry are left out of every total.
    """
    pay = WeekPay()
    for day in week:
        entry = entries_by_date.get(day)
        if entry is None:
            continue

        if driver.pay_type is PayType.SHIFT:
            if entry.status is DayStatus.WORK:
                pay.work_units += 1
            elif entry.status is DayStatus.LEAVE:
                pay.leave_units += 1
            else:
                pay.unpaid_units += 1
        else:
            if entry.status is DayStatus.WORK:
                pay.hours_work += entry.hours or 0.0
            elif entry.status is DayStatus.LEAVE:
                pay.hours_leave += entry.hours or 0.0

    rate = driver.pay_rate or 0.0
    if driver.pay_type is PayType.SHIFT:
        pay.amount = (pay.work_units + pay.leave_units) * rate
    else:
        pay.amount = (pay.hours_work + pay.hours_leave) * rate
    return pay


def index_entries(entries: Iterable[DriverDayEntry]) -> dict[str, dict[date, DriverDayEntry]]:
    """Group entries as ``{driver_id: {entry_date: entry}}``."""
    grouped: dict[str, dict[date, DriverDayEntry]] = {}
    for entry in entries:
        grouped.setdefault(entry.driver_id, {})[entry.entry_date] = entry
    return grouped


def summarize_week(
    drivers: Sequence[Driver],
    entries: Iterable[DriverDayEntry],
    payroll: Iterable[DriverWeekPayroll],
    week: Sequence[date],
) -> WeekSummary:
    by_driver = index_entries(entries)
    payroll_by_driver = {row.driver_id: row for row in payroll}
    summary = WeekSummary(week_start=week[0])
    for driver in drivers:
        driver_entries = by_driver.get(driver.id, {})
        summary.rows.append(
            DriverWeekRow(
                driver=driver,
                pay=compute_driver_week(driver, driver_entries, week),
                entries={day: driver_entries[day] for day in week if day in driver_entries},
                payroll=payroll_by_driver.get(driver.id),
            )
        )
    return summary
