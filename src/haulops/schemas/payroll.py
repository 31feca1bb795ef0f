"""Driver payroll request/response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..models.domain import DayStatus, DriverDayEntry, EntryProvenance, PayType
from ..services.payroll.calculator import DriverWeekRow, WeekSummary
from ..services.payroll.calendar import iso_week, week_dates, week_end, week_label
from ..services.payroll.reconciler import SyncReport


class DayEntryModel(BaseModel):
    driver_id: str
    entry_date: date
    status: DayStatus
    shifts: int
    hours: Optional[float] = None
    notes: Optional[str] = None
    provenance: EntryProvenance

    @classmethod
    def from_domain(cls, entry: DriverDayEntry) -> "DayEntryModel":
        return cls(
            driver_id=entry.driver_id,
            entry_date=entry.entry_date,
            status=entry.status,
            shifts=entry.shifts,
            hours=entry.hours,
            notes=entry.notes,
            provenance=entry.provenance,
        )


class WeekPayModel(BaseModel):
    work_units: int
    leave_units: int
    unpaid_units: int
    hours_work: float
    hours_leave: float
    hours_unpaid: float
    amount: float


class DriverWeekModel(BaseModel):
    driver_id: str
    full_name: str
    pay_type: PayType
    pay_rate: float
    pay: WeekPayModel
    paid: bool
    paid_at: Optional[datetime] = None
    days: List[DayEntryModel]

    @classmethod
    def from_row(cls, row: DriverWeekRow) -> "DriverWeekModel":
        pay = row.pay
        return cls(
            driver_id=row.driver.id,
            full_name=row.driver.full_name,
            pay_type=row.driver.pay_type,
            pay_rate=row.driver.pay_rate,
            pay=WeekPayModel(
                work_units=pay.work_units,
                leave_units=pay.leave_units,
                unpaid_units=pay.unpaid_units,
                hours_work=pay.hours_work,
                hours_leave=pay.hours_leave,
                hours_unpaid=pay.hours_unpaid,
                amount=pay.amount,
            ),
            paid=row.paid,
            paid_at=row.payroll.paid_at if row.payroll else None,
            days=[DayEntryModel.from_domain(entry) for entry in row.entries.values()],
        )


class WeekSummaryResponse(BaseModel):
    week_start: date
    week_end: date
    iso_year: int
    iso_week: int
    label: str
    dates: List[date]
    total_due: float
    unpaid_drivers: int
    drivers: List[DriverWeekModel]

    @classmethod
    def from_domain(cls, summary: WeekSummary) -> "WeekSummaryResponse":
        iso_year, week = iso_week(summary.week_start)
        return cls(
            week_start=summary.week_start,
            week_end=week_end(summary.week_start),
            iso_year=iso_year,
            iso_week=week,
            label=week_label(summary.week_start),
            dates=week_dates(summary.week_start),
            total_due=summary.total_due,
            unpaid_drivers=summary.unpaid_drivers,
            drivers=[DriverWeekModel.from_row(row) for row in summary.rows],
        )


class SetDayStatusRequest(BaseModel):
    status: DayStatus
    manual: bool = Field(default=False, description="Record as a manual classification with a reason.")
    reason: str = "Standby"
    free_text: str = ""
    hours: Optional[float] = Field(default=None, ge=0)
    leave_hours: Optional[float] = Field(default=None, ge=0)


class UpdateHoursRequest(BaseModel):
    hours: float


class SetPaidRequest(BaseModel):
    paid: bool
    note: Optional[str] = None


class PaidStatusResponse(BaseModel):
    driver_id: str
    week_start: date
    paid: bool
    paid_at: Optional[datetime] = None


class SyncReportResponse(BaseModel):
    created: List[DayEntryModel]
    skipped_protected: int
    skipped_manual: int
    skipped_existing: int

    @classmethod
    def from_domain(cls, report: SyncReport) -> "SyncReportResponse":
        return cls(
            created=[DayEntryModel.from_domain(entry) for entry in report.created],
            skipped_protected=report.skipped_protected,
            skipped_manual=report.skipped_manual,
            skipped_existing=report.skipped_existing,
        )


class WeekNavigationResponse(BaseModel):
    week_start: date
    iso_year: int
    iso_week: int
    previous_week_start: date
    next_week_start: date
