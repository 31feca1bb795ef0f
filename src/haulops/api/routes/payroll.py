"""Driver payroll endpoints."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Header, HTTPException, Path, status

from ... import providers
from ...models.domain import Driver
from ...schemas.payroll import (
    DayEntryModel,
    PaidStatusResponse,
    SetDayStatusRequest,
    SetPaidRequest,
    SyncReportResponse,
    UpdateHoursRequest,
    WeekNavigationResponse,
    WeekSummaryResponse,
)
from ...services.payroll import calendar
from ...services.payroll.service import (
    ManualReason,
    clear_day,
    load_week,
    mark_week_paid,
    set_day_status,
    sync_week,
    update_work_hours,
)
from ..errors import to_http_exception

router = APIRouter(prefix="/payroll", tags=["payroll"])


def _require_driver(driver_id: str) -> Driver:
    driver = providers.get_driver_directory().get_driver(driver_id)
    if driver is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Driver {driver_id} not found")
    return driver


@router.get("/weeks/{day}", response_model=WeekSummaryResponse, status_code=status.HTTP_200_OK)
def get_week(day: date, x_owner_id: str | None = Header(default=None)) -> WeekSummaryResponse:
    """Weekly pay for every driver. ``day`` may be any date in the week."""
    try:
        summary = load_week(
            providers.get_driver_directory(),
            providers.get_day_entry_store(x_owner_id),
            providers.get_payroll_store(x_owner_id),
            day,
        )
    except Exception as exc:
        raise to_http_exception(exc, "Failed to load weekly pay") from exc
    return WeekSummaryResponse.from_domain(summary)


@router.get("/iso-weeks/{iso_year}/{week}", response_model=WeekNavigationResponse, status_code=status.HTTP_200_OK)
def jump_to_week(
    iso_year: int = Path(ge=1, le=9999),
    week: int = Path(ge=1, le=53),
) -> WeekNavigationResponse:
    try:
        monday = calendar.monday_of_iso_week(iso_year, week)
        previous_week = calendar.shift_week(monday, -1)
        next_week = calendar.shift_week(monday, 1)
    except (ValueError, OverflowError) as exc:
        # The first and last weeks of the calendar have no neighbour on one side
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"ISO week {iso_year}-W{week:02d} is outside the supported calendar",
        ) from exc
    resolved_year, resolved_week = calendar.iso_week(monday)
    return WeekNavigationResponse(
        week_start=monday,
        iso_year=resolved_year,
        iso_week=resolved_week,
        previous_week_start=previous_week,
        next_week_start=next_week,
    )


@router.put("/drivers/{driver_id}/days/{day}", response_model=DayEntryModel, status_code=status.HTTP_200_OK)
def put_day_status(
    driver_id: str,
    day: date,
    payload: SetDayStatusRequest,
    x_owner_id: str | None = Header(default=None),
) -> DayEntryModel:
    try:
        driver = _require_driver(driver_id)
        entry = set_day_status(
            providers.get_day_entry_store(x_owner_id),
            driver,
            day,
            payload.status,
            manual=ManualReason(payload.reason, payload.free_text) if payload.manual else None,
            hours_override=payload.hours,
            leave_hours=payload.leave_hours,
        )
    except HTTPException:
        raise
    except Exception as exc:
        raise to_http_exception(exc, "Failed to save day entry") from exc
    return DayEntryModel.from_domain(entry)


@router.patch("/drivers/{driver_id}/days/{day}/hours", response_model=DayEntryModel, status_code=status.HTTP_200_OK)
def patch_work_hours(
    driver_id: str,
    day: date,
    payload: UpdateHoursRequest,
    x_owner_id: str | None = Header(default=None),
) -> DayEntryModel:
    try:
        driver = _require_driver(driver_id)
        entry = update_work_hours(providers.get_day_entry_store(x_owner_id), driver, day, payload.hours)
    except HTTPException:
        raise
    except Exception as exc:
        raise to_http_exception(exc, "Failed to update hours") from exc
    if entry is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Hours can only be edited on a work day of an hourly driver",
        )
    return DayEntryModel.from_domain(entry)


@router.delete("/drivers/{driver_id}/days/{day}", status_code=status.HTTP_200_OK)
def delete_day(driver_id: str, day: date, x_owner_id: str | None = Header(default=None)) -> dict:
    try:
        deleted = clear_day(providers.get_day_entry_store(x_owner_id), driver_id, day)
    except Exception as exc:
        raise to_http_exception(exc, "Failed to clear day entry") from exc
    return {"success": True, "deleted": deleted}


@router.put(
    "/drivers/{driver_id}/weeks/{day}/paid",
    response_model=PaidStatusResponse,
    status_code=status.HTTP_200_OK,
)
def put_paid(
    driver_id: str,
    day: date,
    payload: SetPaidRequest,
    x_owner_id: str | None = Header(default=None),
) -> PaidStatusResponse:
    try:
        record = mark_week_paid(providers.get_payroll_store(x_owner_id), driver_id, day, payload.paid, note=payload.note)
    except Exception as exc:
        raise to_http_exception(exc, "Failed to update paid status") from exc
    return PaidStatusResponse(
        driver_id=record.driver_id,
        week_start=record.week_start,
        paid=record.paid,
        paid_at=record.paid_at,
    )


@router.post("/weeks/{day}/sync", response_model=SyncReportResponse, status_code=status.HTTP_200_OK)
def sync_completed_jobs(day: date, x_owner_id: str | None = Header(default=None)) -> SyncReportResponse:
    """Create work days from completed jobs without overwriting existing classifications."""
    try:
        report = sync_week(
            providers.get_day_entry_store(x_owner_id),
            providers.get_completed_job_source(x_owner_id),
            day,
        )
    except Exception as exc:
        raise to_http_exception(exc, "Failed to sync from completed jobs") from exc
    return SyncReportResponse.from_domain(report)
