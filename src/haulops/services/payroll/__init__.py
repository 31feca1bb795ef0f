"""Driver payroll services."""

from .calculator import WeekPay, WeekSummary, compute_driver_week, summarize_week
from .reconciler import SyncReport, plan_sync, reconcile
from .service import (
    ManualReason,
    clear_day,
    load_week,
    mark_week_paid,
    set_day_status,
    sync_week,
    update_work_hours,
)

__all__ = [
    "WeekPay",
    "WeekSummary",
    "compute_driver_week",
    "summarize_week",
    "SyncReport",
    "plan_sync",
    "reconcile",
    "ManualReason",
    "set_day_status",
    "update_work_hours",
    "clear_day",
    "mark_week_paid",
    "load_week",
    "sync_week",
]
