from datetime import date, datetime, timezone

import pytest

from haulops.models.domain import (
    CompletedJobSignal,
    DayStatus,
    Driver,
    DriverDayEntry,
    EntryProvenance,
    PayType,
)
from haulops.persistence.day_entries import InMemoryDayEntryStore
from haulops.persistence.payroll import (
    InMemoryCompletedJobSource,
    InMemoryDriverDirectory,
    InMemoryPayrollStore,
)
from haulops.services.payroll.service import (
    ManualReason,
    build_manual_note,
    clear_day,
    load_week,
    mark_week_paid,
    set_day_status,
    sync_week,
    update_work_hours,
)

SHIFT = Driver(id="D1", full_name="Sam Shift", pay_type=PayType.SHIFT, pay_rate=120)
HOURLY = Driver(id="D2", full_name="Hana Hourly", pay_type=PayType.HOURLY, pay_rate=15.5)
MON = date(2026, 3, 2)
TUE = date(2026, 3, 3)


@pytest.mark.parametrize(
    "status, reason, free_text, expected",
    [
        (DayStatus.WORK, "Training", "", "Work (Training)"),
        (DayStatus.WORK, "Other", "Ferry delayed", "Work (Ferry delayed)"),
        (DayStatus.SICK, "", "flu", "Sick - flu"),
        (DayStatus.WORK, "Standby", "all day", "Work (Standby) - all day"),
        (DayStatus.OFF, "Other", "", "Off"),
    ],
)
def test_build_manual_note(status, reason, free_text, expected):
    assert build_manual_note(status, reason, free_text) == expected


def test_shift_driver_shifts_follow_paid_status():
    store = InMemoryDayEntryStore()

    work = set_day_status(store, SHIFT, MON, DayStatus.WORK)
    sick = set_day_status(store, SHIFT, TUE, DayStatus.SICK)

    assert (work.shifts, work.hours) == (1, None)
    assert (sick.shifts, sick.hours) == (0, None)
    assert sick.notes == "Sick (unpaid)"
    assert sick.provenance is EntryProvenance.MANUAL


def test_hourly_leave_uses_default_leave_hours_unless_overridden():
    store = InMemoryDayEntryStore()

    default = set_day_status(store, HOURLY, MON, DayStatus.LEAVE, leave_hours=7.5)
    override = set_day_status(store, HOURLY, TUE, DayStatus.LEAVE, hours_override=4)

    assert default.hours == 7.5
    assert override.hours == 4


def test_hourly_work_keeps_existing_work_hours():
    store = InMemoryDayEntryStore([DriverDayEntry("D2", MON, DayStatus.WORK, shifts=1, hours=9.0, notes="Work")])

    entry = set_day_status(store, HOURLY, MON, DayStatus.WORK)

    assert entry.hours == 9.0
    assert entry.notes == "Work"


def test_hourly_off_day_has_zero_hours():
    store = InMemoryDayEntryStore([DriverDayEntry("D2", MON, DayStatus.WORK, shifts=1, hours=9.0)])

    entry = set_day_status(store, HOURLY, MON, DayStatus.OFF)

    assert entry.hours == 0.0


def test_manual_classification_marks_provenance_and_blocks_sync():
    store = InMemoryDayEntryStore()
    jobs = InMemoryCompletedJobSource([CompletedJobSignal("D1", MON), CompletedJobSignal("D1", TUE)])

    set_day_status(store, SHIFT, MON, DayStatus.WORK, manual=ManualReason("Yard work"))
    report = sync_week(store, jobs, date(2026, 3, 4))

    assert store.get("D1", MON).provenance is EntryProvenance.MANUAL
    assert store.get("D1", MON).notes == "Work (Yard work)"
    assert report.skipped_manual == 1
    assert [entry.entry_date for entry in report.created] == [TUE]


def test_update_work_hours_only_on_hourly_work_days():
    store = InMemoryDayEntryStore(
        [
            DriverDayEntry("D2", MON, DayStatus.WORK, shifts=1, hours=None, provenance=EntryProvenance.AUTO),
            DriverDayEntry("D2", TUE, DayStatus.LEAVE, shifts=1, hours=8.0),
            DriverDayEntry("D1", MON, DayStatus.WORK, shifts=1),
        ]
    )

    updated = update_work_hours(store, HOURLY, MON, -3)
    assert updated.hours == 0.0
    assert updated.provenance is EntryProvenance.AUTO

    assert update_work_hours(store, HOURLY, MON, 10.25).hours == 10.25
    assert update_work_hours(store, HOURLY, TUE, 5) is None
    assert update_work_hours(store, SHIFT, MON, 5) is None
    assert store.get("D2", TUE).hours == 8.0


def test_clear_day_removes_entry():
    store = InMemoryDayEntryStore([DriverDayEntry("D1", MON, DayStatus.WORK, shifts=1)])

    assert clear_day(store, "D1", MON) is True
    assert clear_day(store, "D1", MON) is False
    assert store.get("D1", MON) is None


def test_mark_week_paid_normalises_to_monday():
    store = InMemoryPayrollStore()
    now = datetime(2026, 3, 10, 12, tzinfo=timezone.utc)

    paid = mark_week_paid(store, "D1", date(2026, 3, 5), True, now=now)
    assert paid.week_start == MON
    assert paid.paid_at == now

    unpaid = mark_week_paid(store, "D1", MON, False, now=now)
    assert unpaid.paid_at is None
    assert store.list_for_week(MON) == [unpaid]


def test_load_week_combines_stores():
    entries = InMemoryDayEntryStore(
        [
            DriverDayEntry("D1", MON, DayStatus.WORK, shifts=1),
            DriverDayEntry("D2", TUE, DayStatus.WORK, shifts=1, hours=8.0),
            DriverDayEntry("D1", date(2026, 3, 9), DayStatus.WORK, shifts=1),
        ]
    )
    payroll = InMemoryPayrollStore()
    mark_week_paid(payroll, "D1", MON, True)

    summary = load_week(InMemoryDriverDirectory([SHIFT, HOURLY]), entries, payroll, date(2026, 3, 8))

    assert summary.week_start == MON
    assert [row.driver.full_name for row in summary.rows] == ["Hana Hourly", "Sam Shift"]
    assert summary.total_due == pytest.approx(120 + 8 * 15.5)
    assert summary.unpaid_drivers == 1
