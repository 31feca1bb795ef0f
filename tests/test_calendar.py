from datetime import date

import pytest

from haulops.services.payroll.calendar import (
    iso_week,
    monday_of_iso_week,
    shift_week,
    start_of_week,
    week_dates,
    week_end,
    week_label,
)


@pytest.mark.parametrize(
    "day, monday",
    [
        (date(2026, 3, 2), date(2026, 3, 2)),  # Monday
        (date(2026, 3, 5), date(2026, 3, 2)),
        (date(2026, 3, 8), date(2026, 3, 2)),  # Sunday
        (date(2026, 1, 1), date(2025, 12, 29)),
    ],
)
def test_start_of_week_is_monday(day, monday):
    assert start_of_week(day) == monday


def test_week_dates_cover_monday_to_sunday():
    days = week_dates(date(2026, 3, 2))

    assert len(days) == 7
    assert days[0].weekday() == 0
    assert days[-1] == week_end(date(2026, 3, 2)) == date(2026, 3, 8)


def test_iso_week_uses_thursday_year():
    assert iso_week(date(2026, 1, 1)) == (2026, 1)
    assert iso_week(date(2027, 1, 1)) == (2026, 53)
    assert iso_week(date(2024, 12, 30)) == (2025, 1)


def test_monday_of_iso_week_round_trips_and_clamps():
    assert monday_of_iso_week(2026, 1) == date(2025, 12, 29)
    assert monday_of_iso_week(2026, 10) == date(2026, 3, 2)
    assert monday_of_iso_week(2026, 0) == monday_of_iso_week(2026, 1)
    assert monday_of_iso_week(2026, 99) == monday_of_iso_week(2026, 53)
    for week in (1, 17, 52):
        assert iso_week(monday_of_iso_week(2025, week)) == (2025, week)


def test_shift_week_moves_whole_weeks():
    monday = date(2026, 3, 2)

    assert shift_week(monday, 1) == date(2026, 3, 9)
    assert shift_week(monday, -1) == date(2026, 2, 23)
    assert shift_week(date(2026, 3, 5), 0) == monday


def test_week_label():
    assert week_label(date(2026, 3, 2)) == "02 Mar – 08 Mar 2026"
