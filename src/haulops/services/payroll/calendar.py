"""Monday-aligned week helpers for payroll navigation."""

from __future__ import annotations

from datetime import date, timedelta


def start_of_week(day: date) -> date:
    """Monday on or before ``day``."""
    return day - timedelta(days=day.weekday())


def week_dates(monday: date) -> list[date]:
    return [monday + timedelta(days=offset) for offset in range(7)]


def week_end(monday: date) -> date:
    return monday + timedelta(days=6)


def shift_week(monday: date, weeks: int) -> date:
    """Move by whole weeks; negative values go back."""
    return start_of_week(monday) + timedelta(weeks=weeks)


def iso_week(day: date) -> tuple[int, int]:
    """(ISO year, ISO week number). The Thursday of the week decides the year."""
    iso_year, week, _ = day.isocalendar()
    return iso_year, week


def monday_of_iso_week(iso_year: int, week: int) -> date:
    """Monday of ``week`` in ``iso_year``, with the week clamped to 1..53.

    Week 53 of a 52-week year rolls into week 1 of the next ISO year.
    """
    week = max(1, min(53, int(week)))
    jan4 = date(iso_year, 1, 4)
    return start_of_week(jan4) + timedelta(weeks=week - 1)


def week_label(monday: date) -> str:
    """Human label such as ``"02 Mar – 08 Mar 2026"``."""
    end = week_end(monday)
    return f"{monday.strftime('%d %b')} – {end.strftime('%d %b %Y')}"
