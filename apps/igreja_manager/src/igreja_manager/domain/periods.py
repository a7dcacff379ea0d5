"""Calendar helpers for reference months and local dates."""

from __future__ import annotations

import calendar
from datetime import date, datetime
from zoneinfo import ZoneInfo

from igreja_manager.core.settings import get_settings


def local_today() -> date:
    """Return today's date in the configured application timezone."""

    return datetime.now(tz=ZoneInfo(get_settings().app_timezone)).date()


def normalize_reference_month(value: date) -> date:
    """Normalize any date to the first day of the same month."""

    return date(year=value.year, month=value.month, day=1)


def month_bounds(reference_month: date) -> tuple[date, date]:
    """Return first and last calendar day of the month containing the date."""

    first_day = normalize_reference_month(reference_month)
    _, last_day_number = calendar.monthrange(first_day.year, first_day.month)
    return first_day, date(first_day.year, first_day.month, last_day_number)


def parse_reference_month(value: str) -> date:
    """Parse a YYYY-MM (or full ISO date) string into the month's first day."""

    if len(value) == 7:
        year_text, month_text = value.split("-", maxsplit=1)
        return date(year=int(year_text), month=int(month_text), day=1)
    return normalize_reference_month(date.fromisoformat(value))


def format_reference_month(value: date) -> str:
    """Format first-day month date as YYYY-MM."""

    return f"{value.year:04d}-{value.month:02d}"


def days_between(earlier: date, later: date) -> int:
    """Return whole days elapsed from earlier to later (negative if reversed)."""

    return (later - earlier).days
