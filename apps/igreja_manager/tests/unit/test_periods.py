from datetime import date

import pytest

from igreja_manager.domain.periods import (
    days_between,
    format_reference_month,
    month_bounds,
    normalize_reference_month,
    parse_reference_month,
)


def test_month_bounds_handles_leap_february() -> None:
    assert month_bounds(date(2028, 2, 14)) == (date(2028, 2, 1), date(2028, 2, 29))
    assert month_bounds(date(2026, 12, 31)) == (date(2026, 12, 1), date(2026, 12, 31))


def test_reference_month_round_trip_labels() -> None:
    assert normalize_reference_month(date(2026, 3, 17)) == date(2026, 3, 1)
    assert parse_reference_month("2026-03") == date(2026, 3, 1)
    assert parse_reference_month("2026-03-17") == date(2026, 3, 1)
    assert format_reference_month(date(2026, 3, 1)) == "2026-03"


def test_parse_reference_month_rejects_invalid_month() -> None:
    with pytest.raises(ValueError):
        parse_reference_month("2026-13")


def test_days_between_counts_calendar_days() -> None:
    assert days_between(date(2026, 3, 1), date(2026, 3, 8)) == 7
    assert days_between(date(2026, 3, 8), date(2026, 3, 1)) == -7
