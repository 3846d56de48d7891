"""Tests for lifegrid.datetime_utils."""

from __future__ import annotations

from datetime import UTC, date, datetime

import pytest
from lifegrid.datetime_utils import (
    MonthProgress,
    add_months,
    cell_date,
    current_month_progress,
    local_today,
    months_lived,
    parse_birth_date,
    utc_now,
)


def test_utc_now_returns_utc_aware():
    result = utc_now()
    assert result.tzinfo == UTC
    assert (datetime.now(UTC) - result).total_seconds() < 1


def test_local_today_is_a_date():
    assert isinstance(local_today(), date)


# Birth date parsing


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("1990-03-15", date(1990, 3, 15)),
        ("1990-03-15T00:00:00.000Z", date(1990, 3, 15)),
        (" 2001-12-01 ", date(2001, 12, 1)),
        (date(1985, 7, 4), date(1985, 7, 4)),
        (datetime(1985, 7, 4, 23, 0, tzinfo=UTC), date(1985, 7, 4)),
        (None, None),
        ("", None),
        ("   ", None),
        ("not a date", None),
        ("1990-13-01", None),
    ],
)
def test_parse_birth_date(value, expected):
    assert parse_birth_date(value) == expected


# Month counting


def test_months_lived():
    assert months_lived(date(1990, 3, 15), date(2026, 10, 18)) == 439


def test_months_lived_ignores_day_of_month():
    assert months_lived(date(1990, 3, 31), date(1990, 4, 1)) == 1


def test_months_lived_birth_month():
    assert months_lived(date(1990, 3, 15), date(1990, 3, 1)) == 0


def test_months_lived_never_negative():
    assert months_lived(date(2030, 1, 1), date(2026, 10, 18)) == 0


def test_current_month_progress_after_anniversary():
    progress = current_month_progress(date(1990, 3, 15), date(2026, 10, 18))
    assert progress == MonthProgress(days_elapsed=4, days_in_month=31)
    assert progress.fraction == pytest.approx(4 / 31)
    assert not progress.complete


def test_current_month_progress_before_anniversary():
    progress = current_month_progress(date(1990, 3, 20), date(2026, 10, 5))
    assert progress.days_elapsed == 5


def test_current_month_progress_short_month():
    progress = current_month_progress(date(1990, 1, 31), date(2026, 2, 28))
    assert progress == MonthProgress(days_elapsed=28, days_in_month=28)
    assert progress.complete
    assert progress.fraction == 1.0


def test_month_progress_empty_month():
    assert MonthProgress(days_elapsed=0, days_in_month=0).fraction == 0.0


# Month arithmetic


@pytest.mark.parametrize(
    ("start", "months", "expected"),
    [
        (date(2024, 1, 15), 1, date(2024, 2, 15)),
        (date(2024, 1, 31), 1, date(2024, 2, 29)),
        (date(2023, 1, 31), 1, date(2023, 2, 28)),
        (date(2024, 11, 30), 3, date(2025, 2, 28)),
        (date(2024, 3, 15), -3, date(2023, 12, 15)),
        (date(2024, 3, 15), 0, date(2024, 3, 15)),
    ],
)
def test_add_months(start, months, expected):
    assert add_months(start, months) == expected


def test_cell_date():
    assert cell_date(date(1990, 3, 15), 18 * 12) == date(2008, 3, 15)
    assert cell_date(date(1990, 3, 15), 10) == date(1991, 1, 15)
