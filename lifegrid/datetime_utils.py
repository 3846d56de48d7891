"""Shared date helpers for placing a birth date on the month grid."""

from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import UTC, date, datetime


@dataclass(frozen=True, slots=True)
class MonthProgress:
    days_elapsed: int
    days_in_month: int

    @property
    def fraction(self) -> float:
        if self.days_in_month <= 0:
            return 0.0
        return min(1.0, self.days_elapsed / self.days_in_month)

    @property
    def complete(self) -> bool:
        return self.days_elapsed >= self.days_in_month


def utc_now() -> datetime:
    """Get current datetime in UTC."""
    return datetime.now(UTC)


def local_today() -> date:
    """Get today's date in the local timezone."""
    return datetime.now().astimezone().date()


def parse_birth_date(value: str | date | None) -> date | None:
    """Parse an ISO date (or datetime) string into a date.

    Returns None for missing or unparseable values; a profile without a usable
    birth date still renders, it just has no lived months.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def months_lived(date_of_birth: date, today: date | None = None) -> int:
    """Count whole calendar months between the birth month and the current month."""
    today = today or local_today()
    years = today.year - date_of_birth.year
    months = today.month - date_of_birth.month
    return max(0, years * 12 + months)


def current_month_progress(date_of_birth: date, today: date | None = None) -> MonthProgress:
    """Days elapsed in the current month cell, counted from the birthday anniversary."""
    today = today or local_today()
    days_in_month = calendar.monthrange(today.year, today.month)[1]
    if today.day >= date_of_birth.day:
        days_elapsed = today.day - date_of_birth.day + 1
    else:
        days_elapsed = today.day
    return MonthProgress(days_elapsed=min(days_elapsed, days_in_month), days_in_month=days_in_month)


def add_months(value: date, months: int) -> date:
    """Shift a date by whole months, clamping the day to the target month's length."""
    total = value.year * 12 + (value.month - 1) + months
    year, month_zero = divmod(total, 12)
    month = month_zero + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def cell_date(date_of_birth: date, month_index: int) -> date:
    """Calendar date represented by the cell `month_index` months after birth."""
    return add_months(date_of_birth, month_index)
