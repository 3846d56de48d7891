"""
Grid coordinate model

The grid is laid out with one column per year of life and twelve rows per
column. Row 0 is always the birth month, so rows are a birth-anchored cycle
rather than calendar months.

Three coordinate systems are used:
- CellKey: "<row>-<yearOffset>" string used for storage
- MonthIndex: yearOffset * 12 + row, the linear order from birth
- Calendar month: 0-11 (January = 0), mapped onto rows via the birth month

All functions here are pure; range validation against the expected lifespan
happens in the selection state machine.
"""

from __future__ import annotations

import re

MONTHS_PER_YEAR = 12

MONTH_NAMES = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
MONTH_FULL_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

# Canonical integers only so that parsing is the exact inverse of to_cell_key.
_CELL_KEY_RE = re.compile(r"^(0|[1-9][0-9]*)-(0|[1-9][0-9]*)$")

CellKey = str


class InvalidCellKeyError(ValueError):
    """Raised when a string is not a key produced by to_cell_key."""


def to_cell_key(row: int, year_offset: int) -> CellKey:
    return f"{row}-{year_offset}"


def from_cell_key(key: str) -> tuple[int, int]:
    """Return (row, year_offset) for a cell key.

    Raises InvalidCellKeyError for anything to_cell_key could not have
    produced, including rows outside 0-11.
    """
    if not isinstance(key, str):
        raise InvalidCellKeyError(f"Cell key must be a string, got {type(key).__name__}")
    match = _CELL_KEY_RE.fullmatch(key)
    if not match:
        raise InvalidCellKeyError(f"Malformed cell key: {key!r}")
    try:
        row = int(match.group(1))
        year_offset = int(match.group(2))
    except ValueError as exc:
        # int() refuses digit strings past the interpreter's conversion limit
        raise InvalidCellKeyError(f"Cell key out of range: {key[:32]!r}") from exc
    if row >= MONTHS_PER_YEAR:
        raise InvalidCellKeyError(f"Cell key row out of range: {key!r}")
    return row, year_offset


def is_cell_key(key: object) -> bool:
    if not isinstance(key, str):
        return False
    try:
        from_cell_key(key)
    except InvalidCellKeyError:
        return False
    return True


def to_month_index(row: int, year_offset: int) -> int:
    return year_offset * MONTHS_PER_YEAR + row


def from_month_index(index: int) -> tuple[int, int]:
    """Return (row, year_offset) for a linear month index."""
    year_offset, row = divmod(index, MONTHS_PER_YEAR)
    return row, year_offset


def month_index_of(key: CellKey) -> int:
    return to_month_index(*from_cell_key(key))


def key_for_month_index(index: int) -> CellKey:
    return to_cell_key(*from_month_index(index))


def display_row(calendar_month: int, birth_calendar_month: int) -> int:
    """Map a calendar month (0-11) onto the birth-anchored row cycle."""
    return (calendar_month - birth_calendar_month) % MONTHS_PER_YEAR


def calendar_month_of(row: int, birth_calendar_month: int) -> int:
    """Inverse of display_row."""
    return (birth_calendar_month + row) % MONTHS_PER_YEAR


def total_months(expected_life_years: int) -> int:
    return max(0, expected_life_years) * MONTHS_PER_YEAR


def row_labels(birth_calendar_month: int) -> list[str]:
    """Month abbreviations in display order, starting with the birth month."""
    return [MONTH_NAMES[calendar_month_of(row, birth_calendar_month)] for row in range(MONTHS_PER_YEAR)]


def cell_range(start: CellKey, end: CellKey, total: int) -> frozenset[CellKey]:
    """All keys between two cells (inclusive, either order), clipped to [0, total)."""
    first = month_index_of(start)
    second = month_index_of(end)
    low = max(0, min(first, second))
    high = min(total - 1, max(first, second))
    return frozenset(key_for_month_index(index) for index in range(low, high + 1))


def in_grid(row: int, year_offset: int, total: int) -> bool:
    if not 0 <= row < MONTHS_PER_YEAR or year_offset < 0:
        return False
    return to_month_index(row, year_offset) < total
