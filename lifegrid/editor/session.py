"""Grid session: one displayed profile with its store, selection and saver.

The surrounding page decides who is looking at the grid. A session only
receives two facts from it, whether the viewer owns the profile and whether
loading has finished, and enables editing when both are true. Visitors get a
read-only grid whose edits (if any reach it) are never saved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Literal

from lifegrid.datetime_utils import MonthProgress, cell_date, current_month_progress, local_today, months_lived

from .annotations import Annotation, AnnotationMap, AnnotationStore, LabeledSection, labeled_sections
from .client import LifeDataClient, ProfileData, normalize_username
from .config import DEFAULT_EXPECTED_LIFE_YEARS, DEFAULT_SAVE_DEBOUNCE_SECONDS, GridConfig
from .coordinates import (
    MONTH_FULL_NAMES,
    CellKey,
    InvalidCellKeyError,
    calendar_month_of,
    from_cell_key,
    row_labels,
    to_cell_key,
    to_month_index,
    total_months,
)
from .selection import SelectionMachine
from .sync import SaveCallback, SaveScheduler

LOGGER = logging.getLogger(__name__)

CellStatus = Literal["lived", "current", "future"]


@dataclass(frozen=True, slots=True)
class HoverInfo:
    text: str
    label: str | None = None
    color: str | None = None


@dataclass(frozen=True, slots=True)
class GridStats:
    months_lived: int
    months_remaining: int
    total_months: int


class GridSession:
    """Connects pointer events, the annotation store and the save scheduler."""

    def __init__(
        self,
        profile: ProfileData,
        save: SaveCallback,
        *,
        is_owner: bool,
        is_loaded: bool = True,
        grid: GridConfig | None = None,
        today: date | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or LOGGER
        self.profile = profile
        self.grid = grid or GridConfig(
            expected_life_years=DEFAULT_EXPECTED_LIFE_YEARS,
            save_debounce_seconds=DEFAULT_SAVE_DEBOUNCE_SECONDS,
        )
        self._today = today
        self._is_owner = is_owner
        self._is_loaded = is_loaded
        self.hovered: CellKey | None = None

        self.store = AnnotationStore(profile.cell_data, logger=self.logger)
        self.selection = SelectionMachine(
            self.store,
            total_months=self.total_months,
            editable=self.editable,
            logger=self.logger,
        )
        self.saver = SaveScheduler(
            self.store.snapshot,
            save,
            owner=is_owner,
            debounce_seconds=self.grid.save_debounce_seconds,
            logger=self.logger,
        )
        self._unsubscribe = self.store.subscribe(self.saver.mark_dirty)

    # ------------------------------------------------------------------
    # Identity and lifecycle
    # ------------------------------------------------------------------

    @property
    def is_owner(self) -> bool:
        return self._is_owner

    @property
    def is_loaded(self) -> bool:
        return self._is_loaded

    @property
    def editable(self) -> bool:
        return self._is_owner and self._is_loaded

    @property
    def total_months(self) -> int:
        return total_months(self.grid.expected_life_years)

    @property
    def birth_month(self) -> int:
        """Calendar month (0-11) shown in row 0; January without a birth date."""
        if self.profile.date_of_birth is None:
            return 0
        return self.profile.date_of_birth.month - 1

    def set_loaded(self, loaded: bool) -> None:
        self._is_loaded = loaded
        self.selection.set_editable(self.editable)

    def set_owner(self, is_owner: bool) -> None:
        """Ownership changed (e.g. sign-out). Drops any edit in progress."""
        if is_owner == self._is_owner:
            return
        self._is_owner = is_owner
        self.saver.owner = is_owner
        self.selection.set_editable(self.editable)
        self.logger.info("Grid for @%s is now %s", self.profile.username, "editable" if self.editable else "read-only")

    def close(self) -> None:
        """Tear down: cancel the pending save and forget local state."""
        self.saver.close()
        self._unsubscribe()
        self.selection.cancel()
        self.store.discard()
        self.hovered = None

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------

    def click(self, row: int, year_offset: int) -> None:
        self.selection.click(to_cell_key(row, year_offset))

    def hover(self, row: int, year_offset: int) -> None:
        key = to_cell_key(row, year_offset)
        self.hovered = key
        self.selection.hover(key)

    def leave(self) -> None:
        self.hovered = None

    def escape(self) -> None:
        self.selection.escape()

    # ------------------------------------------------------------------
    # Color picker
    # ------------------------------------------------------------------

    def set_label(self, label: str) -> None:
        self.selection.set_label(label)

    def type_color(self, text: str) -> bool:
        return self.selection.type_color(text)

    def pick_color(self, color: str) -> bool:
        return self.selection.pick_color(color)

    def apply(self) -> bool:
        return self.selection.apply()

    def clear(self) -> bool:
        return self.selection.clear()

    def cancel(self) -> None:
        self.selection.cancel()

    def editor_title(self) -> str | None:
        if not self.selection.editing:
            return None
        count = len(self.selection.selected)
        if count == 1:
            return "Color this month"
        return f"Color {count} months"

    # ------------------------------------------------------------------
    # Display helpers
    # ------------------------------------------------------------------

    def annotations(self) -> AnnotationMap:
        return self.store.as_mapping()

    def annotation(self, key: CellKey) -> Annotation | None:
        return self.store.get(key)

    def row_labels(self) -> list[str]:
        return row_labels(self.birth_month)

    def stats(self) -> GridStats:
        lived = self._months_lived()
        total = self.total_months
        return GridStats(months_lived=lived, months_remaining=max(0, total - lived), total_months=total)

    def cell_status(self, key: CellKey) -> CellStatus:
        index = to_month_index(*from_cell_key(key))
        lived = self._months_lived()
        if index < lived:
            return "lived"
        if index == lived:
            return "current"
        return "future"

    def current_progress(self) -> MonthProgress | None:
        if self.profile.date_of_birth is None:
            return None
        return current_month_progress(self.profile.date_of_birth, self._today_or_now())

    def describe_cell(self, row: int, year_offset: int) -> str:
        info = self._cell_info(row, year_offset)
        if info.label:
            return f"{info.text} - {info.label}"
        return info.text

    def hover_info(self) -> HoverInfo | None:
        if self.hovered is None:
            return None
        try:
            row, year_offset = from_cell_key(self.hovered)
        except InvalidCellKeyError:
            return None
        return self._cell_info(row, year_offset)

    def legend(self) -> list[LabeledSection]:
        return labeled_sections(self.store.as_mapping())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _today_or_now(self) -> date:
        return self._today or local_today()

    def _months_lived(self) -> int:
        if self.profile.date_of_birth is None:
            return 0
        return months_lived(self.profile.date_of_birth, self._today_or_now())

    def _cell_info(self, row: int, year_offset: int) -> HoverInfo:
        month_name = MONTH_FULL_NAMES[calendar_month_of(row, self.birth_month)]
        text = month_name
        if self.profile.date_of_birth is not None:
            when = cell_date(self.profile.date_of_birth, to_month_index(row, year_offset))
            text += f" {when.year}"
        text += f" (Age {year_offset})"
        annotation = self.store.get(to_cell_key(row, year_offset))
        if annotation is None:
            return HoverInfo(text=text)
        return HoverInfo(text=text, label=annotation.label, color=annotation.color)


async def open_session(
    client: LifeDataClient,
    username: str,
    *,
    viewer: str | None,
    grid: GridConfig | None = None,
    logger: logging.Logger | None = None,
) -> GridSession | None:
    """Load a profile and build a session for it. Returns None if the user does not exist."""
    log = logger or LOGGER
    profile = await client.get_profile(username)
    if profile is None:
        log.info("Profile @%s not found", normalize_username(username))
        return None
    is_owner = viewer is not None and normalize_username(viewer) == normalize_username(profile.username)
    return GridSession(
        profile,
        client.save_cell_data,
        is_owner=is_owner,
        grid=grid,
        logger=log,
    )
