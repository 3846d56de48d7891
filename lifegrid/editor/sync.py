"""Debounced persistence of the annotation map.

Every edit marks the map dirty and (re)starts a short timer. When the timer
fires the whole current map is written through the save callback, so several
edits inside one debounce window collapse into a single write of the final
state. Only one write is in flight at a time; edits that land during a write
re-arm the timer once the write settles.

A failed write leaves the map dirty. The next edit, or an explicit retry(),
schedules another attempt.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any

from lifegrid.datetime_utils import utc_now

LOGGER = logging.getLogger(__name__)

# Debounce delay in seconds - wait this long after last change before writing
DEBOUNCE_DELAY_SECONDS = 1.0

SaveCallback = Callable[[dict[str, dict[str, str]]], Awaitable[bool]]
SnapshotProvider = Callable[[], dict[str, dict[str, str]]]


class SaveScheduler:
    """Owner-only, single-flight, debounced writer for the annotation map."""

    def __init__(
        self,
        snapshot: SnapshotProvider,
        save: SaveCallback,
        *,
        owner: bool = True,
        debounce_seconds: float = DEBOUNCE_DELAY_SECONDS,
        clock: Callable[[], datetime] = utc_now,
        logger: logging.Logger | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._save = save
        self._debounce_seconds = debounce_seconds
        self._clock = clock
        self._logger = logger or LOGGER
        self._owner = owner

        self.has_unsaved_changes = False
        self.last_saved: datetime | None = None
        self.last_error: str | None = None

        self._timer: asyncio.Task[None] | None = None
        self._write_task: asyncio.Task[bool] | None = None
        self._rearm_after_write = False
        self._edits = 0
        self._closed = False

    @property
    def owner(self) -> bool:
        return self._owner

    @owner.setter
    def owner(self, owner: bool) -> None:
        """Revoking ownership cancels any scheduled write; local edits are never saved."""
        self._owner = owner
        if not owner:
            self._rearm_after_write = False
            self.has_unsaved_changes = False
            self._cancel_timer()

    @property
    def is_saving(self) -> bool:
        return self._write_task is not None and not self._write_task.done()

    @property
    def timer_pending(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_dirty(self) -> None:
        """Record an edit and restart the debounce window."""
        if self._closed or not self.owner:
            return
        self._edits += 1
        self.has_unsaved_changes = True
        self._schedule()

    def retry(self) -> bool:
        """Re-arm the timer for unsaved changes. Returns False if there is nothing to save."""
        if self._closed or not self.owner or not self.has_unsaved_changes:
            return False
        self._schedule()
        return True

    async def flush(self) -> bool:
        """Write immediately, bypassing the debounce window."""
        self._cancel_timer()
        if self._write_task is not None and not self._write_task.done():
            with contextlib.suppress(Exception):
                await asyncio.shield(self._write_task)
            # The settled write may have re-armed the timer.
            self._cancel_timer()
        if self._closed or not self.owner or not self.has_unsaved_changes:
            return not self.has_unsaved_changes
        return await asyncio.shield(self._start_write())

    def close(self) -> None:
        """Cancel any pending write; an in-flight write finishes but is ignored."""
        self._closed = True
        self._rearm_after_write = False
        self._cancel_timer()

    def status(self) -> dict[str, Any]:
        """Indicator state for the page header."""
        return {
            "saving": self.is_saving,
            "unsaved": self.has_unsaved_changes,
            "last_saved": self.last_saved.isoformat() if self.last_saved else None,
            "error": self.last_error,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _schedule(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.create_task(self._run_timer())

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _run_timer(self) -> None:
        await asyncio.sleep(self._debounce_seconds)
        self._timer = None
        if self._closed or not self._owner or not self.has_unsaved_changes:
            return
        if self.is_saving:
            # One write at a time; try again after the current one settles.
            self._rearm_after_write = True
            return
        self._start_write()

    def _start_write(self) -> asyncio.Task[bool]:
        self._write_task = asyncio.create_task(self._write())
        return self._write_task

    async def _write(self) -> bool:
        edits_at_start = self._edits
        payload = self._snapshot()
        try:
            ok = bool(await self._save(payload))
            error: str | None = None if ok else "save rejected"
        except Exception as exc:
            ok = False
            error = str(exc) or type(exc).__name__

        if self._closed:
            self._logger.debug("Discarding save result after close")
            return ok

        if ok:
            self.last_error = None
            self.last_saved = self._clock()
            if self._edits == edits_at_start:
                self.has_unsaved_changes = False
            self._logger.debug("Saved %d annotated cell(s)", len(payload))
        else:
            self.last_error = error
            self._logger.warning("Failed to save cell data: %s", error)

        if self._rearm_after_write:
            self._rearm_after_write = False
            if self.has_unsaved_changes:
                self._schedule()
        return ok

