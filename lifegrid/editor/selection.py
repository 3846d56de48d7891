"""
Selection state machine for the month grid

Pointer interactions move the editor through three states:

- Idle: nothing selected
- AnchorSet: one cell clicked; the selection follows the pointer as a range
  from the anchor to the hovered cell
- Editing: a range is committed and the color picker is open with a pending
  color/label

Apply writes the pending edit to every selected cell, clear removes their
annotations, cancel/escape drops the selection. All three return to Idle.
When the grid is not editable (a visitor viewing someone else's profile) every
pointer event is ignored.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, replace

from .annotations import Annotation, AnnotationStore
from .colors import accept_hex_input, normalize_hex, suggest_color
from .coordinates import CellKey, InvalidCellKeyError, cell_range, from_cell_key, in_grid

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PendingEdit:
    color: str
    label: str = ""

    @property
    def complete(self) -> bool:
        return normalize_hex(self.color) is not None


@dataclass(frozen=True, slots=True)
class Idle:
    @property
    def selected(self) -> frozenset[CellKey]:
        return frozenset()


@dataclass(frozen=True, slots=True)
class AnchorSet:
    anchor: CellKey
    selected: frozenset[CellKey]


@dataclass(frozen=True, slots=True)
class Editing:
    selected: frozenset[CellKey]
    edit: PendingEdit


SelectionState = Idle | AnchorSet | Editing
StateListener = Callable[[SelectionState], None]

IDLE = Idle()


class SelectionMachine:
    """Turns click/hover/keyboard events into committed annotation edits."""

    def __init__(
        self,
        store: AnnotationStore,
        *,
        total_months: int,
        editable: bool = False,
        suggest: Callable[[Iterable[str]], str] = suggest_color,
        logger: logging.Logger | None = None,
    ) -> None:
        self.store = store
        self.total_months = total_months
        self.logger = logger or LOGGER
        self._suggest = suggest
        self._editable = editable
        self._state: SelectionState = IDLE
        self._listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # State access
    # ------------------------------------------------------------------

    @property
    def state(self) -> SelectionState:
        return self._state

    @property
    def selected(self) -> frozenset[CellKey]:
        return self._state.selected

    @property
    def anchor(self) -> CellKey | None:
        if isinstance(self._state, AnchorSet):
            return self._state.anchor
        return None

    @property
    def pending(self) -> PendingEdit | None:
        if isinstance(self._state, Editing):
            return self._state.edit
        return None

    @property
    def editing(self) -> bool:
        return isinstance(self._state, Editing)

    @property
    def editable(self) -> bool:
        return self._editable

    def set_editable(self, editable: bool) -> None:
        """Toggle owner mode. Losing edit rights drops any selection in progress."""
        self._editable = editable
        if not editable:
            self._transition(IDLE)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Pointer and keyboard events
    # ------------------------------------------------------------------

    def click(self, key: CellKey) -> None:
        if not self._editable or not self._in_grid(key):
            return
        state = self._state
        if isinstance(state, Idle):
            self._transition(AnchorSet(anchor=key, selected=frozenset({key})))
        elif isinstance(state, AnchorSet):
            if key == state.anchor:
                self._open_editor(frozenset({key}))
            else:
                self._open_editor(cell_range(state.anchor, key, self.total_months))
        # Clicks while the picker is open are ignored.

    def hover(self, key: CellKey) -> None:
        if not self._editable or not self._in_grid(key):
            return
        state = self._state
        if isinstance(state, AnchorSet):
            self._transition(replace(state, selected=cell_range(state.anchor, key, self.total_months)))

    def escape(self) -> None:
        if not self._editable:
            return
        if not isinstance(self._state, Idle):
            self._transition(IDLE)

    # ------------------------------------------------------------------
    # Color picker actions
    # ------------------------------------------------------------------

    def set_label(self, label: str) -> None:
        state = self._state
        if isinstance(state, Editing):
            self._transition(replace(state, edit=replace(state.edit, label=label)))

    def type_color(self, text: str) -> bool:
        """Apply a keystroke in the hex field. Returns False if the edit was rejected."""
        state = self._state
        if not isinstance(state, Editing):
            return False
        accepted = accept_hex_input(text)
        if accepted is None:
            return False
        self._transition(replace(state, edit=replace(state.edit, color=accepted)))
        return True

    def pick_color(self, color: str) -> bool:
        """Choose a complete color (preset swatch or native picker)."""
        state = self._state
        if not isinstance(state, Editing):
            return False
        normalized = normalize_hex(color)
        if normalized is None:
            return False
        self._transition(replace(state, edit=replace(state.edit, color=normalized)))
        return True

    def apply(self) -> bool:
        state = self._state
        if not isinstance(state, Editing):
            return False
        if not state.edit.complete:
            self.logger.debug("Ignoring apply with incomplete color %r", state.edit.color)
            return False
        label = state.edit.label
        annotation = Annotation.create(state.edit.color, label if label.strip() else None)
        self.store.apply_range(state.selected, annotation)
        self._transition(IDLE)
        return True

    def clear(self) -> bool:
        state = self._state
        if not isinstance(state, Editing):
            return False
        self.store.clear_range(state.selected)
        self._transition(IDLE)
        return True

    def cancel(self) -> None:
        if not isinstance(self._state, Idle):
            self._transition(IDLE)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _open_editor(self, selected: frozenset[CellKey]) -> None:
        color = self._suggest(self.store.used_colors())
        self._transition(Editing(selected=selected, edit=PendingEdit(color=color)))

    def _in_grid(self, key: CellKey) -> bool:
        try:
            row, year_offset = from_cell_key(key)
        except InvalidCellKeyError:
            return False
        return in_grid(row, year_offset, self.total_months)

    def _transition(self, state: SelectionState) -> None:
        if state == self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as exc:
                self.logger.error("Selection listener failed: %s", exc, exc_info=True)
