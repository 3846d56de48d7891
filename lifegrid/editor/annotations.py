"""Annotation model and the in-memory annotation store.

The store is the authoritative mapping of cell key -> annotation for the
displayed grid. It is mutated only through apply_range / clear_range, each of
which swaps in a new mapping in one step and notifies subscribers once. The
save scheduler subscribes to these notifications to know the map is dirty.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from .colors import normalize_hex
from .coordinates import CellKey, InvalidCellKeyError, from_cell_key, to_month_index

LOGGER = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


@dataclass(frozen=True, slots=True)
class Annotation:
    color: str
    label: str | None = None

    @classmethod
    def create(cls, color: str, label: str | None = None) -> Annotation:
        """Build an annotation, normalizing the color and dropping blank labels."""
        normalized = normalize_hex(color)
        if normalized is None:
            raise ValueError(f"Invalid annotation color: {color!r}")
        return cls(color=normalized, label=label or None)

    def to_dict(self) -> dict[str, str]:
        payload = {"color": self.color}
        if self.label:
            payload["label"] = self.label
        return payload


AnnotationMap = dict[CellKey, Annotation]


@dataclass(frozen=True, slots=True)
class LabeledSection:
    label: str
    color: str
    count: int
    first_month_index: int


def parse_cell_data(payload: Any, *, logger: logging.Logger | None = None) -> AnnotationMap:
    """Build an annotation map from persisted JSON.

    Entries with malformed keys, non-object values or invalid colors are
    skipped; a grid with a few missing annotations still displays fine.
    """
    log = logger or LOGGER
    if not isinstance(payload, Mapping):
        if payload is not None:
            log.debug("Ignoring non-object cell data payload: %s", type(payload).__name__)
        return {}

    result: AnnotationMap = {}
    for key, value in payload.items():
        try:
            from_cell_key(key)
        except InvalidCellKeyError:
            log.debug("Skipping malformed cell key %r", key)
            continue
        if not isinstance(value, Mapping):
            log.debug("Skipping cell %s with non-object value", key)
            continue
        color = normalize_hex(value.get("color"))
        if color is None:
            log.debug("Skipping cell %s with invalid color %r", key, value.get("color"))
            continue
        label = value.get("label")
        if not isinstance(label, str) or not label:
            label = None
        result[key] = Annotation(color=color, label=label)
    return result


def serialize_cell_data(annotations: Mapping[CellKey, Annotation]) -> dict[str, dict[str, str]]:
    return {key: annotation.to_dict() for key, annotation in annotations.items()}


def labeled_sections(annotations: Mapping[CellKey, Annotation]) -> list[LabeledSection]:
    """Legend entries for labeled cells, ordered by where each label first appears."""
    counts: dict[str, int] = {}
    colors: dict[str, str] = {}
    first_seen: dict[str, int] = {}
    for key, annotation in annotations.items():
        if not annotation.label:
            continue
        try:
            month_index = to_month_index(*from_cell_key(key))
        except InvalidCellKeyError:
            continue
        label = annotation.label
        if label in counts:
            counts[label] += 1
            first_seen[label] = min(first_seen[label], month_index)
        else:
            counts[label] = 1
            colors[label] = annotation.color
            first_seen[label] = month_index

    sections = [
        LabeledSection(label=label, color=colors[label], count=counts[label], first_month_index=first_seen[label])
        for label in counts
    ]
    sections.sort(key=lambda section: section.first_month_index)
    return sections


class AnnotationStore:
    """In-memory annotation map with batched mutations and change notification."""

    def __init__(
        self,
        annotations: Mapping[CellKey, Annotation] | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.logger = logger or LOGGER
        self._annotations: AnnotationMap = dict(annotations or {})
        self._listeners: list[ChangeListener] = []
        self._revision = 0

    def __contains__(self, key: object) -> bool:
        return key in self._annotations

    def __len__(self) -> int:
        return len(self._annotations)

    def __iter__(self) -> Iterator[CellKey]:
        return iter(self._annotations)

    @property
    def revision(self) -> int:
        """Incremented on every mutation."""
        return self._revision

    def get(self, key: CellKey) -> Annotation | None:
        return self._annotations.get(key)

    def items(self) -> list[tuple[CellKey, Annotation]]:
        return list(self._annotations.items())

    def as_mapping(self) -> AnnotationMap:
        return dict(self._annotations)

    def snapshot(self) -> dict[str, dict[str, str]]:
        """JSON-serializable copy of the current map."""
        return serialize_cell_data(self._annotations)

    def used_colors(self) -> set[str]:
        return {annotation.color.upper() for annotation in self._annotations.values()}

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def apply_range(self, keys: Iterable[CellKey], annotation: Annotation) -> int:
        """Set every key to the annotation. Returns the number of keys written."""
        batch = list(keys)
        if not batch:
            return 0
        updated = dict(self._annotations)
        for key in batch:
            updated[key] = annotation
        self._commit(updated)
        self.logger.debug("Applied %s to %d cell(s)", annotation.color, len(batch))
        return len(batch)

    def clear_range(self, keys: Iterable[CellKey]) -> int:
        """Remove annotations for the keys. Returns the number of keys removed."""
        updated = dict(self._annotations)
        removed = 0
        for key in keys:
            if updated.pop(key, None) is not None:
                removed += 1
        if not removed:
            return 0
        self._commit(updated)
        self.logger.debug("Cleared %d cell(s)", removed)
        return removed

    def replace(self, annotations: Mapping[CellKey, Annotation]) -> None:
        """Swap in freshly loaded data without notifying (not an edit)."""
        self._annotations = dict(annotations)

    def discard(self) -> None:
        """Drop all data and listeners when the grid is torn down."""
        self._annotations = {}
        self._listeners.clear()

    def _commit(self, updated: AnnotationMap) -> None:
        self._annotations = updated
        self._revision += 1
        for listener in list(self._listeners):
            try:
                listener()
            except Exception as exc:
                self.logger.error("Annotation change listener failed: %s", exc, exc_info=True)
