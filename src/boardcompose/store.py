"""Composition store — the ordered item list plus selection.

One Composition exists per editing session and is passed explicitly to
whatever needs it (controller, persistence, renderer). All mutation goes
through the methods below; each one leaves the invariants intact before
it returns:

  1. item ids are pairwise distinct;
  2. items that went through enforce_bounds() lie inside the frame;
  3. the observable selection is None or the id of a live item.

List order is z-order: later items paint on top. Items are immutable, so
an update builds a new value and swaps it in at the same index.

After every mutation that changed state, registered observers are called
with a fresh Snapshot. Persistence and re-rendering hang off this hook;
the store itself never waits on them, and an observer that raises is
logged and skipped so the mutation still stands.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass

from .geometry import Frame, clamp_to_frame
from .items import Item, replace_fields

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Read-only view handed to renderers and observers."""

    frame: Frame
    items: tuple[Item, ...]
    selected_id: str | None

    def get(self, item_id: str) -> Item | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


Observer = Callable[[Snapshot], None]


class Composition:
    def __init__(self, frame: Frame, items: Iterable[Item] = ()):
        self.frame = frame
        self._items: list[Item] = []
        self._selected_id: str | None = None
        self._observers: list[Observer] = []
        items = list(items)
        self._check_new_ids(items)
        self._items.extend(items)

    # ── Read side ────────────────────────────────────────────────

    @property
    def items(self) -> tuple[Item, ...]:
        return tuple(self._items)

    @property
    def selected_id(self) -> str | None:
        """Current selection, or None if the selected id is not live.

        set_selected() accepts any id without checking it, so a stale
        value is filtered here on read.
        """
        if self._selected_id is None or self._index_of(self._selected_id) is None:
            return None
        return self._selected_id

    def selected_item(self) -> Item | None:
        selected = self.selected_id
        return None if selected is None else self.get_item(selected)

    def get_item(self, item_id: str) -> Item | None:
        idx = self._index_of(item_id)
        return None if idx is None else self._items[idx]

    def snapshot(self) -> Snapshot:
        return Snapshot(self.frame, self.items, self.selected_id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self.items)

    def __contains__(self, item_id: object) -> bool:
        return isinstance(item_id, str) and self._index_of(item_id) is not None

    # ── Observers ────────────────────────────────────────────────

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register a post-mutation callback. Returns an unsubscribe function."""
        self._observers.append(callback)

        def unsubscribe():
            if callback in self._observers:
                self._observers.remove(callback)

        return unsubscribe

    def _notify(self) -> None:
        snap = self.snapshot()
        for callback in list(self._observers):
            try:
                callback(snap)
            except Exception:
                logger.exception("Store observer %r failed", callback)

    # ── Mutations ────────────────────────────────────────────────

    def add_items(self, new_items: Iterable[Item]) -> None:
        """Append items in input order. Geometry is taken as given.

        Raises:
            ValueError: An id is already live or repeats within the batch.
                Nothing is appended in that case.
        """
        new_items = list(new_items)
        if not new_items:
            return
        self._check_new_ids(new_items)
        self._items.extend(new_items)
        self._notify()

    def add_item(self, item: Item) -> None:
        self.add_items([item])

    def update_item(self, item_id: str, **changes) -> None:
        """Merge *changes* into the matching item. No-op for an unknown id.

        Does not re-clamp; follow position/size edits with enforce_bounds().
        """
        idx = self._index_of(item_id)
        if idx is None or not changes:
            return
        old = self._items[idx]
        new = replace_fields(old, **changes)
        if new == old:
            return
        self._items[idx] = new
        self._notify()

    def enforce_bounds(self, item_id: str) -> None:
        """Clamp the matching item into the frame. No-op for an unknown id."""
        idx = self._index_of(item_id)
        if idx is None:
            return
        old = self._items[idx]
        new = clamp_to_frame(old, self.frame)
        if new == old:
            return
        self._items[idx] = new
        self._notify()

    def remove_item(self, item_id: str) -> None:
        """Delete the matching item, dropping the selection if it pointed there."""
        idx = self._index_of(item_id)
        if idx is None:
            return
        del self._items[idx]
        if self._selected_id == item_id:
            self._selected_id = None
        self._notify()

    def set_selected(self, item_id: str | None) -> None:
        """Replace the selection unconditionally (the id is not checked)."""
        if item_id == self._selected_id:
            return
        self._selected_id = item_id
        self._notify()

    def clear_all(self) -> None:
        if not self._items and self._selected_id is None:
            return
        self._items = []
        self._selected_id = None
        self._notify()

    def replace_items(self, items: Iterable[Item]) -> None:
        """Swap in a whole item list (used when rehydrating). Clears selection."""
        items = list(items)
        ids = [item.id for item in items]
        if len(set(ids)) != len(ids):
            raise ValueError("Duplicate item ids in replacement list")
        self._items = items
        self._selected_id = None
        self._notify()

    # ── Internals ────────────────────────────────────────────────

    def _index_of(self, item_id: str) -> int | None:
        for i, item in enumerate(self._items):
            if item.id == item_id:
                return i
        return None

    def _check_new_ids(self, new_items: list[Item]) -> None:
        seen = {item.id for item in self._items}
        for item in new_items:
            if item.id in seen:
                raise ValueError(f"Duplicate item id: '{item.id}'")
            seen.add(item.id)
