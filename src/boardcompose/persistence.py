"""Persistence — best-effort save/load of the item list to a named slot.

The slot lives in a key-value storage backend. JsonFileStorage keeps all
keys of one store in a single JSON object on disk; MemoryStorage is the
in-process equivalent used by tests and throwaway sessions.

Slot payload (JSON text):
  {"items": [<item record>, ...]}

Selection is never persisted. Saving swallows every storage or
serialization failure (the session keeps working in memory); loading
treats a missing or unreadable slot as "start empty".

BackgroundSaver runs saves on one worker thread so mutating callers
never wait on disk. Saves run in submission order, so the last mutation
wins when several are in flight.
"""

import json
import logging
import os
import tempfile
from collections.abc import Iterable
from concurrent.futures import Future, ThreadPoolExecutor, wait
from pathlib import Path

from .geometry import Frame
from .items import Item, item_from_record, item_to_record
from .store import Composition, Snapshot

logger = logging.getLogger(__name__)

STORAGE_KEY = "boardcompose_state_v1"


# ── Storage backends ──────────────────────────────────────────────


class MemoryStorage:
    def __init__(self):
        self._data: dict[str, str] = {}

    def get_item(self, key: str) -> str | None:
        return self._data.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove_item(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStorage:
    """Key-value storage backed by one JSON object in a file.

    Writes go to a temporary file in the same directory followed by an
    atomic replace, so a reader never sees a half-written file.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read_all(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> str | None:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        try:
            data = self._read_all()
        except (ValueError, RecursionError):
            logger.debug("Discarding unreadable storage file %s", self.path)
            data = {}
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


# ── Adapter ───────────────────────────────────────────────────────


class PersistenceAdapter:
    def __init__(self, storage, key: str = STORAGE_KEY):
        self.storage = storage
        self.key = key

    def save(self, items: Iterable[Item]) -> None:
        """Serialize items into the slot. Failures are logged and dropped."""
        try:
            payload = json.dumps({"items": [item_to_record(item) for item in items]})
            self.storage.set_item(self.key, payload)
        except Exception as exc:
            logger.debug("Save to slot '%s' failed: %s", self.key, exc)

    def save_snapshot(self, snapshot: Snapshot) -> None:
        """Observer form of save()."""
        self.save(snapshot.items)

    def load(self) -> list[Item] | None:
        """Read the slot. None when absent, unparseable, or invalid."""
        try:
            raw = self.storage.get_item(self.key)
            if raw is None:
                return None
            parsed = json.loads(raw)
            if not isinstance(parsed, dict):
                raise ValueError("slot payload is not an object")
            records = parsed.get("items", [])
            if not isinstance(records, list):
                raise ValueError("'items' is not a list")
            items = [item_from_record(rec, i) for i, rec in enumerate(records)]
        except Exception as exc:
            logger.debug("Load from slot '%s' failed: %s", self.key, exc)
            return None

        ids = [item.id for item in items]
        if len(set(ids)) != len(ids):
            logger.debug("Load from slot '%s' failed: duplicate item ids", self.key)
            return None
        return items

    def clear(self) -> None:
        try:
            self.storage.remove_item(self.key)
        except Exception as exc:
            logger.debug("Clearing slot '%s' failed: %s", self.key, exc)


# ── Fire-and-forget saving ────────────────────────────────────────


class BackgroundSaver:
    """Store observer that queues saves on a single worker thread."""

    def __init__(self, adapter: PersistenceAdapter):
        self.adapter = adapter
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="boardcompose-save",
        )
        self._pending: list[Future] = []
        self._closed = False

    def __call__(self, snapshot: Snapshot) -> None:
        self.schedule(snapshot)

    def schedule(self, snapshot: Snapshot) -> None:
        if self._closed:
            logger.debug("Saver closed, saving slot '%s' inline", self.adapter.key)
            self.adapter.save(snapshot.items)
            return
        # Snapshot items are immutable, so the worker sees exactly this state.
        self._pending = [f for f in self._pending if not f.done()]
        self._pending.append(self._executor.submit(self.adapter.save, snapshot.items))

    def flush(self) -> None:
        """Block until every queued save has run."""
        wait(self._pending)
        self._pending = []

    def close(self) -> None:
        """Drain queued saves. Later snapshots are saved synchronously."""
        self._closed = True
        self.flush()
        self._executor.shutdown(wait=True)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


def open_composition(
    frame: Frame,
    adapter: PersistenceAdapter,
    background: bool = True,
) -> tuple[Composition, BackgroundSaver | None]:
    """Create the session's composition, rehydrated from the slot.

    Subscribes saving to every later mutation: through a BackgroundSaver
    (returned, so the caller can flush/close it) or synchronously.
    """
    composition = Composition(frame, adapter.load() or [])
    if background:
        saver = BackgroundSaver(adapter)
        composition.subscribe(saver)
        return composition, saver
    composition.subscribe(adapter.save_snapshot)
    return composition, None
