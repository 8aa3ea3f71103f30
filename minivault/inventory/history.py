"""
Versioned collection store with undo/redo.

The store owns the History (past, present, future) for one collection and
is the only place a new snapshot is produced. Every change is written in
full to a storage backend; storage failures are logged and never reach the
caller, so an edit always completes in memory even when it is not durable.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Iterable, Optional, Union

from .errors import PersistenceError, RestoreShapeError
from .models import Entry, History, Snapshot

HISTORY_KEYS = ("past", "present", "future")

DEFAULT_HISTORY_KEY = "minivault-history"

SnapshotUpdate = Union[Iterable[Entry], Callable[[Snapshot], Iterable[Entry]]]


def has_history_shape(value: Any) -> bool:
    """True when ``value`` is a mapping carrying past, present and future."""
    return isinstance(value, Mapping) and all(key in value for key in HISTORY_KEYS)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _snapshot_from_raw(raw: Any, label: str) -> Snapshot:
    if not _is_sequence(raw):
        raise RestoreShapeError(f"'{label}' must be a list of entries")
    entries = []
    for item in raw:
        if isinstance(item, Entry):
            entries.append(item)
            continue
        if not isinstance(item, Mapping):
            raise RestoreShapeError(f"'{label}' contains a non-entry value: {item!r}")
        try:
            entries.append(Entry.from_dict(dict(item)))
        except (KeyError, TypeError, ValueError) as e:
            raise RestoreShapeError(f"'{label}' contains an invalid entry: {e}")
    ids = [entry.id for entry in entries if entry.id is not None]
    if len(ids) != len(set(ids)):
        raise RestoreShapeError(f"'{label}' contains duplicate entry ids")
    return tuple(entries)


def history_from_dict(data: Any) -> History:
    """Build a History from its serialized form, raising RestoreShapeError on bad shape."""
    if isinstance(data, History):
        return data
    if not has_history_shape(data):
        missing = [key for key in HISTORY_KEYS if not isinstance(data, Mapping) or key not in data]
        raise RestoreShapeError(f"History is missing required keys: {', '.join(missing)}")
    for key in ("past", "future"):
        if not _is_sequence(data[key]):
            raise RestoreShapeError(f"'{key}' must be a list of snapshots")
    return History(
        past=tuple(_snapshot_from_raw(s, f"past[{i}]") for i, s in enumerate(data["past"])),
        present=_snapshot_from_raw(data["present"], "present"),
        future=tuple(_snapshot_from_raw(s, f"future[{i}]") for i, s in enumerate(data["future"])),
    )


class HistoryStore:
    """Undo/redo history for a collection, persisted through a storage backend."""

    def __init__(self, storage, key: str = DEFAULT_HISTORY_KEY,
                 initial: Iterable[Entry] = (), logger: Optional[logging.Logger] = None):
        """Load the saved history for ``key`` or start fresh from ``initial``.

        Args:
            storage: Backend with ``load(key)`` and ``save(key, value)``.
            key: Storage key the history lives under.
            initial: Snapshot used when nothing valid is stored.
            logger: Optional logger; defaults to ``minivault.history``.
        """
        self.storage = storage
        self.key = key
        self.logger = logger or logging.getLogger("minivault.history")
        self.last_save_ok = True
        self._history = self._load(tuple(initial))

    def _load(self, initial: Snapshot) -> History:
        try:
            saved = self.storage.load(self.key)
        except Exception as e:
            self.logger.error("%s", PersistenceError(f"Could not load history '{self.key}': {e}"))
            return History(present=initial)

        if saved is None:
            return History(present=initial)
        if not has_history_shape(saved):
            self.logger.warning("Stored value for '%s' is not a history; starting fresh", self.key)
            return History(present=initial)
        try:
            return history_from_dict(saved)
        except RestoreShapeError as e:
            self.logger.warning("Stored history for '%s' is unreadable (%s); starting fresh", self.key, e)
            return History(present=initial)

    def _persist(self):
        try:
            self.storage.save(self.key, self._history.to_dict())
            self.last_save_ok = True
        except Exception as e:
            self.last_save_ok = False
            self.logger.error("%s", PersistenceError(f"Could not save history '{self.key}': {e}"))

    # --- Read access ---

    @property
    def history(self) -> History:
        return self._history

    @property
    def present(self) -> Snapshot:
        return self._history.present

    @property
    def past(self):
        return self._history.past

    @property
    def future(self):
        return self._history.future

    @property
    def can_undo(self) -> bool:
        return self._history.can_undo

    @property
    def can_redo(self) -> bool:
        return self._history.can_redo

    # --- Mutations ---

    def set(self, update: SnapshotUpdate) -> bool:
        """Record a new present snapshot.

        ``update`` is either the next snapshot or a function of the current
        one. Returns False, without touching history or storage, when the
        result equals the present snapshot. Raises ValueError, leaving the
        history untouched, when the result holds non-entries or repeats an id.
        """
        candidate = update(self._history.present) if callable(update) else update
        next_snapshot = tuple(candidate)
        for item in next_snapshot:
            if not isinstance(item, Entry):
                raise ValueError(f"Snapshot items must be entries, got {item!r}")
        ids = [item.id for item in next_snapshot if item.id is not None]
        if len(ids) != len(set(ids)):
            raise ValueError("Snapshot contains duplicate entry ids")
        current = self._history
        if next_snapshot == current.present:
            self.logger.debug("Ignoring unchanged snapshot")
            return False

        self._history = History(
            past=current.past + (current.present,),
            present=next_snapshot,
            future=(),
        )
        self.logger.debug("Recorded snapshot with %d entries", len(next_snapshot))
        self._persist()
        return True

    def undo(self) -> bool:
        current = self._history
        if not current.past:
            return False
        self._history = History(
            past=current.past[:-1],
            present=current.past[-1],
            future=(current.present,) + current.future,
        )
        self._persist()
        return True

    def redo(self) -> bool:
        current = self._history
        if not current.future:
            return False
        self._history = History(
            past=current.past + (current.present,),
            present=current.future[0],
            future=current.future[1:],
        )
        self._persist()
        return True

    def restore(self, saved: Union[History, Mapping]) -> History:
        """Replace the whole history, e.g. from a backup file.

        Raises RestoreShapeError and leaves the current history untouched
        when ``saved`` is not a valid history.
        """
        restored = history_from_dict(saved)
        self._history = restored
        self.logger.info("Restored history: %d past, %d future snapshots",
                         len(restored.past), len(restored.future))
        self._persist()
        return restored
