"""
Entry-level operations on a history store.

Each operation computes the next snapshot from the present one and hands it
to ``HistoryStore.set``; undo/redo and persistence are entirely the store's
business.
"""

import logging
import uuid
from typing import Any, Callable, Dict, Iterable, Optional

from .csv_codec import DecodeResult, decode_table, encode_snapshot
from .history import HistoryStore
from .models import Entry, Snapshot


def new_entry_id() -> str:
    return uuid.uuid4().hex


class InventoryCollection:
    """Add, edit, remove and bulk-import entries through a HistoryStore."""

    def __init__(self, store: HistoryStore, id_factory: Callable[[], str] = new_entry_id):
        self.store = store
        self.id_factory = id_factory
        self.logger = logging.getLogger("minivault.collection")

    @property
    def entries(self) -> Snapshot:
        return self.store.present

    def get(self, entry_id: str) -> Optional[Entry]:
        for entry in self.store.present:
            if entry.id == entry_id:
                return entry
        return None

    def _fresh_id(self, taken) -> str:
        entry_id = self.id_factory()
        while entry_id in taken:
            entry_id = self.id_factory()
        return entry_id

    def add_entry(self, entry: Entry) -> Entry:
        """Append ``entry`` under a newly assigned id and return the stored copy."""
        taken = {e.id for e in self.store.present}
        stored = entry.with_id(self._fresh_id(taken))
        self.store.set(lambda present: present + (stored,))
        self.logger.info("Added entry %s (%s)", stored.id, stored.name)
        return stored

    def update_entry(self, entry: Entry) -> bool:
        """Replace the entry sharing ``entry.id``; other entries keep their place."""
        if entry.id is None:
            raise ValueError("Cannot update an entry without an id")
        return self.store.set(
            lambda present: tuple(entry if e.id == entry.id else e for e in present)
        )

    def delete_entry(self, entry_id: str) -> bool:
        return self.store.set(
            lambda present: tuple(e for e in present if e.id != entry_id)
        )

    def bulk_update(self, ids: Iterable[str], updates: Dict[str, Any]) -> bool:
        """Apply the same field changes to every listed entry as one undo step."""
        targets = set(ids)
        if not targets or not updates:
            raise ValueError("Bulk update needs at least one id and one field to change")
        return self.store.set(
            lambda present: tuple(e.updated(**updates) if e.id in targets else e for e in present)
        )

    def bulk_delete(self, ids: Iterable[str]) -> bool:
        targets = set(ids)
        if not targets:
            raise ValueError("Bulk delete needs at least one id")
        return self.store.set(
            lambda present: tuple(e for e in present if e.id not in targets)
        )

    def replace_all(self, entries: Iterable[Entry]) -> bool:
        """Replace the whole collection, giving every entry a new id."""
        incoming = list(entries)
        taken = set()
        stored = []
        for entry in incoming:
            entry_id = self._fresh_id(taken)
            taken.add(entry_id)
            stored.append(entry.with_id(entry_id))
        return self.store.set(tuple(stored))

    def import_csv(self, text: str) -> DecodeResult:
        """Decode ``text`` and make it the whole collection.

        FormatError propagates before anything is recorded, so a bad file
        leaves the collection as it was.
        """
        result = decode_table(text)
        self.replace_all(result.entries)
        self.logger.info("Imported %d entries (%d rows skipped)",
                         result.accepted_count, result.skipped_count)
        return result

    def export_csv(self) -> str:
        return encode_snapshot(self.store.present)
