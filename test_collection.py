#!/usr/bin/env python3
"""
Tests for entry operations layered on the history store.
"""

import itertools
import sys
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent))

from minivault.inventory.collection import InventoryCollection
from minivault.inventory.errors import FormatError
from minivault.inventory.history import HistoryStore
from minivault.inventory.models import Entry, Status
from minivault.inventory.registry import CategoryRegistry
from minivault.inventory.stats import collection_summary, progress_segments
from minivault.utils.storage import MemoryStorage


def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"id-{next(counter)}"


def unit(name, status=Status.PURCHASED, quantity=1, **kwargs):
    kwargs.setdefault("category", "Warhammer: Age of Sigmar")
    kwargs.setdefault("group", "Stormcast Eternals")
    return Entry(name=name, status=status, quantity=quantity, **kwargs)


class TestEntryOperations(unittest.TestCase):
    def setUp(self):
        self.storage = MemoryStorage()
        self.store = HistoryStore(self.storage, key="collection")
        self.collection = InventoryCollection(self.store, id_factory=sequential_ids())

    def test_add_assigns_id(self):
        stored = self.collection.add_entry(unit("Liberators"))
        self.assertEqual(stored.id, "id-1")
        self.assertEqual(self.collection.entries, (stored,))
        self.assertTrue(self.store.can_undo)

    def test_add_skips_taken_ids(self):
        self.store.set((unit("Existing", id="id-1"),))
        stored = self.collection.add_entry(unit("New"))
        self.assertEqual(stored.id, "id-2")

    def test_update_keeps_positions(self):
        first = self.collection.add_entry(unit("Liberators"))
        second = self.collection.add_entry(unit("Prosecutors"))
        third = self.collection.add_entry(unit("Lord-Celestant"))
        changed = second.updated(status=Status.PAINTED, quantity=3)
        self.assertTrue(self.collection.update_entry(changed))
        self.assertEqual(self.collection.entries, (first, changed, third))

    def test_update_without_change_is_noop(self):
        first = self.collection.add_entry(unit("Liberators"))
        self.assertFalse(self.collection.update_entry(first))
        self.assertEqual(len(self.store.past), 1)

    def test_update_requires_id(self):
        with self.assertRaises(ValueError):
            self.collection.update_entry(unit("Loose"))

    def test_delete_and_undo(self):
        first = self.collection.add_entry(unit("Liberators"))
        second = self.collection.add_entry(unit("Prosecutors"))
        self.assertTrue(self.collection.delete_entry(first.id))
        self.assertEqual(self.collection.entries, (second,))
        self.store.undo()
        self.assertEqual(self.collection.entries, (first, second))

    def test_delete_unknown_id_is_noop(self):
        self.collection.add_entry(unit("Liberators"))
        self.assertFalse(self.collection.delete_entry("missing"))

    def test_bulk_update_is_one_step(self):
        ids = [self.collection.add_entry(unit(n)).id for n in ("A", "B", "C")]
        steps = len(self.store.past)
        self.assertTrue(self.collection.bulk_update(ids[:2], {"status": "Primed"}))
        self.assertEqual(len(self.store.past), steps + 1)
        self.assertEqual([e.status for e in self.collection.entries],
                         [Status.PRIMED, Status.PRIMED, Status.PURCHASED])

    def test_bulk_update_validation(self):
        entry_id = self.collection.add_entry(unit("A")).id
        with self.assertRaises(ValueError):
            self.collection.bulk_update([], {"status": "Primed"})
        with self.assertRaises(ValueError):
            self.collection.bulk_update([entry_id], {})
        with self.assertRaises(ValueError):
            self.collection.bulk_update([entry_id], {"id": "other"})
        with self.assertRaises(ValueError):
            self.collection.bulk_update([entry_id], {"colour": "red"})

    def test_bulk_delete(self):
        ids = [self.collection.add_entry(unit(n)).id for n in ("A", "B", "C")]
        self.assertTrue(self.collection.bulk_delete([ids[0], ids[2]]))
        self.assertEqual([e.name for e in self.collection.entries], ["B"])
        with self.assertRaises(ValueError):
            self.collection.bulk_delete([])


class TestImportExport(unittest.TestCase):
    def setUp(self):
        self.store = HistoryStore(MemoryStorage(), key="collection")
        self.collection = InventoryCollection(self.store, id_factory=sequential_ids())

    def test_import_replaces_everything_in_one_step(self):
        self.collection.add_entry(unit("Old"))
        text = "\n".join([
            "name,category,group,status,quantity,notes",
            "Vindictors,Warhammer: Age of Sigmar,Stormcast Eternals,Painted,10,",
            'Knight-Arcanum,"Warhammer 40,000",Custodes,Based,1,"Gold, lots of gold"',
        ])
        result = self.collection.import_csv(text)
        self.assertEqual(result.accepted_count, 2)
        self.assertEqual([e.name for e in self.collection.entries], ["Vindictors", "Knight-Arcanum"])
        self.assertTrue(all(e.id for e in self.collection.entries))
        self.assertEqual(len({e.id for e in self.collection.entries}), 2)
        self.store.undo()
        self.assertEqual([e.name for e in self.collection.entries], ["Old"])

    def test_failed_import_leaves_store_untouched(self):
        self.collection.add_entry(unit("Old"))
        before = self.store.history
        with self.assertRaises(FormatError):
            self.collection.import_csv("name,category,group,status,count,notes\nA,B,C,Primed,1,")
        self.assertIs(self.store.history, before)

    def test_export_then_import_preserves_fields(self):
        self.collection.add_entry(unit("Knight-Questor", status=Status.READY_FOR_GAME, quantity=2,
                                       notes='Uses "wet blend"\nPage 12'))
        exported = self.collection.export_csv()
        other = InventoryCollection(HistoryStore(MemoryStorage(), key="other"))
        other.import_csv(exported)
        original = self.collection.entries[0]
        copied = other.entries[0]
        self.assertEqual(
            (copied.name, copied.category, copied.group, copied.status, copied.quantity, copied.notes),
            (original.name, original.category, original.group, original.status, original.quantity, original.notes),
        )


class TestRegistryAndStats(unittest.TestCase):
    def test_registry_defaults_sorted(self):
        registry = CategoryRegistry()
        names = registry.names()
        self.assertEqual(names, sorted(names))
        self.assertIn("Battletech", names)

    def test_registry_add(self):
        saved = []
        registry = CategoryRegistry(["Battletech"], on_change=saved.append)
        self.assertTrue(registry.add("  Infinity "))
        self.assertFalse(registry.add("battletech"))
        self.assertEqual(registry.names(), ["Battletech", "Infinity"])
        self.assertEqual(saved, [["Battletech", "Infinity"]])
        with self.assertRaises(ValueError):
            registry.add("   ")

    def test_summary_counts_models(self):
        snapshot = (
            unit("A", Status.PURCHASED, 5),
            unit("B", Status.PAINTED, 3),
            unit("C", Status.READY_FOR_GAME, 2),
        )
        summary = collection_summary(snapshot)
        self.assertEqual(summary.total_units, 3)
        self.assertEqual(summary.total_models, 10)
        self.assertEqual(summary.painted_models, 5)
        self.assertEqual(summary.unpainted_models, 5)
        self.assertEqual(summary.models_by_status[Status.PRIMED], 0)

        segments = progress_segments(snapshot)
        self.assertEqual([s.label for s in segments], ["Unbuilt", "Painted", "Ready"])
        self.assertAlmostEqual(segments[0].percentage, 50.0)

    def test_status_progress_follows_hobby_order(self):
        self.assertEqual([s.progress for s in Status], list(range(1, 8)))
        self.assertEqual(Status.PURCHASED.progress, 1)
        self.assertEqual(Status.parse("ready for game").progress, 7)

    def test_empty_progress(self):
        self.assertEqual(progress_segments(()), [])


if __name__ == "__main__":
    unittest.main()
