"""
Minivault - Miniature Collection Tracker

Track painting progress across a miniatures collection with full undo/redo
history, CSV import/export and whole-history backups.
"""

from .inventory import (
    Entry,
    Status,
    FilterSpec,
    SortConfig,
    History,
    HistoryStore,
    InventoryCollection,
    CategoryRegistry,
    derive_view,
    encode_snapshot,
    decode_table,
    MinivaultError,
    FormatError,
    ValidationError,
    PersistenceError,
    RestoreShapeError,
)

__version__ = "0.1.0"

__all__ = [
    "Entry",
    "Status",
    "FilterSpec",
    "SortConfig",
    "History",
    "HistoryStore",
    "InventoryCollection",
    "CategoryRegistry",
    "derive_view",
    "encode_snapshot",
    "decode_table",
    "MinivaultError",
    "FormatError",
    "ValidationError",
    "PersistenceError",
    "RestoreShapeError",
]
