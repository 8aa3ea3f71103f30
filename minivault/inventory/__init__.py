"""
Inventory core: entry model, CSV interchange, versioned store and view pipeline.
"""

from .errors import (
    MinivaultError,
    FormatError,
    ValidationError,
    PersistenceError,
    RestoreShapeError,
    ConfigurationError,
)
from .models import (
    Entry,
    Status,
    STATUSES,
    STATUS_PROGRESS,
    DEFAULT_CATEGORIES,
    ALL_CATEGORIES,
    History,
    FilterSpec,
    SortConfig,
)
from .csv_codec import CSV_HEADERS, DecodeResult, encode_snapshot, decode_table
from .history import HistoryStore, history_from_dict
from .collection import InventoryCollection
from .view import derive_view, toggle_sort
from .registry import CategoryRegistry
from .stats import collection_summary, progress_segments

__all__ = [
    "MinivaultError",
    "FormatError",
    "ValidationError",
    "PersistenceError",
    "RestoreShapeError",
    "ConfigurationError",
    "Entry",
    "Status",
    "STATUSES",
    "STATUS_PROGRESS",
    "DEFAULT_CATEGORIES",
    "ALL_CATEGORIES",
    "History",
    "FilterSpec",
    "SortConfig",
    "CSV_HEADERS",
    "DecodeResult",
    "encode_snapshot",
    "decode_table",
    "HistoryStore",
    "history_from_dict",
    "InventoryCollection",
    "derive_view",
    "toggle_sort",
    "CategoryRegistry",
    "collection_summary",
    "progress_segments",
]
