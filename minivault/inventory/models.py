"""
Value types for the miniature inventory.

Entries, snapshots and histories are immutable. Every change to the
collection produces a new snapshot through the history store; nothing here
mutates in place.
"""

from dataclasses import dataclass, replace, asdict
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class Status(Enum):
    """Completion stages, in hobby order."""
    PURCHASED = "Purchased"
    PRINTED = "Printed"
    ASSEMBLED = "Assembled"
    PRIMED = "Primed"
    PAINTED = "Painted"
    BASED = "Based"
    READY_FOR_GAME = "Ready for Game"

    @classmethod
    def parse(cls, text: str) -> "Status":
        """Resolve a display value or member name to a Status."""
        if isinstance(text, Status):
            return text
        cleaned = str(text).strip()
        for status in cls:
            if status.value.lower() == cleaned.lower() or status.name == cleaned.upper():
                return status
        raise ValueError(f"Unknown status: {text!r}")

    @property
    def progress(self) -> int:
        return STATUS_PROGRESS[self]


STATUSES: List[Status] = list(Status)

STATUS_PROGRESS: Dict[Status, int] = {status: index for index, status in enumerate(Status, start=1)}

DEFAULT_CATEGORIES = [
    "Marvel: Crisis Protocol",
    "Battletech",
    "Star Wars: Legion",
    "Star Wars: Shatterpoint",
    "Middle-earth Strategy Battle Game",
    "Warhammer: The Old World",
    "Warhammer: Age of Sigmar",
    "Warhammer 40,000",
]

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class Entry:
    """One inventory record"""
    name: str
    category: str
    group: str
    status: Status
    quantity: int = 1
    notes: Optional[str] = None
    images: Tuple[str, ...] = ()
    id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("Entry name must be a non-empty string")
        for field_name in ("category", "group"):
            value = getattr(self, field_name)
            if value is None:
                object.__setattr__(self, field_name, "")
            elif not isinstance(value, str):
                raise ValueError(f"Entry {field_name} must be a string, got {value!r}")
        # empty notes and absent notes are the same value
        if self.notes == "":
            object.__setattr__(self, "notes", None)
        elif self.notes is not None and not isinstance(self.notes, str):
            raise ValueError(f"Entry notes must be a string, got {self.notes!r}")
        if not isinstance(self.status, Status):
            object.__setattr__(self, "status", Status.parse(self.status))
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError(f"Entry quantity must be a positive integer, got {self.quantity!r}")
        if not isinstance(self.images, tuple):
            object.__setattr__(self, "images", tuple(self.images or ()))

    def with_id(self, entry_id: str) -> "Entry":
        return replace(self, id=entry_id)

    def updated(self, **changes: Any) -> "Entry":
        """Copy of this entry with ``changes`` applied; the id is kept."""
        if "id" in changes:
            raise ValueError("Entry id is immutable")
        unknown = set(changes) - set(ENTRY_FIELDS)
        if unknown:
            raise ValueError(f"Unknown entry fields: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        data["images"] = list(self.images)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Entry":
        return cls(
            id=data.get("id"),
            name=data["name"],
            category=data.get("category", ""),
            group=data.get("group", ""),
            status=Status.parse(data["status"]),
            quantity=int(data.get("quantity", 1)),
            notes=data.get("notes"),
            images=tuple(data.get("images") or ()),
        )


ENTRY_FIELDS = ("name", "category", "group", "status", "quantity", "notes", "images")

Snapshot = Tuple[Entry, ...]


def snapshot_to_list(snapshot: Snapshot) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in snapshot]


@dataclass(frozen=True)
class History:
    """A present snapshot plus its undo (past) and redo (future) stacks."""
    present: Snapshot = ()
    past: Tuple[Snapshot, ...] = ()
    future: Tuple[Snapshot, ...] = ()

    @property
    def can_undo(self) -> bool:
        return len(self.past) > 0

    @property
    def can_redo(self) -> bool:
        return len(self.future) > 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "past": [snapshot_to_list(s) for s in self.past],
            "present": snapshot_to_list(self.present),
            "future": [snapshot_to_list(s) for s in self.future],
        }


@dataclass(frozen=True)
class FilterSpec:
    """Category selector and group substring used by the view pipeline"""
    category: str = ALL_CATEGORIES
    group: str = ""


SORTABLE_KEYS = ("name", "category", "group", "status", "quantity")


@dataclass(frozen=True)
class SortConfig:
    key: str = "name"
    direction: str = "asc"

    def __post_init__(self):
        if self.key not in SORTABLE_KEYS:
            raise ValueError(f"Cannot sort by {self.key!r}; expected one of {', '.join(SORTABLE_KEYS)}")
        if self.direction not in ("asc", "desc"):
            raise ValueError(f"Sort direction must be 'asc' or 'desc', got {self.direction!r}")
