"""Progress figures for a snapshot, as shown on the dashboard."""

from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Tuple

from .models import Entry, Status

PAINTED_STATUSES = (Status.PAINTED, Status.BASED, Status.READY_FOR_GAME)

# (label, statuses) buckets for the combined progress bar
PROGRESS_GROUPS: Tuple[Tuple[str, Tuple[Status, ...]], ...] = (
    ("Unbuilt", (Status.PURCHASED, Status.PRINTED)),
    ("Built", (Status.ASSEMBLED, Status.PRIMED)),
    ("Painted", (Status.PAINTED, Status.BASED)),
    ("Ready", (Status.READY_FOR_GAME,)),
)


@dataclass
class CollectionSummary:
    total_units: int = 0
    total_models: int = 0
    painted_models: int = 0
    unpainted_models: int = 0
    models_by_status: Dict[Status, int] = field(default_factory=dict)


@dataclass
class ProgressSegment:
    label: str
    count: int
    percentage: float


def collection_summary(snapshot: Iterable[Entry]) -> CollectionSummary:
    entries = list(snapshot)
    by_status = {status: 0 for status in Status}
    for entry in entries:
        by_status[entry.status] += entry.quantity
    total = sum(by_status.values())
    painted = sum(by_status[s] for s in PAINTED_STATUSES)
    return CollectionSummary(
        total_units=len(entries),
        total_models=total,
        painted_models=painted,
        unpainted_models=total - painted,
        models_by_status=by_status,
    )


def progress_segments(snapshot: Iterable[Entry]) -> List[ProgressSegment]:
    """Model counts per progress bucket; empty buckets are left out."""
    summary = collection_summary(snapshot)
    if summary.total_models == 0:
        return []
    segments = []
    for label, statuses in PROGRESS_GROUPS:
        count = sum(summary.models_by_status[s] for s in statuses)
        if count > 0:
            segments.append(ProgressSegment(label, count, count / summary.total_models * 100))
    return segments
