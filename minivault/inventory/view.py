"""
Derived view of a snapshot: category filter, group filter, text search, sort.

``derive_view`` is a pure function. It reads the snapshot it is given and
returns a new list; it keeps no state between calls.
"""

import locale
from functools import cmp_to_key
from typing import Any, Iterable, List, Optional

from .models import ALL_CATEGORIES, Entry, FilterSpec, SortConfig, Status

NUMERIC_KEYS = ("quantity",)


def _sort_value(entry: Entry, key: str) -> Any:
    value = getattr(entry, key, None)
    if isinstance(value, Status):
        return value.value
    return value


def compare_entries(a: Entry, b: Entry, key: str) -> int:
    a_value = _sort_value(a, key)
    b_value = _sort_value(b, key)
    if key in NUMERIC_KEYS and isinstance(a_value, int) and isinstance(b_value, int):
        return (a_value > b_value) - (a_value < b_value)
    if isinstance(a_value, str) and isinstance(b_value, str):
        # case-insensitive first so "Zeta" follows "alpha" even under the C locale
        folded = locale.strcoll(a_value.casefold(), b_value.casefold())
        return folded if folded else locale.strcoll(a_value, b_value)
    return 0


def matches_search(entry: Entry, query: str) -> bool:
    needle = query.lower()
    haystacks = (entry.name, entry.category, entry.group, entry.notes)
    return any(text and needle in text.lower() for text in haystacks)


def derive_view(snapshot: Iterable[Entry], filters: Optional[FilterSpec] = None,
                search_query: str = "", sort: Optional[SortConfig] = None) -> List[Entry]:
    filters = filters or FilterSpec()
    sort = sort or SortConfig()
    result = list(snapshot)

    if filters.category != ALL_CATEGORIES:
        result = [e for e in result if e.category == filters.category]

    if filters.group:
        group_text = filters.group.lower()
        result = [e for e in result if group_text in e.group.lower()]

    if search_query and search_query.strip():
        result = [e for e in result if matches_search(e, search_query)]

    sign = -1 if sort.direction == "desc" else 1
    # sorted() is stable, so ties keep snapshot order in both directions
    return sorted(result, key=cmp_to_key(lambda a, b: sign * compare_entries(a, b, sort.key)))


def toggle_sort(current: Optional[SortConfig], key: str) -> SortConfig:
    """Next sort after selecting ``key``: ascending, or descending if it was already ascending."""
    if current is not None and current.key == key and current.direction == "asc":
        return SortConfig(key=key, direction="desc")
    return SortConfig(key=key, direction="asc")
