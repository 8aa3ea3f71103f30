"""Registry of category names offered when adding entries."""

import logging
from typing import Iterable, List, Optional

from .models import DEFAULT_CATEGORIES


class CategoryRegistry:
    """Known categories, kept sorted. Entries may still use names not listed here."""

    def __init__(self, names: Optional[Iterable[str]] = None, on_change=None):
        self._names: List[str] = []
        self.on_change = on_change
        self.logger = logging.getLogger("minivault.registry")
        for name in (DEFAULT_CATEGORIES if names is None else names):
            cleaned = str(name).strip()
            if cleaned and not self.contains(cleaned):
                self._names.append(cleaned)
        self._names.sort()

    def names(self) -> List[str]:
        return list(self._names)

    def contains(self, name: str) -> bool:
        wanted = name.strip().lower()
        return any(existing.lower() == wanted for existing in self._names)

    def add(self, name: str) -> bool:
        """Register ``name``. Returns False if it already exists (ignoring case)."""
        cleaned = (name or "").strip()
        if not cleaned:
            raise ValueError("Category name must not be empty")
        if self.contains(cleaned):
            self.logger.info("Category already exists: %s", cleaned)
            return False
        self._names.append(cleaned)
        self._names.sort()
        if self.on_change:
            self.on_change(self.names())
        return True
