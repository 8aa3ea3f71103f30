"""Storage backends for persisted collection histories."""

import copy
import json
import os
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from sqlalchemy import Column, DateTime, JSON, String, create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from ..inventory.errors import ConfigurationError, PersistenceError


class StorageBackend(ABC):
    """Key-value store the history store writes through."""

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Return the value stored under ``key`` or None."""
        pass

    @abstractmethod
    def save(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key``; raise PersistenceError on failure."""
        pass


class MemoryStorage(StorageBackend):
    """In-process storage, mostly for tests and throwaway sessions."""

    def __init__(self):
        self.data: Dict[str, Any] = {}
        self.save_count = 0

    def load(self, key: str) -> Optional[Any]:
        value = self.data.get(key)
        return copy.deepcopy(value) if value is not None else None

    def save(self, key: str, value: Any) -> None:
        self.data[key] = copy.deepcopy(value)
        self.save_count += 1


class JsonFileStorage(StorageBackend):
    """All keys in a single JSON document on disk."""

    def __init__(self, path):
        self.path = Path(path).expanduser()

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}")
        if not isinstance(data, dict):
            raise PersistenceError(f"{self.path} does not contain a JSON object")
        return data

    def load(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def save(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".minivault_", suffix=".json")
        except OSError as e:
            raise PersistenceError(f"Could not write {self.path}: {e}")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except Exception as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Could not write {self.path}: {e}")


Base = declarative_base()


class HistoryRecord(Base):
    __tablename__ = "history_records"
    key = Column(String, primary_key=True)
    payload = Column(JSON, nullable=False)
    updated_at = Column(DateTime, nullable=True)


class SqlStorage(StorageBackend):
    """Histories stored as JSON rows in any SQLAlchemy database.

    Use ``sqlite:///minivault.db`` locally or a ``postgresql+psycopg2://`` URL
    for a shared database.
    """

    def __init__(self, url: str = "sqlite:///minivault.db"):
        self.url = url
        try:
            self.engine = create_engine(url)
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not open database {url}: {e}")
        self.Session = sessionmaker(bind=self.engine)

    def load(self, key: str) -> Optional[Any]:
        try:
            with self.Session() as session:
                record = session.get(HistoryRecord, key)
                return copy.deepcopy(record.payload) if record else None
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load '{key}': {e}")

    def save(self, key: str, value: Any) -> None:
        try:
            with self.Session() as session:
                record = session.get(HistoryRecord, key)
                if record is None:
                    record = HistoryRecord(key=key)
                    session.add(record)
                record.payload = copy.deepcopy(value)
                record.updated_at = datetime.now(timezone.utc).replace(tzinfo=None)
                session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not save '{key}': {e}")

    def dispose(self):
        self.engine.dispose()


def create_storage(storage_config: Dict[str, Any]) -> StorageBackend:
    """Build the backend named by a config ``storage`` section."""
    backend = (storage_config.get("backend") or "json").lower()
    if backend == "memory":
        return MemoryStorage()
    if backend == "json":
        return JsonFileStorage(storage_config.get("path") or "~/.local/share/minivault/history.json")
    if backend == "sql":
        return SqlStorage(storage_config.get("url") or "sqlite:///minivault.db")
    raise ConfigurationError(f"Unknown storage backend: {backend}")
