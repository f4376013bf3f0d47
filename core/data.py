"""
Data Layer Base Classes.

The data layer persists whole aggregates as text blobs in a key-value store,
the same way a browser keeps application state under one localStorage key.

Key principles:
- Stores handle get/set/delete of opaque text only
- Repositories own (de)serialization of one aggregate type
- No business logic in repositories
- Support for different backends via dependency injection
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

# Type variable for aggregate types
T = TypeVar("T")


class StorageError(Exception):
    """Raised when a storage backend holds data it cannot read back."""
    pass


class KeyValueStore(ABC):
    """
    Abstract base class for key-value storage backends.

    Values are opaque strings. Implementations must make ``set`` durable
    before returning (as far as the backend allows).
    """

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Get the value stored under a key.

        Returns:
            The stored text, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value under a key, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Delete a key.

        Returns:
            True if deleted, False if not found
        """
        pass


class InMemoryKeyValueStore(KeyValueStore):
    """Process-local store. Contents are lost when the process exits."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> bool:
        return self._values.pop(key, None) is not None


class JsonFileKeyValueStore(KeyValueStore):
    """
    Key-value store backed by a single JSON file.

    The file holds one JSON object mapping keys to text blobs. Every ``set``
    rewrites the whole file through a temporary sibling and a rename. A file
    that cannot be parsed raises StorageError on every call and is never
    overwritten.
    """

    def __init__(self, path: str):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _read_all(self) -> Dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            with self._path.open("r", encoding="utf-8") as f:
                content = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"Storage file {self._path} is not valid JSON: {e}")
            raise StorageError(f"Storage file {self._path} is not valid JSON") from e
        if not isinstance(content, dict):
            logger.error(f"Storage file {self._path} does not hold a JSON object")
            raise StorageError(f"Storage file {self._path} does not hold a JSON object")
        return content

    def _write_all(self, values: Dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(values, f, ensure_ascii=False)
        tmp_path.replace(self._path)

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        values = self._read_all()
        values[key] = value
        self._write_all(values)

    def delete(self, key: str) -> bool:
        values = self._read_all()
        if key not in values:
            return False
        del values[key]
        self._write_all(values)
        return True


class AggregateRepository(ABC, Generic[T]):
    """
    Abstract base class for whole-aggregate repositories.

    An AggregateRepository reads and replaces one aggregate as a single unit.
    There are no partial updates and no versioning.

    Example:
        class ScheduleRepository(AggregateRepository[ScheduleData]):
            def load(self) -> ScheduleData:
                raw = self._store.get(self._key)
                ...
    """

    @abstractmethod
    def load(self) -> T:
        """Load the aggregate, falling back to a default when nothing is stored."""
        pass

    @abstractmethod
    def save(self, aggregate: T) -> None:
        """Replace the stored aggregate."""
        pass
