"""
Schedule Repository.

Loads and saves the whole schedule aggregate as one JSON text blob under a
single key of a key-value store. The blob is read back without schema
validation: unknown fields are ignored and missing optional fields default.
"""

import logging
from typing import Callable, Optional

from core.data import AggregateRepository, InMemoryKeyValueStore, JsonFileKeyValueStore, KeyValueStore

from .domain.models import ScheduleData
from .sample_data import default_schedule

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "scheduleData"


class ScheduleRepository(AggregateRepository[ScheduleData]):
    """Whole-aggregate persistence for the schedule."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        default_factory: Callable[[], ScheduleData] = default_schedule,
    ):
        self._store = store
        self._key = key
        self._default_factory = default_factory

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> ScheduleData:
        """Load the stored schedule, or the built-in default when none is stored."""
        blob = self._store.get(self._key)
        if blob is None:
            logger.info(f"No stored schedule under '{self._key}', using the default roster")
            return self._default_factory()

        data = ScheduleData.from_json(blob)
        logger.info(
            f"Loaded schedule: {len(data.professionals)} professionals, "
            f"{len(data.patients)} patients, {len(data.appointments)} appointments"
        )
        return data

    def save(self, aggregate: ScheduleData) -> None:
        """Replace the stored schedule."""
        self._store.set(self._key, aggregate.to_json())
        logger.debug(f"Saved schedule under '{self._key}'")


def create_key_value_store(backend: str, path: Optional[str] = None) -> KeyValueStore:
    """
    Build the key-value store for a backend name.

    Args:
        backend: "file", "memory" or "cosmos"
        path: JSON file path for the file backend
    """
    if backend == "file":
        return JsonFileKeyValueStore(path or "./data/schedule_store.json")
    if backend == "memory":
        return InMemoryKeyValueStore()
    if backend == "cosmos":
        # Imported lazily so the Azure SDK is only touched when selected
        from .cosmos_store import CosmosKeyValueStore
        return CosmosKeyValueStore()
    raise ValueError(f"Unknown storage backend: {backend}")


def create_repository(settings) -> ScheduleRepository:
    """Build the schedule repository from application settings."""
    store = create_key_value_store(settings.storage_backend, settings.data_store_path)
    logger.info(f"Schedule storage backend: {settings.storage_backend}")
    return ScheduleRepository(store, key=settings.storage_key)
