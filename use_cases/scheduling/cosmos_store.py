"""
Cosmos DB Key-Value Store for the Scheduling Use Case.

Stores each key as one document ``{"id": key, "value": blob}`` in the
schedule container. Uses DefaultAzureCredential for flexible authentication.
"""

import logging
from typing import Optional

from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from core.data import KeyValueStore

# Import shared configuration
from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    get_container_name,
)

logger = logging.getLogger(__name__)


class CosmosKeyValueStore(KeyValueStore):
    """Key-value store backed by a Cosmos DB container partitioned on /id."""

    def __init__(self, container=None):
        """
        Initialize the store.

        Args:
            container: Optional container client to use instead of connecting
                with DefaultAzureCredential (used by tests and scripts)
        """
        if container is None:
            logger.info("Initializing Cosmos DB schedule container client...")
            self._credential = DefaultAzureCredential()
            self._client = CosmosClient(COSMOS_ENDPOINT, credential=self._credential)
            database = self._client.get_database_client(DATABASE_NAME)
            container = database.get_container_client(get_container_name("schedule"))
            logger.info(f"Cosmos DB schedule container ready: {COSMOS_ENDPOINT}")
        self._container = container

    def get(self, key: str) -> Optional[str]:
        try:
            document = self._container.read_item(item=key, partition_key=key)
        except CosmosResourceNotFoundError:
            return None
        return document.get("value")

    def set(self, key: str, value: str) -> None:
        self._container.upsert_item({"id": key, "value": value})

    def delete(self, key: str) -> bool:
        try:
            self._container.delete_item(item=key, partition_key=key)
        except CosmosResourceNotFoundError:
            return False
        return True
