"""
Azure Cosmos DB Configuration.

Centralized configuration for the Cosmos DB storage backend, shared by the
application and the seeding script.

Environment Variables (optional overrides):
    COSMOS_ENDPOINT - Override the default Cosmos DB endpoint
    COSMOS_DATABASE - Override the default database name
"""

import os

# =============================================================================
# COSMOS DB CONNECTION
# =============================================================================

COSMOS_ENDPOINT = os.getenv(
    "COSMOS_ENDPOINT",
    "https://localhost:8081/"
)

DATABASE_NAME = os.getenv(
    "COSMOS_DATABASE",
    "clinic"
)

# =============================================================================
# SCHEDULING CONTAINERS
# =============================================================================

# Format: logical_name -> (container_name, partition_key_path)
SCHEDULING_CONTAINERS = {
    "schedule": ("Clinic_Schedule", "/id"),
}

# Simple container name lookup (without partition key)
SCHEDULING_CONTAINER_NAMES = {
    key: name for key, (name, _) in SCHEDULING_CONTAINERS.items()
}

# =============================================================================
# HELPER FUNCTIONS
# =============================================================================

def get_container_name(logical_name: str) -> str:
    """Get the actual container name for a logical container name."""
    if logical_name in SCHEDULING_CONTAINER_NAMES:
        return SCHEDULING_CONTAINER_NAMES[logical_name]
    return logical_name


def get_container_config(logical_name: str) -> tuple:
    """Get (container_name, partition_key_path) for a container."""
    if logical_name in SCHEDULING_CONTAINERS:
        return SCHEDULING_CONTAINERS[logical_name]
    raise ValueError(f"Unknown scheduling container: {logical_name}")
