"""
Schedule Seeding Script.

Writes the default roster of professionals to the configured storage
backend, replacing whatever schedule is stored there.

Usage:
    python scripts/seed_schedule.py          # roster only
    python scripts/seed_schedule.py --demo   # roster plus demo appointments

Environment:
    STORAGE_BACKEND  - file (default), memory or cosmos
    DATA_STORE_PATH  - JSON file for the file backend
    STORAGE_KEY      - key of the schedule blob
    COSMOS_ENDPOINT / COSMOS_DATABASE - Cosmos DB backend location
"""

import logging
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import settings
from shared.cosmos_config import COSMOS_ENDPOINT, DATABASE_NAME, get_container_config
from use_cases.scheduling.repository import create_repository
from use_cases.scheduling.sample_data import default_schedule, demo_schedule

# Configure logging
logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)


def ensure_cosmos_container():
    """Create the schedule container if it does not exist yet."""
    from azure.cosmos import CosmosClient, PartitionKey
    from azure.identity import AzureCliCredential

    container_name, partition_key = get_container_config("schedule")
    logger.info("Authenticating with Azure CLI...")
    client = CosmosClient(COSMOS_ENDPOINT, credential=AzureCliCredential())
    database = client.get_database_client(DATABASE_NAME)
    database.create_container_if_not_exists(id=container_name, partition_key=PartitionKey(path=partition_key))
    logger.info(f"Container '{container_name}' ready (partition: {partition_key})")


def main():
    """Seed the schedule."""
    with_demo = "--demo" in sys.argv[1:]

    logger.info("=" * 60)
    logger.info("Clinic Scheduling - Seed Script")
    logger.info("=" * 60)
    logger.info(f"Backend: {settings.storage_backend}")
    if settings.storage_backend == "file":
        logger.info(f"File: {settings.data_store_path}")
    elif settings.storage_backend == "cosmos":
        logger.info(f"Endpoint: {COSMOS_ENDPOINT}")
        logger.info(f"Database: {DATABASE_NAME}")
        ensure_cosmos_container()
    logger.info(f"Key: {settings.storage_key}")
    logger.info("=" * 60)

    data = demo_schedule() if with_demo else default_schedule()
    repository = create_repository(settings)
    repository.save(data)

    logger.info(
        f"COMPLETE: {len(data.professionals)} professionals, "
        f"{len(data.patients)} patients, {len(data.appointments)} appointments written"
    )


if __name__ == "__main__":
    main()
