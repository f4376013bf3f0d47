"""
Shared modules for the clinic scheduling application.

This package contains shared configuration used by the application and scripts.
"""

from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    SCHEDULING_CONTAINERS,
)

__all__ = [
    "COSMOS_ENDPOINT",
    "DATABASE_NAME",
    "SCHEDULING_CONTAINERS",
]
