"""
Core Framework for the Clinic Scheduling Service.

This module provides the base classes and interfaces that use cases
build on. The layered architecture ensures:

1. Domain Layer - Pure business rules and advisory policies, no I/O
2. Data Layer - Key-value stores and aggregate repositories
3. Session Layer - Token-based sessions for signed-in identities

Each use case follows this pattern for consistency and reusability.
"""

from .domain import DomainEvent, DomainService, PolicyDecision, PolicyEngine, PolicyResult
from .data import AggregateRepository, KeyValueStore, StorageError
from .session import SessionContext, SessionManager

__all__ = [
    # Domain
    "DomainService",
    "PolicyEngine",
    "PolicyDecision",
    "PolicyResult",
    "DomainEvent",
    # Data
    "KeyValueStore",
    "AggregateRepository",
    "StorageError",
    # Session
    "SessionManager",
    "SessionContext",
]
