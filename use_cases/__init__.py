"""
Use Cases Package.

Each use case is a self-contained module following the layered
architecture defined in core/:
- domain/: Pure business logic (models, policies, services)
- repository: data access over core.data stores
- presentation/: rendering of derived views
- store / assistant: the entry points used by the HTTP API

Available use cases:
- scheduling: clinic appointment scheduling with reports and an admin assistant
"""

from use_cases.scheduling import ScheduleStore, create_schedule_store

__all__ = [
    "ScheduleStore",
    "create_schedule_store",
]
