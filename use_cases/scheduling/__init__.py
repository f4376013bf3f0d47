"""
Clinic Scheduling Use Case.

Structure:
- domain/: Pure business logic (no I/O)
  - models.py: Professional, Patient, Appointment, ScheduleData
  - policies.py: pricing and patient-matching rules, advisory policies
  - services.py: schedule operations, financial and operational reports
- repository.py: whole-aggregate persistence over a key-value store
- cosmos_store.py: Cosmos DB key-value backend
- store.py: ScheduleStore state container
- presentation/: printable financial report
- tools.py / assistant.py: administrator AI assistant
"""

from .store import MutationResult, ScheduleStore, create_schedule_store
from .repository import ScheduleRepository, create_repository

__all__ = [
    "MutationResult",
    "ScheduleStore",
    "create_schedule_store",
    "ScheduleRepository",
    "create_repository",
]
