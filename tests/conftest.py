"""Shared test fixtures."""
from datetime import datetime, timezone

import pytest

from core.data import InMemoryKeyValueStore
from use_cases.scheduling.domain.models import (
    Appointment,
    AppointmentStatus,
    Patient,
    Professional,
    ScheduleData,
)
from use_cases.scheduling.domain.services import IdGenerator
from use_cases.scheduling.repository import ScheduleRepository
from use_cases.scheduling.store import ScheduleStore

FIXED_MILLIS = 1714557600000


def millis(year, month, day, hour=0, minute=0) -> int:
    """Epoch milliseconds of a UTC wall-clock time."""
    return int(datetime(year, month, day, hour, minute, tzinfo=timezone.utc).timestamp() * 1000)


def make_appointment(
    appt_id: str,
    professional_id: str,
    start: int,
    status: AppointmentStatus = AppointmentStatus.SCHEDULED,
    price: float = 200,
    patient_id: str = "pat_1",
    patient_name: str = "Maria Silva",
    minutes: int = 30,
) -> Appointment:
    return Appointment(
        id=appt_id,
        professional_id=professional_id,
        patient_id=patient_id,
        patient_name=patient_name,
        start=str(start),
        end=str(start + minutes * 60 * 1000),
        status=status,
        price=price,
    )


@pytest.fixture
def ids() -> IdGenerator:
    """Sequential id generator with a frozen clock."""
    return IdGenerator("sequential", clock=lambda: FIXED_MILLIS)


@pytest.fixture
def roster() -> ScheduleData:
    """Two priced professionals and one without a price."""
    return ScheduleData(professionals=(
        Professional(id="prof_1", name="Dr. Ana Souza", specialty="Cardiology", consultation_price=200),
        Professional(id="prof_2", name="Dr. Bruno Lima", specialty="Dermatology", consultation_price=300),
        Professional(id="prof_3", name="Carla Mendes", specialty="Psychology"),
    ))


@pytest.fixture
def may_schedule(roster) -> ScheduleData:
    """Roster plus appointments around May 2024."""
    return ScheduleData(
        professionals=roster.professionals,
        patients=(
            Patient(id="pat_1", name="Maria Silva"),
            Patient(id="pat_2", name="João Pereira"),
        ),
        appointments=(
            make_appointment("appt_1", "prof_1", millis(2024, 5, 2, 10), AppointmentStatus.COMPLETED, 200),
            make_appointment("appt_2", "prof_1", millis(2024, 5, 9, 10), AppointmentStatus.COMPLETED, 250),
            make_appointment("appt_3", "prof_2", millis(2024, 5, 3, 14), AppointmentStatus.COMPLETED, 300,
                             patient_id="pat_2", patient_name="João Pereira"),
            make_appointment("appt_4", "prof_2", millis(2024, 5, 10, 14), AppointmentStatus.CANCELLED, 300,
                             patient_id="pat_2", patient_name="João Pereira"),
            make_appointment("appt_5", "prof_1", millis(2024, 4, 30, 10), AppointmentStatus.COMPLETED, 200),
            make_appointment("appt_6", "prof_1", millis(2024, 5, 20, 10), AppointmentStatus.SCHEDULED, 200),
        ),
    )


@pytest.fixture
def kv_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def repository(kv_store, roster) -> ScheduleRepository:
    return ScheduleRepository(kv_store, default_factory=lambda: roster)


@pytest.fixture
def store(repository, ids) -> ScheduleStore:
    return ScheduleStore(repository, ids=ids)
