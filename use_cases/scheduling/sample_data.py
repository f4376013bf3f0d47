"""
Built-in schedule used when nothing is stored yet, plus demo appointments
for the seeding script.
"""

from datetime import datetime, timedelta, timezone
from typing import List

from core.domain import to_epoch_millis

from .domain.models import Appointment, AppointmentStatus, Patient, Professional, ScheduleData
from .domain.policies import resolve_consultation_price


DEFAULT_PROFESSIONALS = (
    Professional(id="prof_1", name="Dr. Ana Souza", specialty="Cardiology", consultation_price=250),
    Professional(id="prof_2", name="Dr. Bruno Lima", specialty="Dermatology", consultation_price=200),
    Professional(id="prof_3", name="Carla Mendes", specialty="Psychology", consultation_price=180),
    Professional(id="prof_4", name="Diego Rocha", specialty="Physiotherapy"),
)


def default_schedule() -> ScheduleData:
    """Roster of professionals with no patients and no appointments."""
    return ScheduleData(professionals=DEFAULT_PROFESSIONALS)


def demo_schedule(reference: datetime = None) -> ScheduleData:
    """
    Default roster plus a handful of appointments around ``reference``
    (defaults to now), spread over the past and the coming week.
    """
    reference = reference or datetime.now(timezone.utc)
    base = reference.replace(hour=9, minute=0, second=0, microsecond=0)

    patients = (
        Patient(id="pat_1_demo", name="Maria Silva"),
        Patient(id="pat_2_demo", name="João Pereira"),
        Patient(id="pat_3_demo", name="Luiza Alves"),
    )

    plan = [
        # (day offset, hour offset, professional, patient index, status)
        (-7, 0, "prof_1", 0, AppointmentStatus.COMPLETED),
        (-6, 1, "prof_2", 1, AppointmentStatus.COMPLETED),
        (-5, 2, "prof_1", 2, AppointmentStatus.COMPLETED),
        (-3, 0, "prof_3", 0, AppointmentStatus.CANCELLED),
        (1, 0, "prof_1", 1, AppointmentStatus.CONFIRMED),
        (2, 3, "prof_4", 2, AppointmentStatus.SCHEDULED),
    ]

    prices = {p.id: resolve_consultation_price(p) for p in DEFAULT_PROFESSIONALS}
    appointments: List[Appointment] = []
    for index, (days, hours, prof_id, patient_index, status) in enumerate(plan, start=1):
        start = base + timedelta(days=days, hours=hours)
        patient = patients[patient_index]
        appointments.append(Appointment(
            id=f"appt_{index}_demo",
            professional_id=prof_id,
            patient_id=patient.id,
            patient_name=patient.name,
            start=str(to_epoch_millis(start)),
            end=str(to_epoch_millis(start + timedelta(minutes=30))),
            status=status,
            price=prices[prof_id],
        ))

    return ScheduleData(
        professionals=DEFAULT_PROFESSIONALS,
        patients=patients,
        appointments=tuple(appointments),
    )
