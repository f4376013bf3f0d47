"""
Scheduling Domain Services.

Pure transformations of the schedule aggregate and the reports derived
from it. Every operation takes the current ScheduleData and returns the
next one; the input is never modified. These have NO I/O dependencies.
"""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone, tzinfo
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from core.domain import DomainService, now_millis, to_epoch_millis

from .models import (
    Appointment,
    AppointmentStatus,
    Patient,
    Professional,
    ScheduleData,
)
from .policies import normalize_patient_name, resolve_consultation_price


Moment = Union[datetime, int, str]

# Fields a professional may change on their own profile
UPDATABLE_PROFESSIONAL_FIELDS = ("name", "specialty", "consultation_price")


# =============================================================================
# ID GENERATION
# =============================================================================

class IdGenerator:
    """
    Generates entity ids.

    The ``sequential`` strategy yields ``<prefix>_<count + 1>_<millis>``,
    unique only as long as a single writer creates one entity per
    millisecond. The ``uuid`` strategy yields ``<prefix>_<uuid4 hex>``.
    """

    STRATEGIES = ("sequential", "uuid")

    def __init__(self, strategy: str = "sequential", clock: Callable[[], int] = now_millis):
        if strategy not in self.STRATEGIES:
            raise ValueError(f"Unknown id strategy: {strategy}")
        self.strategy = strategy
        self._clock = clock

    def next_id(self, prefix: str, existing_count: int) -> str:
        if self.strategy == "uuid":
            return f"{prefix}_{uuid.uuid4().hex}"
        return f"{prefix}_{existing_count + 1}_{self._clock()}"


def _encode_moment(moment: Moment, tz: tzinfo) -> str:
    """Encode a point in time as string epoch milliseconds."""
    if isinstance(moment, datetime):
        return str(to_epoch_millis(moment, tz))
    return str(int(float(moment)))


# =============================================================================
# MUTATIONS
# =============================================================================

def find_patient_by_name(data: ScheduleData, patient_name: str) -> Optional[Patient]:
    """Find a patient by normalized name."""
    key = normalize_patient_name(patient_name)
    for patient in data.patients:
        if normalize_patient_name(patient.name) == key:
            return patient
    return None


def book_appointment(
    data: ScheduleData,
    professional_id: str,
    patient_name: str,
    start: Moment,
    end: Moment,
    ids: IdGenerator,
    tz: tzinfo = timezone.utc,
) -> Tuple[ScheduleData, Appointment]:
    """
    Book an appointment.

    The patient is resolved by normalized name or created with the trimmed
    name. The price is copied from the professional, falling back to the
    default consultation price. Overlaps are not checked here.

    Returns:
        Tuple of (next schedule, created appointment)
    """
    patients = data.patients
    patient = find_patient_by_name(data, patient_name)
    if patient is None:
        patient = Patient(
            id=ids.next_id("pat", len(data.patients)),
            name=patient_name.strip(),
        )
        patients = patients + (patient,)

    appointment = Appointment(
        id=ids.next_id("appt", len(data.appointments)),
        professional_id=professional_id,
        patient_id=patient.id,
        patient_name=patient.name,
        start=_encode_moment(start, tz),
        end=_encode_moment(end, tz),
        status=AppointmentStatus.SCHEDULED,
        price=resolve_consultation_price(data.find_professional(professional_id)),
    )

    next_data = replace(
        data,
        patients=patients,
        appointments=data.appointments + (appointment,),
    )
    return next_data, appointment


def _replace_appointment(
    data: ScheduleData,
    appointment_id: str,
    **changes: Any,
) -> ScheduleData:
    appointments = tuple(
        replace(appt, **changes) if appt.id == appointment_id else appt
        for appt in data.appointments
    )
    return replace(data, appointments=appointments)


def update_appointment_notes(data: ScheduleData, appointment_id: str, notes: str) -> ScheduleData:
    """Replace the notes of an appointment. Unknown ids leave the schedule as is."""
    return _replace_appointment(data, appointment_id, notes=notes)


def cancel_appointment(data: ScheduleData, appointment_id: str) -> ScheduleData:
    """Cancel an appointment whatever its current status."""
    return _replace_appointment(data, appointment_id, status=AppointmentStatus.CANCELLED)


def update_appointment_status(
    data: ScheduleData,
    appointment_id: str,
    status: AppointmentStatus,
) -> ScheduleData:
    """Set any status on an appointment, regardless of the current one."""
    return _replace_appointment(data, appointment_id, status=AppointmentStatus(status))


def update_professional_profile(
    data: ScheduleData,
    professional_id: str,
    fields: Mapping[str, Any],
) -> ScheduleData:
    """
    Shallow-merge updatable fields into a professional.

    Accepts ``consultation_price`` or its stored spelling
    ``consultationPrice``; other keys are ignored.
    """
    changes = {}
    for key, value in fields.items():
        if key == "consultationPrice":
            key = "consultation_price"
        if key in UPDATABLE_PROFESSIONAL_FIELDS:
            changes[key] = value

    professionals = tuple(
        replace(prof, **changes) if prof.id == professional_id else prof
        for prof in data.professionals
    )
    return replace(data, professionals=professionals)


def add_professional(
    data: ScheduleData,
    name: str,
    specialty: str,
    consultation_price: Optional[float],
    ids: IdGenerator,
) -> Tuple[ScheduleData, Professional]:
    """Append a professional with a generated id."""
    professional = Professional(
        id=ids.next_id("prof", len(data.professionals)),
        name=name,
        specialty=specialty,
        consultation_price=consultation_price,
    )
    return replace(data, professionals=data.professionals + (professional,)), professional


def delete_professional(data: ScheduleData, professional_id: str) -> ScheduleData:
    """Remove a professional and every appointment booked with them."""
    return replace(
        data,
        professionals=tuple(p for p in data.professionals if p.id != professional_id),
        appointments=tuple(a for a in data.appointments if a.professional_id != professional_id),
    )


# =============================================================================
# QUERIES
# =============================================================================

def _start_sort_key(appointment: Appointment) -> Tuple[bool, int]:
    # Appointments with an unparsable start sort last
    start = appointment.start_millis
    return start is None, start or 0


def filter_appointments(
    data: ScheduleData,
    professional_id: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
) -> List[Appointment]:
    """Appointments matching the given filters, sorted by start."""
    result = [
        appt for appt in data.appointments
        if (professional_id is None or appt.professional_id == professional_id)
        and (status is None or appt.status == status)
    ]
    return sorted(result, key=_start_sort_key)


def appointments_for_patient(data: ScheduleData, patient_name: str) -> List[Appointment]:
    """Appointments of the patient resolved by normalized name, sorted by start."""
    patient = find_patient_by_name(data, patient_name)
    if patient is None:
        return []
    return sorted(
        (a for a in data.appointments if a.patient_id == patient.id),
        key=_start_sort_key,
    )


# =============================================================================
# FINANCIAL REPORT
# =============================================================================

@dataclass
class ProfessionalRevenue:
    """One row of the monthly financial report."""
    professional_id: str
    name: str
    specialty: str
    completed_count: int
    total_revenue: float
    average_ticket: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "professional_id": self.professional_id,
            "name": self.name,
            "specialty": self.specialty,
            "completed_count": self.completed_count,
            "total_revenue": self.total_revenue,
            "average_ticket": self.average_ticket,
        }


@dataclass
class FinancialReport:
    """Revenue per professional for one calendar month."""
    year: int
    month: int
    rows: List[ProfessionalRevenue] = field(default_factory=list)

    @property
    def total_revenue(self) -> float:
        return sum(row.total_revenue for row in self.rows)

    @property
    def completed_count(self) -> int:
        return sum(row.completed_count for row in self.rows)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "total_revenue": self.total_revenue,
            "completed_count": self.completed_count,
            "professionals": [row.to_dict() for row in self.rows],
        }


class FinancialReportCalculator(DomainService):
    """
    Aggregates completed appointments of a month per professional.

    Every professional on the roster gets a row, including those with no
    completed appointment. Rows are sorted by revenue, highest first.
    """

    def __init__(self, tz: tzinfo = timezone.utc):
        self.tz = tz

    def _in_month(self, appointment: Appointment, year: int, month: int) -> bool:
        starts_at = appointment.starts_at(self.tz)
        return starts_at is not None and starts_at.year == year and starts_at.month == month

    def execute(self, data: ScheduleData, year: int, month: int) -> FinancialReport:
        in_month = [a for a in data.appointments if self._in_month(a, year, month)]

        rows = []
        for prof in data.professionals:
            completed = [
                a for a in in_month
                if a.professional_id == prof.id and a.status == AppointmentStatus.COMPLETED
            ]
            revenue = sum(a.price for a in completed)
            rows.append(ProfessionalRevenue(
                professional_id=prof.id,
                name=prof.name,
                specialty=prof.specialty,
                completed_count=len(completed),
                total_revenue=revenue,
                average_ticket=revenue / len(completed) if completed else 0,
            ))

        rows.sort(key=lambda row: row.total_revenue, reverse=True)
        return FinancialReport(year=year, month=month, rows=rows)


# =============================================================================
# OPERATIONAL OVERVIEW
# =============================================================================

@dataclass
class ProfessionalWorkload:
    """Appointment counts of one professional."""
    professional_id: str
    name: str
    total: int
    upcoming: int
    by_status: Dict[str, int]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "professional_id": self.professional_id,
            "name": self.name,
            "total": self.total,
            "upcoming": self.upcoming,
            "by_status": self.by_status,
        }


@dataclass
class OperationalOverview:
    """Counts per status and per professional, plus the upcoming agenda."""
    status_counts: Dict[str, int]
    professionals: List[ProfessionalWorkload]
    upcoming: List[Appointment]
    patient_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status_counts": self.status_counts,
            "professionals": [p.to_dict() for p in self.professionals],
            "upcoming": [a.to_dict() for a in self.upcoming],
            "patient_count": self.patient_count,
            "appointment_count": sum(self.status_counts.values()),
        }


class OperationalOverviewCalculator(DomainService):
    """Builds the administrator's general report."""

    UPCOMING_STATUSES = (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED)

    def _count_statuses(self, appointments: List[Appointment]) -> Dict[str, int]:
        counts = {status.value: 0 for status in AppointmentStatus}
        for appt in appointments:
            key = appt.status.value if isinstance(appt.status, AppointmentStatus) else str(appt.status)
            counts[key] = counts.get(key, 0) + 1
        return counts

    def _is_upcoming(self, appointment: Appointment, now: int) -> bool:
        start = appointment.start_millis
        return appointment.status in self.UPCOMING_STATUSES and start is not None and start > now

    def execute(self, data: ScheduleData, now: Optional[int] = None) -> OperationalOverview:
        now = now_millis() if now is None else now

        workloads = []
        for prof in data.professionals:
            own = [a for a in data.appointments if a.professional_id == prof.id]
            workloads.append(ProfessionalWorkload(
                professional_id=prof.id,
                name=prof.name,
                total=len(own),
                upcoming=sum(1 for a in own if self._is_upcoming(a, now)),
                by_status=self._count_statuses(own),
            ))

        upcoming = sorted(
            (a for a in data.appointments if self._is_upcoming(a, now)),
            key=_start_sort_key,
        )

        return OperationalOverview(
            status_counts=self._count_statuses(list(data.appointments)),
            professionals=workloads,
            upcoming=upcoming,
            patient_count=len(data.patients),
        )
