"""
Schedule Store.

The state container for the clinic schedule. It holds the current
ScheduleData, exposes the scheduling operations as the only way to change
it, and writes the whole aggregate back to the repository after every
mutation.

Each mutation:
1. applies a pure domain operation to the current aggregate
2. evaluates advisory policies (double booking, odd status changes)
3. replaces the held aggregate with the result
4. saves the aggregate
5. returns a MutationResult with a notification message and a domain event
"""

import logging
from dataclasses import dataclass, field
from datetime import timezone, tzinfo
from typing import Any, Dict, List, Mapping, Optional
from zoneinfo import ZoneInfo

from core.domain import DomainEvent, PolicyDecision, collect_reasons

from .domain import services
from .domain.models import Appointment, AppointmentStatus, Professional, ScheduleData
from .domain.policies import (
    BookingContext,
    DoubleBookingPolicy,
    StatusChangeContext,
    StatusChangePolicy,
)
from .domain.services import (
    FinancialReport,
    FinancialReportCalculator,
    IdGenerator,
    OperationalOverview,
    OperationalOverviewCalculator,
)
from .repository import ScheduleRepository, create_repository

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    """
    Outcome of a store mutation.

    Attributes:
        data: The schedule after the mutation
        message: Notification shown to the user
        event: Domain event describing what happened
        entity: The created or targeted record, when there is one
        advisories: Policy decisions that flagged the change for review
    """
    data: ScheduleData
    message: str
    event: DomainEvent
    entity: Optional[Any] = None
    advisories: List[PolicyDecision] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "entity": self.entity.to_dict() if self.entity is not None else None,
            "advisories": [a.to_dict() for a in self.advisories],
            "event": self.event.to_dict(),
        }


class ScheduleStore:
    """
    Holds the schedule and applies scheduling operations to it.

    The held aggregate is replaced on every mutation, never modified.
    Callers that kept a reference to an older ScheduleData still see the
    old state.
    """

    def __init__(
        self,
        repository: ScheduleRepository,
        ids: Optional[IdGenerator] = None,
        tz: tzinfo = timezone.utc,
    ):
        self._repository = repository
        self._ids = ids or IdGenerator()
        self.tz = tz
        self._double_booking = DoubleBookingPolicy()
        self._status_change = StatusChangePolicy()
        self._financial = FinancialReportCalculator(tz)
        self._overview = OperationalOverviewCalculator()
        self._data = repository.load()

    @property
    def data(self) -> ScheduleData:
        return self._data

    def reload(self) -> ScheduleData:
        """Discard the held aggregate and read it again from storage."""
        self._data = self._repository.load()
        return self._data

    def _commit(
        self,
        next_data: ScheduleData,
        event_type: str,
        message: str,
        entity: Optional[Any] = None,
        advisories: Optional[List[PolicyDecision]] = None,
        **event_data: Any,
    ) -> MutationResult:
        self._data = next_data
        self._repository.save(next_data)

        advisories = [a for a in (advisories or []) if not a.is_approved]
        event = DomainEvent(event_type=event_type, data=event_data)
        logger.info(f"{event_type}: {event_data}")
        for reason in collect_reasons(advisories):
            logger.warning(f"{event_type} flagged for review: {reason}")

        return MutationResult(
            data=next_data,
            message=message,
            event=event,
            entity=entity,
            advisories=advisories,
        )

    # =========================================================================
    # APPOINTMENT OPERATIONS
    # =========================================================================

    def book_appointment(
        self,
        professional_id: str,
        patient_name: str,
        start: services.Moment,
        end: services.Moment,
    ) -> MutationResult:
        """Book an appointment, creating the patient on first booking."""
        previous = self._data
        next_data, appointment = services.book_appointment(
            previous, professional_id, patient_name, start, end, self._ids, self.tz
        )
        advisory = self._double_booking.evaluate(
            BookingContext(appointment=appointment, existing_appointments=list(previous.appointments))
        )
        return self._commit(
            next_data,
            "appointment_booked",
            f"Appointment for {appointment.patient_name} booked successfully!",
            entity=appointment,
            advisories=[advisory],
            appointment_id=appointment.id,
            professional_id=professional_id,
            patient_id=appointment.patient_id,
            new_patient=len(next_data.patients) > len(previous.patients),
        )

    def update_appointment_notes(self, appointment_id: str, notes: str) -> MutationResult:
        """Replace the notes of an appointment."""
        next_data = services.update_appointment_notes(self._data, appointment_id, notes)
        return self._commit(
            next_data,
            "appointment_notes_updated",
            "Appointment notes updated!",
            entity=next_data.find_appointment(appointment_id),
            appointment_id=appointment_id,
        )

    def cancel_appointment(self, appointment_id: str) -> MutationResult:
        """Cancel an appointment whatever its current status."""
        return self._change_status(
            appointment_id,
            AppointmentStatus.CANCELLED,
            "appointment_cancelled",
            "Appointment cancelled successfully.",
        )

    def update_appointment_status(self, appointment_id: str, status: AppointmentStatus) -> MutationResult:
        """Set any status on an appointment."""
        return self._change_status(
            appointment_id,
            AppointmentStatus(status),
            "appointment_status_updated",
            "Appointment status updated!",
        )

    def _change_status(
        self,
        appointment_id: str,
        status: AppointmentStatus,
        event_type: str,
        message: str,
    ) -> MutationResult:
        advisories = []
        current = self._data.find_appointment(appointment_id)
        if current is not None:
            advisories.append(self._status_change.evaluate(
                StatusChangeContext(current=current.status, requested=status)
            ))

        if status == AppointmentStatus.CANCELLED:
            next_data = services.cancel_appointment(self._data, appointment_id)
        else:
            next_data = services.update_appointment_status(self._data, appointment_id, status)

        return self._commit(
            next_data,
            event_type,
            message,
            entity=next_data.find_appointment(appointment_id),
            advisories=advisories,
            appointment_id=appointment_id,
            status=status.value,
        )

    # =========================================================================
    # PROFESSIONAL OPERATIONS
    # =========================================================================

    def update_professional_profile(self, professional_id: str, fields: Mapping[str, Any]) -> MutationResult:
        """Shallow-merge profile fields into a professional."""
        next_data = services.update_professional_profile(self._data, professional_id, fields)
        return self._commit(
            next_data,
            "professional_updated",
            "Profile updated successfully!",
            entity=next_data.find_professional(professional_id),
            professional_id=professional_id,
            fields=sorted(fields),
        )

    def add_professional(
        self,
        name: str,
        specialty: str,
        consultation_price: Optional[float] = None,
    ) -> MutationResult:
        """Add a professional to the roster."""
        next_data, professional = services.add_professional(
            self._data, name, specialty, consultation_price, self._ids
        )
        return self._commit(
            next_data,
            "professional_added",
            f"Professional {name} added successfully!",
            entity=professional,
            professional_id=professional.id,
        )

    def delete_professional(self, professional_id: str) -> MutationResult:
        """Remove a professional and all of their appointments."""
        previous = self._data
        next_data = services.delete_professional(previous, professional_id)
        return self._commit(
            next_data,
            "professional_deleted",
            "Professional and their appointments were deleted successfully.",
            professional_id=professional_id,
            removed_appointments=len(previous.appointments) - len(next_data.appointments),
        )

    # =========================================================================
    # QUERIES
    # =========================================================================

    def professional(self, professional_id: str) -> Optional[Professional]:
        return self._data.find_professional(professional_id)

    def appointments(
        self,
        professional_id: Optional[str] = None,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        return services.filter_appointments(self._data, professional_id, status)

    def appointments_for_patient(self, patient_name: str) -> List[Appointment]:
        return services.appointments_for_patient(self._data, patient_name)

    def financial_report(self, year: int, month: int) -> FinancialReport:
        return self._financial.execute(self._data, year, month)

    def operational_overview(self, now: Optional[int] = None) -> OperationalOverview:
        return self._overview.execute(self._data, now)


def create_schedule_store(settings) -> ScheduleStore:
    """Build the store, its repository and id generator from application settings."""
    return ScheduleStore(
        repository=create_repository(settings),
        ids=IdGenerator(settings.id_strategy),
        tz=ZoneInfo(settings.clinic_timezone),
    )
