"""
Scheduling Domain Policies.

Pure business rules for appointment booking.
These classes have NO I/O dependencies - they can be unit tested in isolation.

The schedule deliberately accepts double bookings and any status change.
The policies below never deny; they flag such cases for review so the
store can log them and return them to the caller.
"""

from dataclasses import dataclass
from typing import List, Optional, Union

from core.domain import PolicyEngine, PolicyDecision, PolicyResult, overlaps

from .models import Appointment, AppointmentStatus, Professional


# =============================================================================
# CONSTANTS
# =============================================================================

# Price used when a professional is unknown or has no consultation price
DEFAULT_CONSULTATION_PRICE = 150

# Statuses that keep a slot occupied
ACTIVE_STATUSES = (
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.COMPLETED,
)


# =============================================================================
# PURE RULES
# =============================================================================

def normalize_patient_name(name: str) -> str:
    """Key used to match patients: trimmed and case-insensitive."""
    return name.strip().lower()


def resolve_consultation_price(professional: Optional[Professional]) -> float:
    """
    Price charged for a new appointment with this professional.

    A missing professional, a missing price and a zero price all fall back
    to DEFAULT_CONSULTATION_PRICE.
    """
    if professional is None or not professional.consultation_price:
        return DEFAULT_CONSULTATION_PRICE
    return professional.consultation_price


# =============================================================================
# ADVISORY POLICIES
# =============================================================================

@dataclass
class BookingContext:
    """Context for double-booking evaluation."""
    appointment: Appointment
    existing_appointments: List[Appointment]


class DoubleBookingPolicy(PolicyEngine):
    """
    Flags bookings that overlap another active appointment of the same
    professional or the same patient.
    """

    def evaluate(self, context: BookingContext) -> PolicyDecision:
        new = context.appointment
        new_span = (new.start_millis, new.end_millis)
        if None in new_span:
            return PolicyDecision(result=PolicyResult.APPROVED, reason="Booking time could not be read")

        for existing in context.existing_appointments:
            if existing.id == new.id or existing.status not in ACTIVE_STATUSES:
                continue
            same_professional = existing.professional_id == new.professional_id
            same_patient = existing.patient_id == new.patient_id
            if not (same_professional or same_patient):
                continue
            existing_span = (existing.start_millis, existing.end_millis)
            # Stored records with unreadable times cannot conflict
            if None in existing_span:
                continue
            if overlaps(*new_span, *existing_span):
                party = "professional" if same_professional else "patient"
                return PolicyDecision(
                    result=PolicyResult.REQUIRES_REVIEW,
                    reason=f"Overlaps appointment {existing.id} of the same {party}",
                    metadata={"conflicting_appointment": existing.id, "party": party},
                )

        return PolicyDecision(result=PolicyResult.APPROVED, reason="No overlapping appointments")


@dataclass
class StatusChangeContext:
    """Context for status change evaluation."""
    current: Union[AppointmentStatus, str]
    requested: AppointmentStatus


class StatusChangePolicy(PolicyEngine):
    """
    Flags status changes that look unintended: cancelling a completed
    appointment, or reopening a cancelled one.
    """

    def evaluate(self, context: StatusChangeContext) -> PolicyDecision:
        if context.current == context.requested:
            return PolicyDecision(result=PolicyResult.APPROVED, reason="Status unchanged")

        if (context.current == AppointmentStatus.COMPLETED
                and context.requested == AppointmentStatus.CANCELLED):
            return PolicyDecision(
                result=PolicyResult.REQUIRES_REVIEW,
                reason="A completed appointment is being cancelled",
                metadata={"from": "completed", "to": "cancelled"},
            )

        if context.current == AppointmentStatus.CANCELLED:
            return PolicyDecision(
                result=PolicyResult.REQUIRES_REVIEW,
                reason=f"A cancelled appointment is being moved back to {context.requested.value}",
                metadata={"from": "cancelled", "to": context.requested.value},
            )

        return PolicyDecision(result=PolicyResult.APPROVED, reason="Status change accepted")
