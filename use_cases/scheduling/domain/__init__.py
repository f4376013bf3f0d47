"""Scheduling domain layer - pure business logic."""

from .models import (
    Appointment,
    AppointmentStatus,
    Patient,
    Professional,
    ScheduleData,
    UserRole,
)
from .policies import (
    DEFAULT_CONSULTATION_PRICE,
    DoubleBookingPolicy,
    StatusChangePolicy,
    normalize_patient_name,
)
from .services import (
    FinancialReport,
    FinancialReportCalculator,
    IdGenerator,
    OperationalOverview,
    OperationalOverviewCalculator,
)

__all__ = [
    "Appointment",
    "AppointmentStatus",
    "Patient",
    "Professional",
    "ScheduleData",
    "UserRole",
    "DEFAULT_CONSULTATION_PRICE",
    "DoubleBookingPolicy",
    "StatusChangePolicy",
    "normalize_patient_name",
    "FinancialReport",
    "FinancialReportCalculator",
    "IdGenerator",
    "OperationalOverview",
    "OperationalOverviewCalculator",
]
