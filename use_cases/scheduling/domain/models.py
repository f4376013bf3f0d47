"""
Scheduling Domain Models.

Immutable records for the clinic schedule. The whole schedule is one
aggregate (``ScheduleData``) that is read and replaced as a unit; no record
is ever modified in place.

Serialization uses the camelCase layout of the persisted blob
(``professionalId``, ``patientName``, ``consultationPrice``...).
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from core.domain import from_epoch_millis, parse_epoch_millis


class AppointmentStatus(str, Enum):
    """Appointment status. Any value may follow any other."""
    SCHEDULED = "scheduled"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> Tuple[str, ...]:
        return tuple(s.value for s in cls)


class UserRole(str, Enum):
    """Roles of the three dashboards."""
    ADMIN = "admin"
    PROFESSIONAL = "professional"
    PATIENT = "patient"


def _coerce_status(value: Any) -> Union[AppointmentStatus, str]:
    # Stored blobs are trusted; unknown values are kept as they are
    try:
        return AppointmentStatus(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class Professional:
    """A professional who takes appointments."""
    id: str
    name: str
    specialty: str
    consultation_price: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "name": self.name,
            "specialty": self.specialty,
        }
        if self.consultation_price is not None:
            data["consultationPrice"] = self.consultation_price
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Professional":
        return cls(
            id=data.get("id", ""),
            name=data.get("name", ""),
            specialty=data.get("specialty", ""),
            consultation_price=data.get("consultationPrice"),
        )


@dataclass(frozen=True)
class Patient:
    """A patient, created implicitly on first booking."""
    id: str
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Patient":
        return cls(id=data.get("id", ""), name=data.get("name", ""))


@dataclass(frozen=True)
class Appointment:
    """
    A booked appointment.

    ``start`` and ``end`` are epoch milliseconds encoded as strings; a stored
    value that is not numeric reads back as None from ``start_millis``,
    ``end_millis`` and ``starts_at``.
    ``price`` is copied from the professional at booking time.
    """
    id: str
    professional_id: str
    patient_id: str
    patient_name: str
    start: str
    end: str
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    price: float = 0
    notes: Optional[str] = None

    @property
    def start_millis(self) -> Optional[int]:
        return parse_epoch_millis(self.start)

    @property
    def end_millis(self) -> Optional[int]:
        return parse_epoch_millis(self.end)

    def starts_at(self, tz: tzinfo = timezone.utc) -> Optional[datetime]:
        return from_epoch_millis(self.start, tz)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "professionalId": self.professional_id,
            "patientId": self.patient_id,
            "patientName": self.patient_name,
            "start": self.start,
            "end": self.end,
            "status": self.status.value if isinstance(self.status, AppointmentStatus) else self.status,
            "price": self.price,
        }
        if self.notes is not None:
            data["notes"] = self.notes
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Appointment":
        return cls(
            id=data.get("id", ""),
            professional_id=data.get("professionalId", ""),
            patient_id=data.get("patientId", ""),
            patient_name=data.get("patientName", ""),
            start=str(data.get("start", "0")),
            end=str(data.get("end", "0")),
            status=_coerce_status(data.get("status", AppointmentStatus.SCHEDULED.value)),
            price=data.get("price", 0),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class ScheduleData:
    """
    The schedule aggregate: professionals, patients and appointments.

    Collections are tuples so an instance can be shared freely between the
    previous and next state of the store.
    """
    professionals: Tuple[Professional, ...] = field(default_factory=tuple)
    patients: Tuple[Patient, ...] = field(default_factory=tuple)
    appointments: Tuple[Appointment, ...] = field(default_factory=tuple)

    def find_professional(self, professional_id: str) -> Optional[Professional]:
        for professional in self.professionals:
            if professional.id == professional_id:
                return professional
        return None

    def find_patient(self, patient_id: str) -> Optional[Patient]:
        for patient in self.patients:
            if patient.id == patient_id:
                return patient
        return None

    def find_appointment(self, appointment_id: str) -> Optional[Appointment]:
        for appointment in self.appointments:
            if appointment.id == appointment_id:
                return appointment
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "professionals": [p.to_dict() for p in self.professionals],
            "patients": [p.to_dict() for p in self.patients],
            "appointments": [a.to_dict() for a in self.appointments],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScheduleData":
        return cls(
            professionals=tuple(Professional.from_dict(p) for p in data.get("professionals", [])),
            patients=tuple(Patient.from_dict(p) for p in data.get("patients", [])),
            appointments=tuple(Appointment.from_dict(a) for a in data.get("appointments", [])),
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, blob: str) -> "ScheduleData":
        return cls.from_dict(json.loads(blob))
