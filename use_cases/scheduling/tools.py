"""
AI Tools for the Scheduling Assistant.

These tools are registered with the Azure OpenAI model so the administrator
assistant can read and change the schedule. Every tool runs against the
ScheduleStore, so changes made here are persisted like any other.
"""

import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from .domain.models import AppointmentStatus
from .store import ScheduleStore

logger = logging.getLogger(__name__)


# =============================================================================
# TOOL DEFINITIONS (for OpenAI function calling)
# =============================================================================

def _tool(name: str, description: str, properties: Dict[str, Any], required=None) -> Dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required or [],
            },
        },
    }


SCHEDULING_TOOLS = [
    _tool(
        "list_professionals",
        "List all professionals with their specialty and consultation price.",
        {},
    ),
    _tool(
        "list_appointments",
        "List appointments sorted by start time, optionally for one professional or one status.",
        {
            "professional_id": {"type": "string", "description": "Only this professional (e.g. prof_1)"},
            "status": {"type": "string", "enum": list(AppointmentStatus.values())},
        },
    ),
    _tool(
        "get_financial_report",
        "Revenue, completed appointments and average ticket per professional for one month.",
        {
            "year": {"type": "integer", "description": "Four digit year"},
            "month": {"type": "integer", "description": "Month number, 1-12"},
        },
        required=["year", "month"],
    ),
    _tool(
        "get_operational_overview",
        "Appointment counts by status and by professional, plus the upcoming agenda.",
        {},
    ),
    _tool(
        "book_appointment",
        "Book an appointment for a patient by name. Creates the patient if the name is new.",
        {
            "professional_id": {"type": "string"},
            "patient_name": {"type": "string"},
            "start": {"type": "string", "description": "ISO 8601 start, e.g. 2024-05-01T10:00"},
            "duration_minutes": {"type": "integer", "description": "Defaults to 30"},
        },
        required=["professional_id", "patient_name", "start"],
    ),
    _tool(
        "cancel_appointment",
        "Cancel an appointment by id.",
        {"appointment_id": {"type": "string"}},
        required=["appointment_id"],
    ),
    _tool(
        "update_appointment_status",
        "Set the status of an appointment.",
        {
            "appointment_id": {"type": "string"},
            "status": {"type": "string", "enum": list(AppointmentStatus.values())},
        },
        required=["appointment_id", "status"],
    ),
    _tool(
        "update_appointment_notes",
        "Replace the notes of an appointment.",
        {
            "appointment_id": {"type": "string"},
            "notes": {"type": "string"},
        },
        required=["appointment_id", "notes"],
    ),
]


# =============================================================================
# TOOL IMPLEMENTATIONS
# =============================================================================

def _appointment_summary(store: ScheduleStore, appointment) -> Dict[str, Any]:
    professional = store.professional(appointment.professional_id)
    starts_at = appointment.starts_at(store.tz)
    return {
        "id": appointment.id,
        "professional_id": appointment.professional_id,
        "professional_name": professional.name if professional else None,
        "patient_name": appointment.patient_name,
        "start": starts_at.isoformat() if starts_at else None,
        "status": appointment.to_dict()["status"],
        "price": appointment.price,
        "notes": appointment.notes,
    }


def list_professionals(store: ScheduleStore) -> Dict[str, Any]:
    return {"professionals": [p.to_dict() for p in store.data.professionals]}


def list_appointments(
    store: ScheduleStore,
    professional_id: Optional[str] = None,
    status: Optional[str] = None,
) -> Dict[str, Any]:
    appointments = store.appointments(
        professional_id=professional_id or None,
        status=AppointmentStatus(status) if status else None,
    )
    return {
        "appointments": [_appointment_summary(store, a) for a in appointments],
        "total": len(appointments),
    }


def get_financial_report(store: ScheduleStore, year: int, month: int) -> Dict[str, Any]:
    return store.financial_report(int(year), int(month)).to_dict()


def get_operational_overview(store: ScheduleStore) -> Dict[str, Any]:
    return store.operational_overview().to_dict()


def book_appointment(
    store: ScheduleStore,
    professional_id: str,
    patient_name: str,
    start: str,
    duration_minutes: int = 30,
) -> Dict[str, Any]:
    starts_at = datetime.fromisoformat(start.replace("Z", "+00:00"))
    result = store.book_appointment(
        professional_id,
        patient_name,
        starts_at,
        starts_at + timedelta(minutes=int(duration_minutes)),
    )
    return {
        "success": True,
        "message": result.message,
        "appointment": _appointment_summary(store, result.entity),
        "warnings": [a.reason for a in result.advisories],
    }


def _status_result(store: ScheduleStore, result, appointment_id: str) -> Dict[str, Any]:
    if result.entity is None:
        return {"success": False, "message": f"Appointment {appointment_id} not found"}
    return {
        "success": True,
        "message": result.message,
        "appointment": _appointment_summary(store, result.entity),
        "warnings": [a.reason for a in result.advisories],
    }


def cancel_appointment(store: ScheduleStore, appointment_id: str) -> Dict[str, Any]:
    return _status_result(store, store.cancel_appointment(appointment_id), appointment_id)


def update_appointment_status(store: ScheduleStore, appointment_id: str, status: str) -> Dict[str, Any]:
    result = store.update_appointment_status(appointment_id, AppointmentStatus(status))
    return _status_result(store, result, appointment_id)


def update_appointment_notes(store: ScheduleStore, appointment_id: str, notes: str) -> Dict[str, Any]:
    return _status_result(store, store.update_appointment_notes(appointment_id, notes), appointment_id)


# =============================================================================
# TOOL EXECUTION
# =============================================================================

TOOL_FUNCTIONS = {
    "list_professionals": list_professionals,
    "list_appointments": list_appointments,
    "get_financial_report": get_financial_report,
    "get_operational_overview": get_operational_overview,
    "book_appointment": book_appointment,
    "cancel_appointment": cancel_appointment,
    "update_appointment_status": update_appointment_status,
    "update_appointment_notes": update_appointment_notes,
}


def execute_tool(store: ScheduleStore, tool_name: str, arguments: Dict[str, Any]) -> str:
    """Execute a tool and return the result as JSON string."""
    if tool_name not in TOOL_FUNCTIONS:
        return json.dumps({"error": f"Unknown tool: {tool_name}"})

    try:
        result = TOOL_FUNCTIONS[tool_name](store, **arguments)
        return json.dumps(result, ensure_ascii=False)
    except Exception as e:
        logger.error(f"Error executing tool {tool_name}: {e}")
        return json.dumps({"error": str(e)})
