"""
Scheduling assistant tool status messages.

Each tool maps to (start_message, end_message, icon) tuples. The assistant
reports the end message of every tool it ran so the dashboard can show what
was done on the administrator's behalf.
"""

from typing import Dict, Tuple

SCHEDULING_TOOL_STATUS_MESSAGES: Dict[str, Tuple[str, str, str]] = {
    # Read operations
    "list_professionals": (
        "Loading professionals...",
        "Professionals loaded",
        "user",
    ),
    "list_appointments": (
        "Searching appointments...",
        "Appointments found",
        "calendar",
    ),
    "get_financial_report": (
        "Computing monthly revenue...",
        "Financial report ready",
        "chart",
    ),
    "get_operational_overview": (
        "Summarizing the schedule...",
        "Overview ready",
        "analytics",
    ),

    # Write operations
    "book_appointment": (
        "Booking the appointment...",
        "Appointment booked",
        "check-circle-filled",
    ),
    "cancel_appointment": (
        "Cancelling appointment...",
        "Appointment cancelled",
        "check",
    ),
    "update_appointment_status": (
        "Updating appointment status...",
        "Status updated",
        "check",
    ),
    "update_appointment_notes": (
        "Saving appointment notes...",
        "Notes saved",
        "write",
    ),
}

DEFAULT_STATUS = ("Working...", "Done", "bolt")


def get_tool_status(tool_name: str) -> Tuple[str, str, str]:
    """Status messages for a tool, with a generic fallback."""
    return SCHEDULING_TOOL_STATUS_MESSAGES.get(tool_name, DEFAULT_STATUS)
