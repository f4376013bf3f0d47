"""
FastAPI Application for the Clinic Scheduling Service.

Exposes the schedule operations to the three dashboards (administrator,
professional, patient), the administrator reports and the AI assistant.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse
from pydantic import BaseModel, Field

from config import settings

# Import authentication module
from auth import AuthResponse, AuthService, Identity, LoginRequest, get_identity_provider
from azure_client import client_manager
from core.session import SessionManager

from use_cases.scheduling import MutationResult, ScheduleStore, create_schedule_store
from use_cases.scheduling.assistant import ScheduleAssistant
from use_cases.scheduling.domain.models import AppointmentStatus
from use_cases.scheduling.presentation import FinancialReportComposer

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Reduce SDK logging verbosity
logging.getLogger("azure.cosmos").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)
logging.getLogger("httpx").setLevel(logging.WARNING)

MONTH_PATTERN = r"^\d{4}-(0[1-9]|1[0-2])$"

# Global instances
schedule_store: Optional[ScheduleStore] = None
auth_service: Optional[AuthService] = None
assistant: Optional[ScheduleAssistant] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    global schedule_store, auth_service, assistant

    logger.info("Starting Clinic Scheduling Application...")

    schedule_store = create_schedule_store(settings)
    logger.info("Schedule store ready")

    auth_service = AuthService(
        get_identity_provider(settings),
        SessionManager(ttl_hours=settings.session_ttl_hours),
    )
    logger.info(f"Identity provider: {settings.identity_provider}")

    assistant = ScheduleAssistant(schedule_store)
    if not client_manager.is_configured:
        logger.warning("AZURE_OPENAI_ENDPOINT is not set; the AI assistant is disabled")

    yield

    # Cleanup
    logger.info("Shutting down...")
    await client_manager.close()


# Create FastAPI app
app = FastAPI(
    title="Clinic Scheduling",
    description="Clinic appointment scheduling with reports and an AI assistant",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# REQUEST MODELS
# =============================================================================

class BookAppointmentRequest(BaseModel):
    """Booking made from the patient view."""
    professional_id: str
    patient_name: str = Field(min_length=1)
    start: datetime
    end: Optional[datetime] = None
    duration_minutes: int = 30


class UpdateNotesRequest(BaseModel):
    notes: str


class UpdateStatusRequest(BaseModel):
    status: AppointmentStatus


class ProfessionalCreateRequest(BaseModel):
    name: str = Field(min_length=1)
    specialty: str
    consultation_price: Optional[float] = None


class ProfessionalUpdateRequest(BaseModel):
    """Partial profile update; only the fields sent are changed."""
    name: Optional[str] = None
    specialty: Optional[str] = None
    consultation_price: Optional[float] = None


class ChatRequest(BaseModel):
    message: str
    history: List[Dict[str, Any]] = Field(default_factory=list)


# =============================================================================
# DEPENDENCIES
# =============================================================================

def get_store() -> ScheduleStore:
    if schedule_store is None:
        raise HTTPException(status_code=503, detail="Schedule store not initialized")
    return schedule_store


def get_auth_service() -> AuthService:
    if auth_service is None:
        raise HTTPException(status_code=503, detail="Authentication not initialized")
    return auth_service


def get_assistant() -> ScheduleAssistant:
    if assistant is None:
        raise HTTPException(status_code=503, detail="Assistant not initialized")
    return assistant


def get_report_composer() -> FinancialReportComposer:
    return FinancialReportComposer(
        brand_name=settings.brand_name,
        currency_symbol=settings.currency_symbol,
        decimal_comma=settings.currency_decimal_comma,
    )


def extract_token(request: Request) -> Optional[str]:
    """Session token from the Authorization header, X-Auth-Token header or auth_token cookie."""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[len("Bearer "):]
    return request.headers.get("X-Auth-Token") or request.cookies.get("auth_token")


def require_admin(request: Request, auth: AuthService = Depends(get_auth_service)) -> Identity:
    """Identity of the signed-in administrator, or 401/403."""
    identity = auth.identity_for(extract_token(request))
    if identity is None:
        raise HTTPException(status_code=401, detail="Administrator sign-in required")
    if not identity.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return identity


def mutation_response(result: MutationResult) -> Dict[str, Any]:
    return {"success": True, **result.to_dict()}


def parse_month(month: Optional[str], store: ScheduleStore) -> tuple:
    """(year, month) from ``YYYY-MM``, defaulting to the current month."""
    if not month:
        now = datetime.now(store.tz)
        return now.year, now.month
    year_str, month_str = month.split("-")
    return int(year_str), int(month_str)


# =============================================================================
# HEALTH
# =============================================================================

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "storage_backend": settings.storage_backend,
        "identity_provider": settings.identity_provider,
        "azure_openai_configured": client_manager.is_configured,
    }


# =============================================================================
# AUTHENTICATION ENDPOINTS
# =============================================================================

@app.post("/api/auth/login", response_model=AuthResponse)
async def login(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Sign in as administrator. Returns a session token on success."""
    return await auth.login(request.email, request.password)


@app.post("/api/auth/signup", response_model=AuthResponse)
async def signup(request: LoginRequest, auth: AuthService = Depends(get_auth_service)):
    """Register an administrator account."""
    return await auth.signup(request.email, request.password)


@app.post("/api/auth/logout", response_model=AuthResponse)
async def logout(request: Request, auth: AuthService = Depends(get_auth_service)):
    """Sign out and invalidate the session."""
    return await auth.logout(extract_token(request))


@app.get("/api/auth/me")
async def get_current_user(request: Request, auth: AuthService = Depends(get_auth_service)):
    """Get the signed-in user's identity."""
    identity = auth.identity_for(extract_token(request))
    if identity is None:
        return {"authenticated": False, "user": None}
    return {"authenticated": True, "user": identity.to_dict()}


# =============================================================================
# SCHEDULE
# =============================================================================

@app.get("/api/schedule")
async def get_schedule(store: ScheduleStore = Depends(get_store)):
    """The whole schedule aggregate."""
    return store.data.to_dict()


@app.get("/api/professionals")
async def list_professionals(store: ScheduleStore = Depends(get_store)):
    return {"professionals": [p.to_dict() for p in store.data.professionals]}


@app.post("/api/professionals")
async def add_professional(
    request: ProfessionalCreateRequest,
    store: ScheduleStore = Depends(get_store),
    admin: Identity = Depends(require_admin),
):
    result = store.add_professional(request.name, request.specialty, request.consultation_price)
    return mutation_response(result)


@app.patch("/api/professionals/{professional_id}")
async def update_professional(
    professional_id: str,
    request: ProfessionalUpdateRequest,
    store: ScheduleStore = Depends(get_store),
):
    """Professional profile update (name, specialty, price)."""
    result = store.update_professional_profile(professional_id, request.model_dump(exclude_unset=True))
    return mutation_response(result)


@app.delete("/api/professionals/{professional_id}")
async def delete_professional(
    professional_id: str,
    store: ScheduleStore = Depends(get_store),
    admin: Identity = Depends(require_admin),
):
    """Delete a professional and all of their appointments."""
    return mutation_response(store.delete_professional(professional_id))


@app.get("/api/professionals/{professional_id}/appointments")
async def professional_appointments(professional_id: str, store: ScheduleStore = Depends(get_store)):
    appointments = store.appointments(professional_id=professional_id)
    return {"appointments": [a.to_dict() for a in appointments]}


@app.get("/api/appointments")
async def list_appointments(
    professional_id: Optional[str] = None,
    status: Optional[AppointmentStatus] = None,
    store: ScheduleStore = Depends(get_store),
):
    appointments = store.appointments(professional_id=professional_id, status=status)
    return {"appointments": [a.to_dict() for a in appointments]}


@app.post("/api/appointments")
async def book_appointment(request: BookAppointmentRequest, store: ScheduleStore = Depends(get_store)):
    """Book an appointment from the patient view."""
    end = request.end or request.start + timedelta(minutes=request.duration_minutes)
    result = store.book_appointment(request.professional_id, request.patient_name, request.start, end)
    return mutation_response(result)


@app.patch("/api/appointments/{appointment_id}/notes")
async def update_notes(
    appointment_id: str,
    request: UpdateNotesRequest,
    store: ScheduleStore = Depends(get_store),
):
    return mutation_response(store.update_appointment_notes(appointment_id, request.notes))


@app.post("/api/appointments/{appointment_id}/cancel")
async def cancel_appointment(appointment_id: str, store: ScheduleStore = Depends(get_store)):
    return mutation_response(store.cancel_appointment(appointment_id))


@app.patch("/api/appointments/{appointment_id}/status")
async def update_status(
    appointment_id: str,
    request: UpdateStatusRequest,
    store: ScheduleStore = Depends(get_store),
):
    return mutation_response(store.update_appointment_status(appointment_id, request.status))


@app.get("/api/patients/appointments")
async def patient_appointments(name: str = Query(min_length=1), store: ScheduleStore = Depends(get_store)):
    """Appointments of a patient, matched by name ignoring case and surrounding spaces."""
    appointments = store.appointments_for_patient(name)
    return {"appointments": [a.to_dict() for a in appointments]}


# =============================================================================
# REPORTS (administrator)
# =============================================================================

@app.get("/api/reports/overview")
async def operational_overview(
    store: ScheduleStore = Depends(get_store),
    admin: Identity = Depends(require_admin),
):
    return store.operational_overview().to_dict()


@app.get("/api/reports/financial")
async def financial_report(
    month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN),
    store: ScheduleStore = Depends(get_store),
    admin: Identity = Depends(require_admin),
):
    year, month_number = parse_month(month, store)
    return store.financial_report(year, month_number).to_dict()


@app.get("/api/reports/financial/print", response_class=HTMLResponse)
async def print_financial_report(
    month: Optional[str] = Query(default=None, pattern=MONTH_PATTERN),
    store: ScheduleStore = Depends(get_store),
    composer: FinancialReportComposer = Depends(get_report_composer),
    admin: Identity = Depends(require_admin),
):
    """Print-formatted financial report."""
    year, month_number = parse_month(month, store)
    return HTMLResponse(composer.compose_html(store.financial_report(year, month_number)))


# =============================================================================
# AI ASSISTANT (administrator)
# =============================================================================

@app.post("/api/assistant/chat")
async def assistant_chat(
    request: ChatRequest,
    chat_assistant: ScheduleAssistant = Depends(get_assistant),
    admin: Identity = Depends(require_admin),
):
    reply = await chat_assistant.process_message(request.message, request.history)
    return {"success": reply.error is None, **reply.to_dict()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
