"""Tests for the HTTP API."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

import main
from auth import AuthService, Identity, LocalIdentityProvider
from use_cases.scheduling.assistant import AssistantReply
from use_cases.scheduling.domain.models import UserRole


ADMIN_EMAIL = "admin@clinic.local"
ADMIN_PASSWORD = "admin123"


@pytest.fixture
def auth_service():
    return AuthService(LocalIdentityProvider(ADMIN_EMAIL, ADMIN_PASSWORD))


@pytest.fixture
def chat_assistant():
    assistant = MagicMock()
    assistant.process_message = AsyncMock(return_value=AssistantReply(content="Done.", activity=["Appointment booked"]))
    return assistant


@pytest.fixture
def client(store, auth_service, chat_assistant):
    main.app.dependency_overrides[main.get_store] = lambda: store
    main.app.dependency_overrides[main.get_auth_service] = lambda: auth_service
    main.app.dependency_overrides[main.get_assistant] = lambda: chat_assistant
    yield TestClient(main.app)
    main.app.dependency_overrides.clear()


@pytest.fixture
def admin_headers(client):
    response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    return {"Authorization": f"Bearer {response.json()['token']}"}


def book(client, patient_name="Maria Silva", professional_id="prof_1", start="2024-05-01T10:00:00Z", **extra):
    payload = {"professional_id": professional_id, "patient_name": patient_name, "start": start, **extra}
    return client.post("/api/appointments", json=payload)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthEndpoints:
    """Tests for sign-in and session lookup"""

    def test_login_and_me(self, client):
        response = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["user"]["role"] == "admin"

        me = client.get("/api/auth/me", headers={"X-Auth-Token": body["token"]}).json()
        assert me == {"authenticated": True, "user": body["user"]}

    def test_bad_credentials(self, client):
        body = client.post("/api/auth/login", json={"email": ADMIN_EMAIL, "password": "nope"}).json()
        assert body["success"] is False
        assert body["message"] == "Invalid login credentials"
        assert body["token"] is None

    def test_logout(self, client, admin_headers):
        assert client.post("/api/auth/logout", headers=admin_headers).json()["success"] is True
        assert client.get("/api/auth/me", headers=admin_headers).json()["authenticated"] is False
        assert client.get("/api/reports/overview", headers=admin_headers).status_code == 401

    def test_cookie_token(self, client, admin_headers):
        token = admin_headers["Authorization"].split(" ", 1)[1]
        client.cookies.set("auth_token", token)
        assert client.get("/api/reports/overview").status_code == 200


class TestAppointmentEndpoints:
    """Tests for patient and professional views"""

    def test_book_appointment(self, client, store):
        response = book(client)
        body = response.json()

        assert response.status_code == 200
        assert body["success"] is True
        assert body["message"] == "Appointment for Maria Silva booked successfully!"
        assert body["entity"]["price"] == 200
        assert body["entity"]["status"] == "scheduled"
        assert int(body["entity"]["end"]) - int(body["entity"]["start"]) == 30 * 60 * 1000
        assert len(store.data.appointments) == 1

    def test_book_with_explicit_end(self, client):
        body = book(client, end="2024-05-01T11:00:00Z").json()
        assert int(body["entity"]["end"]) - int(body["entity"]["start"]) == 60 * 60 * 1000

    def test_book_requires_patient_name(self, client):
        assert book(client, patient_name="").status_code == 422

    def test_patient_lookup(self, client):
        book(client, patient_name="maria silva")
        book(client, patient_name="Maria Silva ", professional_id="prof_2", start="2024-05-02T10:00:00Z")

        appointments = client.get("/api/patients/appointments", params={"name": "MARIA SILVA"}).json()["appointments"]
        assert len(appointments) == 2
        assert appointments[0]["patientId"] == appointments[1]["patientId"]

    def test_professional_view(self, client):
        appt_id = book(client).json()["entity"]["id"]

        notes = client.patch(f"/api/appointments/{appt_id}/notes", json={"notes": "Bring exams"}).json()
        assert notes["message"] == "Appointment notes updated!"

        status = client.patch(f"/api/appointments/{appt_id}/status", json={"status": "confirmed"}).json()
        assert status["entity"]["status"] == "confirmed"

        listed = client.get("/api/professionals/prof_1/appointments").json()["appointments"]
        assert listed[0]["notes"] == "Bring exams"

    def test_invalid_status(self, client):
        appt_id = book(client).json()["entity"]["id"]
        assert client.patch(f"/api/appointments/{appt_id}/status", json={"status": "lost"}).status_code == 422

    def test_cancel(self, client):
        appt_id = book(client).json()["entity"]["id"]

        body = client.post(f"/api/appointments/{appt_id}/cancel").json()

        assert body["message"] == "Appointment cancelled successfully."
        cancelled = client.get("/api/appointments", params={"status": "cancelled"}).json()["appointments"]
        assert [a["id"] for a in cancelled] == [appt_id]

    def test_double_booking_returns_advisory(self, client):
        book(client)
        body = book(client, patient_name="João Pereira", start="2024-05-01T10:15:00Z").json()

        assert body["success"] is True
        assert body["advisories"][0]["result"] == "requires_review"

    def test_schedule(self, client):
        body = client.get("/api/schedule").json()
        assert set(body) == {"professionals", "patients", "appointments"}


class TestProfessionalEndpoints:
    """Tests for roster management"""

    def test_profile_update_is_partial(self, client, store):
        body = client.patch("/api/professionals/prof_1", json={"consultation_price": 275}).json()

        assert body["message"] == "Profile updated successfully!"
        prof = store.professional("prof_1")
        assert prof.consultation_price == 275
        assert prof.name == "Dr. Ana Souza"

    def test_add_requires_admin(self, client):
        response = client.post("/api/professionals", json={"name": "Eva Prado", "specialty": "Nutrition"})
        assert response.status_code == 401

    def test_add_and_delete(self, client, admin_headers, store):
        added = client.post(
            "/api/professionals",
            json={"name": "Eva Prado", "specialty": "Nutrition", "consultation_price": 170},
            headers=admin_headers,
        ).json()
        prof_id = added["entity"]["id"]
        assert added["message"] == "Professional Eva Prado added successfully!"

        book(client, professional_id=prof_id)
        deleted = client.delete(f"/api/professionals/{prof_id}", headers=admin_headers).json()

        assert deleted["message"] == "Professional and their appointments were deleted successfully."
        assert store.professional(prof_id) is None
        assert store.data.appointments == ()

    def test_non_admin_role_is_forbidden(self, client, auth_service):
        session = auth_service.sessions.create(Identity(user_id="u-9", email="p@clinic.local", role=UserRole.PATIENT))
        response = client.delete("/api/professionals/prof_1", headers={"Authorization": f"Bearer {session.token}"})
        assert response.status_code == 403


class TestReportEndpoints:
    """Tests for administrator reports"""

    @pytest.mark.parametrize("path", [
        "/api/reports/overview",
        "/api/reports/financial",
        "/api/reports/financial/print",
    ])
    def test_requires_admin(self, client, path):
        assert client.get(path).status_code == 401

    def test_financial_report(self, client, admin_headers):
        appt_id = book(client).json()["entity"]["id"]
        client.patch(f"/api/appointments/{appt_id}/status", json={"status": "completed"})

        body = client.get("/api/reports/financial", params={"month": "2024-05"}, headers=admin_headers).json()

        assert body["total_revenue"] == 200
        assert body["professionals"][0]["professional_id"] == "prof_1"
        assert body["professionals"][0]["average_ticket"] == 200

    @pytest.mark.parametrize("month", ["2024-13", "2024-5", "May 2024"])
    def test_bad_month(self, client, admin_headers, month):
        response = client.get("/api/reports/financial", params={"month": month}, headers=admin_headers)
        assert response.status_code == 422

    def test_printable_report(self, client, admin_headers):
        response = client.get("/api/reports/financial/print", params={"month": "2024-05"}, headers=admin_headers)

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "May 2024" in response.text
        assert "window.print()" in response.text

    def test_overview(self, client, admin_headers):
        book(client)
        body = client.get("/api/reports/overview", headers=admin_headers).json()
        assert body["appointment_count"] == 1
        assert body["status_counts"]["scheduled"] == 1


class TestAssistantEndpoint:
    """Tests for the administrator chat"""

    def test_requires_admin(self, client):
        assert client.post("/api/assistant/chat", json={"message": "hi"}).status_code == 401

    def test_chat(self, client, admin_headers, chat_assistant):
        history = [{"role": "user", "content": "hello"}]
        body = client.post(
            "/api/assistant/chat",
            json={"message": "Book Maria", "history": history},
            headers=admin_headers,
        ).json()

        assert body == {"success": True, "content": "Done.", "activity": ["Appointment booked"], "error": None}
        chat_assistant.process_message.assert_awaited_once_with("Book Maria", history)
