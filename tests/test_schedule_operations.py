"""Tests for the pure scheduling operations and policies."""
from datetime import datetime, timezone

import pytest

from conftest import FIXED_MILLIS, make_appointment, millis
from core.domain import PolicyResult
from use_cases.scheduling.domain import services
from use_cases.scheduling.domain.models import (
    Appointment,
    AppointmentStatus,
    Professional,
    ScheduleData,
)
from use_cases.scheduling.domain.policies import (
    DEFAULT_CONSULTATION_PRICE,
    BookingContext,
    DoubleBookingPolicy,
    StatusChangeContext,
    StatusChangePolicy,
    normalize_patient_name,
    resolve_consultation_price,
)
from use_cases.scheduling.domain.services import IdGenerator


MAY_1_10H = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
MAY_1_10H30 = datetime(2024, 5, 1, 10, 30, tzinfo=timezone.utc)


class TestIdGenerator:
    """Tests for entity id generation"""

    def test_sequential_ids(self, ids):
        assert ids.next_id("appt", 0) == f"appt_1_{FIXED_MILLIS}"
        assert ids.next_id("pat", 4) == f"pat_5_{FIXED_MILLIS}"

    def test_uuid_ids_are_unique(self):
        ids = IdGenerator("uuid")
        first = ids.next_id("prof", 0)
        second = ids.next_id("prof", 0)
        assert first.startswith("prof_")
        assert first != second

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            IdGenerator("snowflake")


class TestBookAppointment:
    """Tests for booking"""

    def test_booking_with_priced_professional(self, roster, ids):
        """Booking Maria Silva with a 200 professional creates a scheduled 200 appointment"""
        data, appt = services.book_appointment(roster, "prof_1", "Maria Silva", MAY_1_10H, MAY_1_10H30, ids)

        assert appt.status == AppointmentStatus.SCHEDULED
        assert appt.price == 200
        assert appt.professional_id == "prof_1"
        assert appt.start == str(millis(2024, 5, 1, 10))
        assert appt.end == str(millis(2024, 5, 1, 10, 30))
        assert len(data.patients) == 1
        assert data.patients[0].name == "Maria Silva"
        assert appt.patient_id == data.patients[0].id
        assert appt.patient_name == "Maria Silva"
        assert data.appointments == (appt,)

    def test_name_matching_ignores_case_and_whitespace(self, roster, ids):
        """Two spellings of the same name resolve to one patient"""
        data, first = services.book_appointment(roster, "prof_1", "maria silva", MAY_1_10H, MAY_1_10H30, ids)
        data, second = services.book_appointment(data, "prof_2", "Maria Silva ", MAY_1_10H, MAY_1_10H30, ids)

        assert first.patient_id == second.patient_id
        assert len(data.patients) == 1
        assert len(data.appointments) == 2

    def test_new_patient_name_is_trimmed(self, roster, ids):
        data, appt = services.book_appointment(roster, "prof_1", "  Luiza Alves  ", MAY_1_10H, MAY_1_10H30, ids)
        assert data.patients[0].name == "Luiza Alves"
        assert appt.patient_name == "Luiza Alves"

    def test_price_falls_back_when_professional_has_none(self, roster, ids):
        _, appt = services.book_appointment(roster, "prof_3", "Maria Silva", MAY_1_10H, MAY_1_10H30, ids)
        assert appt.price == DEFAULT_CONSULTATION_PRICE == 150

    def test_price_falls_back_for_unknown_professional(self, roster, ids):
        _, appt = services.book_appointment(roster, "prof_999", "Maria Silva", MAY_1_10H, MAY_1_10H30, ids)
        assert appt.price == 150
        assert appt.professional_id == "prof_999"

    def test_epoch_inputs_are_stored_as_strings(self, roster, ids):
        start = millis(2024, 5, 1, 10)
        _, appt = services.book_appointment(roster, "prof_1", "Maria Silva", start, start + 1800000, ids)
        assert appt.start == str(start)
        assert appt.end == str(start + 1800000)

    def test_input_is_not_modified(self, roster, ids):
        before = roster.to_dict()
        data, _ = services.book_appointment(roster, "prof_1", "Maria Silva", MAY_1_10H, MAY_1_10H30, ids)

        assert roster.to_dict() == before
        assert data is not roster
        assert roster.appointments == ()


class TestAppointmentUpdates:
    """Tests for notes and status changes"""

    def test_update_notes(self, may_schedule):
        data = services.update_appointment_notes(may_schedule, "appt_6", "Bring exams")

        assert data.find_appointment("appt_6").notes == "Bring exams"
        assert may_schedule.find_appointment("appt_6").notes is None

    def test_update_notes_unknown_id(self, may_schedule):
        data = services.update_appointment_notes(may_schedule, "appt_missing", "x")
        assert data == may_schedule

    def test_cancel_from_any_status(self, may_schedule):
        data = services.cancel_appointment(may_schedule, "appt_1")
        assert data.find_appointment("appt_1").status == AppointmentStatus.CANCELLED

    def test_cancel_is_idempotent(self, may_schedule):
        once = services.cancel_appointment(may_schedule, "appt_6")
        twice = services.cancel_appointment(once, "appt_6")
        assert once == twice

    def test_status_accepts_any_transition(self, may_schedule):
        data = services.update_appointment_status(may_schedule, "appt_4", AppointmentStatus.CONFIRMED)
        assert data.find_appointment("appt_4").status == AppointmentStatus.CONFIRMED

        data = services.update_appointment_status(data, "appt_4", AppointmentStatus.SCHEDULED)
        assert data.find_appointment("appt_4").status == AppointmentStatus.SCHEDULED

    def test_status_update_is_idempotent(self, may_schedule):
        once = services.update_appointment_status(may_schedule, "appt_6", AppointmentStatus.COMPLETED)
        twice = services.update_appointment_status(once, "appt_6", AppointmentStatus.COMPLETED)
        assert once == twice

    def test_other_appointments_untouched(self, may_schedule):
        data = services.update_appointment_status(may_schedule, "appt_6", AppointmentStatus.CONFIRMED)
        for before, after in zip(may_schedule.appointments, data.appointments):
            if before.id != "appt_6":
                assert before is after


class TestProfessionalOperations:
    """Tests for roster changes"""

    def test_update_profile_merges_fields(self, roster):
        data = services.update_professional_profile(roster, "prof_1", {"specialty": "Cardiology & Sports"})
        prof = data.find_professional("prof_1")

        assert prof.specialty == "Cardiology & Sports"
        assert prof.name == "Dr. Ana Souza"
        assert prof.consultation_price == 200

    def test_update_profile_accepts_stored_price_key(self, roster):
        data = services.update_professional_profile(roster, "prof_3", {"consultationPrice": 120})
        assert data.find_professional("prof_3").consultation_price == 120

    def test_update_profile_ignores_unknown_keys(self, roster):
        data = services.update_professional_profile(roster, "prof_1", {"id": "hijack", "rating": 5})
        assert data == roster

    def test_price_change_does_not_reprice_existing(self, may_schedule):
        data = services.update_professional_profile(may_schedule, "prof_1", {"consultation_price": 999})
        assert data.find_appointment("appt_6").price == 200

    def test_add_professional(self, roster, ids):
        data, prof = services.add_professional(roster, "Eva Prado", "Nutrition", 170, ids)

        assert prof.id == f"prof_4_{FIXED_MILLIS}"
        assert data.professionals[-1] == prof
        assert len(roster.professionals) == 3

    def test_delete_professional_cascades(self, may_schedule):
        data = services.delete_professional(may_schedule, "prof_1")

        assert data.find_professional("prof_1") is None
        assert all(a.professional_id != "prof_1" for a in data.appointments)
        assert [a.id for a in data.appointments] == ["appt_3", "appt_4"]
        # patients survive
        assert data.patients == may_schedule.patients


class TestQueries:
    """Tests for appointment lookups"""

    def test_filter_by_professional_sorted_by_start(self, may_schedule):
        result = services.filter_appointments(may_schedule, professional_id="prof_1")
        assert [a.id for a in result] == ["appt_5", "appt_1", "appt_2", "appt_6"]

    def test_filter_by_status(self, may_schedule):
        result = services.filter_appointments(may_schedule, status=AppointmentStatus.CANCELLED)
        assert [a.id for a in result] == ["appt_4"]

    def test_appointments_for_patient(self, may_schedule):
        result = services.appointments_for_patient(may_schedule, "  JOÃO pereira ")
        assert [a.id for a in result] == ["appt_3", "appt_4"]

    def test_appointments_for_unknown_patient(self, may_schedule):
        assert services.appointments_for_patient(may_schedule, "Nobody") == []


class TestPolicies:
    """Tests for pricing rules and advisory policies"""

    def test_policies_never_deny(self):
        assert {r.value for r in PolicyResult} == {"approved", "requires_review"}

    def test_normalize_patient_name(self):
        assert normalize_patient_name("  Maria SILVA ") == "maria silva"

    def test_zero_price_falls_back(self):
        prof = Professional(id="p", name="n", specialty="s", consultation_price=0)
        assert resolve_consultation_price(prof) == 150

    def test_missing_professional_falls_back(self):
        assert resolve_consultation_price(None) == 150

    def test_double_booking_same_professional(self):
        existing = make_appointment("appt_1", "prof_1", millis(2024, 5, 1, 10), patient_id="pat_9")
        new = make_appointment("appt_2", "prof_1", millis(2024, 5, 1, 10, 15), patient_id="pat_1")

        decision = DoubleBookingPolicy().evaluate(BookingContext(new, [existing]))

        assert decision.result == PolicyResult.REQUIRES_REVIEW
        assert decision.metadata == {"conflicting_appointment": "appt_1", "party": "professional"}

    def test_double_booking_same_patient(self):
        existing = make_appointment("appt_1", "prof_2", millis(2024, 5, 1, 10))
        new = make_appointment("appt_2", "prof_1", millis(2024, 5, 1, 10, 15))

        decision = DoubleBookingPolicy().evaluate(BookingContext(new, [existing]))

        assert decision.requires_review
        assert decision.metadata["party"] == "patient"

    def test_back_to_back_is_not_double_booking(self):
        existing = make_appointment("appt_1", "prof_1", millis(2024, 5, 1, 10))
        new = make_appointment("appt_2", "prof_1", millis(2024, 5, 1, 10, 30))

        assert DoubleBookingPolicy().evaluate(BookingContext(new, [existing])).is_approved

    def test_cancelled_slot_is_free(self):
        existing = make_appointment("appt_1", "prof_1", millis(2024, 5, 1, 10), AppointmentStatus.CANCELLED)
        new = make_appointment("appt_2", "prof_1", millis(2024, 5, 1, 10))

        assert DoubleBookingPolicy().evaluate(BookingContext(new, [existing])).is_approved

    @pytest.mark.parametrize("current,requested,flagged", [
        (AppointmentStatus.SCHEDULED, AppointmentStatus.CONFIRMED, False),
        (AppointmentStatus.CONFIRMED, AppointmentStatus.COMPLETED, False),
        (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED, True),
        (AppointmentStatus.CANCELLED, AppointmentStatus.SCHEDULED, True),
        (AppointmentStatus.CANCELLED, AppointmentStatus.CANCELLED, False),
    ])
    def test_status_change_policy(self, current, requested, flagged):
        decision = StatusChangePolicy().evaluate(StatusChangeContext(current, requested))
        assert decision.requires_review is flagged


class TestModels:
    """Tests for the persisted layout"""

    def test_camel_case_layout(self, may_schedule):
        payload = may_schedule.to_dict()
        appt = payload["appointments"][0]

        assert set(appt) == {"id", "professionalId", "patientId", "patientName", "start", "end", "status", "price"}
        assert payload["professionals"][0]["consultationPrice"] == 200
        assert "consultationPrice" not in payload["professionals"][2]

    def test_unknown_fields_and_status_are_tolerated(self):
        data = ScheduleData.from_dict({
            "professionals": [{"id": "prof_1", "name": "A", "specialty": "B", "rating": 5}],
            "appointments": [{
                "id": "appt_1", "professionalId": "prof_1", "patientId": "pat_1",
                "patientName": "X", "start": "1714557600000", "end": "1714559400000",
                "status": "no_show", "price": 100,
            }],
        })

        assert data.patients == ()
        assert data.appointments[0].status == "no_show"
        assert data.appointments[0].to_dict()["status"] == "no_show"

    @pytest.mark.parametrize("raw", ["2024-05-01T10:00:00.000Z", "", "NaN", "inf", None])
    def test_unreadable_stored_time(self, raw):
        appt = Appointment.from_dict({"id": "appt_1", "start": raw, "end": raw})

        assert appt.start_millis is None
        assert appt.end_millis is None
        assert appt.starts_at() is None

    def test_unreadable_stored_time_does_not_break_queries(self, may_schedule, ids):
        bad = make_appointment("appt_bad", "prof_1", 0, AppointmentStatus.SCHEDULED)
        bad = Appointment.from_dict({**bad.to_dict(), "start": "2024-05-01T10:00:00.000Z", "end": "x"})
        data = ScheduleData(
            professionals=may_schedule.professionals,
            patients=may_schedule.patients,
            appointments=(bad,) + may_schedule.appointments,
        )

        listed = services.filter_appointments(data, professional_id="prof_1")
        assert [a.id for a in listed] == ["appt_5", "appt_1", "appt_2", "appt_6", "appt_bad"]
        assert [a.id for a in services.appointments_for_patient(data, "Maria Silva")][-1] == "appt_bad"

        overview = services.OperationalOverviewCalculator().execute(data, now=millis(2024, 5, 15))
        assert [a.id for a in overview.upcoming] == ["appt_6"]
        assert overview.status_counts["scheduled"] == 2

        next_data, appt = services.book_appointment(data, "prof_1", "Maria Silva", MAY_1_10H, MAY_1_10H30, ids)
        decision = DoubleBookingPolicy().evaluate(BookingContext(appt, list(data.appointments)))
        assert decision.is_approved
        assert next_data.find_appointment(appt.id) is not None

    def test_json_round_trip_keeps_notes(self, may_schedule):
        data = services.update_appointment_notes(may_schedule, "appt_1", "Follow-up in 3 months")
        restored = ScheduleData.from_json(data.to_json())

        assert restored == data
        assert isinstance(restored.appointments[0], Appointment)
