"""
Integration tests for the JSON endpoints using the Flask test client.
"""

from datetime import datetime
from unittest.mock import Mock, patch

import pytest

from clinic.core.exceptions import StoreError
from clinic.db.session import dispose_engine

DOCTOR_PAYLOAD = {
    "first_name": "Jane",
    "last_name": "Smith",
    "specialty": "Pediatrics",
    "phone_number": "555-123-4567",
    "email": "jane@x.com",
    "shift_start": "08:00",
    "shift_end": "17:00",
}


def _appointment_payload(doctor_id, **overrides):
    payload = {
        "patient_name": "Billy Jones",
        "doctor_id": doctor_id,
        "appointment_time": "2026-10-14T10:00:00",
        "reason_for_visit": "Routine check-up for cough",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def doctor_id(client):
    response = client.post("/api/doctors", json=DOCTOR_PAYLOAD)
    assert response.status_code == 201
    return response.get_json()["data"]["doctor_id"]


class TestDoctorEndpoints:
    def test_admit_doctor(self, client):
        response = client.post("/api/doctors", json=DOCTOR_PAYLOAD)

        body = response.get_json()
        assert response.status_code == 201
        assert body["success"] is True
        assert body["message"] == "Doctor Insertion SUCCESSFUL for: Smith"

    def test_rejected_doctor_lists_every_error(self, client):
        payload = dict(DOCTOR_PAYLOAD, specialty="Psychology", phone_number="123")

        response = client.post("/api/doctors", json=payload)

        body = response.get_json()
        assert response.status_code == 400
        assert body["data"]["codes"] == ["SPECIALTY", "PHONE_FORMAT"]
        assert len(body["data"]["errors"]) == 2

    def test_malformed_payload_rejected(self, client):
        response = client.post(
            "/api/doctors", json=dict(DOCTOR_PAYLOAD, shift_start="eight o'clock")
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid doctor payload"

    def test_missing_body_rejected(self, client):
        response = client.post("/api/doctors", data="not json")

        assert response.status_code == 400

    def test_get_and_list_doctors(self, client, doctor_id):
        single = client.get(f"/api/doctors/{doctor_id}").get_json()["data"]
        listing = client.get("/api/doctors").get_json()["data"]

        assert single["phone_number"] == "5551234567"
        assert single["shift_start"] == "08:00:00"
        assert [d["id"] for d in listing] == [doctor_id]

    def test_unknown_doctor_is_404(self, client):
        assert client.get("/api/doctors/999").status_code == 404


class TestAppointmentEndpoints:
    def test_schedule_and_fetch(self, client, doctor_id):
        response = client.post("/api/appointments", json=_appointment_payload(doctor_id))

        assert response.status_code == 201
        appointment_id = response.get_json()["data"]["appointment_id"]
        fetched = client.get(f"/api/appointments/{appointment_id}").get_json()["data"]
        assert fetched["status"] == "Scheduled"
        assert fetched["duration_minutes"] == 30

    def test_aware_time_converted_to_anchor_zone(self, client, doctor_id):
        response = client.post(
            "/api/appointments",
            json=_appointment_payload(doctor_id, appointment_time="2026-10-14T12:00:00+02:00"),
        )
        appointment_id = response.get_json()["data"]["appointment_id"]

        fetched = client.get(f"/api/appointments/{appointment_id}").get_json()["data"]
        assert fetched["appointment_time"] == "2026-10-14T10:00:00"

    def test_conflict_rejected(self, client, doctor_id):
        client.post("/api/appointments", json=_appointment_payload(doctor_id))

        response = client.post(
            "/api/appointments",
            json=_appointment_payload(doctor_id, appointment_time="2026-10-14T10:15:00"),
        )

        assert response.status_code == 400
        assert response.get_json()["data"]["codes"] == ["CONFLICT"]

    def test_boolean_doctor_id_is_malformed(self, client):
        response = client.post("/api/appointments", json=_appointment_payload(True))

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid appointment payload"

    def test_list_filtered_by_doctor(self, client, doctor_id):
        client.post("/api/appointments", json=_appointment_payload(doctor_id))

        mine = client.get(f"/api/appointments?doctor_id={doctor_id}").get_json()["data"]
        others = client.get("/api/appointments?doctor_id=999").get_json()["data"]

        assert len(mine) == 1
        assert others == []

    def test_complete_then_cancel_conflicts(self, client, doctor_id):
        created = client.post("/api/appointments", json=_appointment_payload(doctor_id))
        appointment_id = created.get_json()["data"]["appointment_id"]

        completed = client.post(f"/api/appointments/{appointment_id}/complete")
        cancelled = client.post(f"/api/appointments/{appointment_id}/cancel")

        assert completed.status_code == 200
        assert cancelled.status_code == 409

    def test_transition_of_unknown_appointment_is_404(self, client):
        assert client.post("/api/appointments/999/cancel").status_code == 404


class TestOutOfRangeInput:
    @pytest.mark.parametrize("path", ["/api/doctors", "/api/appointments"])
    def test_non_object_body_rejected(self, client, path):
        response = client.post(path, json=[1, 2])

        assert response.status_code == 400
        assert "Request body must be a JSON object" in response.get_json()["data"]["errors"]

    def test_shift_with_utc_offset_rejected(self, client):
        response = client.post(
            "/api/doctors", json=dict(DOCTOR_PAYLOAD, shift_start="08:00+02:00")
        )

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid doctor payload"

    def test_oversized_doctor_id_rejected(self, client):
        response = client.post("/api/appointments", json=_appointment_payload(10**30))

        assert response.status_code == 400
        assert response.get_json()["message"] == "Invalid appointment payload"

    def test_oversized_duration_rejected(self, client, doctor_id):
        response = client.post(
            "/api/appointments",
            json=_appointment_payload(doctor_id, duration_minutes=15 * 10**9),
        )

        assert response.status_code == 400
        assert response.get_json()["data"]["codes"] == ["DURATION", "OUTSIDE_SHIFT"]

    def test_booking_running_past_last_calendar_day(self, client, doctor_id):
        response = client.post(
            "/api/appointments",
            json=_appointment_payload(doctor_id, appointment_time="9999-12-31T23:45:00"),
        )

        assert response.status_code == 400
        assert response.get_json()["data"]["codes"] == ["OUTSIDE_SHIFT"]

    def test_booking_on_last_calendar_day(self, client, doctor_id):
        response = client.post(
            "/api/appointments",
            json=_appointment_payload(doctor_id, appointment_time="9999-12-31T10:00:00"),
        )

        assert response.status_code == 201


class TestReportEndpoints:
    def test_utilization_report(self, client, doctor_id):
        client.post("/api/appointments", json=_appointment_payload(doctor_id))
        client.post(
            "/api/appointments",
            json=_appointment_payload(
                doctor_id, appointment_time="2026-10-15T11:00:00", duration_minutes=45
            ),
        )

        data = client.get("/api/reports/utilization/Pediatrics").get_json()["data"]

        assert data["total_minutes"] == 75
        assert data["week_start"] == "2026-10-12T00:00:00"
        assert data["week_end"] == "2026-10-19T00:00:00"

    def test_performance_report(self, client, doctor_id):
        created = client.post("/api/appointments", json=_appointment_payload(doctor_id))
        client.post(f"/api/appointments/{created.get_json()['data']['appointment_id']}/complete")

        data = client.get("/api/reports/performance/Pediatrics").get_json()["data"]

        assert data["completed_appointments"] == 1
        assert data["cancelled_appointments"] == 0

    @pytest.mark.parametrize(
        "path", ["/api/reports/utilization/Pediatrics", "/api/reports/performance/Pediatrics"]
    )
    def test_report_reads_clock_once(self, path):
        from clinic.main import create_app

        clock = Mock(return_value=datetime(2026, 10, 14, 8, 0))
        dispose_engine()
        try:
            flask_app = create_app(database_url="sqlite:///:memory:", testing=True, clock=clock)
            response = flask_app.test_client().get(path)
        finally:
            dispose_engine()

        assert response.status_code == 200
        assert response.get_json()["data"]["week_start"] == "2026-10-12T00:00:00"
        assert clock.call_count == 1

    def test_specialty_with_space_in_path(self, client):
        response = client.get("/api/reports/utilization/General%20Practice")

        assert response.get_json()["data"]["specialty"] == "General Practice"
        assert response.get_json()["data"]["total_minutes"] == 0


class TestInfrastructureEndpoints:
    def test_health_check(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.get_json()["status"] == "healthy"

    def test_store_error_is_503(self, client, app):
        services = app.extensions["clinic"]
        with patch.object(
            services.doctors, "admit_doctor", side_effect=StoreError("database is locked")
        ):
            response = client.post("/api/doctors", json=DOCTOR_PAYLOAD)

        assert response.status_code == 503
        assert response.get_json()["success"] is False

    def test_unknown_route_is_404(self, client):
        assert client.get("/api/nowhere").status_code == 404
