"""
Helper functions shared by the HTTP controllers and the CLI.
Turns raw payloads into request DTOs and resolves the wired services.
"""

from typing import Any, Optional, Tuple

from flask import current_app

from clinic.core import config
from clinic.core.validation import PayloadParser, ValidationResult
from clinic.schemas.dtos import AppointmentCreateRequest, DoctorCreateRequest


def get_services():
    """Return the ClinicServices container installed by create_app()."""
    return current_app.extensions["clinic"]


def parse_doctor_payload(
    data: Any,
) -> Tuple[Optional[DoctorCreateRequest], ValidationResult]:
    parser = PayloadParser(data)
    first_name = parser.string("first_name")
    last_name = parser.string("last_name")
    specialty = parser.string("specialty")
    phone_number = parser.string("phone_number")
    email = parser.string("email")
    shift_start = parser.time_of_day("shift_start")
    shift_end = parser.time_of_day("shift_end")

    if not parser.result.is_valid:
        return None, parser.result

    return (
        DoctorCreateRequest(
            first_name=first_name,
            last_name=last_name,
            specialty=specialty,
            phone_number=phone_number,
            email=email,
            shift_start=shift_start,
            shift_end=shift_end,
        ),
        parser.result,
    )


def parse_appointment_payload(
    data: Any,
) -> Tuple[Optional[AppointmentCreateRequest], ValidationResult]:
    parser = PayloadParser(data)
    patient_name = parser.string("patient_name")
    doctor_id = parser.integer("doctor_id")
    appointment_time = parser.date_time("appointment_time")
    reason_for_visit = parser.string("reason_for_visit")
    duration_minutes = parser.integer(
        "duration_minutes", default=config.DEFAULT_DURATION_MINUTES
    )
    clinic_room = parser.optional_string("clinic_room")

    if not parser.result.is_valid:
        return None, parser.result

    return (
        AppointmentCreateRequest(
            patient_name=patient_name,
            doctor_id=doctor_id,
            appointment_time=appointment_time,
            reason_for_visit=reason_for_visit,
            duration_minutes=duration_minutes,
            clinic_room=clinic_room,
        ),
        parser.result,
    )
