"""
Appointment controller - HTTP endpoints for scheduling.

Handles only request parsing and response rendering; admission rules live
in AppointmentScheduler.
"""

import logging

from flask import Blueprint, request

from clinic.core.api_utils import admission_response, api_response
from clinic.core.exceptions import InvalidStatusTransition
from clinic.schemas.dtos import AppointmentResponse, ErrorResponse

from .payload_helpers import get_services, parse_appointment_payload

logger = logging.getLogger(__name__)

appointment_bp = Blueprint("appointments", __name__, url_prefix="/api/appointments")


@appointment_bp.route("", methods=["POST"])
def schedule_appointment():
    """Schedule an appointment.

    Body: patient_name, doctor_id, appointment_time (ISO 8601),
    reason_for_visit, duration_minutes (default 30), clinic_room (optional).
    """
    appointment_request, parsed = parse_appointment_payload(
        request.get_json(silent=True)
    )
    if appointment_request is None:
        error = ErrorResponse.validation_error("Invalid appointment payload")
        return api_response(False, error.message, {"errors": parsed.errors}, 400)

    result = get_services().scheduler.schedule_appointment(appointment_request)
    return admission_response(result, "appointment_id")


@appointment_bp.route("", methods=["GET"])
def list_appointments():
    doctor_id = request.args.get("doctor_id", type=int)
    appointments = get_services().scheduler.list_appointments(doctor_id)
    return api_response(
        True,
        f"{len(appointments)} appointment(s)",
        [AppointmentResponse.from_domain(a).to_dict() for a in appointments],
    )


@appointment_bp.route("/<int:appointment_id>", methods=["GET"])
def get_appointment(appointment_id: int):
    appointment = get_services().scheduler.get_appointment(appointment_id)
    if appointment is None:
        error = ErrorResponse.not_found(f"Appointment {appointment_id}")
        return api_response(False, error.message, status_code=404)
    return api_response(
        True, "Appointment found", AppointmentResponse.from_domain(appointment).to_dict()
    )


@appointment_bp.route("/<int:appointment_id>/complete", methods=["POST"])
def complete_appointment(appointment_id: int):
    return _transition(appointment_id, "complete")


@appointment_bp.route("/<int:appointment_id>/cancel", methods=["POST"])
def cancel_appointment(appointment_id: int):
    return _transition(appointment_id, "cancel")


def _transition(appointment_id: int, action: str):
    scheduler = get_services().scheduler
    handler = (
        scheduler.complete_appointment
        if action == "complete"
        else scheduler.cancel_appointment
    )
    try:
        changed = handler(appointment_id)
    except InvalidStatusTransition as e:
        return api_response(False, str(e), status_code=409)

    if not changed:
        error = ErrorResponse.not_found(f"Appointment {appointment_id}")
        return api_response(False, error.message, status_code=404)
    return api_response(True, f"Appointment {appointment_id} updated")
