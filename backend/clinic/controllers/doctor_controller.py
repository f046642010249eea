"""
Doctor controller - HTTP endpoints for the doctor registry.

Handles only request parsing and response rendering; admission rules live
in DoctorRegistry.
"""

import logging

from flask import Blueprint, request

from clinic.core.api_utils import admission_response, api_response
from clinic.schemas.dtos import DoctorResponse, ErrorResponse

from .payload_helpers import get_services, parse_doctor_payload

logger = logging.getLogger(__name__)

doctor_bp = Blueprint("doctors", __name__, url_prefix="/api/doctors")


@doctor_bp.route("", methods=["POST"])
def admit_doctor():
    """Admit a new doctor.

    Body: first_name, last_name, specialty, phone_number, email,
    shift_start and shift_end (HH:MM or HH:MM:SS).
    """
    doctor_request, parsed = parse_doctor_payload(request.get_json(silent=True))
    if doctor_request is None:
        error = ErrorResponse.validation_error("Invalid doctor payload")
        return api_response(False, error.message, {"errors": parsed.errors}, 400)

    result = get_services().doctors.admit_doctor(doctor_request)
    return admission_response(result, "doctor_id")


@doctor_bp.route("", methods=["GET"])
def list_doctors():
    doctors = get_services().doctors.list_doctors()
    return api_response(
        True,
        f"{len(doctors)} doctor(s)",
        [DoctorResponse.from_domain(d).to_dict() for d in doctors],
    )


@doctor_bp.route("/<int:doctor_id>", methods=["GET"])
def get_doctor(doctor_id: int):
    doctor = get_services().doctors.get_doctor(doctor_id)
    if doctor is None:
        error = ErrorResponse.not_found(f"Doctor {doctor_id}")
        return api_response(False, error.message, status_code=404)
    return api_response(True, "Doctor found", DoctorResponse.from_domain(doctor).to_dict())
