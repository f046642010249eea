"""
Admission rules for doctors and appointments.

Every function here is pure: facts that depend on stored state (is the
email taken, what is the doctor's shift, does a booking collide) are looked
up by the caller inside its transaction and passed in. Each evaluator runs
all of its checks and records every failure, in a fixed order, on a
ValidationResult.
"""

from datetime import datetime, timedelta
from typing import TYPE_CHECKING, Optional, Tuple

from clinic.core import config
from clinic.core.validation import ValidationResult
from clinic.domain.entities import ShiftWindow, Specialty

if TYPE_CHECKING:
    from clinic.schemas.dtos import AppointmentCreateRequest, DoctorCreateRequest


class DoctorRule:
    SHIFT_ORDER = "SHIFT_ORDER"
    SPECIALTY = "SPECIALTY"
    NAME_REQUIRED = "NAME_REQUIRED"
    PHONE_FORMAT = "PHONE_FORMAT"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    SHIFT_LENGTH = "SHIFT_LENGTH"


class AppointmentRule:
    DOCTOR_NOT_FOUND = "DOCTOR_NOT_FOUND"
    LEAD_TIME = "LEAD_TIME"
    DURATION = "DURATION"
    OUTSIDE_SHIFT = "OUTSIDE_SHIFT"
    CONFLICT = "CONFLICT"
    REASON_REQUIRED = "REASON_REQUIRED"
    PATIENT_REQUIRED = "PATIENT_REQUIRED"


def normalize_phone(raw: Optional[str]) -> str:
    """Strip separator characters from a phone number."""
    if raw is None:
        return ""
    return "".join(ch for ch in str(raw) if ch not in config.PHONE_SEPARATORS)


def normalize_email(raw: Optional[str]) -> str:
    return (raw or "").strip().lower()


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def intervals_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open overlap: [a_start, a_end) and [b_start, b_end) share an instant."""
    return a_start < b_end and b_start < a_end


def appointment_end(start: datetime, duration_minutes: int) -> Optional[datetime]:
    """End of the booking, or None when the duration is out of range or the
    end falls outside the representable calendar."""
    if abs(duration_minutes) > config.MAX_DURATION_MINUTES:
        return None
    try:
        return start + timedelta(minutes=duration_minutes)
    except OverflowError:
        return None


def iso_week_window(now: datetime) -> Tuple[datetime, datetime]:
    """Monday 00:00 of the week containing ``now`` and the following Monday 00:00."""
    start = datetime.combine(now.date() - timedelta(days=now.weekday()), datetime.min.time())
    return start, start + timedelta(weeks=1)


def evaluate_doctor(
    request: "DoctorCreateRequest", email_taken: bool
) -> ValidationResult:
    """Run the six doctor admission checks."""
    result = ValidationResult()
    shift = ShiftWindow(start=request.shift_start, end=request.shift_end)

    if request.shift_start >= request.shift_end:
        result.add_error(
            DoctorRule.SHIFT_ORDER,
            "Shift Start time must be before Shift End time.",
        )

    if not Specialty.is_valid(request.specialty):
        result.add_error(
            DoctorRule.SPECIALTY,
            "Specialty is invalid. Must be one of: "
            + ", ".join(Specialty.values())
            + ".",
        )

    if is_blank(request.first_name) or is_blank(request.last_name):
        result.add_error(
            DoctorRule.NAME_REQUIRED, "First and Last Names cannot be empty."
        )

    phone = normalize_phone(request.phone_number)
    if len(phone) != config.PHONE_DIGITS or not phone.isdigit():
        result.add_error(
            DoctorRule.PHONE_FORMAT,
            f"Phone number must contain {config.PHONE_DIGITS} digits.",
        )

    if email_taken:
        result.add_error(
            DoctorRule.EMAIL_TAKEN, "An account with this email already exists."
        )

    if shift.length < timedelta(hours=config.MIN_SHIFT_HOURS):
        result.add_error(
            DoctorRule.SHIFT_LENGTH,
            f"Minimum shift duration is {config.MIN_SHIFT_HOURS} hours.",
        )

    return result


def evaluate_appointment(
    request: "AppointmentCreateRequest",
    now: datetime,
    shift: Optional[ShiftWindow],
    has_conflict: bool = False,
) -> ValidationResult:
    """Run the appointment admission checks.

    ``shift`` is None when the doctor does not exist; the shift containment
    and conflict checks are then skipped rather than evaluated. A booking
    whose end cannot be computed never fits a shift and is not checked for
    conflicts.
    """
    result = ValidationResult()
    start = request.appointment_time
    end = appointment_end(start, request.duration_minutes)

    if shift is None:
        result.add_error(
            AppointmentRule.DOCTOR_NOT_FOUND,
            f"Doctor ID {request.doctor_id} does not exist.",
        )

    if start < now + timedelta(minutes=config.MIN_LEAD_MINUTES):
        result.add_error(
            AppointmentRule.LEAD_TIME,
            f"Appointment must be scheduled at least {config.MIN_LEAD_MINUTES} "
            "minutes in advance.",
        )

    if request.duration_minutes <= 0 or request.duration_minutes % config.SLOT_MINUTES:
        result.add_error(
            AppointmentRule.DURATION,
            "Appointment duration must be positive and a multiple of "
            f"{config.SLOT_MINUTES} minutes.",
        )
    elif request.duration_minutes > config.MAX_DURATION_MINUTES:
        result.add_error(
            AppointmentRule.DURATION,
            f"Appointment duration cannot exceed {config.MAX_DURATION_MINUTES} minutes.",
        )

    if shift is not None:
        shift_start, shift_end = shift.on(start.date())
        if end is None or start < shift_start or end > shift_end:
            result.add_error(
                AppointmentRule.OUTSIDE_SHIFT,
                f"Appointment time is outside of Doctor {request.doctor_id}'s "
                f"shift ({shift}).",
            )

        if has_conflict and end is not None:
            result.add_error(
                AppointmentRule.CONFLICT,
                "Scheduling conflict: Doctor is already booked at this time.",
            )

    if is_blank(request.reason_for_visit):
        result.add_error(
            AppointmentRule.REASON_REQUIRED, "Reason for visit cannot be empty."
        )

    if is_blank(request.patient_name):
        result.add_error(
            AppointmentRule.PATIENT_REQUIRED, "Patient name cannot be empty."
        )

    return result
