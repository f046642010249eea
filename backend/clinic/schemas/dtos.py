"""
Data Transfer Objects (DTOs) for service inputs and outputs.

Request DTOs are plain value objects; validating them is the job of the
admission rules in clinic.domain.rules, which accumulate every failure
instead of raising on the first one.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, time
from typing import Any, Dict, List, NamedTuple, Optional

from clinic.core import config
from clinic.core.clock import to_anchor
from clinic.core.validation import ValidationResult


@dataclass
class DoctorCreateRequest:
    """DTO for doctor admission requests."""

    first_name: str
    last_name: str
    specialty: str
    phone_number: str
    email: str
    shift_start: time
    shift_end: time


@dataclass
class AppointmentCreateRequest:
    """DTO for appointment scheduling requests."""

    patient_name: str
    doctor_id: int
    appointment_time: datetime
    reason_for_visit: str
    duration_minutes: int = config.DEFAULT_DURATION_MINUTES
    clinic_room: Optional[str] = None

    def __post_init__(self):
        self.appointment_time = to_anchor(self.appointment_time)


@dataclass
class AdmissionResult:
    """Outcome of an admission call.

    A rejected admission is a normal return value, not an exception: it
    carries every violated rule in check order and nothing was written.
    """

    success: bool
    message: str
    entity_id: Optional[int] = None
    errors: List[str] = field(default_factory=list)
    codes: List[str] = field(default_factory=list)

    @classmethod
    def accepted(cls, entity_id: int, message: str) -> "AdmissionResult":
        return cls(success=True, message=message, entity_id=entity_id)

    @classmethod
    def rejected(cls, prefix: str, validation: ValidationResult) -> "AdmissionResult":
        return cls(
            success=False,
            message=f"{prefix} Errors: {validation.summary()}",
            errors=validation.errors,
            codes=validation.codes,
        )

    def __bool__(self) -> bool:
        return self.success


class PerformanceSummary(NamedTuple):
    """Completed/cancelled counts for one specialty over one week."""

    completed: int = 0
    cancelled: int = 0


@dataclass
class DoctorResponse:
    """DTO for doctor API responses."""

    id: int
    first_name: str
    last_name: str
    specialty: str
    phone_number: str
    email: str
    shift_start: str
    shift_end: str

    @classmethod
    def from_domain(cls, doctor) -> "DoctorResponse":
        return cls(
            id=doctor.id,
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            specialty=doctor.specialty,
            phone_number=doctor.phone_number,
            email=doctor.email,
            shift_start=doctor.shift_start.isoformat(),
            shift_end=doctor.shift_end.isoformat(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AppointmentResponse:
    """DTO for appointment API responses."""

    id: int
    patient_name: str
    doctor_id: int
    appointment_time: str
    reason_for_visit: str
    status: str
    duration_minutes: int
    clinic_room: Optional[str]

    @classmethod
    def from_domain(cls, appointment) -> "AppointmentResponse":
        return cls(
            id=appointment.id,
            patient_name=appointment.patient_name,
            doctor_id=appointment.doctor_id,
            appointment_time=appointment.appointment_time.isoformat(),
            reason_for_visit=appointment.reason_for_visit,
            status=appointment.status.value,
            duration_minutes=appointment.duration_minutes,
            clinic_room=appointment.clinic_room,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ErrorResponse:
    """DTO for error responses."""

    error: str
    message: str
    details: Optional[dict] = None

    @classmethod
    def validation_error(
        cls, message: str, details: Optional[dict] = None
    ) -> "ErrorResponse":
        """Create validation error response."""
        return cls(error="validation_error", message=message, details=details)

    @classmethod
    def not_found(cls, resource: str) -> "ErrorResponse":
        """Create not found error response."""
        return cls(error="not_found", message=f"{resource} not found")

    @classmethod
    def store_error(cls, message: str = "Data store unavailable") -> "ErrorResponse":
        """Create infrastructure error response."""
        return cls(error="store_error", message=message)
