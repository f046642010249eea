"""
Schemas package - Data Transfer Objects.

This package contains the DTOs exchanged between the services and the
HTTP / CLI front ends.
"""

from .dtos import (
    AdmissionResult,
    AppointmentCreateRequest,
    AppointmentResponse,
    DoctorCreateRequest,
    DoctorResponse,
    ErrorResponse,
    PerformanceSummary,
)

__all__ = [
    # Doctor DTOs
    "DoctorCreateRequest",
    "DoctorResponse",
    # Appointment DTOs
    "AppointmentCreateRequest",
    "AppointmentResponse",
    # Results
    "AdmissionResult",
    "PerformanceSummary",
    # Common DTOs
    "ErrorResponse",
]
