"""
Custom exceptions for the clinic backend.

Business-rule failures are not exceptions: admission calls return an
AdmissionResult. The types below cover infrastructure failures and misuse.
"""

from typing import Optional


class ClinicError(Exception):
    """Base class for all clinic backend errors."""

    pass


class StoreError(ClinicError):
    """
    Raised when the persistence layer is unreachable, times out, or rejects
    a write (for example a unique constraint race).

    The underlying driver exception is chained as ``__cause__``.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.operation = operation


class InvalidStatusTransition(ClinicError, ValueError):
    """Raised when an appointment is moved out of a non-Scheduled status."""

    def __init__(self, appointment_id: int, current_status: str, target_status: str):
        super().__init__(
            f"Appointment {appointment_id} is {current_status}; "
            f"only Scheduled appointments can become {target_status}"
        )
        self.appointment_id = appointment_id
        self.current_status = current_status
        self.target_status = target_status
