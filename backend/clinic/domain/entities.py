"""
Domain entities - Pure business logic, no framework dependencies.

Doctors and appointments as the services see them, independent of the
SQLAlchemy models in clinic.db.base.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Optional

from clinic.core import config


class Specialty(str, Enum):
    """Fixed set of specialties a doctor may be registered under."""

    CARDIOLOGY = "Cardiology"
    PEDIATRICS = "Pediatrics"
    ONCOLOGY = "Oncology"
    DERMATOLOGY = "Dermatology"
    GENERAL_PRACTICE = "General Practice"

    @classmethod
    def values(cls):
        return [member.value for member in cls]

    @classmethod
    def is_valid(cls, value) -> bool:
        return value in cls.values()


class AppointmentStatus(str, Enum):
    SCHEDULED = "Scheduled"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


@dataclass
class ShiftWindow:
    """Time-of-day range during which a doctor may be booked."""

    start: time
    end: time

    def on(self, day: date):
        """Return the shift as concrete datetimes on ``day``."""
        return datetime.combine(day, self.start), datetime.combine(day, self.end)

    @property
    def length(self) -> timedelta:
        """Signed shift length (negative when end precedes start)."""
        anchor = date.min
        return datetime.combine(anchor, self.end) - datetime.combine(anchor, self.start)

    def __str__(self) -> str:
        return f"{self.start.strftime('%H:%M:%S')} to {self.end.strftime('%H:%M:%S')}"


@dataclass
class Doctor:
    """Domain entity representing a registered doctor."""

    first_name: str
    last_name: str
    specialty: str
    phone_number: str
    email: str
    shift_start: time
    shift_end: time
    id: Optional[int] = None


@dataclass
class Appointment:
    """Domain entity for a booked appointment."""

    patient_name: str
    doctor_id: int
    appointment_time: datetime
    reason_for_visit: str
    duration_minutes: int = config.DEFAULT_DURATION_MINUTES
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    clinic_room: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        # Rows read back from storage carry plain strings
        if not isinstance(self.status, AppointmentStatus):
            self.status = AppointmentStatus(self.status)

    @property
    def end_time(self) -> datetime:
        return self.appointment_time + timedelta(minutes=self.duration_minutes)

    @property
    def is_scheduled(self) -> bool:
        return self.status == AppointmentStatus.SCHEDULED
