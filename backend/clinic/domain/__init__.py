"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Doctor and Appointment entities, specialty and status enums
- rules.py: accumulate-all admission rules and interval/week helpers
- interfaces.py: store contracts the services depend on
"""

from .entities import Appointment, AppointmentStatus, Doctor, ShiftWindow, Specialty
from .interfaces import (
    IAppointmentReader,
    IAppointmentRepository,
    IAppointmentWriter,
    IDoctorReader,
    IDoctorRepository,
    IDoctorWriter,
    IStoreTransaction,
    IUnitOfWork,
)

__all__ = [
    # Domain entities
    "Doctor",
    "Appointment",
    "AppointmentStatus",
    "ShiftWindow",
    "Specialty",
    # Repository interfaces
    "IDoctorRepository",
    "IAppointmentRepository",
    "IUnitOfWork",
    "IStoreTransaction",
    # Segregated interfaces
    "IDoctorReader",
    "IDoctorWriter",
    "IAppointmentReader",
    "IAppointmentWriter",
]
