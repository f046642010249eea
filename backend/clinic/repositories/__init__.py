"""SQLAlchemy implementations of the store contract in clinic.domain.interfaces."""

from .appointment_repo import AppointmentRepository
from .doctor_repo import DoctorRepository
from .unit_of_work import SqlAlchemyUnitOfWork

__all__ = ["AppointmentRepository", "DoctorRepository", "SqlAlchemyUnitOfWork"]
