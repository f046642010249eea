"""
Abstract interfaces for the persistence store following Interface Segregation.

These interfaces define the store contract the services depend on:
insert (``add``), existence predicates, filtered queries and an atomic
check-and-insert runner. Implementations raise StoreError for any
infrastructure failure.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from typing import Callable, List, Optional, TypeVar

from .entities import Appointment, AppointmentStatus, Doctor, ShiftWindow

T = TypeVar("T")


class IDoctorReader(ABC):
    """Interface for doctor read operations."""

    @abstractmethod
    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        """Get doctor by ID."""
        pass

    @abstractmethod
    def get_shift(self, doctor_id: int, for_update: bool = False) -> Optional[ShiftWindow]:
        """Return the doctor's shift window, or None when the doctor does not exist."""
        pass

    @abstractmethod
    def email_exists(self, email: str) -> bool:
        """Check whether a doctor with this (normalized) email is stored."""
        pass

    @abstractmethod
    def list_all(self) -> List[Doctor]:
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class IDoctorWriter(ABC):
    """Interface for doctor write operations."""

    @abstractmethod
    def add(self, doctor: Doctor) -> Doctor:
        """Insert a doctor and return it with its generated id."""
        pass


class IDoctorRepository(IDoctorReader, IDoctorWriter):
    """Complete doctor repository interface."""

    pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def has_conflict(
        self, doctor_id: int, day: date, start: datetime, end: datetime
    ) -> bool:
        """True when a Scheduled booking of the doctor on ``day`` overlaps [start, end)."""
        pass

    @abstractmethod
    def list_for_specialty(
        self,
        specialty: str,
        window_start: datetime,
        window_end: datetime,
        status: Optional[AppointmentStatus] = None,
    ) -> List[Appointment]:
        """Appointments of doctors in ``specialty`` with time in [window_start, window_end)."""
        pass

    @abstractmethod
    def list_all(self, doctor_id: Optional[int] = None) -> List[Appointment]:
        """Appointments, newest first, optionally for one doctor."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def add(self, appointment: Appointment) -> Appointment:
        """Insert an appointment and return it with its generated id."""
        pass

    @abstractmethod
    def set_status(self, appointment_id: int, status: AppointmentStatus) -> bool:
        """Change an appointment's status. False when the id is unknown."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class IStoreTransaction(ABC):
    """Repositories bound to one open transaction."""

    doctors: IDoctorRepository
    appointments: IAppointmentRepository


class IUnitOfWork(ABC):
    """Runs a check-and-write sequence as one atomic unit."""

    @abstractmethod
    def run_atomic(
        self,
        operation: Callable[[IStoreTransaction], T],
        lock_key: Optional[str] = None,
    ) -> T:
        """Execute ``operation`` in a single transaction.

        Commits when ``operation`` returns, rolls back when it raises. While
        ``lock_key`` is held no other atomic operation with the same key can
        run. Infrastructure failures surface as StoreError.
        """
        pass
