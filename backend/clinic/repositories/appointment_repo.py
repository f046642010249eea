"""
Appointment repository implementation following SOLID principles.
"""

from datetime import date, datetime, time
from typing import List, Optional

from sqlalchemy import func, select

from clinic.db.base import Appointment as DbAppointment
from clinic.db.base import Doctor as DbDoctor
from clinic.domain.entities import Appointment as DomainAppointment
from clinic.domain.entities import AppointmentStatus
from clinic.domain.interfaces import IAppointmentRepository
from clinic.domain.rules import intervals_overlap


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, appointment_id: int) -> Optional[DomainAppointment]:
        db_appointment = self.db.get(DbAppointment, appointment_id)
        return self._to_domain(db_appointment) if db_appointment else None

    def has_conflict(
        self, doctor_id: int, day: date, start: datetime, end: datetime
    ) -> bool:
        """Check Scheduled bookings of the doctor on ``day`` for overlap with [start, end)."""
        stmt = select(DbAppointment).where(
            DbAppointment.doctor_id == doctor_id,
            DbAppointment.status == AppointmentStatus.SCHEDULED.value,
            DbAppointment.appointment_time >= datetime.combine(day, time.min),
            DbAppointment.appointment_time <= datetime.combine(day, time.max),
        )
        return any(
            intervals_overlap(start, end, existing.appointment_time, existing.end_time)
            for existing in map(self._to_domain, self.db.scalars(stmt))
        )

    def list_for_specialty(
        self,
        specialty: str,
        window_start: datetime,
        window_end: datetime,
        status: Optional[AppointmentStatus] = None,
    ) -> List[DomainAppointment]:
        specialty = getattr(specialty, "value", specialty)
        stmt = (
            select(DbAppointment)
            .join(DbDoctor, DbAppointment.doctor_id == DbDoctor.id)
            .where(
                DbDoctor.specialty == specialty,
                DbAppointment.appointment_time >= window_start,
                DbAppointment.appointment_time < window_end,
            )
        )
        if status is not None:
            stmt = stmt.where(DbAppointment.status == AppointmentStatus(status).value)
        return [self._to_domain(a) for a in self.db.scalars(stmt)]

    def list_all(self, doctor_id: Optional[int] = None) -> List[DomainAppointment]:
        stmt = select(DbAppointment).order_by(DbAppointment.appointment_time.desc())
        if doctor_id is not None:
            stmt = stmt.where(DbAppointment.doctor_id == doctor_id)
        return [self._to_domain(a) for a in self.db.scalars(stmt)]

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(DbAppointment)) or 0

    def add(self, appointment: DomainAppointment) -> DomainAppointment:
        db_appointment = DbAppointment(
            patient_name=appointment.patient_name,
            doctor_id=appointment.doctor_id,
            appointment_time=appointment.appointment_time,
            reason_for_visit=appointment.reason_for_visit,
            status=appointment.status.value,
            duration_minutes=appointment.duration_minutes,
            clinic_room=appointment.clinic_room,
        )
        self.db.add(db_appointment)
        self.db.flush()
        return self._to_domain(db_appointment)

    def set_status(self, appointment_id: int, status: AppointmentStatus) -> bool:
        db_appointment = self.db.get(DbAppointment, appointment_id)
        if not db_appointment:
            return False
        db_appointment.status = AppointmentStatus(status).value
        self.db.flush()
        return True

    def _to_domain(self, db_appointment: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity."""
        return DomainAppointment(
            id=db_appointment.id,
            patient_name=db_appointment.patient_name,
            doctor_id=db_appointment.doctor_id,
            appointment_time=db_appointment.appointment_time,
            reason_for_visit=db_appointment.reason_for_visit,
            status=db_appointment.status,
            duration_minutes=db_appointment.duration_minutes,
            clinic_room=db_appointment.clinic_room,
        )
