"""
Doctor repository implementation following SOLID principles.

Runs inside a transaction owned by SqlAlchemyUnitOfWork: writes are
flushed to obtain generated ids but never committed here.
"""

from typing import List, Optional

from sqlalchemy import func, select

from clinic.db.base import Doctor as DbDoctor
from clinic.domain.entities import Doctor as DomainDoctor
from clinic.domain.entities import ShiftWindow
from clinic.domain.interfaces import IDoctorRepository


class DoctorRepository(IDoctorRepository):
    """Repository for Doctor persistence operations."""

    def __init__(self, db_session) -> None:
        self.db = db_session

    def get_by_id(self, doctor_id: int) -> Optional[DomainDoctor]:
        db_doctor = self.db.get(DbDoctor, doctor_id)
        return self._to_domain(db_doctor) if db_doctor else None

    def get_shift(self, doctor_id: int, for_update: bool = False) -> Optional[ShiftWindow]:
        """Fetch only the shift columns; ``for_update`` row-locks the doctor
        on backends that support SELECT ... FOR UPDATE."""
        stmt = select(DbDoctor.shift_start, DbDoctor.shift_end).where(
            DbDoctor.id == doctor_id
        )
        if for_update:
            stmt = stmt.with_for_update()
        row = self.db.execute(stmt).first()
        if row is None:
            return None
        return ShiftWindow(start=row.shift_start, end=row.shift_end)

    def email_exists(self, email: str) -> bool:
        stmt = select(DbDoctor.id).where(func.lower(DbDoctor.email) == email.lower())
        return self.db.execute(stmt.limit(1)).first() is not None

    def list_all(self) -> List[DomainDoctor]:
        db_doctors = self.db.scalars(select(DbDoctor).order_by(DbDoctor.id)).all()
        return [self._to_domain(d) for d in db_doctors]

    def count(self) -> int:
        return self.db.scalar(select(func.count()).select_from(DbDoctor)) or 0

    def add(self, doctor: DomainDoctor) -> DomainDoctor:
        db_doctor = DbDoctor(
            first_name=doctor.first_name,
            last_name=doctor.last_name,
            specialty=doctor.specialty,
            phone_number=doctor.phone_number,
            email=doctor.email,
            shift_start=doctor.shift_start,
            shift_end=doctor.shift_end,
        )
        self.db.add(db_doctor)
        self.db.flush()
        return self._to_domain(db_doctor)

    def _to_domain(self, db_doctor: DbDoctor) -> DomainDoctor:
        """Convert database model to domain entity."""
        return DomainDoctor(
            id=db_doctor.id,
            first_name=db_doctor.first_name,
            last_name=db_doctor.last_name,
            specialty=db_doctor.specialty,
            phone_number=db_doctor.phone_number,
            email=db_doctor.email,
            shift_start=db_doctor.shift_start,
            shift_end=db_doctor.shift_end,
        )
