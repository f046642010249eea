from __future__ import annotations

from datetime import datetime, time
from typing import List, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .session import Base


class Doctor(Base):
    """Doctor model: identity, specialty and daily shift window"""

    __tablename__ = "doctors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    first_name: Mapped[str] = mapped_column(String(50), nullable=False)
    last_name: Mapped[str] = mapped_column(String(50), nullable=False)
    specialty: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    phone_number: Mapped[str] = mapped_column(String(15), nullable=False)
    email: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    shift_start: Mapped[time] = mapped_column(Time, nullable=False)
    shift_end: Mapped[time] = mapped_column(Time, nullable=False)

    appointments: Mapped[List["Appointment"]] = relationship(
        "Appointment", back_populates="doctor"
    )

    __table_args__ = (
        CheckConstraint("shift_start < shift_end", name="ck_doctors_shift_order"),
    )

    def __repr__(self):
        return f"<Doctor(id={self.id}, last_name='{self.last_name}', specialty='{self.specialty}')>"


class Appointment(Base):
    """Appointment model booked against a doctor's shift"""

    __tablename__ = "appointments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    patient_name: Mapped[str] = mapped_column(String(100), nullable=False)
    doctor_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("doctors.id"), nullable=False
    )
    # Naive wall-clock time in the configured anchor timezone
    appointment_time: Mapped[datetime] = mapped_column(
        DateTime(timezone=False), nullable=False
    )
    reason_for_visit: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="Scheduled"
    )  # Scheduled, Cancelled, Completed
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    clinic_room: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)

    doctor: Mapped["Doctor"] = relationship("Doctor", back_populates="appointments")

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="ck_appointments_duration"),
        Index("ix_appointments_doctor_time", "doctor_id", "appointment_time"),
    )

    def __repr__(self):
        return (
            f"<Appointment(id={self.id}, doctor_id={self.doctor_id}, "
            f"time={self.appointment_time}, status='{self.status}')>"
        )
