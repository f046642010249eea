"""
Appointment scheduler service following SOLID principles.
"""

import logging
from typing import List, Optional

from clinic.core.clock import Clock, system_clock
from clinic.core.exceptions import InvalidStatusTransition, StoreError
from clinic.domain.entities import Appointment, AppointmentStatus
from clinic.domain.interfaces import IStoreTransaction, IUnitOfWork
from clinic.domain.rules import appointment_end, evaluate_appointment
from clinic.schemas.dtos import AdmissionResult, AppointmentCreateRequest

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Appointment Scheduling FAILED."


class AppointmentScheduler:
    """Application service for appointment admission.

    Business Rules (all evaluated, all failures reported):
    - Doctor must exist
    - Appointment must start at least 30 minutes after "now"
    - Duration must be a positive multiple of 15 minutes
    - Appointment must fit inside the doctor's shift on its day
    - No overlap with the doctor's other Scheduled appointments that day
    - Reason for visit and patient name must not be blank

    The shift lookup, the conflict check and the insert run in one atomic
    store operation holding a per-doctor lock.
    """

    def __init__(self, uow: IUnitOfWork, clock: Clock = system_clock):
        self.uow = uow
        self.clock = clock

    def schedule_appointment(
        self, request: AppointmentCreateRequest, now: Optional[Clock] = None
    ) -> AdmissionResult:
        current_time = (now or self.clock)()
        start = request.appointment_time
        end = appointment_end(start, request.duration_minutes)

        def check_and_insert(tx: IStoreTransaction) -> AdmissionResult:
            shift = tx.doctors.get_shift(request.doctor_id, for_update=True)
            has_conflict = False
            if shift is not None and end is not None:
                has_conflict = tx.appointments.has_conflict(
                    request.doctor_id, start.date(), start, end
                )

            validation = evaluate_appointment(
                request, now=current_time, shift=shift, has_conflict=has_conflict
            )
            if not validation.is_valid:
                return AdmissionResult.rejected(FAILURE_PREFIX, validation)

            appointment = tx.appointments.add(
                Appointment(
                    patient_name=request.patient_name.strip(),
                    doctor_id=request.doctor_id,
                    appointment_time=start,
                    reason_for_visit=request.reason_for_visit.strip(),
                    duration_minutes=request.duration_minutes,
                    status=AppointmentStatus.SCHEDULED,
                    clinic_room=request.clinic_room,
                )
            )
            return AdmissionResult.accepted(
                appointment.id,
                f"Appointment SUCCESSFUL for {appointment.patient_name} "
                f"with Doctor {appointment.doctor_id}",
            )

        try:
            result = self.uow.run_atomic(
                check_and_insert, lock_key=f"doctor:{request.doctor_id}"
            )
        except StoreError:
            logger.error(
                "Appointment admission failed in the store",
                extra={"context": {"doctor_id": request.doctor_id}},
                exc_info=True,
            )
            raise

        if result.success:
            logger.info(
                "Appointment scheduled",
                extra={
                    "context": {
                        "appointment_id": result.entity_id,
                        "doctor_id": request.doctor_id,
                        "start": start.isoformat(),
                        "duration_minutes": request.duration_minutes,
                    }
                },
            )
        else:
            logger.warning(
                "Appointment admission rejected",
                extra={
                    "context": {"doctor_id": request.doctor_id, "codes": result.codes}
                },
            )
        return result

    def complete_appointment(self, appointment_id: int) -> bool:
        """Mark a Scheduled appointment as Completed."""
        return self._transition(appointment_id, AppointmentStatus.COMPLETED)

    def cancel_appointment(self, appointment_id: int) -> bool:
        """Mark a Scheduled appointment as Cancelled."""
        return self._transition(appointment_id, AppointmentStatus.CANCELLED)

    def _transition(self, appointment_id: int, target: AppointmentStatus) -> bool:
        def apply(tx: IStoreTransaction) -> bool:
            appointment = tx.appointments.get_by_id(appointment_id)
            if not appointment:
                return False
            if appointment.status != AppointmentStatus.SCHEDULED:
                raise InvalidStatusTransition(
                    appointment_id, appointment.status.value, target.value
                )
            return tx.appointments.set_status(appointment_id, target)

        changed = self.uow.run_atomic(apply)
        if changed:
            logger.info(
                f"Appointment {target.value.lower()}",
                extra={"context": {"appointment_id": appointment_id}},
            )
        return changed

    def get_appointment(self, appointment_id: int) -> Optional[Appointment]:
        return self.uow.run_atomic(lambda tx: tx.appointments.get_by_id(appointment_id))

    def list_appointments(self, doctor_id: Optional[int] = None) -> List[Appointment]:
        """All appointments, newest first, optionally for one doctor."""
        return self.uow.run_atomic(lambda tx: tx.appointments.list_all(doctor_id))

    def count_appointments(self) -> int:
        return self.uow.run_atomic(lambda tx: tx.appointments.count())
