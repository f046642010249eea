"""
Doctor registry service following SOLID principles.
"""

import logging
from typing import List, Optional

from clinic.core.exceptions import StoreError
from clinic.domain.entities import Doctor
from clinic.domain.interfaces import IStoreTransaction, IUnitOfWork
from clinic.domain.rules import evaluate_doctor, normalize_email, normalize_phone
from clinic.schemas.dtos import AdmissionResult, DoctorCreateRequest

logger = logging.getLogger(__name__)

FAILURE_PREFIX = "Doctor Insertion FAILED."


class DoctorRegistry:
    """Application service that validates and admits doctor records.

    Admission runs every rule and reports all failures together; the
    duplicate-email check and the insert share one atomic store operation,
    so either the full record is written or nothing is.
    """

    def __init__(self, uow: IUnitOfWork):
        self.uow = uow

    def admit_doctor(self, request: DoctorCreateRequest) -> AdmissionResult:
        email = normalize_email(request.email)

        def check_and_insert(tx: IStoreTransaction) -> AdmissionResult:
            validation = evaluate_doctor(request, email_taken=tx.doctors.email_exists(email))
            if not validation.is_valid:
                return AdmissionResult.rejected(FAILURE_PREFIX, validation)

            doctor = tx.doctors.add(
                Doctor(
                    first_name=request.first_name.strip(),
                    last_name=request.last_name.strip(),
                    specialty=str(getattr(request.specialty, "value", request.specialty)),
                    phone_number=normalize_phone(request.phone_number),
                    email=email,
                    shift_start=request.shift_start,
                    shift_end=request.shift_end,
                )
            )
            return AdmissionResult.accepted(
                doctor.id, f"Doctor Insertion SUCCESSFUL for: {doctor.last_name}"
            )

        try:
            result = self.uow.run_atomic(
                check_and_insert, lock_key=f"doctor-email:{email}"
            )
        except StoreError:
            logger.error(
                "Doctor admission failed in the store",
                extra={"context": {"email": email}},
                exc_info=True,
            )
            raise

        if result.success:
            logger.info(
                "Doctor admitted",
                extra={"context": {"doctor_id": result.entity_id, "specialty": str(request.specialty)}},
            )
        else:
            logger.warning(
                "Doctor admission rejected",
                extra={"context": {"codes": result.codes, "email": email}},
            )
        return result

    def get_doctor(self, doctor_id: int) -> Optional[Doctor]:
        return self.uow.run_atomic(lambda tx: tx.doctors.get_by_id(doctor_id))

    def list_doctors(self) -> List[Doctor]:
        return self.uow.run_atomic(lambda tx: tx.doctors.list_all())

    def count_doctors(self) -> int:
        return self.uow.run_atomic(lambda tx: tx.doctors.count())
