"""
Integration tests for the SQLAlchemy repositories and unit of work
against an in-memory SQLite database.
"""

import threading
from datetime import date, datetime, time

import pytest

from clinic.core.exceptions import StoreError
from clinic.domain.entities import Appointment, AppointmentStatus, Doctor
from clinic.repositories import AppointmentRepository, DoctorRepository
from clinic.repositories.unit_of_work import KeyedLocks, SqlAlchemyUnitOfWork
from clinic.services import AppointmentScheduler


def _doctor(email="jane@x.com", specialty="Pediatrics", **overrides):
    data = dict(
        first_name="Jane",
        last_name="Smith",
        specialty=specialty,
        phone_number="5551234567",
        email=email,
        shift_start=time(8, 0),
        shift_end=time(17, 0),
    )
    data.update(overrides)
    return Doctor(**data)


def _appointment(doctor_id, at, duration=30, status=AppointmentStatus.SCHEDULED):
    return Appointment(
        patient_name="Billy Jones",
        doctor_id=doctor_id,
        appointment_time=at,
        reason_for_visit="Check-up",
        duration_minutes=duration,
        status=status,
    )


@pytest.fixture
def doctors(db_session):
    return DoctorRepository(db_session)


@pytest.fixture
def appointments(db_session):
    return AppointmentRepository(db_session)


class TestDoctorRepository:
    def test_add_assigns_id(self, doctors):
        stored = doctors.add(_doctor())

        assert stored.id is not None
        assert doctors.get_by_id(stored.id).email == "jane@x.com"

    def test_get_shift(self, doctors):
        stored = doctors.add(_doctor())

        shift = doctors.get_shift(stored.id, for_update=True)

        assert (shift.start, shift.end) == (time(8, 0), time(17, 0))
        assert doctors.get_shift(999) is None

    def test_email_exists_is_case_insensitive(self, doctors):
        doctors.add(_doctor(email="jane@x.com"))

        assert doctors.email_exists("JANE@X.COM")
        assert not doctors.email_exists("other@x.com")

    def test_list_and_count(self, doctors):
        doctors.add(_doctor(email="a@x.com"))
        doctors.add(_doctor(email="b@x.com"))

        assert doctors.count() == 2
        assert [d.email for d in doctors.list_all()] == ["a@x.com", "b@x.com"]


class TestAppointmentRepository:
    @pytest.fixture
    def doctor_id(self, doctors):
        return doctors.add(_doctor()).id

    def test_add_and_read_back_status(self, appointments, doctor_id):
        stored = appointments.add(_appointment(doctor_id, datetime(2026, 10, 14, 10, 0)))

        loaded = appointments.get_by_id(stored.id)
        assert loaded.status == AppointmentStatus.SCHEDULED
        assert loaded.appointment_time == datetime(2026, 10, 14, 10, 0)

    @pytest.mark.parametrize(
        "start,end,expected",
        [
            ((10, 15), (10, 45), True),
            ((9, 45), (10, 15), True),
            ((10, 30), (11, 0), False),
            ((9, 30), (10, 0), False),
        ],
    )
    def test_has_conflict_half_open(self, appointments, doctor_id, start, end, expected):
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 14, 10, 0)))

        conflict = appointments.has_conflict(
            doctor_id,
            date(2026, 10, 14),
            datetime(2026, 10, 14, *start),
            datetime(2026, 10, 14, *end),
        )

        assert conflict is expected

    def test_has_conflict_ignores_non_scheduled(self, appointments, doctor_id):
        appointments.add(
            _appointment(
                doctor_id, datetime(2026, 10, 14, 10, 0), status=AppointmentStatus.CANCELLED
            )
        )

        assert not appointments.has_conflict(
            doctor_id,
            date(2026, 10, 14),
            datetime(2026, 10, 14, 10, 0),
            datetime(2026, 10, 14, 10, 30),
        )

    def test_has_conflict_ignores_other_doctors(self, appointments, doctors, doctor_id):
        other = doctors.add(_doctor(email="other@x.com")).id
        appointments.add(_appointment(other, datetime(2026, 10, 14, 10, 0)))

        assert not appointments.has_conflict(
            doctor_id,
            date(2026, 10, 14),
            datetime(2026, 10, 14, 10, 0),
            datetime(2026, 10, 14, 10, 30),
        )

    def test_list_for_specialty_window_and_status(self, appointments, doctors, doctor_id):
        cardiologist = doctors.add(_doctor(email="c@x.com", specialty="Cardiology")).id
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 12, 0, 0)))
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 18, 23, 30)))
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 19, 0, 0)))
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 11, 23, 30)))
        appointments.add(
            _appointment(
                doctor_id, datetime(2026, 10, 15, 9, 0), status=AppointmentStatus.CANCELLED
            )
        )
        appointments.add(_appointment(cardiologist, datetime(2026, 10, 14, 9, 0)))

        window = (datetime(2026, 10, 12), datetime(2026, 10, 19))
        every_status = appointments.list_for_specialty("Pediatrics", *window)
        scheduled = appointments.list_for_specialty(
            "Pediatrics", *window, status=AppointmentStatus.SCHEDULED
        )

        assert len(every_status) == 3
        assert sorted(a.appointment_time for a in scheduled) == [
            datetime(2026, 10, 12, 0, 0),
            datetime(2026, 10, 18, 23, 30),
        ]

    def test_set_status(self, appointments, doctor_id):
        stored = appointments.add(_appointment(doctor_id, datetime(2026, 10, 14, 10, 0)))

        assert appointments.set_status(stored.id, AppointmentStatus.COMPLETED)
        assert appointments.get_by_id(stored.id).status == AppointmentStatus.COMPLETED
        assert not appointments.set_status(999, AppointmentStatus.CANCELLED)

    def test_list_all_newest_first(self, appointments, doctor_id):
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 14, 9, 0)))
        appointments.add(_appointment(doctor_id, datetime(2026, 10, 15, 9, 0)))

        times = [a.appointment_time for a in appointments.list_all(doctor_id)]

        assert times == [datetime(2026, 10, 15, 9, 0), datetime(2026, 10, 14, 9, 0)]


class TestUnitOfWork:
    def test_commits_on_success(self, uow):
        doctor_id = uow.run_atomic(lambda tx: tx.doctors.add(_doctor()).id)

        assert uow.run_atomic(lambda tx: tx.doctors.get_by_id(doctor_id)) is not None

    def test_rolls_back_on_exception(self, uow):
        def add_then_fail(tx):
            tx.doctors.add(_doctor())
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            uow.run_atomic(add_then_fail)

        assert uow.run_atomic(lambda tx: tx.doctors.count()) == 0

    def test_unique_violation_becomes_store_error(self, uow):
        uow.run_atomic(lambda tx: tx.doctors.add(_doctor()))

        with pytest.raises(StoreError) as exc_info:
            uow.run_atomic(lambda tx: tx.doctors.add(_doctor(first_name="Janet")))

        assert exc_info.value.__cause__ is not None
        assert uow.run_atomic(lambda tx: tx.doctors.count()) == 1

    def test_lock_timeout_raises_store_error(self, session_factory):
        locks = KeyedLocks()
        uow = SqlAlchemyUnitOfWork(session_factory, lock_timeout=0.05, locks=locks)
        held = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("doctor:1", timeout=1):
                held.set()
                release.wait(2)

        thread = threading.Thread(target=holder)
        thread.start()
        try:
            held.wait(1)
            with pytest.raises(StoreError):
                uow.run_atomic(lambda tx: tx.doctors.count(), lock_key="doctor:1")
            # Other keys are not blocked
            assert uow.run_atomic(lambda tx: tx.doctors.count(), lock_key="doctor:2") == 0
        finally:
            release.set()
            thread.join()

        assert len(locks) == 0

    def test_lock_entries_released_after_use(self, session_factory):
        locks = KeyedLocks()
        uow = SqlAlchemyUnitOfWork(session_factory, locks=locks)

        for doctor_id in range(5):
            uow.run_atomic(lambda tx: tx.doctors.count(), lock_key=f"doctor:{doctor_id}")
        with pytest.raises(RuntimeError):
            with locks.hold("doctor:9", timeout=1):
                raise RuntimeError("boom")

        assert len(locks) == 0

    def test_rejected_bookings_leave_no_lock_entries(
        self, session_factory, appointment_request, clock
    ):
        locks = KeyedLocks()
        scheduler = AppointmentScheduler(
            SqlAlchemyUnitOfWork(session_factory, locks=locks), clock=clock
        )

        for doctor_id in range(1000, 1200):
            result = scheduler.schedule_appointment(appointment_request(doctor_id=doctor_id))
            assert not result.success

        assert len(locks) == 0
