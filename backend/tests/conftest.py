"""
Central pytest configuration for the clinic backend tests.

Provides a fixed clock, mock-backed services for unit tests and
SQLite-backed services / Flask app for integration tests.
"""

import os
from datetime import datetime, time

# Test environment (set early so import-time configuration uses it)
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["TZ"] = "UTC"
os.environ["LOG_TO_FILE"] = "false"
os.environ["TESTING"] = "true"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clinic.core.clock import fixed_clock
from clinic.db import base  # noqa: F401  (registers models on Base.metadata)
from clinic.db.session import Base, dispose_engine
from clinic.repositories.unit_of_work import SqlAlchemyUnitOfWork
from clinic.schemas.dtos import AppointmentCreateRequest, DoctorCreateRequest
from clinic.services import AppointmentScheduler, DoctorRegistry, UtilizationAggregator
from tests.config.markers import pytest_collection_modifyitems, pytest_configure  # noqa: F401
from tests.factories.repository_factories import (
    AppointmentRepositoryFactory,
    DoctorRepositoryFactory,
    UnitOfWorkFactory,
)

# Wednesday; the current ISO week runs 2026-10-12 00:00 to 2026-10-19 00:00
FIXED_NOW = datetime(2026, 10, 14, 8, 0)


# =====================================================
# CLOCK / REQUEST BUILDERS
# =====================================================


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock(now):
    return fixed_clock(now)


def make_doctor_request(**overrides) -> DoctorCreateRequest:
    data = dict(
        first_name="Jane",
        last_name="Smith",
        specialty="Pediatrics",
        phone_number="5551234567",
        email="jane@x.com",
        shift_start=time(8, 0),
        shift_end=time(17, 0),
    )
    data.update(overrides)
    return DoctorCreateRequest(**data)


def make_appointment_request(**overrides) -> AppointmentCreateRequest:
    data = dict(
        patient_name="Billy Jones",
        doctor_id=1,
        appointment_time=datetime(2026, 10, 14, 10, 0),
        reason_for_visit="Routine check-up for cough",
        duration_minutes=30,
    )
    data.update(overrides)
    return AppointmentCreateRequest(**data)


@pytest.fixture
def doctor_request():
    return make_doctor_request


@pytest.fixture
def appointment_request():
    return make_appointment_request


# =====================================================
# MOCK STORE (unit tests)
# =====================================================


@pytest.fixture
def mock_doctor_repo():
    return DoctorRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_appointment_repo():
    return AppointmentRepositoryFactory.create_mock_full()


@pytest.fixture
def mock_uow(mock_doctor_repo, mock_appointment_repo):
    return UnitOfWorkFactory.create_mock(mock_doctor_repo, mock_appointment_repo)


# =====================================================
# SQLITE STORE (integration tests)
# =====================================================


@pytest.fixture
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(
        autocommit=False, autoflush=False, expire_on_commit=False, bind=db_engine
    )


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def uow(session_factory):
    return SqlAlchemyUnitOfWork(session_factory)


@pytest.fixture
def registry(uow):
    return DoctorRegistry(uow)


@pytest.fixture
def scheduler(uow, clock):
    return AppointmentScheduler(uow, clock=clock)


@pytest.fixture
def aggregator(uow, clock):
    return UtilizationAggregator(uow, clock=clock)


# =====================================================
# FLASK APP
# =====================================================


@pytest.fixture
def app(clock):
    from clinic.main import create_app

    dispose_engine()
    flask_app = create_app(database_url="sqlite:///:memory:", testing=True, clock=clock)
    try:
        yield flask_app
    finally:
        dispose_engine()


@pytest.fixture
def client(app):
    return app.test_client()
