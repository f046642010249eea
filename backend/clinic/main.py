import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from clinic.core import config
from clinic.core.api_utils import api_response
from clinic.core.clock import Clock, system_clock
from clinic.core.exceptions import StoreError
from clinic.core.logging_config import setup_logging
from clinic.db.session import create_tables, get_sessionmaker
from clinic.repositories.unit_of_work import SqlAlchemyUnitOfWork
from clinic.schemas.dtos import ErrorResponse
from clinic.services import AppointmentScheduler, DoctorRegistry, UtilizationAggregator

logger = logging.getLogger(__name__)


@dataclass
class ClinicServices:
    """The three application services sharing one store."""

    doctors: DoctorRegistry
    scheduler: AppointmentScheduler
    reports: UtilizationAggregator


def build_services(
    session_factory=None, clock: Clock = system_clock
) -> ClinicServices:
    uow = SqlAlchemyUnitOfWork(session_factory or get_sessionmaker())
    return ClinicServices(
        doctors=DoctorRegistry(uow),
        scheduler=AppointmentScheduler(uow, clock=clock),
        reports=UtilizationAggregator(uow, clock=clock),
    )


def create_app(
    database_url: Optional[str] = None,
    testing: bool = False,
    clock: Clock = system_clock,
) -> Flask:
    # Only load from .env when DATABASE_URL is not already defined
    if database_url is None and not os.getenv("DATABASE_URL"):
        load_dotenv()
    if database_url is not None:
        os.environ["DATABASE_URL"] = database_url

    app = Flask(__name__)
    app.config["TESTING"] = testing
    app.json.sort_keys = False

    setup_logging(
        app,
        log_level=config.get_log_level(),
        log_to_file=config.get_log_to_file() and not testing,
    )
    config.log_timezone_config()

    create_tables()
    app.extensions["clinic"] = build_services(get_sessionmaker(), clock=clock)

    from clinic.controllers import appointment_bp, doctor_bp, health_bp, reports_bp

    app.register_blueprint(doctor_bp)
    app.register_blueprint(appointment_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(health_bp)

    @app.errorhandler(StoreError)
    def handle_store_error(error: StoreError):
        logger.error(
            "Store failure while handling request",
            extra={"context": {"operation": error.operation, "error": error.message}},
        )
        return api_response(False, ErrorResponse.store_error().message, status_code=503)

    @app.errorhandler(404)
    def handle_not_found(error):
        return api_response(False, ErrorResponse.not_found("Resource").message, status_code=404)

    logger.info(
        "Clinic application created",
        extra={"context": {"testing": testing, "timezone": str(config.APP_TZ)}},
    )
    return app


if __name__ == "__main__":
    create_app().run(
        host=os.getenv("HOST", "127.0.0.1"), port=int(os.getenv("PORT", "5000"))
    )
