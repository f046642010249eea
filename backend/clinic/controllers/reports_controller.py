"""
Reports controller - weekly utilization and performance per specialty.
"""

import logging

from flask import Blueprint

from clinic.core.api_utils import api_response
from clinic.core.clock import fixed_clock

from .payload_helpers import get_services

logger = logging.getLogger(__name__)

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.route("/utilization/<specialty>", methods=["GET"])
def weekly_utilization(specialty: str):
    """Total Scheduled minutes this ISO week for ``specialty``."""
    reports = get_services().reports
    now = fixed_clock(reports.clock())
    week_start, week_end = reports.current_week(now)
    minutes = reports.weekly_specialty_utilization(specialty, now=now)
    return api_response(
        True,
        f"Weekly utilization for {specialty}",
        {
            "specialty": specialty,
            "week_start": week_start.isoformat(),
            "week_end": week_end.isoformat(),
            "total_minutes": minutes,
        },
    )


@reports_bp.route("/performance/<specialty>", methods=["GET"])
def weekly_performance(specialty: str):
    """Completed and Cancelled counts this ISO week for ``specialty``."""
    reports = get_services().reports
    now = fixed_clock(reports.clock())
    week_start, week_end = reports.current_week(now)
    summary = reports.weekly_specialty_performance(specialty, now=now)
    return api_response(
        True,
        f"Weekly performance for {specialty}",
        {
            "specialty": specialty,
            "week_start": week_start.isoformat(),
            "week_end": week_end.isoformat(),
            "completed_appointments": summary.completed,
            "cancelled_appointments": summary.cancelled,
        },
    )
