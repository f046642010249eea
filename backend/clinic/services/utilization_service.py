"""
Weekly utilization reports per specialty.

Both reports cover the ISO week containing "now" in the anchor timezone
(Monday 00:00 inclusive to the next Monday 00:00 exclusive) and fold over
the matching appointments in a single pass.
"""

import logging
import time
from datetime import datetime
from typing import Iterable, Optional, Tuple

from clinic.core.clock import Clock, system_clock
from clinic.core.logging_config import log_performance
from clinic.domain.entities import Appointment, AppointmentStatus, Specialty
from clinic.domain.interfaces import IUnitOfWork
from clinic.domain.rules import iso_week_window
from clinic.schemas.dtos import PerformanceSummary

logger = logging.getLogger(__name__)


def total_scheduled_minutes(appointments: Iterable[Appointment]) -> int:
    return sum(a.duration_minutes for a in appointments if a.is_scheduled)


def count_outcomes(appointments: Iterable[Appointment]) -> PerformanceSummary:
    """Count Completed and Cancelled appointments in one pass."""
    completed = cancelled = 0
    for appointment in appointments:
        if appointment.status == AppointmentStatus.COMPLETED:
            completed += 1
        elif appointment.status == AppointmentStatus.CANCELLED:
            cancelled += 1
    return PerformanceSummary(completed=completed, cancelled=cancelled)


class UtilizationAggregator:
    """Read-only reporting over doctors joined to their appointments."""

    def __init__(self, uow: IUnitOfWork, clock: Clock = system_clock):
        self.uow = uow
        self.clock = clock

    def current_week(self, now: Optional[Clock] = None) -> Tuple[datetime, datetime]:
        return iso_week_window((now or self.clock)())

    def weekly_specialty_utilization(
        self, specialty: str, now: Optional[Clock] = None
    ) -> int:
        """Minutes booked (status Scheduled) this week for doctors of ``specialty``.

        Returns 0 when nothing matches, including unknown specialties.
        """
        started = time.perf_counter()
        window_start, window_end = self.current_week(now)
        appointments = self.uow.run_atomic(
            lambda tx: tx.appointments.list_for_specialty(
                _specialty_name(specialty),
                window_start,
                window_end,
                status=AppointmentStatus.SCHEDULED,
            )
        )
        minutes = total_scheduled_minutes(appointments)
        log_performance(
            "weekly_specialty_utilization",
            (time.perf_counter() - started) * 1000,
            specialty=_specialty_name(specialty),
            week_start=window_start.date().isoformat(),
            total_minutes=minutes,
        )
        return minutes

    def weekly_specialty_performance(
        self, specialty: str, now: Optional[Clock] = None
    ) -> PerformanceSummary:
        """Completed and Cancelled counts this week for doctors of ``specialty``."""
        started = time.perf_counter()
        window_start, window_end = self.current_week(now)
        appointments = self.uow.run_atomic(
            lambda tx: tx.appointments.list_for_specialty(
                _specialty_name(specialty), window_start, window_end
            )
        )
        summary = count_outcomes(appointments)
        log_performance(
            "weekly_specialty_performance",
            (time.perf_counter() - started) * 1000,
            specialty=_specialty_name(specialty),
            week_start=window_start.date().isoformat(),
            completed=summary.completed,
            cancelled=summary.cancelled,
        )
        return summary


def _specialty_name(specialty) -> str:
    if isinstance(specialty, Specialty):
        return specialty.value
    return str(specialty)
