# Services package initialization
# Application services: doctor registry, appointment scheduler, weekly reports

from .appointment_service import AppointmentScheduler
from .doctor_service import DoctorRegistry
from .utilization_service import UtilizationAggregator

__all__ = ["AppointmentScheduler", "DoctorRegistry", "UtilizationAggregator"]
