# Controllers package initialization
# Flask blueprints forming the thin JSON front end over the services

from .appointment_controller import appointment_bp
from .doctor_controller import doctor_bp
from .health_controller import health_bp
from .reports_controller import reports_bp

__all__ = [
    "appointment_bp",
    "doctor_bp",
    "health_bp",
    "reports_bp",
]
