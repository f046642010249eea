"""
Centralized configuration module for application-wide settings.

This module provides the anchor timezone used for every "now" and every
weekly report window, the database location, and the business constants
shared by the admission rules.
"""

import logging
import os
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

# ===========================
# Timezone Configuration
# ===========================


def get_app_timezone() -> ZoneInfo:
    """
    Get the application (anchor) timezone from environment variable.

    Returns:
        ZoneInfo: Application timezone (defaults to UTC if not configured)

    Environment Variables:
        TZ: Timezone identifier (e.g., 'America/New_York', 'UTC')
            Default: 'UTC'

    Appointment times are stored as naive wall-clock values in this zone,
    and the ISO week used by the weekly reports starts on Monday 00:00 here.
    """
    tz_name = os.getenv("TZ", "UTC")

    try:
        return ZoneInfo(tz_name)
    except Exception as e:
        logger.warning(
            f"Invalid timezone '{tz_name}' specified in TZ environment variable. "
            f"Falling back to UTC. Error: {e}"
        )
        return ZoneInfo("UTC")


# Global timezone instance - initialized once at import time
APP_TZ = get_app_timezone()


def log_timezone_config():
    """Log the active timezone configuration at startup."""
    logger.info(
        "Timezone configuration initialized",
        extra={
            "context": {
                "timezone": str(APP_TZ),
                "tz_env_var": os.getenv("TZ", "UTC"),
            }
        },
    )


# ===========================
# Database / Logging
# ===========================


def get_database_url() -> str:
    """Return DATABASE_URL, defaulting to a local SQLite file."""
    return os.getenv("DATABASE_URL", "sqlite:///./clinic.db")


def get_log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").upper()


def get_log_to_file() -> bool:
    """Whether rotating file handlers are enabled (LOG_TO_FILE, default true)."""
    return os.getenv("LOG_TO_FILE", "true").lower() in ("true", "1", "yes")


# ===========================
# Scheduling Rules
# ===========================

MIN_SHIFT_HOURS = 4
MIN_LEAD_MINUTES = 30
SLOT_MINUTES = 15
DEFAULT_DURATION_MINUTES = 30
MAX_DURATION_MINUTES = 24 * 60
PHONE_DIGITS = 10
PHONE_SEPARATORS = "-. ()"
