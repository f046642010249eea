"""
Time source for admission and report calls.

A clock is any zero-argument callable returning the current time as a naive
datetime in the anchor timezone (``config.APP_TZ``). Services accept one at
construction and per call so tests can pin "now".
"""

from datetime import datetime
from typing import Callable

from clinic.core import config

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    """Current wall-clock time in the anchor timezone, without tzinfo."""
    return datetime.now(config.APP_TZ).replace(tzinfo=None)


def fixed_clock(moment: datetime) -> Clock:
    """Return a clock frozen at ``moment`` (normalized to the anchor zone)."""
    frozen = to_anchor(moment)
    return lambda: frozen


def to_anchor(value: datetime) -> datetime:
    """Convert an aware datetime to naive anchor-zone time; naive values pass through."""
    if value.tzinfo is None:
        return value
    return value.astimezone(config.APP_TZ).replace(tzinfo=None)
