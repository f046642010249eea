"""
Common validation utilities for the clinic backend.

Two concerns live here:
- ValidationResult, the accumulate-all container used by the admission
  rules (every failed rule appends, nothing short-circuits).
- Payload parsers used by the HTTP and CLI front ends to turn raw JSON /
  string input into typed values before the services see them.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Dict, List, Optional

from clinic.core.clock import to_anchor

logger = logging.getLogger(__name__)

# Range of the integer columns (BIGINT on PostgreSQL, INTEGER on SQLite)
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


@dataclass(frozen=True)
class Violation:
    """One failed business rule: a stable code plus its human message."""

    code: str
    message: str


class ValidationResult:
    """Container for validation results."""

    def __init__(self):
        self.violations: List[Violation] = []

    @property
    def is_valid(self) -> bool:
        return not self.violations

    @property
    def errors(self) -> List[str]:
        return [v.message for v in self.violations]

    @property
    def codes(self) -> List[str]:
        return [v.code for v in self.violations]

    def add_error(self, code: str, message: str):
        """Add validation error."""
        self.violations.append(Violation(code=code, message=message))
        logger.debug(f"Validation error: {code}: {message}")

    def summary(self) -> str:
        """All messages joined in the order they were recorded."""
        return " ".join(self.errors)


class PayloadParser:
    """Parse loosely typed request payloads (JSON bodies, CLI options)."""

    def __init__(self, data: Any):
        self.result = ValidationResult()
        if data is not None and not isinstance(data, dict):
            self.result.add_error("PAYLOAD", "Request body must be a JSON object")
            data = None
        self.data: Dict[str, Any] = data or {}

    def required(self, field_name: str) -> Any:
        """Return the raw value, recording an error when the key is missing."""
        if field_name not in self.data or self.data[field_name] is None:
            self.result.add_error("PAYLOAD", f"{field_name} is required")
            return None
        return self.data[field_name]

    def optional_string(self, field_name: str) -> Optional[str]:
        value = self.data.get(field_name)
        if value is None:
            return None
        return str(value)

    def string(self, field_name: str) -> Optional[str]:
        value = self.required(field_name)
        if value is None:
            return None
        return str(value)

    def integer(self, field_name: str, default: Optional[int] = None) -> Optional[int]:
        """Validate and convert integer field."""
        value = self.data.get(field_name)
        if value is None or value == "":
            if default is not None:
                return default
            self.result.add_error("PAYLOAD", f"{field_name} is required")
            return None
        if isinstance(value, bool):
            self.result.add_error("PAYLOAD", f"{field_name} must be an integer")
            return None
        try:
            number = int(value)
        except (ValueError, TypeError, OverflowError):
            self.result.add_error("PAYLOAD", f"{field_name} must be an integer")
            return None
        if not INT64_MIN <= number <= INT64_MAX:
            self.result.add_error("PAYLOAD", f"{field_name} is out of range")
            return None
        return number

    def time_of_day(self, field_name: str) -> Optional[time]:
        """Accept HH:MM or HH:MM:SS strings (or time objects)."""
        value = self.required(field_name)
        if value is None:
            return None
        if isinstance(value, time):
            value = value.isoformat()
        try:
            parsed = time.fromisoformat(str(value).strip())
        except ValueError:
            self.result.add_error(
                "PAYLOAD", f"{field_name} must be a time in HH:MM or HH:MM:SS format"
            )
            return None
        if parsed.tzinfo is not None:
            # Shifts are wall-clock times in the clinic timezone
            self.result.add_error("PAYLOAD", f"{field_name} must not carry a UTC offset")
            return None
        return parsed

    def date_time(self, field_name: str) -> Optional[datetime]:
        """Accept ISO 8601 date-time strings (or datetime objects)."""
        value = self.required(field_name)
        if value is None:
            return None
        try:
            parsed = (
                value
                if isinstance(value, datetime)
                else datetime.fromisoformat(str(value).strip())
            )
            return to_anchor(parsed)
        except (ValueError, OverflowError):
            self.result.add_error(
                "PAYLOAD", f"{field_name} must be an ISO 8601 date-time"
            )
            return None
