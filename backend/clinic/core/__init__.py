# Core package initialization
# Shared configuration, logging, clock and error types

from . import clock, config, exceptions, validation

__all__ = [
    "clock",
    "config",
    "exceptions",
    "validation",
]
