# Area: Shared
"""
Shared utilities used by the session and generator layers.

This package contains:
- Logging configuration
- Telemetry event recording
"""

from .logging_config import (
    setup_logging,
    log_generator_error,
)
from .telemetry import (
    TelemetryEvent,
    TelemetryRecorder,
    get_telemetry,
)

__all__ = [
    "setup_logging",
    "log_generator_error",
    "TelemetryEvent",
    "TelemetryRecorder",
    "get_telemetry",
]
