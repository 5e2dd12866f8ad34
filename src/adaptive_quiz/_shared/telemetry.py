# Area: Shared
"""
adaptive_quiz._shared.telemetry — Engine telemetry events
=========================================================

Records named engine events (compliance failures, retries, fallbacks,
review mode, finished sessions). Each event is logged on the
``adaptive_quiz.telemetry`` logger and kept in counters plus a bounded
buffer of recent events for inspection.
"""

from __future__ import annotations
import logging
import threading
from collections import Counter, deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

logger = logging.getLogger("adaptive_quiz.telemetry")

# Event names
COMPLIANCE_FAILURE = "compliance_failure"
GENERATOR_RETRY = "generator_retry"
GENERATOR_FALLBACK = "generator_fallback"
MALFORMED_OUTPUT = "malformed_output"
INVALID_SIGNAL = "invalid_signal"
REVIEW_MODE = "review_mode"
SESSION_FINISHED = "session_finished"

# Events logged at WARNING; everything else at INFO
WARNING_EVENTS = {COMPLIANCE_FAILURE, MALFORMED_OUTPUT, GENERATOR_FALLBACK}


@dataclass(frozen=True)
class TelemetryEvent:
    """One recorded event."""
    name: str
    timestamp: str
    session_id: Optional[str] = None
    fields: Dict[str, Any] = field(default_factory=dict)


class TelemetryRecorder:
    """Thread-safe recorder for engine events."""

    def __init__(self, max_recent: int = 200):
        self._lock = threading.Lock()
        self._counts: Counter = Counter()
        self._recent: Deque[TelemetryEvent] = deque(maxlen=max_recent)

    def record(self, name: str, session_id: Optional[str] = None, **fields: Any) -> TelemetryEvent:
        """Record an event and log it."""
        event = TelemetryEvent(
            name=name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            session_id=session_id,
            fields=dict(fields),
        )
        with self._lock:
            self._counts[name] += 1
            self._recent.append(event)

        level = logging.WARNING if name in WARNING_EVENTS else logging.INFO
        logger.log(
            level,
            f"[{session_id or '-'}] {name} {fields}",
            extra={"session_id": session_id, "event": name},
        )
        return event

    def count(self, name: str) -> int:
        with self._lock:
            return self._counts[name]

    def counts(self) -> Dict[str, int]:
        with self._lock:
            return dict(self._counts)

    def recent(self, name: Optional[str] = None) -> List[TelemetryEvent]:
        """Recent events, oldest first, optionally filtered by name."""
        with self._lock:
            events = list(self._recent)
        if name is None:
            return events
        return [e for e in events if e.name == name]

    def reset(self) -> None:
        with self._lock:
            self._counts.clear()
            self._recent.clear()


# Global default instance
_telemetry: Optional[TelemetryRecorder] = None


def get_telemetry() -> TelemetryRecorder:
    """Get or create the process-wide default recorder."""
    global _telemetry
    if _telemetry is None:
        _telemetry = TelemetryRecorder()
    return _telemetry
