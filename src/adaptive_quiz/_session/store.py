# Area: Session
"""
adaptive_quiz._session.store — Keyed session store
==================================================

Holds one SessionRecord per session id. Each record carries its own
lock; the engine holds it for a whole turn so turns for the same
session are serialized while different sessions run independently.
"""

from __future__ import annotations
import threading
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from ..errors import SessionNotFoundError
from .compactor import TranscriptEntry
from .state import SessionState, SessionSummary


@dataclass
class SessionRecord:
    """Everything the engine keeps for one session."""
    state: SessionState
    transcript: List[TranscriptEntry] = field(default_factory=list)
    consecutive_failures: int = 0
    summary: Optional[SessionSummary] = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)


class SessionStore:
    """Thread-safe mapping of session id to SessionRecord."""

    def __init__(self):
        self._records: Dict[str, SessionRecord] = {}
        self._lock = threading.Lock()

    def add(self, state: SessionState) -> SessionRecord:
        record = SessionRecord(state=state)
        with self._lock:
            if state.session_id in self._records:
                raise ValueError(f"Session already exists: {state.session_id}")
            self._records[state.session_id] = record
        return record

    def get(self, session_id: str) -> SessionRecord:
        """
        Raises:
            SessionNotFoundError: If the id is unknown
        """
        with self._lock:
            record = self._records.get(session_id)
        if record is None:
            raise SessionNotFoundError(session_id)
        return record

    def remove(self, session_id: str) -> SessionRecord:
        with self._lock:
            record = self._records.pop(session_id, None)
        if record is None:
            raise SessionNotFoundError(session_id)
        return record

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)

    def __iter__(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._records))
