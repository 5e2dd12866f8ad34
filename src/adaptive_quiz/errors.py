"""
adaptive_quiz.errors — Custom exception classes
===============================================

Defines the exception hierarchy for the quiz engine.
Generator errors store full context for structured logging.

Only session lookup errors ever reach the caller of ``QuizEngine``.
Generator and signal errors are caught by the engine, retried or
degraded, and leave the session state untouched.
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from .error_formatter import format_error_block


class QuizEngineError(Exception):
    """Base exception for all adaptive_quiz errors."""
    pass


class GeneratorUnavailableError(QuizEngineError):
    """Raised when the external generator cannot be reached or crashes."""

    def __init__(
        self,
        callback_name: str,
        input_payload: Dict[str, Any],
        reason: str = "generator call failed",
        deadline_seconds: Optional[float] = None,
    ):
        self.callback_name = callback_name
        self.input_payload = input_payload
        self.reason = reason
        self.deadline_seconds = deadline_seconds
        super().__init__(f"Generator '{callback_name}' unavailable: {reason}")

    def format_error_log(self) -> str:
        return format_error_block(
            error_type="GENERATOR_UNAVAILABLE",
            callback_name=self.callback_name,
            deadline_seconds=self.deadline_seconds,
            input_payload=self.input_payload,
            output_payload=None,
            validation_errors=[self.reason],
        )


class GeneratorTimeoutError(GeneratorUnavailableError):
    """Raised when a generator call exceeds its deadline."""

    def __init__(
        self,
        callback_name: str,
        deadline_seconds: float,
        input_payload: Dict[str, Any],
    ):
        super().__init__(
            callback_name=callback_name,
            input_payload=input_payload,
            reason=f"timed out after {deadline_seconds} seconds",
            deadline_seconds=deadline_seconds,
        )

    def format_error_log(self) -> str:
        return format_error_block(
            error_type="GENERATOR_TIMEOUT",
            callback_name=self.callback_name,
            deadline_seconds=self.deadline_seconds,
            input_payload=self.input_payload,
            output_payload=None,
            validation_errors=None,
        )


class MalformedToolOutputError(QuizEngineError):
    """Raised when generator output is not a dict or fails its schema."""

    def __init__(
        self,
        callback_name: str,
        input_payload: Dict[str, Any],
        output_payload: Any,
        validation_errors: List[str],
    ):
        self.callback_name = callback_name
        self.input_payload = input_payload
        self.output_payload = output_payload
        self.validation_errors = validation_errors
        super().__init__(
            f"Generator '{callback_name}' output failed validation: {validation_errors}"
        )

    def format_error_log(self) -> str:
        output = self.output_payload
        if not isinstance(output, dict):
            output = {"raw_output": repr(output), "type": type(output).__name__}
        return format_error_block(
            error_type="MALFORMED_TOOL_OUTPUT",
            callback_name=self.callback_name,
            deadline_seconds=None,
            input_payload=self.input_payload,
            output_payload=output,
            validation_errors=self.validation_errors,
        )


class InvalidPlayerSignalError(QuizEngineError):
    """Raised when a player signal cannot be classified."""

    def __init__(self, signal: Any, reason: str = "ambiguous intent"):
        self.signal = signal
        self.reason = reason
        super().__init__(f"Invalid player signal {signal!r}: {reason}")


class InvariantViolationError(QuizEngineError):
    """Describes an invariant the generator broke and the engine repaired.

    Recorded as telemetry; never raised to the player.
    """

    def __init__(self, invariant: str, details: Dict[str, Any]):
        self.invariant = invariant
        self.details = details
        super().__init__(f"Invariant '{invariant}' violated: {details}")


class SessionNotFoundError(QuizEngineError):
    """Raised when a session id is unknown to the engine."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Unknown session: {session_id}")


class SessionFinishedError(QuizEngineError):
    """Raised when a turn is submitted to a finished session."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session {session_id} is finished")
