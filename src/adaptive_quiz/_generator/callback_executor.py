# Area: Generator
"""
adaptive_quiz._generator.callback_executor — Safe generator execution
=====================================================================

Wraps a generator callback with deadline enforcement, a dict check and
schema validation. Every failure is converted into one of two errors
the engine knows how to retry:

- GeneratorUnavailableError: the call raised or overran its deadline
- MalformedToolOutputError: the call returned something unusable
"""

from __future__ import annotations
from typing import Any, Callable, Dict, Optional
import logging

from ..errors import (
    GeneratorTimeoutError,
    GeneratorUnavailableError,
    MalformedToolOutputError,
)
from .timeout import run_with_deadline
from .validator import validate_output

logger = logging.getLogger("adaptive_quiz.executor")


def execute_generator(
    callback_fn: Callable[[Dict[str, Any]], Dict[str, Any]],
    callback_name: str,
    ctx: Dict[str, Any],
    deadline_seconds: Optional[float],
) -> Dict[str, Any]:
    """Execute a generator callback with deadline and validation.

    Raises:
        GeneratorTimeoutError: Deadline exceeded
        GeneratorUnavailableError: The callback raised
        MalformedToolOutputError: Non-dict output or schema failure
    """
    logger.debug(f"[GENERATOR] Executing {callback_name} (timeout={deadline_seconds}s)")

    # ── Step 1: Execute with deadline ─────────────────────────
    try:
        result = run_with_deadline(callback_fn, ctx, deadline_seconds, callback_name)
    except GeneratorTimeoutError:
        raise
    except Exception as e:
        raise GeneratorUnavailableError(
            callback_name=callback_name,
            input_payload=ctx,
            reason=f"{type(e).__name__}: {e}",
            deadline_seconds=deadline_seconds,
        ) from e

    # ── Step 2: Validate return type and schema ───────────────
    validation_errors = validate_output(callback_name, result)
    if validation_errors:
        raise MalformedToolOutputError(
            callback_name=callback_name,
            input_payload=ctx,
            output_payload=result,
            validation_errors=validation_errors,
        )

    logger.debug(f"[GENERATOR] {callback_name} completed successfully")
    return result
