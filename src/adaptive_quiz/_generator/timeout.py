# Area: Generator
"""
adaptive_quiz._generator.timeout — Generator deadline enforcement
=================================================================

Runs a generator callback on a daemon worker thread and waits for it
up to a wall-clock deadline. Works from any thread, so several
sessions can be driven concurrently.

A call that overruns is abandoned: its thread keeps running until the
callback returns, but its result is discarded and never reaches the
session state.
"""

from __future__ import annotations
import threading
from typing import Any, Callable, Dict, Optional

from ..errors import GeneratorTimeoutError


class _CallThread(threading.Thread):
    """Worker thread holding one callback's result or exception."""

    def __init__(self, fn: Callable[[Dict[str, Any]], Any], ctx: Dict[str, Any], name: str):
        super().__init__(name=f"quiz-generator-{name}", daemon=True)
        self._fn = fn
        self._ctx = ctx
        self.result: Any = None
        self.error: Optional[BaseException] = None

    def run(self) -> None:
        try:
            self.result = self._fn(self._ctx)
        except BaseException as e:  # re-raised on the caller's thread
            self.error = e


def run_with_deadline(
    fn: Callable[[Dict[str, Any]], Any],
    ctx: Dict[str, Any],
    deadline_seconds: Optional[float],
    callback_name: str,
) -> Any:
    """
    Call ``fn(ctx)`` with a deadline.

    A deadline of None or <= 0 calls *fn* directly on this thread.

    Raises:
        GeneratorTimeoutError: If the deadline passes first
        Exception: Whatever *fn* raised
    """
    if not deadline_seconds or deadline_seconds <= 0:
        return fn(ctx)

    worker = _CallThread(fn, ctx, callback_name)
    worker.start()
    worker.join(deadline_seconds)

    if worker.is_alive():
        raise GeneratorTimeoutError(
            callback_name=callback_name,
            deadline_seconds=deadline_seconds,
            input_payload=ctx,
        )
    if worker.error is not None:
        raise worker.error
    return worker.result
