# Area: Engine
"""
adaptive_quiz.engine — QuizEngine
=================================

The public entry point. A QuizEngine owns a session store and drives
each session through strictly sequential turns:

    classify signal → (generator call, retried) → state transition
    → option validation → commit → transcript compaction

A turn works on a copy of the session state and commits it only after
every step has succeeded, so generator failures, malformed output and
unclear input all leave the committed state exactly as it was.

Usage:
    from adaptive_quiz import QuizEngine, DemoGenerator, default_catalog

    catalog = default_catalog()
    engine = QuizEngine(catalog, DemoGenerator(catalog))
    start = engine.start_session("easy", "young", total_rounds=5, seed=42)
    outcome = engine.submit_turn(start.session_id, "I don't know")
"""

from __future__ import annotations
import json
import logging
import random
import sqlite3
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from ._archive.repo_summaries import SummaryRepository
from ._catalog.catalog import ContentCatalog, QuizItem
from ._config import EngineConfig
from ._generator.callback_executor import execute_generator
from ._generator.context_builder import ContextBuilder
from ._session.answer_set import build_fallback_options, validate_options
from ._session.calibration import option_count
from ._session.classifier import ClassifiedSignal, classify_structured, classify_text
from ._session.compactor import MESSAGE, TOOL_CALL, TOOL_RESULT, TranscriptEntry, compact
from ._session.enums import AgeBand, Difficulty, SessionEvent, SessionStatus, SignalKind, age_band_for
from ._session.hints import MediaSearch
from ._session.prompt import PromptBundle, assemble_prompt
from ._session.state import PrecomputedHint, RoundResult, SessionState, SessionSummary
from ._session.state_machine import SessionStateMachine, TransitionOutcome, _now_ms
from ._session.store import SessionRecord, SessionStore
from ._shared.logging_config import log_generator_error
from ._shared.telemetry import (
    GENERATOR_FALLBACK,
    GENERATOR_RETRY,
    INVALID_SIGNAL,
    MALFORMED_OUTPUT,
    SESSION_FINISHED,
    TelemetryRecorder,
    get_telemetry,
)
from .callbacks import QuizGenerator
from .errors import (
    GeneratorUnavailableError,
    InvalidPlayerSignalError,
    MalformedToolOutputError,
    QuizEngineError,
    SessionFinishedError,
)

logger = logging.getLogger("adaptive_quiz.engine")

PlayerSignal = Union[str, Mapping[str, Any]]

CLARIFY_MESSAGE = "Can you pick one of the options, say a name, or ask for a hint?"
RETRY_MESSAGE = "Oops, something went wrong on my side. Please try again!"
CONTINUE_PROMPT = "Say 'continue' when you're ready for the next one!"


# ══════════════════════════════════════════════════════════════
# RESULT TYPES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class StartResult:
    """What the player sees when a session starts."""
    session_id: str
    prompt: PromptBundle
    opening_clue: str
    options: Tuple[str, ...]
    round_number: int
    total_rounds: int


@dataclass(frozen=True)
class TurnOutcome:
    """
    Everything produced by one submitted turn.

    Attributes:
        result: The RoundResult; a no-op turn has no transitions
        message: Host message for the player
        options: Validated options for the active item (empty once finished)
        hint: Hint served this turn, if any
        opening_clue: Opening clue of a round started by this turn
        needs_retry: True when the generator failed and nothing changed
        summary: Session summary once the session is finished
        final_message: Generator's closing message, when available
        fun_fact: Optional extra from the generator after a correct answer
    """
    result: RoundResult
    message: str
    options: Tuple[str, ...] = ()
    hint: Optional[PrecomputedHint] = None
    opening_clue: Optional[str] = None
    needs_retry: bool = False
    summary: Optional[SessionSummary] = None
    final_message: Optional[str] = None
    fun_fact: Optional[str] = None

    @property
    def changed_state(self) -> bool:
        return bool(self.result.transitions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "result": self.result.to_dict(),
            "message": self.message,
            "options": list(self.options),
            "hint": self.hint.to_dict() if self.hint else None,
            "opening_clue": self.opening_clue,
            "needs_retry": self.needs_retry,
            "summary": self.summary.to_dict() if self.summary else None,
            "final_message": self.final_message,
            "fun_fact": self.fun_fact,
        }


# ══════════════════════════════════════════════════════════════
# ENGINE
# ══════════════════════════════════════════════════════════════

class QuizEngine:
    """
    Adaptive quiz session engine.

    One engine serves many sessions. The catalog is shared read-only;
    each session's state lives in the engine's store and is only
    changed under that session's lock.
    """

    def __init__(
        self,
        catalog: ContentCatalog,
        generator: QuizGenerator,
        config: Optional[EngineConfig] = None,
        telemetry: Optional[TelemetryRecorder] = None,
        archive: Optional[SummaryRepository] = None,
        media_search: Optional[MediaSearch] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        if len(catalog) == 0:
            raise ValueError("QuizEngine needs a non-empty catalog")
        self.catalog = catalog
        self.generator = generator
        self.config = config or EngineConfig()
        self.telemetry = telemetry or get_telemetry()
        if archive is None and self.config.archive_path:
            archive = SummaryRepository(self.config.archive_path)
        self.archive = archive
        self.rng = rng or random.Random()
        self.clock = clock

        self.machine = SessionStateMachine(
            catalog,
            points_per_correct=self.config.points_per_correct,
            completion_bonus=self.config.completion_bonus,
            max_hints_per_round=self.config.max_hints_per_round,
            auto_advance=self.config.auto_advance,
            hint_on_incorrect=self.config.hint_on_incorrect,
            media_search=media_search,
            telemetry=self.telemetry,
            rng=self.rng,
            clock=clock,
        )
        self.contexts = ContextBuilder(
            self.config.generator_deadline_seconds,
            self.config.final_message_deadline_seconds,
        )
        self.store = SessionStore()

    # ── Session lifecycle ────────────────────────────────────

    def start_session(
        self,
        difficulty: Union[Difficulty, str],
        age_band: Union[AgeBand, str, int],
        total_rounds: Optional[int] = None,
        seed: Optional[Union[int, str]] = None,
        session_id: Optional[str] = None,
    ) -> StartResult:
        """
        Start a session and return the opening clue for round 1.

        *age_band* may be an AgeBand, its value, or an age in years.
        """
        difficulty = Difficulty(difficulty)
        if isinstance(age_band, int) and not isinstance(age_band, bool):
            age_band = age_band_for(age_band)
        age_band = AgeBand(age_band)
        total_rounds = total_rounds or self.config.default_total_rounds
        session_id = session_id or uuid.uuid4().hex

        state = self.machine.new_session(session_id, difficulty, age_band, total_rounds, seed)
        state.current_options = tuple(self._fallback_options(state, state.current_item))
        record = self.store.add(state)
        record.transcript.append(
            TranscriptEntry(1, "host", MESSAGE, state.current_item.opening_clue)
        )

        logger.info(
            f"[{session_id}] Session started",
            extra={"session_id": session_id, "event": "session_started"},
        )
        return StartResult(
            session_id=session_id,
            prompt=self._prompt(state),
            opening_clue=state.current_item.opening_clue,
            options=state.current_options,
            round_number=state.round_number,
            total_rounds=state.total_rounds,
        )

    def submit_turn(self, session_id: str, player_signal: PlayerSignal) -> TurnOutcome:
        """
        Process one player turn.

        Raises:
            SessionNotFoundError: Unknown session id
            SessionFinishedError: The session is already finished
        """
        record = self.store.get(session_id)
        with record.lock:
            if record.state.is_finished:
                raise SessionFinishedError(session_id)
            return self._run_turn(record, player_signal)

    def end_session(self, session_id: str) -> SessionSummary:
        """Terminate a session now; returns its summary. Idempotent."""
        record = self.store.get(session_id)
        with record.lock:
            if record.state.is_finished:
                return record.summary or self.build_summary(record.state)
            outcome = self.machine.apply(record.state, SessionEvent.TERMINATE)
            outcome.state.current_options = ()
            record.state = outcome.state
            logger.info(f"[{session_id}] Session terminated externally")
            return self._on_finished(record)

    def get_state(self, session_id: str) -> SessionState:
        """Copy of the committed state."""
        record = self.store.get(session_id)
        with record.lock:
            return record.state.copy()

    def get_summary(self, session_id: str) -> SessionSummary:
        """Final summary once finished, otherwise a snapshot of progress so far."""
        record = self.store.get(session_id)
        with record.lock:
            return record.summary or self.build_summary(record.state)

    def get_prompt(self, session_id: str) -> PromptBundle:
        record = self.store.get(session_id)
        with record.lock:
            return self._prompt(record.state)

    def transcript(self, session_id: str) -> List[TranscriptEntry]:
        record = self.store.get(session_id)
        with record.lock:
            return list(record.transcript)

    def discard_session(self, session_id: str) -> None:
        """Drop a session from the store. Nothing else holds its state."""
        record = self.store.remove(session_id)
        logger.info(f"[{session_id}] Session discarded at {record.state.status.value}")

    def build_summary(self, state: SessionState) -> SessionSummary:
        end = state.finished_at_ms if state.finished_at_ms is not None else self.clock()
        return SessionSummary(
            session_id=state.session_id,
            score=state.score,
            correct_count=state.correct_count,
            total_rounds=state.total_rounds,
            rounds_played=state.rounds_resolved,
            hints_used=state.total_hints_used,
            duration_ms=max(0, end - state.started_at_ms),
            bonus_earned=state.bonus_awarded,
            difficulty=state.difficulty,
            completed=state.bonus_awarded,
        )

    # ── Turn pipeline ────────────────────────────────────────

    def _run_turn(self, record: SessionRecord, player_signal: PlayerSignal) -> TurnOutcome:
        state = record.state
        response: Optional[Dict[str, Any]] = None

        # ── Step 1: Classify ──────────────────────────────────
        try:
            if isinstance(player_signal, Mapping):
                reading = classify_structured(player_signal, state.current_options, state.current_item)
                player_text = reading.text or str(player_signal.get("type"))
            elif isinstance(player_signal, str):
                player_text = player_signal
                local = classify_text(player_signal, state.current_options,
                                      state.current_item, self.catalog)
                response, error = self._call_generator(record, player_signal, local)
                if response is None:
                    if local.kind is SignalKind.UNCLEAR:
                        return self._failed_turn(record, error)
                    self.telemetry.record(GENERATOR_FALLBACK, session_id=state.session_id,
                                          reason=type(error).__name__)
                    reading = local
                else:
                    reading = self._merge_reading(local, response)
            else:
                raise InvalidPlayerSignalError(player_signal, "expected text or a signal dict")
        except InvalidPlayerSignalError as e:
            self.telemetry.record(INVALID_SIGNAL, session_id=state.session_id, reason=e.reason)
            return self._noop(state, CLARIFY_MESSAGE)

        # ── Step 2: Map to an event ───────────────────────────
        event = self._event_for(state, reading)
        if event is None:
            if reading.kind is SignalKind.UNCLEAR:
                self.telemetry.record(INVALID_SIGNAL, session_id=state.session_id,
                                      reason="unclear")
            message = self._generator_message(response, reading) or self._noop_message(state, reading)
            return self._noop(state, message)

        # ── Step 3: Transition on a copy ──────────────────────
        explanation = (response or {}).get("explanation") or ""
        outcome = self.machine.apply(state, event, explanation)
        new_state = outcome.state

        # ── Step 4: Validate options for the active item ──────
        options = self._options_after(state, outcome, response)
        new_state.current_options = tuple(options)

        message = self._generator_message(response, reading) or self._default_message(event, outcome)

        # ── Step 5: Commit ────────────────────────────────────
        record.state = new_state
        record.consecutive_failures = 0
        self._record_transcript(record, state.round_number, player_text, response, outcome, message)

        summary = final_message = None
        if new_state.is_finished:
            summary = self._on_finished(record)
            final_message = self._final_message(record, summary)

        return TurnOutcome(
            result=outcome.result,
            message=message,
            options=new_state.current_options,
            hint=outcome.hint,
            opening_clue=new_state.current_item.opening_clue if outcome.new_round_started else None,
            summary=summary,
            final_message=final_message,
            fun_fact=(response or {}).get("fun_fact") if reading.correct else None,
        )

    def _call_generator(
        self,
        record: SessionRecord,
        text: str,
        local: ClassifiedSignal,
    ) -> Tuple[Optional[Dict[str, Any]], Optional[QuizEngineError]]:
        """Call take_turn with bounded retries; returns (response, last_error)."""
        state = record.state
        ctx = self.contexts.build_turn_ctx(
            state, self._prompt(state), text, local, record.transcript,
            upcoming_hint=self.machine.peek_hint(state),
        )
        malformed = unavailable = 0
        while True:
            try:
                return execute_generator(
                    self.generator.take_turn, "take_turn", ctx,
                    self.config.generator_deadline_seconds,
                ), None
            except MalformedToolOutputError as e:
                log_generator_error(e, state.session_id)
                self.telemetry.record(MALFORMED_OUTPUT, session_id=state.session_id,
                                      errors=e.validation_errors)
                malformed += 1
                if malformed > self.config.malformed_retry_cap:
                    return None, e
            except GeneratorUnavailableError as e:
                log_generator_error(e, state.session_id)
                unavailable += 1
                if unavailable > self.config.unavailable_retry_cap:
                    return None, e
            self.telemetry.record(GENERATOR_RETRY, session_id=state.session_id,
                                  attempt=malformed + unavailable)

    def _failed_turn(self, record: SessionRecord, error: Optional[QuizEngineError]) -> TurnOutcome:
        """Generator gave up and the text means nothing locally: nothing changes."""
        record.consecutive_failures += 1
        state = record.state
        if isinstance(error, GeneratorUnavailableError):
            self.telemetry.record(GENERATOR_FALLBACK, session_id=state.session_id,
                                  reason="catalog question")
            message = self._fallback_question(state)
        else:
            message = RETRY_MESSAGE
        logger.warning(
            f"[{state.session_id}] Turn not applied "
            f"({record.consecutive_failures} consecutive failures)"
        )
        return TurnOutcome(
            result=self._noop_result(state, message),
            message=message,
            options=state.current_options,
            needs_retry=True,
        )

    def _fallback_question(self, state: SessionState) -> str:
        clue = state.current_item.opening_clue
        if state.hints_used_this_round and state.current_hint is not None:
            clue = f"{clue} {state.current_hint.text}"
        choices = ", ".join(state.current_options)
        return f"{clue} Which city is it? {choices}"

    @staticmethod
    def _merge_reading(local: ClassifiedSignal, response: Dict[str, Any]) -> ClassifiedSignal:
        """A clear local reading wins; otherwise take the generator's."""
        if local.kind is not SignalKind.UNCLEAR:
            return local
        kind = SignalKind(response["signal"])
        if kind is SignalKind.ANSWER:
            return ClassifiedSignal(kind, local.text, local.text, bool(response.get("correct")))
        return ClassifiedSignal(kind, local.text)

    def _event_for(self, state: SessionState, reading: ClassifiedSignal) -> Optional[SessionEvent]:
        kind = reading.kind
        if state.status is SessionStatus.ROUND_COMPLETE:
            if kind in (SignalKind.CONTINUE, SignalKind.SKIP):
                return SessionEvent.ADVANCE
            return None
        if kind is SignalKind.ANSWER:
            return SessionEvent.CORRECT_ANSWER if reading.correct else SessionEvent.INCORRECT_GUESS
        if kind is SignalKind.DONT_KNOW:
            return SessionEvent.DONT_KNOW
        if kind is SignalKind.SKIP:
            if self.machine.hints_remaining(state) > 0:
                return SessionEvent.DONT_KNOW
            return SessionEvent.GIVE_UP
        return None

    def _options_after(
        self,
        before: SessionState,
        outcome: TransitionOutcome,
        response: Optional[Dict[str, Any]],
    ) -> List[str]:
        state = outcome.state
        if state.is_finished:
            return []
        item = state.current_item
        if outcome.new_round_started:
            proposed = (response or {}).get("next_options") or []
        elif state.round_number == before.round_number:
            proposed = (response or {}).get("options") or list(before.current_options)
        else:
            proposed = []
        if not proposed:
            return self._fallback_options(state, item)
        return validate_options(
            proposed, item.display_name, self.catalog, item,
            telemetry=self.telemetry, rng=self.rng, session_id=state.session_id,
        )

    def _fallback_options(self, state: SessionState, item: QuizItem) -> List[str]:
        count = option_count(state.difficulty, state.age_band)
        return build_fallback_options(self.catalog, item, count, self.rng)

    # ── Messages ─────────────────────────────────────────────

    @staticmethod
    def _generator_message(response: Optional[Dict[str, Any]], reading: ClassifiedSignal) -> Optional[str]:
        """The generator's message, unless it judged the turn differently."""
        if response is None:
            return None
        if response.get("signal") != reading.kind.value:
            return None
        if reading.kind is SignalKind.ANSWER and bool(response.get("correct")) != bool(reading.correct):
            return None
        return response.get("message")

    @staticmethod
    def _default_message(event: SessionEvent, outcome: TransitionOutcome) -> str:
        result = outcome.result
        if result.revealed_answer:
            return f"The answer was {result.revealed_answer}. Let's try another one!"
        if event is SessionEvent.CORRECT_ANSWER:
            return f"Correct! +{result.points_delta} points."
        if outcome.hint is not None:
            return f"Here's a hint: {outcome.hint.text}"
        if event is SessionEvent.INCORRECT_GUESS:
            return "Not quite, try again!"
        if event is SessionEvent.ADVANCE:
            return "Here comes the next one!"
        return result.explanation

    @staticmethod
    def _noop_message(state: SessionState, reading: ClassifiedSignal) -> str:
        if state.status is SessionStatus.ROUND_COMPLETE:
            return CONTINUE_PROMPT
        if reading.kind is SignalKind.CONTINUE:
            return "We're still on this one. Which city is it?"
        return CLARIFY_MESSAGE

    @staticmethod
    def _noop_result(state: SessionState, message: str) -> RoundResult:
        return RoundResult(
            correct=False,
            explanation=message,
            points_delta=0,
            score=state.score,
            status=state.status,
            round_number=state.round_number,
        )

    def _noop(self, state: SessionState, message: str) -> TurnOutcome:
        return TurnOutcome(
            result=self._noop_result(state, message),
            message=message,
            options=state.current_options,
        )

    # ── Bookkeeping ──────────────────────────────────────────

    def _prompt(self, state: SessionState) -> PromptBundle:
        return assemble_prompt(
            state,
            self.config.points_per_correct,
            self.config.completion_bonus,
            self.config.max_hints_per_round,
        )

    def _record_transcript(
        self,
        record: SessionRecord,
        round_number: int,
        player_text: str,
        response: Optional[Dict[str, Any]],
        outcome: TransitionOutcome,
        message: str,
    ) -> None:
        transcript = record.transcript
        transcript.append(TranscriptEntry(round_number, "player", MESSAGE, player_text))
        if response is not None:
            transcript.append(TranscriptEntry(
                round_number, "host", TOOL_CALL, json.dumps(response, ensure_ascii=False, default=str)
            ))
        transcript.append(TranscriptEntry(
            round_number, "system", TOOL_RESULT, json.dumps(outcome.result.to_dict(), ensure_ascii=False)
        ))
        transcript.append(TranscriptEntry(round_number, "host", MESSAGE, message))

        if outcome.resolved_round is not None:
            result = outcome.result
            summary = f"correct={result.correct} points={result.points_delta} score={result.score}"
            record.transcript = compact(transcript, outcome.resolved_round, summary)
        if outcome.new_round_started:
            state = outcome.state
            record.transcript.append(TranscriptEntry(
                state.round_number, "host", MESSAGE, state.current_item.opening_clue
            ))

    def _on_finished(self, record: SessionRecord) -> SessionSummary:
        summary = self.build_summary(record.state)
        record.summary = summary
        self.telemetry.record(SESSION_FINISHED, session_id=summary.session_id,
                              score=summary.score, completed=summary.completed)
        if self.archive is not None:
            try:
                self.archive.save_summary(summary)
            except (sqlite3.Error, OSError) as e:
                logger.error(f"[{summary.session_id}] Could not archive summary: {e}")
        return summary

    def _final_message(self, record: SessionRecord, summary: SessionSummary) -> Optional[str]:
        """Best effort; a failing generator only costs the closing message."""
        ctx = self.contexts.build_final_message_ctx(record.state, summary, record.transcript)
        try:
            result = execute_generator(
                self.generator.get_final_message, "final_message", ctx,
                self.config.final_message_deadline_seconds,
            )
        except (GeneratorUnavailableError, MalformedToolOutputError) as e:
            log_generator_error(e, summary.session_id)
            return None
        return result["message"]
