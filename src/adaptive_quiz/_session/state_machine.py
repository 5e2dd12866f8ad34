# Area: Session
"""
adaptive_quiz._session.state_machine — Session State Machine
============================================================

Owns the round lifecycle of one session: score, hint budget, round
advancement and termination. Every transition works on a copy of the
incoming SessionState and returns the copy; the caller decides whether
to commit it, so a failed turn never leaves a half-applied state.

Scoring:
- Correct answer:  points_per_correct - hint costs this round, floored at 0
- Hint ("don't know"): cost is charged against the round reward; score unchanged
- Give up: answer revealed; hint costs this round come off the score, floored at 0
- Last round resolved: completion bonus, added exactly once
"""

from __future__ import annotations
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from .._catalog.catalog import ContentCatalog, QuizItem
from .._shared.telemetry import REVIEW_MODE, TelemetryRecorder
from .enums import AgeBand, Difficulty, SessionEvent, SessionStatus
from .hints import DEFAULT_HINT_BUDGET, MediaSearch
from .selector import select_item
from .state import PrecomputedHint, RoundResult, SessionState
from .strategies import strategy_for

logger = logging.getLogger("adaptive_quiz.state_machine")


# Valid transitions: {current_status: {event: next_status}}
# ADVANCE from the last round goes to FINISHED instead (see _advance).
TRANSITIONS: Dict[SessionStatus, Dict[SessionEvent, SessionStatus]] = {
    SessionStatus.AWAITING_ANSWER: {
        SessionEvent.CORRECT_ANSWER: SessionStatus.ROUND_COMPLETE,
        SessionEvent.GIVE_UP: SessionStatus.ROUND_COMPLETE,
        SessionEvent.DONT_KNOW: SessionStatus.HINT_GIVEN,
        SessionEvent.INCORRECT_GUESS: SessionStatus.AWAITING_ANSWER,
        SessionEvent.TERMINATE: SessionStatus.FINISHED,
    },
    SessionStatus.HINT_GIVEN: {
        SessionEvent.CORRECT_ANSWER: SessionStatus.ROUND_COMPLETE,
        SessionEvent.GIVE_UP: SessionStatus.ROUND_COMPLETE,
        SessionEvent.DONT_KNOW: SessionStatus.HINT_GIVEN,
        SessionEvent.INCORRECT_GUESS: SessionStatus.HINT_GIVEN,
        SessionEvent.TERMINATE: SessionStatus.FINISHED,
    },
    SessionStatus.ROUND_COMPLETE: {
        SessionEvent.ADVANCE: SessionStatus.AWAITING_ANSWER,
        SessionEvent.TERMINATE: SessionStatus.FINISHED,
    },
    SessionStatus.FINISHED: {},
}


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class TransitionOutcome:
    """
    Result of applying one event.

    Attributes:
        state: The new (uncommitted) state
        result: RoundResult describing the transition
        hint: Hint served by this transition, if any
        resolved_round: Round number resolved by this transition, if any
        new_round_started: True when the session moved to a new round
    """
    state: SessionState
    result: RoundResult
    hint: Optional[PrecomputedHint] = None
    resolved_round: Optional[int] = None
    new_round_started: bool = False


class SessionStateMachine:
    """
    Transition logic for quiz sessions.

    Stateless apart from its injected collaborators, so one instance can
    serve every session of an engine.
    """

    def __init__(
        self,
        catalog: ContentCatalog,
        points_per_correct: int = 15,
        completion_bonus: int = 25,
        max_hints_per_round: int = DEFAULT_HINT_BUDGET,
        auto_advance: bool = True,
        hint_on_incorrect: bool = False,
        media_search: Optional[MediaSearch] = None,
        telemetry: Optional[TelemetryRecorder] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        self.catalog = catalog
        self.points_per_correct = points_per_correct
        self.completion_bonus = completion_bonus
        self.max_hints_per_round = max_hints_per_round
        self.auto_advance = auto_advance
        self.hint_on_incorrect = hint_on_incorrect
        self.media_search = media_search
        self.telemetry = telemetry
        self.rng = rng
        self.clock = clock

    # ── Session creation ─────────────────────────────────────

    def new_session(
        self,
        session_id: str,
        difficulty: Difficulty,
        age_band: AgeBand,
        total_rounds: int,
        seed: Optional[int | str] = None,
    ) -> SessionState:
        """Build the initial state: round 1 item, look-ahead item and hints."""
        if total_rounds < 1:
            raise ValueError(f"total_rounds must be >= 1, got {total_rounds}")

        first = select_item(
            self.catalog, (), 1, difficulty, age_band,
            seed=seed, rng=self.rng,
        )
        state = SessionState(
            session_id=session_id,
            difficulty=difficulty,
            age_band=age_band,
            total_rounds=total_rounds,
            current_item=first.item,
            seed=seed,
            is_review_mode=first.is_review_mode,
            started_at_ms=self.clock(),
        )
        state.next_item = self._select_next(state)
        state.current_hint = self._hint(state, state.current_item)
        state.next_hint = self._hint(state, state.next_item)
        logger.info(
            f"[{session_id}] New session: {total_rounds} rounds, "
            f"{difficulty.value}/{age_band.value}, first item {first.item.id}"
        )
        return state

    # ── Transition API ───────────────────────────────────────

    def can_transition(self, state: SessionState, event: SessionEvent) -> bool:
        return event in TRANSITIONS.get(state.status, {})

    def hints_remaining(self, state: SessionState) -> int:
        return max(0, self.max_hints_per_round - state.hints_used_this_round)

    def peek_hint(self, state: SessionState) -> Optional[PrecomputedHint]:
        """The hint a "don't know" would serve next, or None if the budget is spent."""
        if self.hints_remaining(state) == 0:
            return None
        number = state.hints_used_this_round + 1
        hint = state.current_hint
        if number == 1 and hint is not None and hint.item_id == state.current_item.id:
            return hint
        return self._hint(state, state.current_item, number)

    def apply(
        self,
        state: SessionState,
        event: SessionEvent,
        explanation: str = "",
    ) -> TransitionOutcome:
        """
        Apply *event* to a copy of *state*.

        Raises:
            ValueError: If the event is not valid in the current status
        """
        if not self.can_transition(state, event):
            raise ValueError(
                f"Invalid transition: {event.value} from {state.status.value}"
            )

        working = state.copy()
        trail: List[SessionStatus] = []

        if event is SessionEvent.CORRECT_ANSWER:
            return self._correct(working, trail, explanation)
        if event is SessionEvent.GIVE_UP:
            return self._give_up(working, trail, explanation)
        if event is SessionEvent.DONT_KNOW:
            return self._dont_know(working, trail, explanation)
        if event is SessionEvent.INCORRECT_GUESS:
            return self._incorrect(working, trail, explanation)
        if event is SessionEvent.ADVANCE:
            score_before = working.score
            new_round = self._advance(working, trail)
            return self._outcome(working, trail, False, working.score - score_before,
                                 explanation, new_round_started=new_round)
        return self._terminate(working, trail, explanation)

    # ── Event handlers ───────────────────────────────────────

    def _correct(self, s: SessionState, trail: List[SessionStatus],
                 explanation: str) -> TransitionOutcome:
        resolved = s.round_number
        reward = max(0, self.points_per_correct - s.hint_costs_this_round)
        s.score += reward
        s.correct_count += 1
        bonus_before = s.score
        new_round = self._resolve(s, trail)
        delta = reward + (s.score - bonus_before)
        return self._outcome(s, trail, True, delta, explanation,
                             resolved_round=resolved, new_round_started=new_round)

    def _give_up(self, s: SessionState, trail: List[SessionStatus],
                 explanation: str) -> TransitionOutcome:
        resolved = s.round_number
        answer = s.current_item.display_name
        score_before = s.score
        s.score = max(0, s.score - s.hint_costs_this_round)
        new_round = self._resolve(s, trail)
        return self._outcome(
            s, trail, False, s.score - score_before,
            explanation or f"The answer was {answer}.",
            resolved_round=resolved, new_round_started=new_round,
            revealed_answer=answer,
        )

    def _dont_know(self, s: SessionState, trail: List[SessionStatus],
                   explanation: str) -> TransitionOutcome:
        if self.hints_remaining(s) == 0:
            logger.info(f"[{s.session_id}] Hint budget exhausted; giving up round {s.round_number}")
            return self._give_up(s, trail, explanation)

        hint = self._serve_hint(s)
        s.advance_status(SessionStatus.HINT_GIVEN)
        trail.append(SessionStatus.HINT_GIVEN)
        return self._outcome(s, trail, False, 0, explanation or hint.text, hint=hint)

    def _incorrect(self, s: SessionState, trail: List[SessionStatus],
                   explanation: str) -> TransitionOutcome:
        if self.hint_on_incorrect and self.hints_remaining(s) > 0:
            hint = self._serve_hint(s)
            s.advance_status(SessionStatus.HINT_GIVEN)
            trail.append(SessionStatus.HINT_GIVEN)
            return self._outcome(s, trail, False, 0, explanation, hint=hint)
        trail.append(s.status)
        return self._outcome(s, trail, False, 0, explanation)

    def _terminate(self, s: SessionState, trail: List[SessionStatus],
                   explanation: str) -> TransitionOutcome:
        score_before = s.score
        self._finish(s, trail, completed=False)
        return self._outcome(s, trail, False, s.score - score_before,
                             explanation or "Game ended.")

    # ── Internals ────────────────────────────────────────────

    def _serve_hint(self, s: SessionState) -> PrecomputedHint:
        hint = self.peek_hint(s)
        s.hints_used_this_round = hint.hint_number
        s.hint_costs_this_round += hint.points_deduction
        s.total_hints_used += 1
        return hint

    def _hint(self, s: SessionState, item: Optional[QuizItem],
              number: int = 1) -> Optional[PrecomputedHint]:
        if item is None:
            return None
        return strategy_for(item.category).build_hint(
            item, s.difficulty, number, self.media_search,
        )

    def _resolve(self, s: SessionState, trail: List[SessionStatus]) -> bool:
        """
        Close the current round; returns True if a new round started.

        The last round always finishes; earlier rounds wait for ADVANCE
        unless auto_advance is set.
        """
        s.mark_used(s.current_item)
        s.rounds_resolved += 1
        s.advance_status(SessionStatus.ROUND_COMPLETE)
        trail.append(SessionStatus.ROUND_COMPLETE)
        if self.auto_advance or s.is_last_round:
            return self._advance(s, trail)
        return False

    def _advance(self, s: SessionState, trail: List[SessionStatus]) -> bool:
        if s.is_last_round:
            self._finish(s, trail, completed=True)
            return False

        s.round_number += 1
        s.current_item = s.next_item or self._select_for_round(s, s.round_number)
        if s.next_hint is not None and s.next_hint.item_id == s.current_item.id:
            s.current_hint = s.next_hint
        else:
            s.current_hint = self._hint(s, s.current_item)
        s.next_item = self._select_next(s)
        s.next_hint = self._hint(s, s.next_item)
        s.reset_round_counters()
        s.advance_status(SessionStatus.AWAITING_ANSWER)
        trail.append(SessionStatus.AWAITING_ANSWER)
        return True

    def _finish(self, s: SessionState, trail: List[SessionStatus], completed: bool) -> None:
        if completed and not s.bonus_awarded:
            s.score += self.completion_bonus
            s.bonus_awarded = True
        s.next_item = None
        s.next_hint = None
        s.finished_at_ms = self.clock()
        s.advance_status(SessionStatus.FINISHED)
        trail.append(SessionStatus.FINISHED)

    def _select_next(self, s: SessionState) -> Optional[QuizItem]:
        """Pre-select the look-ahead item for round_number + 1."""
        if s.round_number >= s.total_rounds:
            return None
        return self._select_for_round(s, s.round_number + 1)

    def _select_for_round(self, s: SessionState, round_number: int) -> QuizItem:
        exclude = list(s.used_item_ids)
        history = list(s.category_history)
        if s.current_item.id not in exclude:
            exclude.append(s.current_item.id)
            history.append(s.current_item.category)
        selection = select_item(
            self.catalog, exclude, round_number, s.difficulty, s.age_band,
            seed=s.seed, category_history=history,
            avoid_id=s.current_item.id, rng=self.rng,
        )
        if selection.is_review_mode and not s.is_review_mode:
            s.is_review_mode = True
            if self.telemetry is not None:
                self.telemetry.record(REVIEW_MODE, session_id=s.session_id,
                                      round_number=round_number)
        return selection.item

    def _outcome(
        self,
        s: SessionState,
        trail: List[SessionStatus],
        correct: bool,
        points_delta: int,
        explanation: str,
        hint: Optional[PrecomputedHint] = None,
        resolved_round: Optional[int] = None,
        new_round_started: bool = False,
        revealed_answer: Optional[str] = None,
    ) -> TransitionOutcome:
        result = RoundResult(
            correct=correct,
            explanation=explanation,
            points_delta=points_delta,
            score=s.score,
            status=s.status,
            round_number=resolved_round or s.round_number,
            transitions=tuple(trail),
            revealed_answer=revealed_answer,
        )
        return TransitionOutcome(
            state=s,
            result=result,
            hint=hint,
            resolved_round=resolved_round,
            new_round_started=new_round_started,
        )
