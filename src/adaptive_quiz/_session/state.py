"""
adaptive_quiz._session.state — Session state tracker
====================================================

Value types owned by one session: the mutable SessionState plus the
immutable PrecomputedHint, RoundResult and SessionSummary it emits.

SessionState is only ever changed by the state machine, and only on a
copy; the engine swaps the copy in once the whole turn has succeeded.
"""

from __future__ import annotations
import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .._catalog.catalog import QuizItem
from .enums import AgeBand, Difficulty, SessionStatus

logger = logging.getLogger("adaptive_quiz.state")


@dataclass(frozen=True)
class PrecomputedHint:
    """Hint derived from catalog facts; recomputed every round."""
    item_id: str
    hint_number: int
    text: str
    points_deduction: int
    media_query: Optional[str] = None
    media: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "hint_number": self.hint_number,
            "text": self.text,
            "points_deduction": self.points_deduction,
            "media_query": self.media_query,
            "media": list(self.media),
        }


@dataclass(frozen=True)
class RoundResult:
    """
    Outcome of one state transition.

    Attributes:
        correct: Whether the player answered correctly this turn
        explanation: Why, in player-facing words
        points_delta: Change applied to the score by this turn
        score: Resulting score
        status: Resulting status
        round_number: Round the result belongs to
        transitions: Statuses passed through, in order
        revealed_answer: The answer, when the round was given up
    """
    correct: bool
    explanation: str
    points_delta: int
    score: int
    status: SessionStatus
    round_number: int
    transitions: Tuple[SessionStatus, ...] = ()
    revealed_answer: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "correct": self.correct,
            "explanation": self.explanation,
            "points_delta": self.points_delta,
            "score": self.score,
            "status": self.status.value,
            "round_number": self.round_number,
            "transitions": [s.value for s in self.transitions],
            "revealed_answer": self.revealed_answer,
        }


@dataclass(frozen=True)
class SessionSummary:
    """Archived snapshot of a finished session."""
    session_id: str
    score: int
    correct_count: int
    total_rounds: int
    rounds_played: int
    hints_used: int
    duration_ms: int
    bonus_earned: bool
    difficulty: Difficulty
    completed: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "score": self.score,
            "correct_count": self.correct_count,
            "total_rounds": self.total_rounds,
            "rounds_played": self.rounds_played,
            "hints_used": self.hints_used,
            "duration_ms": self.duration_ms,
            "bonus_earned": self.bonus_earned,
            "difficulty": self.difficulty.value,
            "completed": self.completed,
        }


@dataclass
class SessionState:
    """
    Full state of one quiz session.

    The engine keeps this outside the generator transcript; compacting
    the transcript never touches it.
    """
    session_id: str
    difficulty: Difficulty
    age_band: AgeBand
    total_rounds: int
    current_item: QuizItem
    next_item: Optional[QuizItem] = None
    seed: Optional[int | str] = None
    round_number: int = 1
    score: int = 0
    status: SessionStatus = SessionStatus.AWAITING_ANSWER

    # Insertion-ordered, duplicate-free
    used_item_ids: List[str] = field(default_factory=list)
    category_history: List[str] = field(default_factory=list)
    is_review_mode: bool = False

    # Per-round counters
    hints_used_this_round: int = 0
    hint_costs_this_round: int = 0
    current_options: Tuple[str, ...] = ()
    current_hint: Optional[PrecomputedHint] = None
    next_hint: Optional[PrecomputedHint] = None

    # Session totals
    correct_count: int = 0
    rounds_resolved: int = 0
    total_hints_used: int = 0
    bonus_awarded: bool = False
    started_at_ms: int = 0
    finished_at_ms: Optional[int] = None

    def copy(self) -> "SessionState":
        """Working copy for an all-or-nothing transition."""
        return copy.deepcopy(self)

    @property
    def is_finished(self) -> bool:
        return self.status is SessionStatus.FINISHED

    @property
    def is_last_round(self) -> bool:
        return self.round_number >= self.total_rounds

    def advance_status(self, new_status: SessionStatus) -> None:
        logger.info(f"[{self.session_id}] Status: {self.status.value} → {new_status.value}")
        self.status = new_status

    def mark_used(self, item: QuizItem) -> None:
        """Record a resolved item; keeps used_item_ids duplicate-free."""
        if item.id not in self.used_item_ids:
            self.used_item_ids.append(item.id)
        self.category_history.append(item.category)

    def reset_round_counters(self) -> None:
        self.hints_used_this_round = 0
        self.hint_costs_this_round = 0
        self.current_options = ()
