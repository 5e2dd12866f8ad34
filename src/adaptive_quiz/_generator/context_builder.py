# Area: Generator
"""
adaptive_quiz._generator.context_builder — Build generator context dicts
========================================================================

Constructs the ctx dicts passed to generator callbacks.
Each ctx has two sections:
- dynamic: Session data, the prompt bundle and the transcript
- service: What the generator is asked to produce
"""

from __future__ import annotations
from typing import Any, Dict, Optional, Sequence
import logging

from .._session.classifier import ClassifiedSignal
from .._session.compactor import TranscriptEntry
from .._session.prompt import PromptBundle
from .._session.state import PrecomputedHint, SessionState, SessionSummary

logger = logging.getLogger("adaptive_quiz.context")


# ══════════════════════════════════════════════════════════════
# SERVICE DEFINITIONS
# ══════════════════════════════════════════════════════════════

SERVICE_DEFINITIONS: Dict[str, Dict[str, Any]] = {
    "take_turn": {
        "name": "take_turn",
        "description": (
            "Classify the player's reply (answer, dont_know, skip, continue, "
            "unclear), judge an answer against CORRECT_ANSWER, and write the "
            "host's next message"
        ),
        "required_output_fields": ["signal", "message"],
        "optional_output_fields": [
            "correct", "explanation", "options", "next_options", "fun_fact",
        ],
    },
    "final_message": {
        "name": "final_message",
        "description": "Congratulate the player and sum up the finished game",
        "required_output_fields": ["message"],
        "optional_output_fields": [],
    },
}


# ══════════════════════════════════════════════════════════════
# CONTEXT BUILDER CLASS
# ══════════════════════════════════════════════════════════════

class ContextBuilder:
    """
    Builds context dicts for generator callbacks.

    Each context has:
    - dynamic: Data from the session state and player input
    - service: Generator request info, including the deadline
    """

    def __init__(self, turn_deadline: Optional[float], final_deadline: Optional[float]):
        self.deadlines = {
            "take_turn": turn_deadline,
            "final_message": final_deadline,
        }

    def _service(self, name: str) -> Dict[str, Any]:
        service = dict(SERVICE_DEFINITIONS[name])
        service["deadline_seconds"] = self.deadlines[name]
        return service

    def _base_dynamic(self, state: SessionState) -> Dict[str, Any]:
        return {
            "session_id": state.session_id,
            "round_number": state.round_number,
            "total_rounds": state.total_rounds,
            "status": state.status.value,
            "score": state.score,
            "difficulty": state.difficulty.value,
            "age_band": state.age_band.value,
        }

    # ── Callback 1: take_turn ─────────────────────────────────

    def build_turn_ctx(
        self,
        state: SessionState,
        bundle: PromptBundle,
        player_input: str,
        local_reading: ClassifiedSignal,
        transcript: Sequence[TranscriptEntry],
        upcoming_hint: Optional[PrecomputedHint] = None,
    ) -> Dict[str, Any]:
        """
        Build context for the take_turn callback.

        Parameters
        ----------
        state : SessionState
            Committed session state (not modified).
        bundle : PromptBundle
            Prompt for this turn.
        player_input : str
            The player's free text.
        local_reading : ClassifiedSignal
            What the engine made of the text on its own.
        transcript : sequence of TranscriptEntry
            Compacted conversation so far.
        upcoming_hint : PrecomputedHint, optional
            The hint the engine will serve if the player asks for one.
        """
        dynamic = self._base_dynamic(state)
        dynamic.update({
            "player_input": player_input,
            "local_reading": {
                "signal": local_reading.kind.value,
                "answer": local_reading.answer,
                "correct": local_reading.correct,
            },
            "correct_answer": state.current_item.display_name,
            "current_options": list(state.current_options),
            "hints_used_this_round": state.hints_used_this_round,
            "upcoming_hint": upcoming_hint.to_dict() if upcoming_hint else None,
            "system_prompt": bundle.render(),
            "prompt": bundle.as_dict(),
            "transcript": [entry.to_dict() for entry in transcript],
        })
        return {
            "dynamic": dynamic,
            "service": self._service("take_turn"),
        }

    # ── Callback 2: final_message ─────────────────────────────

    def build_final_message_ctx(
        self,
        state: SessionState,
        summary: SessionSummary,
        transcript: Sequence[TranscriptEntry],
    ) -> Dict[str, Any]:
        """Build context for the final_message callback."""
        dynamic = self._base_dynamic(state)
        dynamic.update({
            "summary": summary.to_dict(),
            "transcript": [entry.to_dict() for entry in transcript],
        })
        return {
            "dynamic": dynamic,
            "service": self._service("final_message"),
        }
