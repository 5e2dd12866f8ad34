# Area: Generator Callbacks
"""
adaptive_quiz.callbacks — The generator interface
=================================================

Subclass QuizGenerator and implement its two methods to plug a text
generator (an LLM, a rule engine, a test fake) into the QuizEngine.

Each method receives a context dict and returns a result dict. The
engine validates every result before it touches the session, so a
generator can be wrong, slow or broken without corrupting a game.

Type Definitions
----------------
All input/output types are defined in types.py:

    from adaptive_quiz import (
        TurnContext, TurnResponse,
        FinalMessageContext, FinalMessageResponse,
    )
"""

from abc import ABC, abstractmethod
from .types import (
    TurnContext, TurnResponse,
    FinalMessageContext, FinalMessageResponse,
)


class QuizGenerator(ABC):
    """
    Abstract base class for quiz generators.

    The engine calls ``take_turn`` once per free-text player turn and
    ``get_final_message`` once when a session finishes.
    """

    # ──────────────────────────────────────────────────────────────
    # CALLBACK 1: Classify the player's reply and write the host message
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def take_turn(self, ctx: TurnContext) -> TurnResponse:
        """
        Called for every free-text player turn.

        Parameters
        ----------
        ctx : TurnContext
            {
                "dynamic": {
                    "player_input": str,       # e.g. "is it Jaffa?"
                    "correct_answer": str,     # e.g. "Jaffa"
                    "current_options": [str],  # options on screen
                    "local_reading": {...},    # the engine's own reading
                    "system_prompt": str,      # rendered prompt bundle
                    "transcript": [...],       # compacted history
                    ...
                },
                "service": {...}
            }

        Returns
        -------
        TurnResponse
            {
                "signal": "answer",            # answer | dont_know | skip
                                               # | continue | unclear
                "correct": True,               # required for "answer"
                "message": "Yes! Jaffa!",
                "options": [str],              # optional
                "next_options": [str]          # optional, next round
            }
        """
        pass

    # ──────────────────────────────────────────────────────────────
    # CALLBACK 2: Closing message for a finished session
    # ──────────────────────────────────────────────────────────────
    @abstractmethod
    def get_final_message(self, ctx: FinalMessageContext) -> FinalMessageResponse:
        """
        Called once when the session reaches ``finished``.

        ``ctx["dynamic"]["summary"]`` holds the final score, correct
        count, hints used and whether the completion bonus was earned.
        Failures here are logged and ignored.

        Returns
        -------
        FinalMessageResponse
            {"message": str}
        """
        pass
