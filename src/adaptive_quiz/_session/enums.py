# Area: Session
"""
adaptive_quiz._session.enums — Session Enums
============================================

Defines difficulty, age band, session status, session events and the
classified player signal kinds used by the session state machine.
"""

from enum import Enum


class Difficulty(Enum):
    """Difficulty chosen by the player at session start."""
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class AgeBand(Enum):
    """
    Coarse age bracket of the player.

    PRESCHOOL: up to 5 years
    YOUNG:     6-7 years
    CHILD:     8-9 years
    PRETEEN:   10 years and older
    """
    PRESCHOOL = "preschool"
    YOUNG = "young"
    CHILD = "child"
    PRETEEN = "preteen"


class SessionStatus(Enum):
    """
    Status of a session.

    Transitions:
    AWAITING_ANSWER -> HINT_GIVEN (on DONT_KNOW)
    AWAITING_ANSWER | HINT_GIVEN -> ROUND_COMPLETE (on CORRECT or GIVE_UP)
    ROUND_COMPLETE -> AWAITING_ANSWER (on ADVANCE, more rounds left)
    ROUND_COMPLETE -> FINISHED (on ADVANCE, last round)
    Any state -> FINISHED (on TERMINATE)
    """
    AWAITING_ANSWER = "awaiting_answer"
    HINT_GIVEN = "hint_given"
    ROUND_COMPLETE = "round_complete"
    FINISHED = "finished"


class SessionEvent(Enum):
    """Events that drive the session state machine."""
    CORRECT_ANSWER = "CORRECT_ANSWER"
    INCORRECT_GUESS = "INCORRECT_GUESS"
    DONT_KNOW = "DONT_KNOW"
    GIVE_UP = "GIVE_UP"
    ADVANCE = "ADVANCE"
    TERMINATE = "TERMINATE"


class SignalKind(Enum):
    """Classified player intent for one turn."""
    ANSWER = "answer"
    DONT_KNOW = "dont_know"
    SKIP = "skip"
    CONTINUE = "continue"
    UNCLEAR = "unclear"


def age_band_for(age: int) -> AgeBand:
    """Map an age in years to its AgeBand."""
    if age <= 5:
        return AgeBand.PRESCHOOL
    if age <= 7:
        return AgeBand.YOUNG
    if age <= 9:
        return AgeBand.CHILD
    return AgeBand.PRETEEN
