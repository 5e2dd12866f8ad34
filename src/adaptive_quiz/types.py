"""
adaptive_quiz.types — TypedDict schemas for generator inputs/outputs
====================================================================

Documents the exact structure of the context dicts passed to each
QuizGenerator callback and the dicts they must return.

All types are exported from the main package:

    from adaptive_quiz import TurnContext, TurnResponse, ...

Use __annotations__ to inspect fields:

    >>> TurnResponse.__annotations__
    {'signal': ..., 'message': <class 'str'>, ...}
"""

from typing import Any, Dict, List, Literal, Optional, TypedDict


SignalValue = Literal["answer", "dont_know", "skip", "continue", "unclear"]


# ============================================
# Shared pieces
# ============================================

class ServiceInfo(TypedDict):
    """What the generator is asked to produce, and by when."""
    name: str
    description: str
    required_output_fields: List[str]
    optional_output_fields: List[str]
    deadline_seconds: Optional[float]


class LocalReading(TypedDict):
    """The engine's own reading of the player's text."""
    signal: SignalValue
    answer: Optional[str]
    correct: Optional[bool]


class TranscriptLine(TypedDict):
    round_number: int
    role: str               # "player", "host" or "system"
    kind: str               # "message", "tool_call", "tool_result" or "marker"
    content: str


# ============================================
# take_turn() Input/Output
# ============================================

class TurnDynamic(TypedDict):
    """Dynamic section of the take_turn context.

    Fields
    ------
    player_input : str
        What the player typed.
    correct_answer : str
        Exact correct-answer string for the active item.
    current_options : List[str]
        Options currently on screen (may be empty).
    system_prompt : str
        Rendered PromptBundle.
    prompt : dict
        The PromptBundle as a dict.
    """
    session_id: str
    round_number: int
    total_rounds: int
    status: str
    score: int
    difficulty: str
    age_band: str
    player_input: str
    local_reading: LocalReading
    correct_answer: str
    current_options: List[str]
    hints_used_this_round: int
    upcoming_hint: Optional[Dict[str, Any]]
    system_prompt: str
    prompt: Dict[str, Any]
    transcript: List[TranscriptLine]


class TurnContext(TypedDict):
    """Context passed to take_turn()."""
    dynamic: TurnDynamic
    service: ServiceInfo


class _TurnResponseRequired(TypedDict):
    signal: SignalValue
    message: str


class TurnResponse(_TurnResponseRequired, total=False):
    """Expected return from take_turn().

    Fields
    ------
    signal : str
        One of answer, dont_know, skip, continue, unclear.
    message : str
        The host's reply to show the player.
    correct : bool
        Required when signal is "answer".
    options : List[str], optional
        Choices for the current item. Repaired if the answer is missing.
    next_options : List[str], optional
        Choices for the next item, used when the round advances.
    """
    correct: bool
    explanation: str
    options: List[str]
    next_options: List[str]
    fun_fact: str


# ============================================
# get_final_message() Input/Output
# ============================================

class SummaryInfo(TypedDict):
    session_id: str
    score: int
    correct_count: int
    total_rounds: int
    rounds_played: int
    hints_used: int
    duration_ms: int
    bonus_earned: bool
    difficulty: str
    completed: bool


class FinalMessageDynamic(TypedDict):
    session_id: str
    round_number: int
    total_rounds: int
    status: str
    score: int
    difficulty: str
    age_band: str
    summary: SummaryInfo
    transcript: List[TranscriptLine]


class FinalMessageContext(TypedDict):
    """Context passed to get_final_message()."""
    dynamic: FinalMessageDynamic
    service: ServiceInfo


class FinalMessageResponse(TypedDict):
    """Expected return from get_final_message()."""
    message: str
