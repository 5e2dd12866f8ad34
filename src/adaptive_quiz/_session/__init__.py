# Area: Session
"""
Session layer - everything that owns or derives session state.

This package handles:
- Item selection and difficulty calibration
- Hint precomputation and answer-set repair
- Prompt assembly for the generator
- The round/score state machine
- Transcript compaction and the session store
"""

from .enums import AgeBand, Difficulty, SessionEvent, SessionStatus, SignalKind, age_band_for
from .state import PrecomputedHint, RoundResult, SessionState, SessionSummary
from .selector import Selection, select_item
from .hints import build_hint
from .answer_set import build_fallback_options, validate_options
from .prompt import PromptBundle, assemble_prompt
from .state_machine import SessionStateMachine, TransitionOutcome, TRANSITIONS
from .compactor import TranscriptEntry, compact
from .classifier import ClassifiedSignal, classify_structured, classify_text
from .store import SessionRecord, SessionStore

__all__ = [
    "AgeBand",
    "Difficulty",
    "SessionEvent",
    "SessionStatus",
    "SignalKind",
    "age_band_for",
    "PrecomputedHint",
    "RoundResult",
    "SessionState",
    "SessionSummary",
    "Selection",
    "select_item",
    "build_hint",
    "validate_options",
    "build_fallback_options",
    "PromptBundle",
    "assemble_prompt",
    "SessionStateMachine",
    "TransitionOutcome",
    "TRANSITIONS",
    "TranscriptEntry",
    "compact",
    "ClassifiedSignal",
    "classify_structured",
    "classify_text",
    "SessionRecord",
    "SessionStore",
]
