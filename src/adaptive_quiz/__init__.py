"""
adaptive_quiz — Adaptive Quiz Session Engine
============================================

Round-based quiz sessions whose questions come from an untrusted text
generator, while scoring, progression and fairness stay under the
engine's control.

Quick Start (no API key needed):
    from adaptive_quiz import QuizEngine, DemoGenerator, default_catalog
    catalog = default_catalog()
    engine = QuizEngine(catalog, DemoGenerator(catalog))
    start = engine.start_session("easy", 7)
    outcome = engine.submit_turn(start.session_id, "Jerusalem")

Custom Generator:
    from adaptive_quiz import QuizGenerator, QuizEngine
    class MyHost(QuizGenerator): ...  # Implement 2 methods
    engine = QuizEngine(catalog, MyHost())

Type Definitions
----------------
All generator input/output types are available for import:

    from adaptive_quiz import (
        TurnContext, TurnResponse,
        FinalMessageContext, FinalMessageResponse,
    )
"""

from .callbacks import QuizGenerator
from .demo_generator import DemoGenerator
from .engine import QuizEngine, StartResult, TurnOutcome
from ._config import EngineConfig, load_config
from ._catalog import ContentCatalog, QuizItem, Tier, default_catalog, load_catalog
from ._session import (
    AgeBand,
    Difficulty,
    PrecomputedHint,
    PromptBundle,
    RoundResult,
    SessionState,
    SessionStatus,
    SessionSummary,
    SignalKind,
    age_band_for,
)
from ._shared import TelemetryRecorder, get_telemetry, setup_logging
from .errors import (
    QuizEngineError,
    GeneratorUnavailableError,
    GeneratorTimeoutError,
    MalformedToolOutputError,
    InvalidPlayerSignalError,
    InvariantViolationError,
    SessionNotFoundError,
    SessionFinishedError,
)
from .types import (
    TurnContext,
    TurnResponse,
    FinalMessageContext,
    FinalMessageResponse,
)

__all__ = [
    # Main classes
    "QuizEngine",
    "QuizGenerator",
    "DemoGenerator",
    "StartResult",
    "TurnOutcome",
    "EngineConfig",
    "load_config",
    # Catalog
    "ContentCatalog",
    "QuizItem",
    "Tier",
    "default_catalog",
    "load_catalog",
    # Session values
    "AgeBand",
    "Difficulty",
    "PrecomputedHint",
    "PromptBundle",
    "RoundResult",
    "SessionState",
    "SessionStatus",
    "SessionSummary",
    "SignalKind",
    "age_band_for",
    # Logging / telemetry
    "TelemetryRecorder",
    "get_telemetry",
    "setup_logging",
    # Errors
    "QuizEngineError",
    "GeneratorUnavailableError",
    "GeneratorTimeoutError",
    "MalformedToolOutputError",
    "InvalidPlayerSignalError",
    "InvariantViolationError",
    "SessionNotFoundError",
    "SessionFinishedError",
    # Generator types
    "TurnContext",
    "TurnResponse",
    "FinalMessageContext",
    "FinalMessageResponse",
]
__version__ = "1.0.0"
