# Area: Generator
"""
adaptive_quiz._generator.validator_schemas — Generator output schemas
=====================================================================

Schema definitions for the two generator callbacks.
"""

from __future__ import annotations
from typing import Any, Dict

from .._session.enums import SignalKind

SIGNAL_VALUES = [kind.value for kind in SignalKind]


# ══════════════════════════════════════════════════════════════
# CALLBACK SCHEMAS
# ══════════════════════════════════════════════════════════════

CALLBACK_SCHEMAS: Dict[str, Dict[str, Any]] = {
    "take_turn": {
        "required": ["signal", "message"],
        "types": {
            "signal": str,
            "message": str,
            "correct": bool,
            "explanation": str,
            "options": list,
            "next_options": list,
            "fun_fact": str,
        },
        "constraints": {
            "signal": {"one_of": SIGNAL_VALUES},
            "message": {"min_length": 1, "max_length": 2000},
            "options": {"max_length": 6},
            "next_options": {"max_length": 6},
        },
        "list_item_types": {
            "options": str,
            "next_options": str,
        },
        # Fields required only for certain signal values
        "required_when": {
            "correct": {"signal": SignalKind.ANSWER.value},
        },
    },
    "final_message": {
        "required": ["message"],
        "types": {"message": str},
        "constraints": {
            "message": {"min_length": 1, "max_length": 2000},
        },
    },
}
