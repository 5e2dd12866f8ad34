# Area: Generator Callbacks
"""
adaptive_quiz.llm_generator — Anthropic tool-use generator
==========================================================

QuizGenerator backed by the Anthropic Messages API. Each turn forces a
single ``report_turn`` tool call whose input schema mirrors
TurnResponse, so the reply arrives as structured data rather than
free text.

Requires the ``llm`` extra:

    pip install adaptive-quiz-engine[llm]

The API key is read by the SDK from ``ANTHROPIC_API_KEY``.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from ._config import EngineConfig
from .callbacks import QuizGenerator

logger = logging.getLogger("adaptive_quiz.llm")

REPORT_TURN_TOOL: Dict[str, Any] = {
    "name": "report_turn",
    "description": (
        "Report how the player's reply was classified and the host's reply. "
        "Call this exactly once per turn."
    ),
    "input_schema": {
        "type": "object",
        "properties": {
            "signal": {
                "type": "string",
                "enum": ["answer", "dont_know", "skip", "continue", "unclear"],
            },
            "correct": {
                "type": "boolean",
                "description": "Required when signal is 'answer'.",
            },
            "explanation": {"type": "string"},
            "message": {"type": "string", "description": "Reply shown to the player."},
            "options": {"type": "array", "items": {"type": "string"}},
            "next_options": {
                "type": "array",
                "items": {"type": "string"},
                "description": "Options for the next item, when the round advances.",
            },
            "fun_fact": {"type": "string"},
        },
        "required": ["signal", "message"],
    },
}

FINAL_MESSAGE_TOOL: Dict[str, Any] = {
    "name": "final_message",
    "description": "Write the closing message for a finished game.",
    "input_schema": {
        "type": "object",
        "properties": {"message": {"type": "string"}},
        "required": ["message"],
    },
}


def _format_transcript(lines: List[Dict[str, Any]]) -> str:
    if not lines:
        return "(no previous turns)"
    return "\n".join(f"[{l['round_number']}] {l['role']}: {l['content']}" for l in lines)


def _tool_input(response: Any, tool_name: str) -> Dict[str, Any]:
    """Input of the first matching tool_use block, or {} if there is none."""
    for block in getattr(response, "content", None) or []:
        if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == tool_name:
            return dict(block.input)
    logger.warning(f"Model reply had no {tool_name} tool call")
    return {}


class AnthropicGenerator(QuizGenerator):
    """Quiz host driven by Claude through forced tool use."""

    def __init__(
        self,
        client: Any = None,
        config: Optional[EngineConfig] = None,
    ):
        """
        Args:
            client: An ``anthropic.Anthropic`` instance; created lazily if None
            config: Supplies llm_model and llm_max_tokens; defaults if None
        """
        config = config or EngineConfig()
        self.model = config.llm_model
        self.max_tokens = config.llm_max_tokens
        self._client = client if client is not None else self._init_client()

    @staticmethod
    def _init_client() -> Any:
        try:
            from anthropic import Anthropic
        except ImportError as e:
            raise ImportError(
                "AnthropicGenerator needs the 'anthropic' package: "
                "pip install adaptive-quiz-engine[llm]"
            ) from e
        return Anthropic()

    def _call_tool(self, system: str, user_text: str, tool: Dict[str, Any]) -> Dict[str, Any]:
        response = self._client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            tools=[tool],
            tool_choice={"type": "tool", "name": tool["name"]},
            messages=[{"role": "user", "content": user_text}],
        )
        return _tool_input(response, tool["name"])

    def take_turn(self, ctx: Dict[str, Any]) -> Dict[str, Any]:
        dynamic = ctx["dynamic"]
        user_text = (
            f"Conversation so far:\n{_format_transcript(dynamic['transcript'])}\n\n"
            f"Options on screen: {dynamic['current_options'] or 'none'}\n"
            f"Player says: {dynamic['player_input']}"
        )
        if dynamic.get("upcoming_hint"):
            user_text += f"\nIf they need a hint, use: {dynamic['upcoming_hint']['text']}"
        return self._call_tool(dynamic["system_prompt"], user_text, REPORT_TURN_TOOL)

    def get_final_message(self, ctx: Dict[str, Any]) -> Dict[str, Any]:
        summary = ctx["dynamic"]["summary"]
        system = "You are a cheerful quiz host for children. Keep it to two sentences."
        user_text = (
            f"The game is over. Score {summary['score']}, "
            f"{summary['correct_count']} of {summary['total_rounds']} correct, "
            f"{summary['hints_used']} hints used, bonus earned: {summary['bonus_earned']}."
        )
        return self._call_tool(system, user_text, FINAL_MESSAGE_TOOL)
