# Area: Session
"""
adaptive_quiz._session.prompt — Prompt Assembler
================================================

Builds the PromptBundle sent to the generator on every turn: persona
and behaviour rules, current and look-ahead item data, difficulty and
age calibration, and the session's current standing.

The bundle is a frozen snapshot; ``as_dict()`` hands out copies.
"""

from __future__ import annotations
import copy
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .calibration import (
    AGE_SETTINGS,
    HINT_STYLE_GUIDE,
    VOCABULARY_GUIDE,
    complexity_guidance,
    content_complexity,
    hint_cost,
    option_count,
)
from .state import SessionState
from .strategies import strategy_for


# ══════════════════════════════════════════════════════════════
# STATIC SECTIONS
# ══════════════════════════════════════════════════════════════

PERSONA = """\
You are a cheerful quiz host for children.
- Short sentences, easy words, always encouraging
- Never discuss sad or scary topics; focus on culture, food and history
- Never write URLs"""

RULES = """\
## Game: City Explorer
You give clues about one city and the player must guess it.

### Turn protocol
- Report every turn with exactly one structured result: signal, correct,
  explanation, message, and options when you show choices
- signal is one of: answer, dont_know, skip, continue, unclear
- Use ONLY the facts in "Current Item"; do not invent facts
- CORRECT_ANSWER is the only valid answer; any other city is incorrect
- A numeric reply like "2" means the player picked the second option
- If the reply is vague, use signal "unclear" and ask them to be specific
- Never reveal the answer unless the player gives up

### Look-ahead
- "Next Item" is the city for the following round. After a correct
  answer, open the next round in the same message with its first fact
  and include next_options for it"""


# ══════════════════════════════════════════════════════════════
# BUNDLE
# ══════════════════════════════════════════════════════════════

def _freeze(data: Optional[Dict[str, Any]]) -> Optional[Mapping[str, Any]]:
    if data is None:
        return None
    return MappingProxyType(copy.deepcopy(data))


@dataclass(frozen=True)
class PromptBundle:
    """
    Read-only instruction payload for one generator call.

    Attributes:
        persona: Host persona and safety rules
        rules: Game and turn-protocol rules
        calibration: Difficulty and age calibration text
        category_notes: Category-specific guidance for the current item
        current_item: Data for the active item (includes the answer)
        next_item: Data for the look-ahead item, if any
        session: Round, score and hint standing
        option_count: How many options to show
    """
    persona: str
    rules: str
    calibration: str
    category_notes: str
    current_item: Mapping[str, Any]
    next_item: Optional[Mapping[str, Any]]
    session: Mapping[str, Any]
    option_count: int

    def render(self) -> str:
        """Render as a single system prompt."""
        parts = [self.persona, self.rules, self.calibration, self.category_notes]
        parts.append(_item_section("Current Item", self.current_item))
        if self.next_item is not None:
            parts.append(_item_section("Next Item", self.next_item))
        parts.append(
            "## Session\n"
            + "\n".join(f"- {k}: {v}" for k, v in self.session.items())
        )
        return "\n\n".join(p for p in parts if p)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "persona": self.persona,
            "rules": self.rules,
            "calibration": self.calibration,
            "category_notes": self.category_notes,
            "current_item": copy.deepcopy(dict(self.current_item)),
            "next_item": copy.deepcopy(dict(self.next_item)) if self.next_item else None,
            "session": dict(self.session),
            "option_count": self.option_count,
        }


def _item_section(title: str, item: Mapping[str, Any]) -> str:
    lines = [f"## {title}", f"CORRECT_ANSWER: {item['correct_answer']}"]
    lines.append(f"Category: {item['category']} | Tier: {item['tier']}")
    for i, fact in enumerate(item["facts"]):
        label = "Opening clue" if i == 0 else f"Fact {i}"
        lines.append(f"- {label}: {fact}")
    if item.get("aliases"):
        lines.append(f"Also accept: {', '.join(item['aliases'])}")
    return "\n".join(lines)


def calibration_text(state: SessionState) -> str:
    settings = AGE_SETTINGS[state.age_band]
    level = content_complexity(state.age_band, state.difficulty)
    count = option_count(state.difficulty, state.age_band)
    cost = hint_cost(state.difficulty)
    return "\n".join([
        f"## Difficulty: {state.difficulty.value}",
        f"- Show {count} options",
        f"- Each hint costs {cost} point(s) from this round's reward",
        f"## Age Adaptation ({settings.label}, about {settings.representative_age})",
        f"- At most {settings.max_sentences} sentences and {settings.max_words} words",
        f"- {VOCABULARY_GUIDE[settings.vocabulary]}",
        f"- {HINT_STYLE_GUIDE[settings.hint_style]}",
        f"- Emojis per message: {settings.emojis_per_message}",
        f"- {complexity_guidance(level)}",
    ])


def assemble_prompt(
    state: SessionState,
    points_per_correct: int,
    completion_bonus: int,
    max_hints_per_round: int,
    persona: str = PERSONA,
) -> PromptBundle:
    """Build the PromptBundle for the next generator call on *state*."""
    current_strategy = strategy_for(state.current_item.category)
    next_item = None
    if state.next_item is not None:
        next_item = strategy_for(state.next_item.category).select_content(state.next_item)

    session = {
        "round_number": state.round_number,
        "total_rounds": state.total_rounds,
        "score": state.score,
        "status": state.status.value,
        "hints_used_this_round": state.hints_used_this_round,
        "hints_remaining": max(0, max_hints_per_round - state.hints_used_this_round),
        "points_per_correct": points_per_correct,
        "completion_bonus": completion_bonus,
        "review_mode": state.is_review_mode,
    }

    return PromptBundle(
        persona=persona,
        rules=RULES,
        calibration=calibration_text(state),
        category_notes=current_strategy.build_prompt(state.current_item),
        current_item=_freeze(current_strategy.select_content(state.current_item)),
        next_item=_freeze(next_item),
        session=MappingProxyType(session),
        option_count=option_count(state.difficulty, state.age_band),
    )
