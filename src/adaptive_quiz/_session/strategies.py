# Area: Session
"""
adaptive_quiz._session.strategies — Per-category content strategies
===================================================================

Each catalog category gets one strategy with the same three operations:

- select_content(item): the item data the generator may use
- build_hint(item, difficulty, n): the catalog-derived hint
- build_prompt(item): category-specific instructions for the generator

Categories without an entry use the default strategy.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .._catalog.catalog import QuizItem
from .enums import Difficulty
from .hints import MediaSearch, build_hint
from .state import PrecomputedHint


@dataclass(frozen=True)
class CategoryStrategy:
    """Content strategy for one category tag."""
    category: str
    prompt_notes: str
    place_phrase: str

    def select_content(self, item: QuizItem) -> Dict[str, Any]:
        """Item data handed to the generator; the answer is the display name."""
        return {
            "id": item.id,
            "correct_answer": item.display_name,
            "category": item.category,
            "tier": item.tier.value,
            "facts": list(item.facts),
            "opening_clue": item.opening_clue,
            "aliases": list(item.aliases),
            "description": item.description,
        }

    def generic_hint(self, item: QuizItem) -> str:
        return (
            f"It is {self.place_phrase}, and its name starts with "
            f"'{item.display_name[:1]}'."
        )

    def build_hint(
        self,
        item: QuizItem,
        difficulty: Difficulty,
        hint_number: int = 1,
        media_search: Optional[MediaSearch] = None,
    ) -> PrecomputedHint:
        return build_hint(item, difficulty, hint_number, media_search,
                          generic_hint=self.generic_hint)

    def build_prompt(self, item: QuizItem) -> str:
        return f"## Category: {self.category}\n{self.prompt_notes}"


DEFAULT_STRATEGY = CategoryStrategy(
    category="general",
    prompt_notes="- Build hints only from the listed facts.",
    place_phrase="a place in this catalog",
)

STRATEGIES: Dict[str, CategoryStrategy] = {
    "coast": CategoryStrategy(
        category="coast",
        prompt_notes=(
            "- Coastal city: the sea, the port and fishing make good clues.\n"
            "- On hard mode, use other coastal cities as decoys."
        ),
        place_phrase="a city by the sea",
    ),
    "highlands": CategoryStrategy(
        category="highlands",
        prompt_notes=(
            "- Hill-country city: stone houses, olive groves and old markets.\n"
            "- Mention the central hills to help the player on the map."
        ),
        place_phrase="a city in the hills",
    ),
    "north": CategoryStrategy(
        category="north",
        prompt_notes=(
            "- Northern city: green valleys, lakes and mountains.\n"
            "- Point the player toward the north of the map."
        ),
        place_phrase="a city in the north",
    ),
    "south": CategoryStrategy(
        category="south",
        prompt_notes=(
            "- Southern city: desert edges, Bedouin heritage and markets.\n"
            "- Point the player toward the south of the map."
        ),
        place_phrase="a city in the south",
    ),
    "valley": CategoryStrategy(
        category="valley",
        prompt_notes=(
            "- Valley city: low, warm and fertile; palms and springs.\n"
            "- The Jordan Valley is the landmark to mention."
        ),
        place_phrase="a city in the valley",
    ),
}


def strategy_for(category: str) -> CategoryStrategy:
    return STRATEGIES.get(category, DEFAULT_STRATEGY)
