# Area: Session
"""
adaptive_quiz._session.hints — Hint Precomputation
==================================================

Builds hints straight from catalog facts, never from generator output,
so hint text and cost stay auditable.

Fact usage: facts[0] is the opening clue; hint n uses facts[n], skipping
any fact that repeats the opening clue. When facts run out, a generic
hint is built from the item's category and initial.
"""

from __future__ import annotations
import logging
from typing import Callable, List, Optional, Sequence, Tuple

from .._catalog.catalog import QuizItem
from .calibration import hint_cost
from .enums import Difficulty
from .state import PrecomputedHint

logger = logging.getLogger("adaptive_quiz.hints")

# query -> list of media URLs
MediaSearch = Callable[[str], Sequence[str]]

OPENING_FACT_INDEX = 0
DEFAULT_HINT_BUDGET = 2


def hint_facts(item: QuizItem) -> List[str]:
    """Facts usable as hints, in order, excluding the opening clue."""
    opening = item.facts[OPENING_FACT_INDEX].strip()
    return [
        fact for fact in item.facts[OPENING_FACT_INDEX + 1:]
        if fact.strip() and fact.strip() != opening
    ]


def _generic_hint(item: QuizItem) -> str:
    return (
        f"It belongs to the {item.category} group, and its name starts "
        f"with '{item.display_name[:1]}'."
    )


def _fetch_media(media_search: Optional[MediaSearch], query: str) -> Tuple[str, ...]:
    """Best-effort media lookup; never raises."""
    if media_search is None:
        return ()
    try:
        return tuple(media_search(query) or ())
    except Exception as e:
        logger.warning(f"Media search failed for {query!r}: {e}")
        return ()


def build_hint(
    item: QuizItem,
    difficulty: Difficulty,
    hint_number: int = 1,
    media_search: Optional[MediaSearch] = None,
    generic_hint: Optional[Callable[[QuizItem], str]] = None,
) -> PrecomputedHint:
    """
    Build hint number *hint_number* (1-based) for *item*.

    The cost is a table lookup on *difficulty*. *generic_hint* replaces
    the default wording once the item's facts run out.
    """
    facts = hint_facts(item)
    if hint_number - 1 < len(facts):
        text = facts[hint_number - 1]
    else:
        text = (generic_hint or _generic_hint)(item)

    query = item.media_hint or item.display_name
    return PrecomputedHint(
        item_id=item.id,
        hint_number=hint_number,
        text=text,
        points_deduction=hint_cost(difficulty),
        media_query=query,
        media=_fetch_media(media_search, query),
    )

