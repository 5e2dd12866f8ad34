# Area: Session
"""
adaptive_quiz._session.selector — Item Selector
===============================================

Chooses the item for a round. Pure function of its inputs plus the
catalog: no session state is read or written here.

Pool narrowing, in order:
1. Catalog minus excluded ids, intersected with the round's target tier
2. Catalog minus excluded ids (any tier)
3. Entire catalog, flagged as review mode

Within the pool the least-recently-used category wins, then an index is
drawn either from a stable seed digest or uniformly at random.
"""

from __future__ import annotations
import hashlib
import logging
import random
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .._catalog.catalog import ContentCatalog, QuizItem
from .calibration import target_tier
from .enums import AgeBand, Difficulty

logger = logging.getLogger("adaptive_quiz.selector")


@dataclass(frozen=True)
class Selection:
    """Result of one selection."""
    item: QuizItem
    is_review_mode: bool


def seeded_index(seed: int | str, round_number: int, size: int) -> int:
    """Stable index derived from (seed, round_number)."""
    digest = hashlib.sha256(f"{seed}:{round_number}".encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big") % size


def _prefer_least_recent_category(
    candidates: Sequence[QuizItem],
    category_history: Sequence[str],
) -> List[QuizItem]:
    """Keep only candidates from the least-recently-used category.

    Categories never used this session rank before any used one.
    Among used ones, the one whose last use is oldest wins.
    """
    last_used = {}
    for position, category in enumerate(category_history):
        last_used[category] = position

    def rank(item: QuizItem) -> int:
        return last_used.get(item.category, -1)

    best = min(rank(item) for item in candidates)
    return [item for item in candidates if rank(item) == best]


def select_item(
    catalog: ContentCatalog,
    exclude_ids: Iterable[str],
    round_number: int,
    difficulty: Difficulty,
    age_band: AgeBand,
    seed: Optional[int | str] = None,
    category_history: Sequence[str] = (),
    avoid_id: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> Selection:
    """
    Select the item for *round_number*.

    Args:
        catalog: Content catalog to draw from
        exclude_ids: Item ids already used (or reserved) this session
        round_number: 1-based round the item is for
        difficulty: Session difficulty
        age_band: Player age band
        seed: Optional seed; makes the choice replayable
        category_history: Categories used this session, oldest first
        avoid_id: Item to skip in review mode while alternatives exist
        rng: Random source for unseeded selection

    Returns:
        Selection with the chosen item and the review-mode flag.
        Never fails for a non-empty catalog.
    """
    if len(catalog) == 0:
        raise ValueError("Cannot select from an empty catalog")

    excluded = set(exclude_ids)
    remaining = [item for item in catalog if item.id not in excluded]
    tier = target_tier(difficulty, age_band, round_number)
    candidates = [item for item in remaining if item.tier is tier]
    is_review_mode = False

    if not candidates:
        candidates = remaining
    if not candidates:
        is_review_mode = True
        candidates = [item for item in catalog if item.id != avoid_id] or list(catalog)
        logger.info(f"Content pool exhausted at round {round_number}; review mode")

    candidates = _prefer_least_recent_category(candidates, category_history)

    if seed is not None:
        index = seeded_index(seed, round_number, len(candidates))
    else:
        index = (rng or random).randrange(len(candidates))

    item = candidates[index]
    logger.debug(
        f"Selected {item.id} for round {round_number} "
        f"(tier={tier.value}, pool={len(candidates)}, review={is_review_mode})"
    )
    return Selection(item=item, is_review_mode=is_review_mode)
