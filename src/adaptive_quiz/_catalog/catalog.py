# Area: Catalog
"""
adaptive_quiz._catalog.catalog — Content Catalog
================================================

Immutable table of quiz items shared read-only by every session.
Items are created once at load time and never mutated; the catalog
is injected into the engine instead of living in module globals.
"""

from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple

logger = logging.getLogger("adaptive_quiz.catalog")

DEFAULT_CATALOG_PATH = Path(__file__).parent / "data" / "cities.json"


class Tier(Enum):
    """Fame/difficulty bucket of a catalog item."""
    COMMON = "common"
    FAMILIAR = "familiar"
    OBSCURE = "obscure"


@dataclass(frozen=True)
class QuizItem:
    """
    One quiz item.

    Attributes:
        id: Unique item identifier
        display_name: The exact correct-answer string
        category: Category tag used for diversity balancing
        tier: Fame/difficulty tier
        facts: Ordered facts; facts[0] is the opening clue,
               facts[1] and facts[2] feed the hints
        media_hint: Optional media search query
        aliases: Other accepted spellings of the answer
        description: Optional narration used after a correct answer
    """

    id: str
    display_name: str
    category: str
    tier: Tier
    facts: Tuple[str, ...]
    media_hint: Optional[str] = None
    aliases: Tuple[str, ...] = ()
    description: Optional[str] = None

    @property
    def opening_clue(self) -> str:
        return self.facts[0]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "category": self.category,
            "tier": self.tier.value,
            "facts": list(self.facts),
            "media_hint": self.media_hint,
            "aliases": list(self.aliases),
            "description": self.description,
        }


class ContentCatalog:
    """Read-only, ordered collection of QuizItems."""

    def __init__(self, items: Iterable[QuizItem]):
        ordered = tuple(items)
        by_id: Dict[str, QuizItem] = {}
        for item in ordered:
            if item.id in by_id:
                raise ValueError(f"Duplicate catalog item id: {item.id}")
            if not item.facts:
                raise ValueError(f"Catalog item {item.id} has no facts")
            by_id[item.id] = item
        self._items = ordered
        self._by_id: Mapping[str, QuizItem] = MappingProxyType(by_id)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[QuizItem]:
        return iter(self._items)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    def get(self, item_id: str) -> QuizItem:
        """Return the item with *item_id*; raises KeyError if absent."""
        return self._by_id[item_id]

    @property
    def items(self) -> Tuple[QuizItem, ...]:
        return self._items

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(item.id for item in self._items)

    @property
    def categories(self) -> Tuple[str, ...]:
        seen: Dict[str, None] = {}
        for item in self._items:
            seen.setdefault(item.category, None)
        return tuple(seen)

    def by_tier(self, tier: Tier) -> Tuple[QuizItem, ...]:
        return tuple(item for item in self._items if item.tier is tier)


def item_from_dict(data: Dict[str, Any]) -> QuizItem:
    """Build a QuizItem from its JSON representation."""
    return QuizItem(
        id=data["id"],
        display_name=data["display_name"],
        category=data["category"],
        tier=Tier(data["tier"]),
        facts=tuple(data["facts"]),
        media_hint=data.get("media_hint"),
        aliases=tuple(data.get("aliases", ())),
        description=data.get("description"),
    )


def load_catalog(path: str | Path) -> ContentCatalog:
    """
    Load a catalog from a JSON file.

    The file holds either a list of items or ``{"items": [...]}``.

    Raises:
        ValueError: If an item is malformed or ids repeat
    """
    with open(path, encoding="utf-8") as f:
        raw = json.load(f)
    entries = raw["items"] if isinstance(raw, dict) else raw
    try:
        items = [item_from_dict(entry) for entry in entries]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Malformed catalog entry in {path}: {e}") from e
    catalog = ContentCatalog(items)
    logger.info(f"Loaded catalog with {len(catalog)} items from {path}")
    return catalog


def default_catalog() -> ContentCatalog:
    """Load the bundled city catalog."""
    return load_catalog(DEFAULT_CATALOG_PATH)
