"""Shared fixtures: a small, fully known catalog."""

import pytest

from adaptive_quiz._catalog.catalog import ContentCatalog, QuizItem, Tier


def make_item(item_id, name, category="coast", tier=Tier.COMMON, facts=None,
              aliases=(), media_hint=None, description=None):
    """Build a QuizItem with three default facts."""
    return QuizItem(
        id=item_id,
        display_name=name,
        category=category,
        tier=tier,
        facts=tuple(facts or (
            f"Opening clue for {name}.",
            f"First hint fact for {name}.",
            f"Second hint fact for {name}.",
        )),
        media_hint=media_hint,
        aliases=tuple(aliases),
        description=description,
    )


@pytest.fixture
def catalog():
    """Six items across three tiers and four categories."""
    return ContentCatalog([
        make_item("gaza", "Gaza", "coast", Tier.COMMON, aliases=("Ghazza",),
                  description="Gaza is an old port city."),
        make_item("jaffa", "Jaffa", "coast", Tier.COMMON),
        make_item("nablus", "Nablus", "highlands", Tier.COMMON),
        make_item("hebron", "Hebron", "highlands", Tier.FAMILIAR),
        make_item("nazareth", "Nazareth", "north", Tier.FAMILIAR),
        make_item("jericho", "Jericho", "valley", Tier.OBSCURE),
    ])
