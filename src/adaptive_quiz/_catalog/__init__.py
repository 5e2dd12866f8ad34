# Area: Catalog
"""
Content Catalog — immutable quiz item table shared by all sessions.
"""

from .catalog import (
    Tier,
    QuizItem,
    ContentCatalog,
    load_catalog,
    default_catalog,
    item_from_dict,
    DEFAULT_CATALOG_PATH,
)

__all__ = [
    "Tier",
    "QuizItem",
    "ContentCatalog",
    "load_catalog",
    "default_catalog",
    "item_from_dict",
    "DEFAULT_CATALOG_PATH",
]
