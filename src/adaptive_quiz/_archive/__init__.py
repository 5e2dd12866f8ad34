# Area: Archive
"""
Archive - SQLite persistence of finished session summaries.
"""

from .repo_summaries import SummaryRepository

__all__ = ["SummaryRepository"]
