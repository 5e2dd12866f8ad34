# Area: Archive Tests
"""Tests for the session summary archive."""

import os
import sqlite3
import tempfile

import pytest

from adaptive_quiz._archive.repo_summaries import SummaryRepository
from adaptive_quiz._session.enums import Difficulty
from adaptive_quiz._session.state import SessionSummary


def _summary(session_id="s1", score=40, completed=True):
    return SessionSummary(
        session_id=session_id,
        score=score,
        correct_count=1,
        total_rounds=1,
        rounds_played=1,
        hints_used=0,
        duration_ms=1200,
        bonus_earned=completed,
        difficulty=Difficulty.EASY,
        completed=completed,
    )


class TestSummaryRepository:
    """Tests for SummaryRepository class."""

    @pytest.fixture
    def db_path(self):
        """Create temporary database for testing."""
        fd, path = tempfile.mkstemp(suffix=".db")
        os.close(fd)
        yield path
        os.unlink(path)

    @pytest.fixture
    def repo(self, db_path):
        """Create repository with test database."""
        return SummaryRepository(db_path)

    def test_save_and_get(self, repo):
        """Test saving and reading back a summary."""
        repo.save_summary(_summary())
        row = repo.get_summary("s1")
        assert row["score"] == 40
        assert row["difficulty"] == "easy"
        assert row["completed"] is True
        assert row["bonus_earned"] is True

    def test_get_missing_returns_none(self, repo):
        """Test that an unknown session id returns None."""
        assert repo.get_summary("nope") is None

    def test_save_replaces_same_session(self, repo):
        """Test that saving a session again replaces its row."""
        repo.save_summary(_summary(score=10, completed=False))
        repo.save_summary(_summary(score=40))
        assert repo.count() == 1
        assert repo.get_summary("s1")["score"] == 40

    def test_list_recent(self, repo):
        """Test that list_recent returns newest first up to the limit."""
        for i in range(5):
            repo.save_summary(_summary(session_id=f"s{i}"))
        recent = repo.list_recent(limit=3)
        assert [row["session_id"] for row in recent] == ["s4", "s3", "s2"]

    def test_negative_score_rejected(self, repo):
        """Test that a negative score violates the table constraint."""
        with pytest.raises(sqlite3.IntegrityError):
            repo.save_summary(_summary(score=-1))

    def test_creates_table_on_fresh_path(self, tmp_path):
        """Test that a fresh database path gets the table."""
        repo = SummaryRepository(str(tmp_path / "fresh.db"))
        assert repo.count() == 0

    def test_reopening_keeps_rows(self, db_path, repo):
        """Test that a second repository on the same file sees earlier rows."""
        repo.save_summary(_summary())
        assert SummaryRepository(db_path).get_summary("s1")["score"] == 40

    def test_failed_save_leaves_archive_unchanged(self, repo):
        """Test that a rejected row does not disturb stored summaries."""
        repo.save_summary(_summary(session_id="s1"))
        with pytest.raises(sqlite3.IntegrityError):
            repo.save_summary(_summary(session_id="s2", score=-5))
        assert repo.count() == 1
