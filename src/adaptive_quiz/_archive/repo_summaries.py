# Area: Archive
"""
adaptive_quiz._archive.repo_summaries — Session Summary Archive
===============================================================

One row per finished session in the session_summaries table
(schema.sql). The repository applies the schema when it is created,
so pointing it at a fresh path is enough.
"""

import logging
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .._session.state import SessionSummary

logger = logging.getLogger("adaptive_quiz.archive")

SCHEMA_PATH = Path(__file__).parent / "schema.sql"

# Summary fields stored as 0/1 integers.
FLAG_COLUMNS = ("bonus_earned", "completed")
COLUMNS = (
    "session_id", "score", "correct_count", "total_rounds", "rounds_played",
    "hints_used", "duration_ms", "bonus_earned", "difficulty", "completed",
)


def _values(summary: SessionSummary) -> tuple:
    row = summary.to_dict()
    return tuple(int(row[c]) if c in FLAG_COLUMNS else row[c] for c in COLUMNS)


def _from_row(row: sqlite3.Row) -> Dict[str, Any]:
    data = dict(row)
    for column in FLAG_COLUMNS:
        data[column] = bool(data[column])
    return data


class SummaryRepository:
    """SQLite archive of SessionSummary rows, keyed by session id."""

    def __init__(self, db_path: str = "quiz_archive.db"):
        self.db_path = db_path
        with self._connect() as conn:
            conn.executescript(SCHEMA_PATH.read_text(encoding="utf-8"))
        logger.info(f"Summary archive ready at {db_path}")

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Short-lived connection; commits on success, rolls back on error."""
        with closing(sqlite3.connect(self.db_path)) as conn:
            conn.row_factory = sqlite3.Row
            with conn:
                yield conn

    def save_summary(self, summary: SessionSummary) -> None:
        """Insert or replace the summary of one session."""
        placeholders = ", ".join("?" for _ in COLUMNS)
        with self._connect() as conn:
            conn.execute(
                f"INSERT OR REPLACE INTO session_summaries ({', '.join(COLUMNS)}) "
                f"VALUES ({placeholders})",
                _values(summary),
            )
        logger.debug(f"[{summary.session_id}] Archived summary (score {summary.score})")

    def get_summary(self, session_id: str) -> Optional[Dict[str, Any]]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM session_summaries WHERE session_id = ?", (session_id,)
            ).fetchone()
        return _from_row(row) if row else None

    def list_recent(self, limit: int = 10) -> List[Dict[str, Any]]:
        """Most recently archived summaries first."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM session_summaries "
                "ORDER BY archived_at DESC, rowid DESC LIMIT ?",
                (limit,),
            ).fetchall()
        return [_from_row(row) for row in rows]

    def count(self) -> int:
        with self._connect() as conn:
            return conn.execute("SELECT COUNT(*) FROM session_summaries").fetchone()[0]
