# Area: Session
"""
adaptive_quiz._session.compactor — History Compactor
====================================================

Keeps the generator transcript bounded. Once a round resolves, its tool
exchanges collapse into a single marker entry; plain messages survive.
Nothing here can touch score, round or used items, which live in
SessionState.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

# Entry kinds
MESSAGE = "message"
TOOL_CALL = "tool_call"
TOOL_RESULT = "tool_result"
MARKER = "marker"

TOOL_KINDS = frozenset({TOOL_CALL, TOOL_RESULT})


@dataclass(frozen=True)
class TranscriptEntry:
    """One transcript line sent back to the generator as context."""
    round_number: int
    role: str
    kind: str
    content: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "round_number": self.round_number,
            "role": self.role,
            "kind": self.kind,
            "content": self.content,
        }


def resolved_marker(round_number: int, summary: str = "") -> TranscriptEntry:
    text = f"[round {round_number} resolved]"
    if summary:
        text = f"{text} {summary}"
    return TranscriptEntry(round_number, "system", MARKER, text)


def compact(
    transcript: Sequence[TranscriptEntry],
    resolved_round: int,
    summary: str = "",
) -> List[TranscriptEntry]:
    """
    Collapse the tool exchanges of *resolved_round* into one marker.

    The marker takes the position of the round's first tool entry. A
    round with no tool entries, or one already compacted, comes back
    unchanged, so compacting twice is the same as compacting once.
    """
    result: List[TranscriptEntry] = []
    marker_placed = any(
        e.round_number == resolved_round and e.kind == MARKER for e in transcript
    )
    for entry in transcript:
        if entry.round_number == resolved_round and entry.kind in TOOL_KINDS:
            if not marker_placed:
                result.append(resolved_marker(resolved_round, summary))
                marker_placed = True
            continue
        result.append(entry)
    return result
