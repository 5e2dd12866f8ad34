# Area: Shared
"""Error formatting for structured generator error logs."""

from __future__ import annotations
import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

RULE_WIDTH = 64

# Dynamic ctx keys shown in the session header instead of the payload dump.
SESSION_KEYS = ("session_id", "round_number", "total_rounds", "status", "score")
OMITTED_KEYS = ("prompt", "transcript")


def format_error_block(
    error_type: str,
    callback_name: str,
    deadline_seconds: Optional[float],
    input_payload: Dict[str, Any],
    output_payload: Optional[Dict[str, Any]],
    validation_errors: Optional[List[str]],
) -> str:
    """Format a structured error block for the log file and stderr.

    The session header is read from ``input_payload["dynamic"]``; the
    rendered prompt and transcript are summarised rather than dumped.
    """
    dynamic = input_payload.get("dynamic", {}) if isinstance(input_payload, dict) else {}
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")

    lines = [
        "",
        "=" * RULE_WIDTH,
        f" GENERATOR ERROR: {error_type} (turn not applied)",
        "=" * RULE_WIDTH,
        f" Timestamp:    {timestamp}",
        f" Callback:     {callback_name}",
    ]
    if deadline_seconds is not None:
        lines.append(f" Deadline:     {deadline_seconds:g}s")
    for key in SESSION_KEYS:
        if key in dynamic:
            lines.append(f" {key + ':':<13} {dynamic[key]}")
    if "player_input" in dynamic:
        lines.append(f" Player said:  {dynamic['player_input']!r}")

    lines.extend(_section("CONTEXT", _trimmed_context(input_payload)))
    if output_payload is not None:
        lines.extend(_section("GENERATOR OUTPUT", output_payload))
    if validation_errors:
        lines.append("")
        lines.append(_rule("PROBLEMS"))
        lines.extend(f"  - {error}" for error in validation_errors)

    lines.extend(["", "=" * RULE_WIDTH, ""])
    return "\n".join(lines)


def _rule(title: str) -> str:
    head = f" -- {title} "
    return head + "-" * max(RULE_WIDTH - len(head), 0)


def _section(title: str, payload: Any) -> List[str]:
    return ["", _rule(title), indent_json(payload)]


def _trimmed_context(input_payload: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(input_payload, dict):
        return input_payload
    trimmed = dict(input_payload)
    dynamic = dict(trimmed.get("dynamic", {}))
    for key in OMITTED_KEYS:
        value = dynamic.get(key)
        if isinstance(value, str):
            dynamic[key] = f"<{len(value)} chars>"
        elif isinstance(value, list):
            dynamic[key] = f"<{len(value)} entries>"
        elif isinstance(value, dict):
            dynamic[key] = f"<sections: {', '.join(value)}>"
    trimmed["dynamic"] = dynamic
    return trimmed


def indent_json(data: Any, indent: int = 2) -> str:
    """Format JSON with indentation for error logs."""
    try:
        formatted = json.dumps(data, indent=indent, default=str, ensure_ascii=False)
    except (TypeError, ValueError):
        return f"  {data!r}"
    return "\n".join("  " + line for line in formatted.split("\n"))
