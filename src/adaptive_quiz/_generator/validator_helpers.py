# Area: Generator
"""
adaptive_quiz._generator.validator_helpers — Field-level validation helpers
===========================================================================

Helpers that check one aspect of a generator output dict against a
schema. Each returns a list of error strings.
"""

from __future__ import annotations
from typing import Any, Dict, List


def _type_name(expected: Any) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _check_required_fields(schema: Dict, output: Dict) -> List[str]:
    """Check that all required fields are present."""
    return [
        f"Missing required field: '{field}'"
        for field in schema.get("required", [])
        if field not in output
    ]


def _check_types(schema: Dict, output: Dict) -> List[str]:
    """Check field types; absent optional fields and None are skipped."""
    errors = []
    for field, expected_type in schema.get("types", {}).items():
        value = output.get(field)
        if value is None:
            continue
        if not isinstance(value, expected_type):
            errors.append(
                f"Field '{field}' has wrong type: expected {_type_name(expected_type)}, "
                f"got {type(value).__name__}"
            )
    return errors


def _check_constraints(schema: Dict, output: Dict) -> List[str]:
    errors = []
    for field, constraints in schema.get("constraints", {}).items():
        value = output.get(field)
        if value is None:
            continue
        errors.extend(_apply_constraints(field, value, constraints))
    return errors


def _apply_constraints(field: str, value: Any, constraints: Dict) -> List[str]:
    """Apply min_length / max_length / one_of to one value."""
    errors = []

    if "min_length" in constraints and hasattr(value, "__len__"):
        if len(value) < constraints["min_length"]:
            errors.append(
                f"Field '{field}' is too short: {len(value)} < {constraints['min_length']}"
            )

    if "max_length" in constraints and hasattr(value, "__len__"):
        if len(value) > constraints["max_length"]:
            errors.append(
                f"Field '{field}' is too long: {len(value)} > {constraints['max_length']}"
            )

    if "one_of" in constraints and value not in constraints["one_of"]:
        errors.append(
            f"Field '{field}' has invalid value: '{value}' not in {constraints['one_of']}"
        )

    return errors


def _check_list_item_types(schema: Dict, output: Dict) -> List[str]:
    """Check the element type of list fields."""
    errors = []
    for field, expected_type in schema.get("list_item_types", {}).items():
        items = output.get(field)
        if not isinstance(items, list):
            continue
        for i, item in enumerate(items):
            if not isinstance(item, expected_type):
                errors.append(
                    f"{field}[{i}]: expected {_type_name(expected_type)}, "
                    f"got {type(item).__name__}"
                )
    return errors


def _check_required_when(schema: Dict, output: Dict) -> List[str]:
    """Check fields that become required for particular field values."""
    errors = []
    for field, condition in schema.get("required_when", {}).items():
        applies = all(output.get(k) == v for k, v in condition.items())
        if applies and output.get(field) is None:
            when = ", ".join(f"{k}={v!r}" for k, v in condition.items())
            errors.append(f"Missing required field: '{field}' (required when {when})")
    return errors
