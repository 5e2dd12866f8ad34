# Area: Generator
"""
adaptive_quiz._generator.validator — Output schema validation
=============================================================

Validates generator outputs against the callback schemas.
Returns a list of validation errors (empty if valid).
"""

from __future__ import annotations
from typing import Any, List

from .validator_schemas import CALLBACK_SCHEMAS
from .validator_helpers import (
    _check_constraints,
    _check_list_item_types,
    _check_required_fields,
    _check_required_when,
    _check_types,
)


def validate_output(callback_name: str, output: Any) -> List[str]:
    """
    Validate a generator callback's output against its schema.

    Parameters
    ----------
    callback_name : str
        "take_turn" or "final_message".
    output : Any
        The value returned by the generator.

    Returns
    -------
    List[str]
        Validation error messages. Empty if valid.
    """
    if callback_name not in CALLBACK_SCHEMAS:
        return [f"Unknown callback: {callback_name}"]

    if not isinstance(output, dict):
        return [f"Expected dict, got {type(output).__name__}"]

    schema = CALLBACK_SCHEMAS[callback_name]
    errors: List[str] = []
    errors.extend(_check_required_fields(schema, output))
    errors.extend(_check_types(schema, output))
    errors.extend(_check_constraints(schema, output))
    errors.extend(_check_list_item_types(schema, output))
    errors.extend(_check_required_when(schema, output))
    return errors
