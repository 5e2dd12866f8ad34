# Area: Session
"""
adaptive_quiz._session.answer_set — Answer-Set Validator
========================================================

Repairs generator-proposed multiple-choice options so that the exact
correct answer is always present.

- Correct answer present: list returned unchanged (order preserved)
- Correct answer missing: inserted at a uniformly random index in
  [0, len(options)] and a compliance failure is recorded
- Fewer than 2 options: padded with catalog decoys, same tier first

validate_options(validate_options(x, c), c) == validate_options(x, c)
"""

from __future__ import annotations
import logging
import random
from typing import List, Optional, Sequence

from .._catalog.catalog import ContentCatalog, QuizItem
from .._shared.telemetry import COMPLIANCE_FAILURE, TelemetryRecorder
from ..errors import InvariantViolationError
from .calibration import MIN_OPTIONS

logger = logging.getLogger("adaptive_quiz.validator")


def _decoy_pool(
    catalog: ContentCatalog,
    item: Optional[QuizItem],
    taken: Sequence[str],
    rng: random.Random,
) -> List[str]:
    """Catalog names not yet used as options; same tier first."""
    taken_set = set(taken)
    same_tier, other = [], []
    for candidate in catalog:
        name = candidate.display_name
        if name in taken_set or (item is not None and candidate.id == item.id):
            continue
        if item is not None and candidate.tier is item.tier:
            same_tier.append(name)
        else:
            other.append(name)
    rng.shuffle(same_tier)
    rng.shuffle(other)
    return same_tier + other


def validate_options(
    proposed: Sequence[str],
    correct_answer: str,
    catalog: Optional[ContentCatalog] = None,
    item: Optional[QuizItem] = None,
    telemetry: Optional[TelemetryRecorder] = None,
    rng: Optional[random.Random] = None,
    session_id: Optional[str] = None,
) -> List[str]:
    """
    Return an option list guaranteed to contain *correct_answer*.

    Parameters
    ----------
    proposed : sequence of str
        Options proposed by the generator.
    correct_answer : str
        Exact correct-answer string for the active item.
    catalog, item : optional
        Source of padding decoys and the active item's tier.
    telemetry : TelemetryRecorder, optional
        Receives a compliance_failure event on repair.
    rng : random.Random, optional
        Random source for the insertion index and decoy order.
    """
    rng = rng or random.Random()
    options = list(proposed)

    if correct_answer not in options:
        index = rng.randint(0, len(options))
        options.insert(index, correct_answer)
        violation = InvariantViolationError(
            "correct_answer_in_options",
            {"item_id": item.id if item else None, "proposed": list(proposed)},
        )
        logger.warning(f"Auto-injected correct answer at index {index}: {violation}")
        if telemetry is not None:
            telemetry.record(
                COMPLIANCE_FAILURE,
                session_id=session_id,
                item_id=item.id if item else None,
                proposed=list(proposed),
                inserted_at=index,
            )

    if len(options) < MIN_OPTIONS and catalog is not None:
        for decoy in _decoy_pool(catalog, item, options, rng):
            if len(options) >= MIN_OPTIONS:
                break
            options.append(decoy)
        if len(options) < MIN_OPTIONS:
            logger.warning(f"Catalog too small to pad options: {options}")

    return options


def build_fallback_options(
    catalog: ContentCatalog,
    item: QuizItem,
    count: int,
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Catalog-only option list: correct answer plus decoys, shuffled."""
    rng = rng or random.Random()
    decoys = _decoy_pool(catalog, item, [item.display_name], rng)
    options = [item.display_name] + decoys[:max(0, count - 1)]
    rng.shuffle(options)
    return options
