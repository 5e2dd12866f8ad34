# Area: Session
"""
adaptive_quiz._session.calibration — Difficulty/age lookup tables
=================================================================

Pure table lookups that calibrate a session: which fame tier a round
targets, how many options are shown, what a hint costs, and how the
generator should pitch its language to the player's age band.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from .._catalog.catalog import Tier
from .enums import AgeBand, Difficulty


# ══════════════════════════════════════════════════════════════
# TIER SCHEDULE
# ══════════════════════════════════════════════════════════════

# (familiar_from_round, obscure_from_round); None = never
TIER_SCHEDULE: Dict[Difficulty, Dict[AgeBand, Tuple[Optional[int], Optional[int]]]] = {
    Difficulty.EASY: {
        AgeBand.PRESCHOOL: (None, None),
        AgeBand.YOUNG: (4, None),
        AgeBand.CHILD: (3, None),
        AgeBand.PRETEEN: (3, 6),
    },
    Difficulty.MEDIUM: {
        AgeBand.PRESCHOOL: (4, None),
        AgeBand.YOUNG: (3, None),
        AgeBand.CHILD: (2, 5),
        AgeBand.PRETEEN: (2, 4),
    },
    Difficulty.HARD: {
        AgeBand.PRESCHOOL: (3, None),
        AgeBand.YOUNG: (2, 5),
        AgeBand.CHILD: (1, 3),
        AgeBand.PRETEEN: (1, 2),
    },
}


def target_tier(difficulty: Difficulty, age_band: AgeBand, round_number: int) -> Tier:
    """Return the fame tier a round should draw from."""
    familiar_from, obscure_from = TIER_SCHEDULE[difficulty][age_band]
    if obscure_from is not None and round_number >= obscure_from:
        return Tier.OBSCURE
    if familiar_from is not None and round_number >= familiar_from:
        return Tier.FAMILIAR
    return Tier.COMMON


# ══════════════════════════════════════════════════════════════
# HINTS AND OPTIONS
# ══════════════════════════════════════════════════════════════

HINT_COST: Dict[Difficulty, int] = {
    Difficulty.EASY: 0,
    Difficulty.MEDIUM: 1,
    Difficulty.HARD: 2,
}

OPTIONS_PER_DIFFICULTY: Dict[Difficulty, int] = {
    Difficulty.EASY: 2,
    Difficulty.MEDIUM: 3,
    Difficulty.HARD: 4,
}

MIN_OPTIONS = 2


def hint_cost(difficulty: Difficulty) -> int:
    return HINT_COST[difficulty]


def option_count(difficulty: Difficulty, age_band: AgeBand) -> int:
    """Number of options to show, capped by the age band."""
    return max(MIN_OPTIONS, min(OPTIONS_PER_DIFFICULTY[difficulty],
                                AGE_SETTINGS[age_band].max_options))


# ══════════════════════════════════════════════════════════════
# AGE ADAPTATION
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AgeSettings:
    """Language limits for one age band."""
    label: str
    representative_age: int
    max_sentences: int
    max_words: int
    max_options: int
    hint_style: str
    vocabulary: str
    emojis_per_message: str


AGE_SETTINGS: Dict[AgeBand, AgeSettings] = {
    AgeBand.PRESCHOOL: AgeSettings("Preschool", 5, 2, 15, 2, "obvious", "simple", "2-3"),
    AgeBand.YOUNG: AgeSettings("Young", 7, 2, 20, 2, "obvious", "simple", "2-3"),
    AgeBand.CHILD: AgeSettings("Child", 9, 3, 30, 3, "moderate", "moderate", "1-2"),
    AgeBand.PRETEEN: AgeSettings("Pre-teen", 11, 4, 50, 4, "subtle", "rich", "1"),
}

VOCABULARY_GUIDE = {
    "simple": "Simple words only. No abstract concepts.",
    "moderate": "Everyday words. Simple history is fine.",
    "rich": "Rich vocabulary. Historical context is welcome.",
}

HINT_STYLE_GUIDE = {
    "obvious": "Hints: OBVIOUS (colours, shapes, food, animals). Give it away gently.",
    "moderate": "Hints: start general, then specific (region, landmark, food).",
    "subtle": "Hints: make them think. Reference geography, history, culture.",
}

_DIFFICULTY_OFFSET = {
    Difficulty.EASY: 0.0,
    Difficulty.MEDIUM: 1.5,
    Difficulty.HARD: 3.0,
}


def content_complexity(age_band: AgeBand, difficulty: Difficulty) -> int:
    """Complexity level 1-10 from age and difficulty."""
    age = max(4, min(12, AGE_SETTINGS[age_band].representative_age))
    age_base = 1 + ((age - 4) / 8) * 5
    return max(1, min(10, round(age_base + _DIFFICULTY_OFFSET[difficulty])))


def complexity_guidance(level: int) -> str:
    if level <= 3:
        return f"Complexity {level}/10: obvious clues (sea and oranges, famous sweets)"
    if level <= 5:
        return f"Complexity {level}/10: well-known features (landmarks, signature food)"
    if level <= 7:
        return f"Complexity {level}/10: regional and cultural clues"
    return f"Complexity {level}/10: historical context"
