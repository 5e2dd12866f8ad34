# Area: Shared
"""
adaptive_quiz._config — Engine Configuration
============================================

EngineConfig model, JSON config loading and QUIZ_* environment
overrides. Environment values win over file values.
"""

from __future__ import annotations
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

logger = logging.getLogger("adaptive_quiz.config")

ENV_PREFIX = "QUIZ_"


class EngineConfig(BaseModel):
    """Scoring, retry and deadline settings for a QuizEngine."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Scoring
    points_per_correct: int = Field(15, ge=0)
    completion_bonus: int = Field(25, ge=0)
    default_total_rounds: int = Field(5, ge=1)
    max_hints_per_round: int = Field(2, ge=0)

    # Generator failure handling
    malformed_retry_cap: int = Field(1, ge=0)
    unavailable_retry_cap: int = Field(1, ge=0)
    generator_deadline_seconds: Optional[float] = Field(30.0, gt=0)
    final_message_deadline_seconds: Optional[float] = Field(15.0, gt=0)

    # Round flow
    auto_advance: bool = True
    hint_on_incorrect: bool = False

    # Anthropic generator
    llm_model: str = "claude-3-5-haiku-latest"
    llm_max_tokens: int = Field(1000, gt=0)

    # Output
    log_file: Optional[str] = "adaptive_quiz.log"
    archive_path: Optional[str] = None

    @model_validator(mode="after")
    def _check_rounds(self) -> "EngineConfig":
        if self.default_total_rounds > 100:
            raise ValueError("default_total_rounds must be <= 100")
        return self


def env_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Collect QUIZ_<FIELD> values from the environment."""
    environ = os.environ if environ is None else environ
    overrides: Dict[str, Any] = {}
    for name in EngineConfig.model_fields:
        key = f"{ENV_PREFIX}{name.upper()}"
        if key in environ:
            value = environ[key]
            overrides[name] = None if value.strip().lower() in ("", "none", "null") else value
    return overrides


def load_config(
    path: Optional[str | Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> EngineConfig:
    """
    Build an EngineConfig from an optional JSON file plus the environment.

    Raises:
        FileNotFoundError: If *path* does not exist
        ValueError: On invalid JSON or invalid values (pydantic ValidationError)
    """
    data: Dict[str, Any] = {}
    if path is not None:
        with open(path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file must contain a JSON object: {path}")
        data.update(loaded)
        logger.debug(f"Loaded config from {path}")

    data.update(env_overrides(environ))
    return EngineConfig(**data)
