# Area: Shared
"""
adaptive_quiz.demo_generator — Rule-based demo generator
========================================================

A ready-to-use QuizGenerator that needs no network and no API key.
It trusts the engine's local reading of the player's text and writes
short, friendly host messages from the prompt data.

Usage:
    from adaptive_quiz import DemoGenerator, QuizEngine, default_catalog

    catalog = default_catalog()
    engine = QuizEngine(catalog, DemoGenerator(catalog))
"""

from __future__ import annotations
import random
from typing import Any, Dict, List, Optional

from ._catalog.catalog import ContentCatalog
from .callbacks import QuizGenerator


class DemoGenerator(QuizGenerator):
    """
    Deterministic-enough stand-in for an LLM host.

    With a catalog it also proposes multiple-choice options (the
    correct answer plus random catalog names); without one the engine
    builds options itself.
    """

    def __init__(self, catalog: Optional[ContentCatalog] = None,
                 rng: Optional[random.Random] = None):
        self._catalog = catalog
        self._rng = rng or random.Random()

    # ── Options ───────────────────────────────────────────────

    def _options_for(self, item: Optional[Dict[str, Any]], count: int) -> List[str]:
        if item is None or self._catalog is None:
            return []
        answer = item["correct_answer"]
        names = [i.display_name for i in self._catalog if i.display_name != answer]
        options = self._rng.sample(names, min(len(names), max(0, count - 1)))
        options.insert(self._rng.randint(0, len(options)), answer)
        return options

    # ── Callback 1 ────────────────────────────────────────────

    def take_turn(self, ctx: Dict[str, Any]) -> Dict[str, Any]:
        dynamic = ctx["dynamic"]
        reading = dynamic["local_reading"]
        prompt = dynamic["prompt"]
        current = prompt["current_item"]
        count = prompt["option_count"]
        signal = reading["signal"]

        response: Dict[str, Any] = {"signal": signal}

        if signal == "answer":
            correct = bool(reading.get("correct"))
            response["correct"] = correct
            if correct:
                response["message"] = f"Yes! It's {current['correct_answer']}! Well done!"
                if current.get("description"):
                    response["fun_fact"] = current["description"]
                response["next_options"] = self._options_for(prompt.get("next_item"), count)
            else:
                response["message"] = "Not quite! Have another try."
                response["explanation"] = f"{reading.get('answer')} is not the city we're looking for."
        elif signal == "dont_know":
            hint = dynamic.get("upcoming_hint")
            if hint:
                response["message"] = f"Here's a hint: {hint['text']}"
            else:
                response["message"] = "That's okay! Let's see the answer."
        elif signal == "skip":
            response["message"] = "No problem, let's move on!"
        elif signal == "continue":
            response["message"] = "Let's keep going!"
            response["next_options"] = self._options_for(prompt.get("next_item"), count)
        else:
            response["message"] = "Can you pick one of the options or say a city name?"

        if signal != "answer" or not response.get("correct"):
            if not dynamic.get("current_options"):
                response["options"] = self._options_for(current, count)
        return response

    # ── Callback 2 ────────────────────────────────────────────

    def get_final_message(self, ctx: Dict[str, Any]) -> Dict[str, Any]:
        summary = ctx["dynamic"]["summary"]
        text = (
            f"Great game! You found {summary['correct_count']} of "
            f"{summary['total_rounds']} cities and scored {summary['score']} points."
        )
        if summary.get("bonus_earned"):
            text += " You earned the completion bonus!"
        return {"message": text}
