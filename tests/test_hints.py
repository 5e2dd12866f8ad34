# Area: Session Tests
"""Tests for hint precomputation and per-category strategies."""

import pytest

from adaptive_quiz._session.enums import Difficulty
from adaptive_quiz._session.hints import build_hint, hint_facts
from adaptive_quiz._session.strategies import DEFAULT_STRATEGY, STRATEGIES, strategy_for
from conftest import make_item


class TestHintFacts:
    """Tests for hint_facts."""

    def test_skips_opening_clue(self):
        """Test that hint facts exclude the opening clue."""
        item = make_item("gaza", "Gaza")
        assert hint_facts(item) == list(item.facts[1:])

    def test_skips_facts_repeating_the_opening_clue(self):
        """Test that facts identical to the opening clue are skipped."""
        item = make_item("gaza", "Gaza", facts=("By the sea.", "By the sea.", "Old port."))
        assert hint_facts(item) == ["Old port."]


class TestBuildHint:
    """Tests for build_hint."""

    def test_hints_follow_fact_order(self):
        """Test that hint n uses the n-th hint fact."""
        item = make_item("gaza", "Gaza")
        assert build_hint(item, Difficulty.EASY, 1).text == item.facts[1]
        assert build_hint(item, Difficulty.EASY, 2).text == item.facts[2]

    def test_generic_hint_when_facts_run_out(self):
        """Test that a generic hint is built once facts run out."""
        item = make_item("gaza", "Gaza", facts=("By the sea.",))
        hint = build_hint(item, Difficulty.EASY, 1)
        assert "coast" in hint.text
        assert "'G'" in hint.text

    @pytest.mark.parametrize("difficulty,cost", [
        (Difficulty.EASY, 0), (Difficulty.MEDIUM, 1), (Difficulty.HARD, 2),
    ])
    def test_cost_comes_from_difficulty(self, difficulty, cost):
        """Test that hint cost follows the difficulty table."""
        assert build_hint(make_item("gaza", "Gaza"), difficulty).points_deduction == cost

    def test_media_search_uses_media_hint(self):
        """Test that media search is queried with the item's media hint."""
        queries = []

        def search(query):
            queries.append(query)
            return ["https://img.example/1.jpg"]

        item = make_item("gaza", "Gaza", media_hint="Gaza harbour")
        hint = build_hint(item, Difficulty.EASY, media_search=search)
        assert queries == ["Gaza harbour"]
        assert hint.media == ("https://img.example/1.jpg",)

    def test_failing_media_search_is_ignored(self):
        """Test that a failing media search still yields a hint."""
        def search(query):
            raise ConnectionError("offline")

        hint = build_hint(make_item("gaza", "Gaza"), Difficulty.EASY, media_search=search)
        assert hint.media == ()
        assert hint.media_query == "Gaza"


class TestStrategies:
    """Tests for the category strategy table."""

    def test_known_and_unknown_categories(self):
        """Test that unknown categories fall back to the default strategy."""
        assert strategy_for("coast") is STRATEGIES["coast"]
        assert strategy_for("moon") is DEFAULT_STRATEGY

    def test_strategy_generic_hint_uses_place_phrase(self):
        """Test that the coast strategy's generic hint uses its place phrase."""
        item = make_item("gaza", "Gaza", "coast", facts=("By the sea.",))
        hint = strategy_for("coast").build_hint(item, Difficulty.MEDIUM)
        assert "a city by the sea" in hint.text
        assert hint.points_deduction == 1

    def test_select_content_exposes_the_answer(self):
        """Test that select_content exposes the correct answer."""
        item = make_item("gaza", "Gaza", aliases=("Ghazza",))
        content = strategy_for("coast").select_content(item)
        assert content["correct_answer"] == "Gaza"
        assert content["opening_clue"] == item.facts[0]
        assert content["aliases"] == ["Ghazza"]

    def test_build_prompt_names_the_category(self):
        """Test that the category prompt names the category."""
        item = make_item("x", "X", "valley")
        assert strategy_for("valley").build_prompt(item).startswith("## Category: valley")
