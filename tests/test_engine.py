# Area: Engine Tests
"""Tests for QuizEngine: turn pipeline, generator failures, lifecycle."""

import random
import time

import pytest

from adaptive_quiz import QuizEngine, QuizGenerator
from adaptive_quiz._archive.repo_summaries import SummaryRepository
from adaptive_quiz._catalog.catalog import ContentCatalog
from adaptive_quiz._config import EngineConfig
from adaptive_quiz._session.compactor import MARKER, TOOL_KINDS
from adaptive_quiz._session.enums import AgeBand, Difficulty, SessionStatus
from adaptive_quiz._shared.telemetry import (
    COMPLIANCE_FAILURE,
    GENERATOR_FALLBACK,
    GENERATOR_RETRY,
    INVALID_SIGNAL,
    MALFORMED_OUTPUT,
    SESSION_FINISHED,
    TelemetryRecorder,
)
from adaptive_quiz.engine import CLARIFY_MESSAGE, CONTINUE_PROMPT, RETRY_MESSAGE
from adaptive_quiz.errors import SessionFinishedError, SessionNotFoundError

UNCLEAR_TEXT = "hmm the one with the big harbour"


class ScriptedGenerator(QuizGenerator):
    """Plays back scripted turns, then echoes the engine's local reading."""

    def __init__(self, *turns, final=None):
        self.turns = list(turns)
        self.final = final if final is not None else {"message": "Bye!"}
        self.calls = 0
        self.contexts = []

    def take_turn(self, ctx):
        self.calls += 1
        self.contexts.append(ctx)
        if self.turns:
            turn = self.turns.pop(0)
            if isinstance(turn, Exception):
                raise turn
            return turn
        reading = ctx["dynamic"]["local_reading"]
        response = {"signal": reading["signal"], "message": "scripted reply"}
        if reading["signal"] == "answer":
            response["correct"] = bool(reading["correct"])
        return response

    def get_final_message(self, ctx):
        if isinstance(self.final, Exception):
            raise self.final
        return self.final


@pytest.fixture
def telemetry():
    return TelemetryRecorder()


@pytest.fixture
def make_engine(catalog, telemetry):
    def _make(generator=None, **config):
        config.setdefault("log_file", None)
        return QuizEngine(
            catalog,
            generator or ScriptedGenerator(),
            EngineConfig(**config),
            telemetry=telemetry,
            rng=random.Random(11),
        )
    return _make


def _start(engine, difficulty="easy", age=7, rounds=2):
    return engine.start_session(difficulty, age, rounds, seed="engine")


def _answer(engine, sid):
    return engine.get_state(sid).current_item.display_name


def _wrong(engine, sid):
    current = engine.get_state(sid).current_item
    return next(i.display_name for i in engine.catalog if i.id != current.id)


def _choice_of(engine, sid):
    state = engine.get_state(sid)
    return {"type": "choice", "index": state.current_options.index(state.current_item.display_name)}


class TestStartSession:
    """Tests for start_session."""

    def test_returns_opening_clue_and_options(self, make_engine):
        """Test that start_session returns the opening clue and valid options."""
        engine = make_engine()
        start = _start(engine)
        state = engine.get_state(start.session_id)
        assert start.opening_clue == state.current_item.opening_clue
        assert state.current_item.display_name in start.options
        assert len(start.options) == 2
        assert start.round_number == 1
        assert start.total_rounds == 2

    def test_age_in_years_maps_to_band(self, make_engine):
        """Test that an age in years maps to its age band."""
        engine = make_engine()
        start = engine.start_session("medium", 11)
        assert engine.get_state(start.session_id).age_band is AgeBand.PRETEEN

    def test_default_rounds_from_config(self, make_engine):
        """Test that total rounds default to the configured value."""
        engine = make_engine(default_total_rounds=3)
        start = engine.start_session(Difficulty.EASY, "young")
        assert start.total_rounds == 3

    def test_seed_replays_first_item(self, make_engine):
        """Test that the same seed picks the same first item."""
        first = make_engine()
        second = make_engine()
        a = first.start_session("easy", 7, 3, seed=99)
        b = second.start_session("easy", 7, 3, seed=99)
        assert first.get_state(a.session_id).current_item == second.get_state(b.session_id).current_item

    def test_seed_replays_whole_session(self, make_engine):
        """Test that seeded sessions given the same turns visit the same items."""
        def play(engine):
            sid = engine.start_session("easy", 7, 5, seed="replay").session_id
            turns = [
                lambda: _choice_of(engine, sid),
                lambda: {"type": "dont_know"},
                lambda: _choice_of(engine, sid),
                lambda: {"type": "dont_know"},
                lambda: {"type": "dont_know"},
                lambda: {"type": "dont_know"},
                lambda: _wrong(engine, sid),
                lambda: _answer(engine, sid),
                lambda: {"type": "skip"},
                lambda: _choice_of(engine, sid),
            ]
            visited = [engine.get_state(sid).current_item.id]
            for turn in turns:
                engine.submit_turn(sid, turn())
                state = engine.get_state(sid)
                if state.is_finished:
                    break
                visited.append(state.current_item.id)
            return visited, engine.get_state(sid)

        first_items, first_state = play(make_engine())
        second_items, second_state = play(make_engine())
        assert first_state.is_finished and second_state.is_finished
        assert first_items == second_items
        assert first_state.used_item_ids == second_state.used_item_ids
        assert len(first_state.used_item_ids) == 5
        assert first_state.score == second_state.score

    def test_prompt_bundle_matches_state(self, make_engine):
        """Test that the prompt bundle reflects the session state."""
        engine = make_engine()
        start = _start(engine)
        assert start.prompt.current_item["correct_answer"] == _answer(engine, start.session_id)
        assert engine.get_prompt(start.session_id).session["round_number"] == 1

    def test_empty_catalog_rejected(self):
        """Test that an empty catalog raises ValueError."""
        with pytest.raises(ValueError):
            QuizEngine(ContentCatalog([]), ScriptedGenerator())


class TestTextTurns:
    """Free-text turns go through the generator."""

    def test_correct_answer_advances(self, make_engine):
        """Test that a correct free-text answer scores and opens the next round."""
        generator = ScriptedGenerator()
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, f"Is it {_answer(engine, sid)}?")
        assert outcome.result.correct
        assert outcome.result.points_delta == 15
        assert outcome.message == "scripted reply"
        assert outcome.opening_clue == engine.get_state(sid).current_item.opening_clue
        assert engine.get_state(sid).round_number == 2
        assert generator.calls == 1

    def test_generator_trusted_when_local_reading_unclear(self, make_engine):
        """Test that the generator decides when the local reading is unclear."""
        generator = ScriptedGenerator({"signal": "answer", "correct": True, "message": "Yes!"})
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.result.correct
        assert outcome.message == "Yes!"

    def test_clear_local_reading_wins(self, make_engine):
        """Test that a clear wrong answer is not overridden by the generator."""
        generator = ScriptedGenerator({"signal": "answer", "correct": True, "message": "Yes!"})
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, _wrong(engine, sid))
        assert not outcome.result.correct
        assert outcome.message == "Not quite, try again!"
        assert engine.get_state(sid).score == 0

    def test_listing_every_city_defers_to_generator(self, make_engine):
        """Test that a reply naming many cities is judged by the generator."""
        generator = ScriptedGenerator({"signal": "answer", "correct": False,
                                       "message": "Pick just one!"})
        engine = make_engine(generator)
        sid = _start(engine).session_id
        every_city = " ".join(item.display_name for item in engine.catalog)
        outcome = engine.submit_turn(sid, every_city)
        assert generator.contexts[0]["dynamic"]["local_reading"]["signal"] == "unclear"
        assert not outcome.result.correct
        assert outcome.message == "Pick just one!"
        assert engine.get_state(sid).score == 0

    def test_generator_options_repaired(self, make_engine, telemetry):
        """Test that generator options missing the answer are repaired."""
        generator = ScriptedGenerator({
            "signal": "answer", "correct": False, "message": "Nope",
            "options": ["Foo", "Bar"],
        })
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, _wrong(engine, sid))
        assert len(outcome.options) == 3
        assert _answer(engine, sid) in outcome.options
        assert engine.get_state(sid).current_options == outcome.options
        assert telemetry.count(COMPLIANCE_FAILURE) == 1

    def test_unclear_everywhere_changes_nothing(self, make_engine, telemetry):
        """Test that an unclear turn asks for clarification and keeps state."""
        engine = make_engine(ScriptedGenerator({"signal": "unclear", "message": "Which one?"}))
        sid = _start(engine).session_id
        before = engine.get_state(sid)
        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.message == "Which one?"
        assert not outcome.changed_state
        assert engine.get_state(sid) == before
        assert telemetry.count(INVALID_SIGNAL) == 1

    def test_context_sent_to_generator(self, make_engine):
        """Test the context the generator receives for a turn."""
        generator = ScriptedGenerator()
        engine = make_engine(generator)
        sid = _start(engine).session_id
        engine.submit_turn(sid, "I don't know")
        dynamic = generator.contexts[0]["dynamic"]
        assert dynamic["player_input"] == "I don't know"
        assert dynamic["local_reading"]["signal"] == "dont_know"
        assert dynamic["upcoming_hint"]["hint_number"] == 1
        assert dynamic["correct_answer"] in dynamic["system_prompt"]
        assert generator.contexts[0]["service"]["name"] == "take_turn"


class TestGeneratorFailures:
    """Malformed output, outages and deadlines never corrupt state."""

    def test_malformed_twice_asks_for_retry(self, make_engine, telemetry):
        """Test that repeated malformed output returns the retry message."""
        generator = ScriptedGenerator({"message": "no signal"}, {"signal": "answer", "message": "x"})
        engine = make_engine(generator)
        sid = _start(engine).session_id
        before = engine.get_state(sid)

        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.needs_retry
        assert outcome.message == RETRY_MESSAGE
        assert engine.get_state(sid) == before
        assert generator.calls == 2
        assert telemetry.count(MALFORMED_OUTPUT) == 2
        assert telemetry.count(GENERATOR_RETRY) == 1
        assert engine.store.get(sid).consecutive_failures == 1

    def test_malformed_then_valid_applies(self, make_engine, telemetry):
        """Test that a valid retry after malformed output is applied."""
        generator = ScriptedGenerator(
            "not a dict",
            {"signal": "answer", "correct": True, "message": "Right!"},
        )
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.result.correct
        assert not outcome.needs_retry
        assert telemetry.count(GENERATOR_RETRY) == 1
        assert engine.store.get(sid).consecutive_failures == 0

    def test_outage_falls_back_to_catalog_question(self, make_engine, telemetry):
        """Test that an outage with an unclear reading re-asks from the catalog."""
        generator = ScriptedGenerator(RuntimeError("down"), RuntimeError("still down"))
        engine = make_engine(generator)
        sid = _start(engine).session_id
        before = engine.get_state(sid)

        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.needs_retry
        assert before.current_item.opening_clue in outcome.message
        for option in before.current_options:
            assert option in outcome.message
        assert engine.get_state(sid) == before
        assert telemetry.count(GENERATOR_FALLBACK) == 1

    def test_outage_with_clear_reading_still_plays(self, make_engine, telemetry):
        """Test that an outage with a clear reading still applies the turn."""
        generator = ScriptedGenerator(RuntimeError("down"), RuntimeError("down"))
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, _answer(engine, sid))
        assert outcome.result.correct
        assert outcome.message == "Correct! +15 points."
        assert telemetry.count(GENERATOR_FALLBACK) == 1

    def test_slow_generator_hits_deadline(self, make_engine):
        """Test that a generator past its deadline is treated as unavailable."""
        class SlowGenerator(ScriptedGenerator):
            def take_turn(self, ctx):
                time.sleep(1.0)
                return {"signal": "unclear", "message": "late"}

        engine = make_engine(SlowGenerator(), generator_deadline_seconds=0.05,
                             unavailable_retry_cap=0)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, UNCLEAR_TEXT)
        assert outcome.needs_retry
        assert "late" not in outcome.message

    def test_structured_signals_skip_the_generator(self, make_engine):
        """Test that structured signals never call the generator."""
        generator = ScriptedGenerator(RuntimeError("never called"))
        engine = make_engine(generator)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))
        assert outcome.result.correct
        assert generator.calls == 0


class TestHintsAndSkips:
    """Structured dont_know / skip handling."""

    def test_hard_two_hints_then_correct_nets_eleven(self, make_engine):
        """Test that two hard hints then a correct choice earn 11 points."""
        engine = make_engine()
        sid = _start(engine, difficulty="hard", age=11).session_id
        first = engine.submit_turn(sid, {"type": "dont_know"})
        second = engine.submit_turn(sid, {"type": "dont_know"})
        assert first.hint.hint_number == 1
        assert second.hint.hint_number == 2
        assert first.message.startswith("Here's a hint:")
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))
        assert outcome.result.points_delta == 11
        assert engine.get_state(sid).score == 11

    def test_dont_know_after_budget_reveals_answer(self, make_engine):
        """Test that "don't know" past the budget reveals the answer."""
        engine = make_engine()
        sid = _start(engine).session_id
        answer = _answer(engine, sid)
        engine.submit_turn(sid, {"type": "dont_know"})
        engine.submit_turn(sid, {"type": "dont_know"})
        outcome = engine.submit_turn(sid, {"type": "dont_know"})
        assert outcome.result.revealed_answer == answer
        assert answer in outcome.message
        assert engine.get_state(sid).round_number == 2

    def test_skip_uses_hints_before_giving_up(self, make_engine):
        """Test that skip serves remaining hints before giving up."""
        engine = make_engine(max_hints_per_round=1)
        sid = _start(engine).session_id
        first = engine.submit_turn(sid, {"type": "skip"})
        assert first.hint is not None
        second = engine.submit_turn(sid, {"type": "skip"})
        assert second.result.revealed_answer is not None

    def test_continue_while_awaiting_is_a_no_op(self, make_engine):
        """Test that continue while awaiting an answer changes nothing."""
        engine = make_engine()
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, {"type": "continue"})
        assert not outcome.changed_state
        assert engine.get_state(sid).status is SessionStatus.AWAITING_ANSWER

    def test_invalid_structured_signal(self, make_engine, telemetry):
        """Test that unknown signal shapes get the clarify message."""
        engine = make_engine()
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, {"type": "dance"})
        assert outcome.message == CLARIFY_MESSAGE
        assert telemetry.count(INVALID_SIGNAL) == 1
        assert engine.submit_turn(sid, 42).message == CLARIFY_MESSAGE


class TestManualAdvance:
    """auto_advance=False keeps the session at round_complete."""

    def test_waits_for_continue(self, make_engine):
        """Test that a resolved round waits for continue before advancing."""
        engine = make_engine(auto_advance=False)
        sid = _start(engine).session_id
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))
        assert engine.get_state(sid).status is SessionStatus.ROUND_COMPLETE
        assert outcome.opening_clue is None

        waiting = engine.submit_turn(sid, {"type": "answer", "text": "Gaza"})
        assert waiting.message == CONTINUE_PROMPT
        assert not waiting.changed_state

        advanced = engine.submit_turn(sid, {"type": "continue"})
        assert advanced.opening_clue is not None
        state = engine.get_state(sid)
        assert state.round_number == 2
        assert state.current_item.display_name in advanced.options

    def test_final_round_finishes_without_continue(self, make_engine):
        """Test that resolving the last round finishes the session with the bonus."""
        engine = make_engine(auto_advance=False)
        sid = _start(engine, rounds=1).session_id
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))
        assert outcome.summary is not None
        assert outcome.result.points_delta == 15 + 25
        summary = engine.get_summary(sid)
        assert summary.completed
        assert summary.score == 40


class TestLifecycle:
    """Finishing, terminating and looking sessions up."""

    def test_full_game_summary_and_final_message(self, make_engine, telemetry):
        """Test that finishing a game yields summary, bonus and final message."""
        engine = make_engine()
        sid = _start(engine, rounds=2).session_id
        engine.submit_turn(sid, _choice_of(engine, sid))
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))

        assert outcome.result.transitions == (SessionStatus.ROUND_COMPLETE, SessionStatus.FINISHED)
        assert outcome.options == ()
        assert outcome.final_message == "Bye!"
        summary = outcome.summary
        assert summary.score == 15 + 15 + 25
        assert summary.correct_count == 2
        assert summary.completed and summary.bonus_earned
        assert engine.get_summary(sid) == summary
        assert telemetry.count(SESSION_FINISHED) == 1

    def test_final_message_failure_is_tolerated(self, make_engine):
        """Test that a failing final message leaves the summary intact."""
        engine = make_engine(ScriptedGenerator(final=RuntimeError("down")))
        sid = _start(engine, rounds=1).session_id
        outcome = engine.submit_turn(sid, _choice_of(engine, sid))
        assert outcome.summary is not None
        assert outcome.final_message is None

    def test_end_session_is_idempotent(self, make_engine):
        """Test that ending a session twice returns the same summary."""
        engine = make_engine()
        sid = _start(engine, rounds=3).session_id
        engine.submit_turn(sid, _choice_of(engine, sid))
        summary = engine.end_session(sid)
        assert summary.score == 15
        assert not summary.completed
        assert summary.rounds_played == 1
        assert engine.end_session(sid) == summary
        assert engine.get_state(sid).is_finished

    def test_turn_after_finish_raises(self, make_engine):
        """Test that a turn on a finished session raises SessionFinishedError."""
        engine = make_engine()
        sid = _start(engine).session_id
        engine.end_session(sid)
        with pytest.raises(SessionFinishedError):
            engine.submit_turn(sid, "Gaza")

    def test_unknown_session(self, make_engine):
        """Test that unknown session ids raise SessionNotFoundError."""
        engine = make_engine()
        with pytest.raises(SessionNotFoundError):
            engine.submit_turn("missing", "Gaza")
        with pytest.raises(SessionNotFoundError):
            engine.get_state("missing")

    def test_discard_session(self, make_engine):
        """Test that a discarded session can no longer be found."""
        engine = make_engine()
        sid = _start(engine).session_id
        engine.discard_session(sid)
        assert sid not in engine.store

    def test_sessions_are_independent(self, make_engine):
        """Test that turns in one session do not affect another."""
        engine = make_engine()
        a = _start(engine).session_id
        b = _start(engine).session_id
        engine.submit_turn(a, _choice_of(engine, a))
        assert engine.get_state(a).score == 15
        assert engine.get_state(b).score == 0

    def test_summary_archived(self, catalog, telemetry, tmp_path):
        """Test that a finished session is written to the archive."""
        archive = SummaryRepository(str(tmp_path / "archive.db"))
        engine = QuizEngine(catalog, ScriptedGenerator(), EngineConfig(log_file=None),
                            telemetry=telemetry, archive=archive)
        sid = _start(engine, rounds=1).session_id
        engine.submit_turn(sid, _choice_of(engine, sid))
        row = archive.get_summary(sid)
        assert row["score"] == 40
        assert row["completed"] is True

    def test_archive_path_from_config(self, catalog, tmp_path):
        """Test that archive_path in the config enables archiving."""
        path = tmp_path / "from_config.db"
        engine = QuizEngine(catalog, ScriptedGenerator(),
                            EngineConfig(log_file=None, archive_path=str(path)))
        sid = _start(engine, rounds=1).session_id
        engine.end_session(sid)
        assert engine.archive.count() == 1


class TestTranscript:
    """Transcript compaction after resolved rounds."""

    def test_resolved_round_is_compacted(self, make_engine):
        """Test that a resolved round's tool entries are compacted."""
        engine = make_engine()
        sid = _start(engine).session_id
        engine.submit_turn(sid, _answer(engine, sid))
        transcript = engine.transcript(sid)
        round_one = [e for e in transcript if e.round_number == 1]
        assert not [e for e in round_one if e.kind in TOOL_KINDS]
        assert len([e for e in round_one if e.kind == MARKER]) == 1
        assert transcript[-1].round_number == 2
        assert transcript[-1].content == engine.get_state(sid).current_item.opening_clue

    def test_open_round_keeps_tool_entries(self, make_engine):
        """Test that the open round keeps its tool entries."""
        engine = make_engine()
        sid = _start(engine).session_id
        engine.submit_turn(sid, _wrong(engine, sid))
        kinds = [e.kind for e in engine.transcript(sid)]
        assert "tool_call" in kinds and "tool_result" in kinds

    def test_compaction_never_touches_state(self, make_engine):
        """Test that compaction leaves score and rounds unchanged."""
        engine = make_engine()
        sid = _start(engine, rounds=3).session_id
        engine.submit_turn(sid, _answer(engine, sid))
        state = engine.get_state(sid)
        assert state.score == 15
        assert len(state.used_item_ids) == 1
        assert state.round_number == 2
