# Area: Session Tests
"""Tests for local player-signal classification."""

import pytest

from adaptive_quiz._session.classifier import (
    answer_core,
    classify_structured,
    classify_text,
    matches_item,
    normalize,
)
from adaptive_quiz._session.enums import SignalKind
from adaptive_quiz.errors import InvalidPlayerSignalError

OPTIONS = ("Jaffa", "Gaza", "Nablus")


class TestNormalize:
    def test_strips_punctuation_and_case(self):
        """Test that case, punctuation and apostrophes are dropped."""
        assert normalize("  I DON'T know!!  ") == "i dont know"

    def test_curly_apostrophe(self):
        """Test that curly apostrophes normalize like straight ones."""
        assert normalize("don’t know") == "dont know"

    def test_answer_core_strips_one_filler(self):
        """Test that a single leading filler phrase is removed."""
        assert answer_core("Is it Gaza?") == "gaza"
        assert answer_core("I think it is Gaza") == "gaza"
        assert answer_core("not Gaza") == "not gaza"


class TestClassifyText:
    """Tests for classify_text."""

    def test_correct_name_with_filler(self, catalog):
        """Test that 'Is it Gaza?' is read as the correct answer."""
        signal = classify_text("Is it Gaza?", OPTIONS, catalog.get("gaza"))
        assert signal.kind is SignalKind.ANSWER
        assert signal.correct is True
        assert signal.answer == "Gaza"

    def test_alias_counts_as_correct(self, catalog):
        """Test that an alias is accepted as the correct answer."""
        assert classify_text("ghazza", OPTIONS, catalog.get("gaza")).correct is True

    def test_reply_naming_several_cities_is_unclear(self, catalog):
        """Test that listing many names never wins the round locally."""
        text = "Gaza Jaffa Nablus Hebron Nazareth Jericho"
        signal = classify_text(text, OPTIONS, catalog.get("jaffa"), catalog)
        assert signal.kind is SignalKind.UNCLEAR
        assert signal.correct is None

    @pytest.mark.parametrize("text", ["not Jaffa", "Jaffa or Gaza", "is it jaffa or nablus"])
    def test_name_inside_other_text_is_unclear(self, catalog, text):
        """Test that the answer embedded in a longer reply is left to the generator."""
        signal = classify_text(text, OPTIONS, catalog.get("jaffa"), catalog)
        assert signal.kind is SignalKind.UNCLEAR

    def test_option_number(self, catalog):
        """Test that a 1-based option number picks that option."""
        item = catalog.get("gaza")
        assert classify_text("2", OPTIONS, item).correct is True
        wrong = classify_text("1", OPTIONS, item)
        assert wrong.correct is False
        assert wrong.answer == "Jaffa"

    def test_number_out_of_range_is_unclear(self, catalog):
        """Test that an option number past the list is unclear."""
        assert classify_text("9", OPTIONS, catalog.get("gaza")).kind is SignalKind.UNCLEAR

    def test_other_option_is_incorrect(self, catalog):
        """Test that naming a different option is an incorrect answer."""
        signal = classify_text("nablus", OPTIONS, catalog.get("gaza"))
        assert signal.kind is SignalKind.ANSWER
        assert signal.correct is False

    def test_other_catalog_name_is_incorrect(self, catalog):
        """Test that naming another catalog item is an incorrect answer."""
        signal = classify_text("I think Jericho", OPTIONS, catalog.get("gaza"), catalog)
        assert signal.correct is False
        assert signal.answer == "Jericho"

    @pytest.mark.parametrize("text,kind", [
        ("I don't know", SignalKind.DONT_KNOW),
        ("hint", SignalKind.DONT_KNOW),
        ("لا أعرف", SignalKind.DONT_KNOW),
        ("I give up", SignalKind.SKIP),
        ("skip", SignalKind.SKIP),
        ("next", SignalKind.CONTINUE),
        ("OK!", SignalKind.CONTINUE),
    ])
    def test_phrases(self, catalog, text, kind):
        """Test that known phrases map to their signal kinds."""
        assert classify_text(text, OPTIONS, catalog.get("gaza")).kind is kind

    @pytest.mark.parametrize("text", ["", "   ", "the one with the big harbour"])
    def test_unclear(self, catalog, text):
        """Test that blank or unmatched text is unclear."""
        assert classify_text(text, OPTIONS, catalog.get("gaza"), catalog).kind is SignalKind.UNCLEAR

    def test_matches_whole_words_only(self, catalog):
        """Test that a name prefix inside a longer word does not match."""
        assert not matches_item("gazapedia", catalog.get("gaza"))


class TestClassifyStructured:
    """Tests for classify_structured."""

    def test_choice_by_index(self, catalog):
        """Test that a 0-based choice index selects the option."""
        signal = classify_structured({"type": "choice", "index": 1}, OPTIONS, catalog.get("gaza"))
        assert signal.kind is SignalKind.ANSWER
        assert signal.correct is True

    @pytest.mark.parametrize("index", [3, -1, "1", True, None])
    def test_bad_choice_index(self, catalog, index):
        """Test that non-integer or out-of-range indexes are rejected."""
        with pytest.raises(InvalidPlayerSignalError):
            classify_structured({"type": "choice", "index": index}, OPTIONS, catalog.get("gaza"))

    def test_answer_text(self, catalog):
        """Test that a typed answer is checked against the item's names."""
        item = catalog.get("gaza")
        assert classify_structured({"type": "answer", "text": "Gaza"}, OPTIONS, item).correct
        wrong = classify_structured({"type": "answer", "text": " Jaffa "}, OPTIONS, item)
        assert wrong.correct is False
        assert wrong.answer == "Jaffa"

    def test_answer_listing_names_is_incorrect(self, catalog):
        """Test that a typed answer naming several cities is not correct."""
        item = catalog.get("gaza")
        signal = classify_structured({"type": "answer", "text": "Gaza Jaffa"}, OPTIONS, item)
        assert signal.correct is False

    def test_empty_answer_rejected(self, catalog):
        """Test that a blank typed answer raises."""
        with pytest.raises(InvalidPlayerSignalError):
            classify_structured({"type": "answer", "text": "  "}, OPTIONS, catalog.get("gaza"))

    @pytest.mark.parametrize("kind", ["dont_know", "skip", "continue"])
    def test_simple_signals(self, catalog, kind):
        """Test that bare signal types map to their SignalKind."""
        signal = classify_structured({"type": kind}, OPTIONS, catalog.get("gaza"))
        assert signal.kind is SignalKind(kind)

    def test_unknown_type(self, catalog):
        """Test that an unknown signal type raises with its name in the reason."""
        with pytest.raises(InvalidPlayerSignalError) as exc_info:
            classify_structured({"type": "dance"}, OPTIONS, catalog.get("gaza"))
        assert "dance" in exc_info.value.reason
