# Area: Session
"""
adaptive_quiz._session.classifier — Local player-signal classification
======================================================================

Structured signals (buttons, option picks) are classified here without
a generator call. Free text gets a best-effort local reading that the
engine combines with the generator's classification.

Structured signal shapes:
    {"type": "choice", "index": 0}        0-based option index
    {"type": "answer", "text": "Gaza"}
    {"type": "dont_know"} | {"type": "skip"} | {"type": "continue"}
"""

from __future__ import annotations
import re
import unicodedata
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from .._catalog.catalog import ContentCatalog, QuizItem
from ..errors import InvalidPlayerSignalError
from .enums import SignalKind

DONT_KNOW_PHRASES = frozenset({
    "i dont know", "i do not know", "dont know", "idk", "no idea",
    "not sure", "hint", "give me a hint", "help", "another hint",
    "لا أعرف", "لا اعرف", "مش عارف", "ما بعرف",
})

SKIP_PHRASES = frozenset({
    "skip", "pass", "give up", "i give up", "tell me", "tell me the answer",
    "next question", "skip this one", "بدي أتخطى", "قلي الجواب",
})

CONTINUE_PHRASES = frozenset({
    "continue", "next", "go on", "ok", "okay", "yes", "lets go", "more",
    "next round", "يلا", "كمان",
})

# Leading words stripped before a reply is compared with item names.
FILLER_PREFIXES = tuple(sorted((
    "is it", "it is", "its", "i think", "i think it is", "i think its",
    "maybe", "the answer is", "my answer is", "i guess", "هي", "يمكن",
), key=len, reverse=True))

_PUNCTUATION = re.compile(r"[^\w\s]", re.UNICODE)
_SPACES = re.compile(r"\s+")


@dataclass(frozen=True)
class ClassifiedSignal:
    """
    A player turn reduced to one signal kind.

    ``correct`` is None when correctness is left to the generator.
    """
    kind: SignalKind
    text: str = ""
    answer: Optional[str] = None
    correct: Optional[bool] = None


def normalize(text: str) -> str:
    """Lowercase, drop apostrophes and punctuation, collapse spaces."""
    text = unicodedata.normalize("NFKC", text).replace("’", "'")
    text = text.replace("'", "")
    text = _PUNCTUATION.sub(" ", text.lower())
    return _SPACES.sub(" ", text).strip()


def names_for(item: QuizItem) -> Iterable[str]:
    yield item.display_name
    yield from item.aliases


def answer_core(text: str) -> str:
    """Normalized reply with one leading filler phrase ("is it", ...) removed."""
    said = normalize(text)
    for prefix in FILLER_PREFIXES:
        if said.startswith(prefix + " "):
            return said[len(prefix) + 1:]
    return said


def matches_item(text: str, item: QuizItem) -> bool:
    """
    True if the whole reply is the item's display name or an alias.

    A name embedded in a longer reply ("not Jaffa", a list of cities)
    does not count.
    """
    core = answer_core(text)
    return bool(core) and any(core == normalize(name) for name in names_for(item))


def find_named_item(text: str, catalog: ContentCatalog) -> Optional[QuizItem]:
    """The catalog item the whole reply names, if any."""
    for item in catalog:
        if matches_item(text, item):
            return item
    return None


def _choice_from_number(text: str, options: Sequence[str]) -> Optional[str]:
    stripped = normalize(text)
    if stripped.isdigit():
        index = int(stripped) - 1
        if 0 <= index < len(options):
            return options[index]
    return None


def classify_text(
    text: str,
    options: Sequence[str],
    item: QuizItem,
    catalog: Optional[ContentCatalog] = None,
) -> ClassifiedSignal:
    """
    Local reading of a free-text turn.

    Only a reply that is, as a whole, a number, a name or a phrase gets
    a clear reading. Anything else is UNCLEAR and the engine relies on
    the generator's classification.
    """
    said = normalize(text)
    if not said:
        return ClassifiedSignal(SignalKind.UNCLEAR, text)

    picked = _choice_from_number(text, options)
    if picked is not None:
        return ClassifiedSignal(SignalKind.ANSWER, text, picked, picked == item.display_name)

    if matches_item(text, item):
        return ClassifiedSignal(SignalKind.ANSWER, text, item.display_name, True)
    if said in DONT_KNOW_PHRASES:
        return ClassifiedSignal(SignalKind.DONT_KNOW, text)
    if said in SKIP_PHRASES:
        return ClassifiedSignal(SignalKind.SKIP, text)
    if said in CONTINUE_PHRASES:
        return ClassifiedSignal(SignalKind.CONTINUE, text)

    core = answer_core(text)
    for option in options:
        if normalize(option) == core:
            return ClassifiedSignal(SignalKind.ANSWER, text, option, False)
    if catalog is not None:
        named = find_named_item(text, catalog)
        if named is not None:
            return ClassifiedSignal(SignalKind.ANSWER, text, named.display_name, False)

    return ClassifiedSignal(SignalKind.UNCLEAR, text)


def classify_structured(
    signal: Mapping[str, Any],
    options: Sequence[str],
    item: QuizItem,
) -> ClassifiedSignal:
    """
    Classify a structured signal.

    Raises:
        InvalidPlayerSignalError: Unknown type, or an option index out of range
    """
    kind = signal.get("type")

    if kind == "choice":
        index = signal.get("index")
        if not isinstance(index, int) or isinstance(index, bool):
            raise InvalidPlayerSignalError(signal, "choice needs an integer index")
        if not 0 <= index < len(options):
            raise InvalidPlayerSignalError(signal, f"no option at index {index}")
        choice = options[index]
        return ClassifiedSignal(SignalKind.ANSWER, choice, choice, choice == item.display_name)

    if kind == "answer":
        text = signal.get("text")
        if not isinstance(text, str) or not text.strip():
            raise InvalidPlayerSignalError(signal, "answer needs non-empty text")
        correct = matches_item(text, item)
        return ClassifiedSignal(
            SignalKind.ANSWER, text,
            item.display_name if correct else text.strip(), correct,
        )

    if kind == SignalKind.DONT_KNOW.value:
        return ClassifiedSignal(SignalKind.DONT_KNOW)
    if kind == SignalKind.SKIP.value:
        return ClassifiedSignal(SignalKind.SKIP)
    if kind == SignalKind.CONTINUE.value:
        return ClassifiedSignal(SignalKind.CONTINUE)

    raise InvalidPlayerSignalError(signal, f"unknown signal type {kind!r}")
