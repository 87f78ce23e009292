from __future__ import annotations

"""Exercise content for each task type and answer grading.

Builders are pure helpers over the catalog; the session state machine only
ever receives the boolean grade.
"""

import random
import re
from dataclasses import dataclass, field
from typing import Literal, Sequence, Union

from vocabmaster.config import DECOY_COUNT
from vocabmaster.models import Task, TaskType, Word
from vocabmaster.queue import RandomSource

BLANK = "____"
FILLER_WORDS: tuple[str, ...] = (
    "is", "the", "not", "very", "a", "to", "for", "it", "he", "she", "but", "and", "my", "your",
)
FILLER_COUNT = 2

_TILE_PUNCT_RE = re.compile(r"[.,?]")
_GRADE_PUNCT_RE = re.compile(r"[.,?!]")


def example_sentence(word: Word) -> tuple[str, str]:
    """Return (sentence, translation) for a word, falling back to a template."""
    if word.example.strip():
        return word.example.strip(), word.example_translation.strip()
    return f"I know the word {word.english}.", word.translation


def pick_decoys(
    word: Word,
    catalog: Sequence[Word],
    count: int = DECOY_COUNT,
    rng: RandomSource = random,  # type: ignore[assignment]
) -> list[Word]:
    pool = [w for w in catalog if w.id != word.id]
    return rng.sample(pool, min(count, len(pool)))


@dataclass(frozen=True)
class ChoiceChallenge:
    prompt: str
    options: list[str]
    answer: str


@dataclass(frozen=True)
class AssembleChallenge:
    sentence: str  # with BLANK in place of the word
    translation: str
    options: list[str]
    answer: str


@dataclass(frozen=True)
class ScrambleChallenge:
    sentence: str
    translation: str
    tiles: list[str]


@dataclass(frozen=True)
class SpellChallenge:
    prompt: str
    hint: str
    answer: str


def choice_challenge(word: Word, catalog: Sequence[Word], rng: RandomSource = random) -> ChoiceChallenge:  # type: ignore[assignment]
    options = [word.translation] + [d.translation for d in pick_decoys(word, catalog, DECOY_COUNT, rng)]
    rng.shuffle(options)
    return ChoiceChallenge(prompt=word.english, options=options, answer=word.translation)


def blank_out(sentence: str, english: str) -> str:
    """Replace the first case-insensitive occurrence of `english` with a blank."""
    pattern = re.compile(re.escape(english), re.IGNORECASE)
    if not pattern.search(sentence):
        return f"{sentence} ({BLANK})"
    return pattern.sub(BLANK, sentence, count=1)


def assemble_challenge(word: Word, catalog: Sequence[Word], rng: RandomSource = random) -> AssembleChallenge:  # type: ignore[assignment]
    sentence, translation = example_sentence(word)
    options = [word.english] + [d.english for d in pick_decoys(word, catalog, DECOY_COUNT, rng)]
    rng.shuffle(options)
    return AssembleChallenge(
        sentence=blank_out(sentence, word.english),
        translation=translation or word.translation,
        options=options,
        answer=word.english,
    )


def scramble_challenge(word: Word, rng: RandomSource = random) -> ScrambleChallenge:  # type: ignore[assignment]
    sentence, translation = example_sentence(word)
    parts = [p for p in _TILE_PUNCT_RE.sub("", sentence).split(" ") if p]
    present = {p.lower() for p in parts}
    fillers = [f for f in FILLER_WORDS if f not in present]
    tiles = parts + rng.sample(fillers, min(FILLER_COUNT, len(fillers)))
    rng.shuffle(tiles)
    return ScrambleChallenge(sentence=sentence, translation=translation, tiles=tiles)


def spell_challenge(word: Word) -> SpellChallenge:
    return SpellChallenge(prompt=word.translation, hint=f"{word.english[:1]}...", answer=word.english)


# ---- Match board -----------------------------------------------------------

MatchEvent = Literal["selected", "matched", "mismatch", "complete", "ignored"]


@dataclass(frozen=True)
class MatchCard:
    word_id: int
    side: Literal["en", "tr"]
    text: str


@dataclass
class MatchBoard:
    """Pairing grid for a MATCH task. Mismatches only reset the selection."""

    cards: list[MatchCard]
    matched: set[int] = field(default_factory=set)  # card indexes
    selection: list[int] = field(default_factory=list)

    @classmethod
    def build(cls, words: Sequence[Word], rng: RandomSource = random) -> "MatchBoard":  # type: ignore[assignment]
        cards: list[MatchCard] = []
        for w in words:
            cards.append(MatchCard(w.id, "en", w.english))
            cards.append(MatchCard(w.id, "tr", w.translation))
        rng.shuffle(cards)
        return cls(cards=cards)

    @property
    def is_complete(self) -> bool:
        return len(self.matched) == len(self.cards)

    def select(self, index: int) -> MatchEvent:
        if not (0 <= index < len(self.cards)) or index in self.matched or index in self.selection:
            return "ignored"
        self.selection.append(index)
        if len(self.selection) < 2:
            return "selected"
        first, second = (self.cards[i] for i in self.selection)
        pair = list(self.selection)
        self.selection.clear()
        if first.word_id != second.word_id or first.side == second.side:
            return "mismatch"
        self.matched.update(pair)
        return "complete" if self.is_complete else "matched"


Challenge = Union[ChoiceChallenge, AssembleChallenge, ScrambleChallenge, SpellChallenge, MatchBoard, None]


def build_challenge(task: Task, catalog: Sequence[Word], rng: RandomSource = random) -> Challenge:  # type: ignore[assignment]
    """Build exercise content for a task; LEARN cards have none."""
    if task.type == TaskType.CHOICE:
        return choice_challenge(task.word, catalog, rng)
    if task.type == TaskType.ASSEMBLE:
        return assemble_challenge(task.word, catalog, rng)
    if task.type == TaskType.SCRAMBLE:
        return scramble_challenge(task.word, rng)
    if task.type == TaskType.SPELL:
        return spell_challenge(task.word)
    if task.type == TaskType.MATCH:
        return MatchBoard.build(task.group_words or (task.word,), rng)
    return None


# ---- Grading ---------------------------------------------------------------


def normalize_answer(s: str) -> str:
    return s.strip().lower()


def normalize_sentence(s: str) -> str:
    """Lowercase, drop punctuation and every space so only word order matters."""
    return _GRADE_PUNCT_RE.sub("", s).lower().replace(" ", "")


def grade_spelling(text: str, word: Word) -> bool:
    return normalize_answer(text) == normalize_answer(word.english)


def grade_choice(selected: str, challenge: ChoiceChallenge) -> bool:
    return normalize_answer(selected) == normalize_answer(challenge.answer)


def grade_assemble(selected: str, challenge: AssembleChallenge) -> bool:
    return normalize_answer(selected) == normalize_answer(challenge.answer)


def grade_scramble(built: str, challenge: ScrambleChallenge) -> bool:
    return normalize_sentence(built) == normalize_sentence(challenge.sentence)
