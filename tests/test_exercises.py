from __future__ import annotations

import random

from vocabmaster.exercises import (
    BLANK,
    FILLER_WORDS,
    MatchBoard,
    assemble_challenge,
    build_challenge,
    choice_challenge,
    example_sentence,
    grade_assemble,
    grade_choice,
    grade_scramble,
    grade_spelling,
    scramble_challenge,
    spell_challenge,
)
from vocabmaster.models import Task, TaskType, Word


APPLE = Word(1, "apple", "n.", "manzana", "I eat an Apple every morning.", "Como una manzana cada mañana.")
CATALOG = [APPLE] + [Word(i, f"word{i}", "n.", f"tr{i}") for i in range(2, 8)]


def test_example_fallback():
    w = Word(9, "cat", "n.", "gato")
    assert example_sentence(w) == ("I know the word cat.", "gato")


def test_choice_options():
    ch = choice_challenge(APPLE, CATALOG, random.Random(1))
    assert ch.prompt == "apple"
    assert len(ch.options) == 4
    assert len(set(ch.options)) == 4
    assert "manzana" in ch.options
    assert grade_choice("manzana", ch)
    assert not grade_choice(next(o for o in ch.options if o != "manzana"), ch)


def test_assemble_blanks_first_occurrence_ignoring_case():
    ch = assemble_challenge(APPLE, CATALOG, random.Random(1))
    assert ch.sentence == f"I eat an {BLANK} every morning."
    assert ch.translation == "Como una manzana cada mañana."
    assert "apple" in ch.options and len(ch.options) == 4
    assert grade_assemble(" Apple ", ch)


def test_scramble_tiles_and_grading():
    ch = scramble_challenge(APPLE, random.Random(4))
    words = ["I", "eat", "an", "Apple", "every", "morning"]
    fillers = [t for t in ch.tiles if t not in words]
    assert sorted(t for t in ch.tiles if t in words) == sorted(words)
    assert len(fillers) == 2
    assert all(f in FILLER_WORDS for f in fillers)
    assert grade_scramble("i eat an apple every morning", ch)
    assert grade_scramble("I eat an apple every morning!", ch)
    assert not grade_scramble("I eat an apple morning every", ch)


def test_spelling():
    ch = spell_challenge(APPLE)
    assert ch.prompt == "manzana"
    assert ch.hint.startswith("a")
    assert grade_spelling("  APPLE ", APPLE)
    assert not grade_spelling("aple", APPLE)


def test_match_board_flow():
    words = CATALOG[:3]
    board = MatchBoard.build(words, random.Random(2))
    assert len(board.cards) == 6

    def index_of(word_id: int, side: str) -> int:
        return next(i for i, c in enumerate(board.cards) if c.word_id == word_id and c.side == side)

    # two english cards never pair
    assert board.select(index_of(1, "en")) == "selected"
    assert board.select(index_of(2, "en")) == "mismatch"
    assert board.selection == []

    assert board.select(index_of(1, "en")) == "selected"
    assert board.select(index_of(1, "en")) == "ignored"
    assert board.select(index_of(1, "tr")) == "matched"
    assert board.select(index_of(1, "tr")) == "ignored"
    assert board.select(99) == "ignored"

    board.select(index_of(2, "tr"))
    assert board.select(index_of(2, "en")) == "matched"
    board.select(index_of(3, "en"))
    assert board.select(index_of(3, "tr")) == "complete"
    assert board.is_complete


def test_build_challenge_dispatch():
    assert build_challenge(Task("t", APPLE, TaskType.LEARN), CATALOG) is None
    match = build_challenge(Task("t", APPLE, TaskType.MATCH, group_words=tuple(CATALOG[:2])), CATALOG)
    assert isinstance(match, MatchBoard) and len(match.cards) == 4
