from __future__ import annotations

import itertools
import random
from datetime import datetime
from typing import Callable, MutableSequence, Protocol, Sequence, TypeVar

from vocabmaster.config import (
    MATCH_GROUP_SIZE,
    REVIEW_WORD_LIMIT,
    SCRAMBLE_WORDS_PER_LESSON,
    WORDS_PER_LESSON,
)
from vocabmaster.models import Task, TaskType, UserProgress, Word
from vocabmaster.progress import get_word_stats, study_word_ids
from vocabmaster.srs import is_due

T = TypeVar("T")


class RandomSource(Protocol):
    """The slice of `random.Random` the schedulers need. The `random` module fits too."""

    def shuffle(self, x: MutableSequence) -> None: ...

    def sample(self, population: Sequence[T], k: int) -> list[T]: ...


def _id_factory(prefix: str) -> Callable[[], str]:
    counter = itertools.count()
    return lambda: f"{prefix}-{next(counter)}"


def lesson_words(lesson_index: int, catalog: Sequence[Word]) -> list[Word]:
    start = lesson_index * WORDS_PER_LESSON
    return list(catalog[start : start + WORDS_PER_LESSON])


def build_lesson_queue(
    lesson_index: int,
    catalog: Sequence[Word],
    rng: RandomSource = random,  # type: ignore[assignment]
) -> list[Task]:
    """Return the ordered task queue for one lesson.

    Phases: LEARN (catalog order) -> CHOICE -> ASSEMBLE -> SPELL -> SCRAMBLE
    (random subset), each non-LEARN phase shuffled on its own, then one MATCH
    over the whole lesson slice.
    """
    words = lesson_words(lesson_index, catalog)
    if not words:
        raise ValueError(f"Lesson {lesson_index} has no words")
    new_id = _id_factory("lesson")

    learn = [Task(new_id(), w, TaskType.LEARN) for w in words]
    phases: list[list[Task]] = []
    for task_type in (TaskType.CHOICE, TaskType.ASSEMBLE, TaskType.SPELL):
        phase = [Task(new_id(), w, task_type) for w in words]
        rng.shuffle(phase)
        phases.append(phase)

    scramble_words = rng.sample(words, min(SCRAMBLE_WORDS_PER_LESSON, len(words)))
    scramble = [Task(new_id(), w, TaskType.SCRAMBLE) for w in scramble_words]
    rng.shuffle(scramble)
    phases.append(scramble)

    match = Task(new_id(), words[0], TaskType.MATCH, group_words=tuple(words))
    return learn + [t for phase in phases for t in phase] + [match]


def order_review_candidates(
    words: Sequence[Word],
    progress: UserProgress,
    now: datetime,
    rng: RandomSource = random,  # type: ignore[assignment]
) -> list[Word]:
    """Due words first, then weaker boxes first; ties shuffled within their group."""

    def key(w: Word) -> tuple[int, int]:
        stats = get_word_stats(progress, w.id)
        return (0 if is_due(stats, now) else 1, stats.box)

    ordered: list[Word] = []
    for _, group in itertools.groupby(sorted(words, key=key), key=key):
        bucket = list(group)
        rng.shuffle(bucket)
        ordered.extend(bucket)
    return ordered


def _review_tasks_for(word: Word, box: int, new_id: Callable[[], str]) -> list[Task]:
    if box <= 1:
        types = (TaskType.LEARN, TaskType.ASSEMBLE)
    elif box <= 3:
        types = (TaskType.SCRAMBLE, TaskType.SPELL)
    else:
        types = (TaskType.SPELL,)
    return [Task(new_id(), word, t) for t in types]


def build_review_queue(
    progress: UserProgress,
    catalog: Sequence[Word],
    now: datetime,
    rng: RandomSource = random,  # type: ignore[assignment]
) -> list[Task]:
    """Return review tasks for previously studied words; empty when there is nothing to review."""
    pool = study_word_ids(progress)
    candidates = [w for w in catalog if w.id in pool]
    if not candidates:
        return []

    picked = order_review_candidates(candidates, progress, now, rng)[:REVIEW_WORD_LIMIT]
    new_id = _id_factory("review")
    tasks: list[Task] = []
    for w in picked:
        tasks.extend(_review_tasks_for(w, get_word_stats(progress, w.id).box, new_id))

    if len(picked) >= MATCH_GROUP_SIZE:
        group = tuple(picked[:MATCH_GROUP_SIZE])
        tasks.append(Task(new_id(), group[0], TaskType.MATCH, group_words=group))
    return tasks
