from __future__ import annotations

"""Pure transforms over UserProgress and read-only projections for screens.

Every function here returns a new aggregate; nothing mutates its input.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Iterable, Sequence

from vocabmaster.models import LessonStats, UserProgress, Word, WordStats
from vocabmaster.srs import is_due


def get_word_stats(progress: UserProgress, word_id: int) -> WordStats:
    """Stats for a word, or a fresh box-0 record if the word was never graded."""
    return progress.word_stats.get(word_id) or WordStats(word_id=word_id)


def record_word_stats(progress: UserProgress, stats: WordStats) -> UserProgress:
    word_stats = dict(progress.word_stats)
    word_stats[stats.word_id] = stats
    return replace(progress, word_stats=word_stats)


def record_lesson_result(progress: UserProgress, lesson_index: int, stars: int) -> UserProgress:
    """Upsert lesson stats: stars never decrease and a lesson stays completed."""
    old = progress.lesson_stats.get(lesson_index) or LessonStats(lesson_index=lesson_index)
    lesson_stats = dict(progress.lesson_stats)
    lesson_stats[lesson_index] = replace(old, stars=max(old.stars, stars), is_completed=True)
    return replace(progress, lesson_stats=lesson_stats)


def add_completed_words(progress: UserProgress, word_ids: Iterable[int]) -> UserProgress:
    merged = list(dict.fromkeys([*progress.completed_word_ids, *word_ids]))
    return replace(progress, completed_word_ids=tuple(merged))


def set_current_lesson(progress: UserProgress, lesson_index: int) -> UserProgress:
    return replace(progress, current_lesson_index=lesson_index)


def set_reminder(progress: UserProgress, enabled: bool, reminder_time: str | None = None) -> UserProgress:
    return replace(
        progress,
        reminder_enabled=enabled,
        reminder_time=reminder_time or progress.reminder_time,
    )


def study_word_ids(progress: UserProgress) -> set[int]:
    """Words the learner has seen: completed ones plus any with recorded stats."""
    return set(progress.completed_word_ids) | set(progress.word_stats.keys())


# ---- Projections -----------------------------------------------------------


@dataclass(frozen=True)
class ProgressOverview:
    current_lesson_index: int
    total_lessons: int
    learned_words: int
    tracked_words: int
    due_words: int
    total_xp: int
    day_streak: int
    completed_lessons: int
    stars: int


@dataclass(frozen=True)
class LessonCard:
    index: int
    stars: int
    is_completed: bool
    is_current: bool


def overview(progress: UserProgress, catalog: Sequence[Word], total_lessons: int, now: datetime) -> ProgressOverview:
    catalog_ids = {w.id for w in catalog}
    seen = study_word_ids(progress) & catalog_ids
    due = sum(1 for wid in seen if is_due(get_word_stats(progress, wid), now))
    completed = [ls for ls in progress.lesson_stats.values() if ls.is_completed]
    return ProgressOverview(
        current_lesson_index=progress.current_lesson_index,
        total_lessons=total_lessons,
        learned_words=len(set(progress.completed_word_ids) & catalog_ids),
        tracked_words=len(seen),
        due_words=due,
        total_xp=progress.total_xp,
        day_streak=progress.day_streak,
        completed_lessons=len(completed),
        stars=sum(ls.stars for ls in progress.lesson_stats.values()),
    )


def course_list(progress: UserProgress, total_lessons: int) -> list[LessonCard]:
    cards: list[LessonCard] = []
    for idx in range(total_lessons):
        stats = progress.lesson_stats.get(idx)
        cards.append(
            LessonCard(
                index=idx,
                stars=stats.stars if stats else 0,
                is_completed=bool(stats and stats.is_completed),
                is_current=idx == progress.current_lesson_index,
            )
        )
    return cards
