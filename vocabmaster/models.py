from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Literal, Mapping, Optional

from vocabmaster.config import DEFAULT_REMINDER_TIME

SessionMode = Literal["lesson", "review"]


class TaskType(str, Enum):
    LEARN = "LEARN"  # flashcard, passive exposure
    CHOICE = "CHOICE"  # pick the translation
    ASSEMBLE = "ASSEMBLE"  # fill the blank in an example sentence
    SCRAMBLE = "SCRAMBLE"  # reorder the example sentence
    SPELL = "SPELL"  # type the word
    MATCH = "MATCH"  # pair words with translations


@dataclass(frozen=True)
class Word:
    id: int
    english: str
    pos: str
    translation: str
    example: str = ""
    example_translation: str = ""


@dataclass(frozen=True)
class WordStats:
    word_id: int
    box: int = 0
    next_review_date: Optional[datetime] = None  # None: never scheduled, due now
    consecutive_correct: int = 0
    last_error_date: Optional[datetime] = None


@dataclass(frozen=True)
class LessonStats:
    lesson_index: int
    stars: int = 0
    is_completed: bool = False


@dataclass(frozen=True)
class Task:
    id: str
    word: Word
    type: TaskType
    is_retry: bool = False
    group_words: tuple[Word, ...] = ()


@dataclass(frozen=True)
class UserProgress:
    current_lesson_index: int = 0
    completed_word_ids: tuple[int, ...] = ()
    word_stats: Mapping[int, WordStats] = field(default_factory=dict)
    lesson_stats: Mapping[int, LessonStats] = field(default_factory=dict)
    last_study_date: Optional[datetime] = None
    total_xp: int = 0
    day_streak: int = 0
    reminder_enabled: bool = False
    reminder_time: str = DEFAULT_REMINDER_TIME
