from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional, Sequence

from vocabmaster.config import XP_BASE, XP_COMBO_BONUS
from vocabmaster.models import SessionMode, Task, TaskType, UserProgress, Word
from vocabmaster.progress import (
    add_completed_words,
    get_word_stats,
    record_lesson_result,
    record_word_stats,
    set_current_lesson,
)
from vocabmaster.queue import RandomSource, build_lesson_queue, build_review_queue
from vocabmaster.srs import apply_outcome

logger = logging.getLogger(__name__)


class SessionFinishedError(RuntimeError):
    """Raised when an outcome is submitted to a session that has no current task."""


@dataclass(frozen=True)
class SessionState:
    mode: SessionMode
    tasks: tuple[Task, ...]
    current_index: int = 0
    combo: int = 0
    xp: int = 0
    errors: int = 0
    lesson_index: Optional[int] = None

    @property
    def current_task(self) -> Optional[Task]:
        if self.current_index < len(self.tasks):
            return self.tasks[self.current_index]
        return None

    @property
    def is_finished(self) -> bool:
        return self.current_index >= len(self.tasks)


@dataclass(frozen=True)
class SessionSummary:
    mode: SessionMode
    lesson_index: Optional[int]
    stars: int
    xp: int
    errors: int
    scorable_tasks: int
    day_streak: int
    new_word_ids: tuple[int, ...]


@dataclass(frozen=True)
class Outcome:
    session: SessionState
    progress: UserProgress
    xp_gain: int
    is_finished: bool
    summary: Optional[SessionSummary] = None


def start_lesson_session(
    progress: UserProgress,
    catalog: Sequence[Word],
    lesson_index: Optional[int] = None,
    rng: RandomSource = random,  # type: ignore[assignment]
    total_lessons: Optional[int] = None,
) -> tuple[UserProgress, SessionState]:
    """Build a lesson session; an explicit lesson index becomes the current lesson."""
    idx = progress.current_lesson_index if lesson_index is None else lesson_index
    if idx < 0 or (total_lessons is not None and idx >= total_lessons):
        raise ValueError(f"Lesson index out of range: {idx}")
    tasks = build_lesson_queue(idx, catalog, rng)
    if lesson_index is not None:
        progress = set_current_lesson(progress, lesson_index)
    logger.info("Lesson session started: lesson=%s tasks=%s", idx, len(tasks))
    return progress, SessionState(mode="lesson", tasks=tuple(tasks), lesson_index=idx)


def start_review_session(
    progress: UserProgress,
    catalog: Sequence[Word],
    now: datetime,
    rng: RandomSource = random,  # type: ignore[assignment]
) -> Optional[SessionState]:
    """Build a review session, or return None when nothing has been studied yet."""
    tasks = build_review_queue(progress, catalog, now, rng)
    if not tasks:
        logger.info("Review requested with no candidates")
        return None
    logger.info("Review session started: tasks=%s", len(tasks))
    return SessionState(mode="review", tasks=tuple(tasks))


def splice_penalty(tasks: Sequence[Task], index: int) -> tuple[Task, ...]:
    """Rebuild the queue after a failure at `index`.

    A LEARN re-exposure goes right after the failed task and a retry of the
    same exercise follows one slot later (SCRAMBLE retries as ASSEMBLE). With
    nothing left in the queue both penalties are simply appended.
    """
    failed = tasks[index]
    done = list(tasks[: index + 1])
    remaining = list(tasks[index + 1 :])
    retry_type = TaskType.ASSEMBLE if failed.type == TaskType.SCRAMBLE else failed.type
    # queue length only grows, so these ids stay unique within the session
    penalty_learn = Task(f"retry-{len(tasks)}", failed.word, TaskType.LEARN, is_retry=True)
    penalty_retry = Task(f"retry-{len(tasks) + 1}", failed.word, retry_type, is_retry=True)
    return tuple(done + [penalty_learn] + remaining[:1] + [penalty_retry] + remaining[1:])


def scorable_count(tasks: Sequence[Task]) -> int:
    return sum(1 for t in tasks if not t.is_retry and t.type != TaskType.LEARN)


def star_rating(errors: int, scorable: int) -> int:
    if errors == 0:
        return 3
    if errors <= scorable * 0.1:
        return 2
    return 1


def update_streak(last_study_date: Optional[datetime], streak: int, now: datetime) -> int:
    """Compare calendar days in the timezone of `now`."""
    if last_study_date is None:
        return 1
    last_day = last_study_date.astimezone(now.tzinfo).date() if now.tzinfo else last_study_date.date()
    delta = (now.date() - last_day).days
    if delta == 0:
        return streak
    if delta == 1:
        return streak + 1
    return 1


def finish_session(
    session: SessionState,
    progress: UserProgress,
    now: datetime,
) -> tuple[UserProgress, SessionSummary]:
    """Commit a finished session into progress and build its summary."""
    scorable = scorable_count(session.tasks)
    stars = star_rating(session.errors, scorable)
    streak = update_streak(progress.last_study_date, progress.day_streak, now)

    new_word_ids: tuple[int, ...] = ()
    if session.mode == "lesson" and session.lesson_index is not None:
        progress = record_lesson_result(progress, session.lesson_index, stars)
        learned = [t.word.id for t in session.tasks if t.type == TaskType.LEARN and not t.is_retry]
        known = set(progress.completed_word_ids)
        new_word_ids = tuple(wid for wid in dict.fromkeys(learned) if wid not in known)
        progress = add_completed_words(progress, learned)

    progress = replace(
        progress,
        total_xp=progress.total_xp + session.xp,
        day_streak=streak,
        last_study_date=now,
    )
    summary = SessionSummary(
        mode=session.mode,
        lesson_index=session.lesson_index,
        stars=stars,
        xp=session.xp,
        errors=session.errors,
        scorable_tasks=scorable,
        day_streak=streak,
        new_word_ids=new_word_ids,
    )
    logger.info(
        "Session finished: mode=%s lesson=%s stars=%s xp=%s errors=%s",
        session.mode,
        session.lesson_index,
        stars,
        session.xp,
        session.errors,
    )
    return progress, summary


def submit_outcome(
    session: SessionState,
    progress: UserProgress,
    success: bool,
    now: datetime,
) -> Outcome:
    """Grade the current task and advance the session by one step."""
    task = session.current_task
    if task is None:
        raise SessionFinishedError("Session is already finished")

    if success:
        xp_gain = XP_BASE + session.combo * XP_COMBO_BONUS
        combo, errors = session.combo + 1, session.errors
    else:
        xp_gain = 0
        combo, errors = 0, session.errors + 1

    if task.type != TaskType.MATCH:
        old = get_word_stats(progress, task.word.id)
        new = apply_outcome(old, task, success, now)
        if new != old:
            progress = record_word_stats(progress, new)

    tasks = session.tasks
    if not success and task.type != TaskType.MATCH:
        tasks = splice_penalty(tasks, session.current_index)
        logger.debug("Penalty tasks inserted for word %s after %s", task.word.id, task.id)

    session = replace(
        session,
        tasks=tasks,
        current_index=session.current_index + 1,
        combo=combo,
        xp=session.xp + xp_gain,
        errors=errors,
    )
    if not session.is_finished:
        return Outcome(session=session, progress=progress, xp_gain=xp_gain, is_finished=False)

    progress, summary = finish_session(session, progress, now)
    return Outcome(session=session, progress=progress, xp_gain=xp_gain, is_finished=True, summary=summary)
