from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta

from vocabmaster.config import BOX_INTERVALS, MAX_BOX
from vocabmaster.models import Task, TaskType, WordStats


def next_review_time(box: int, now: datetime) -> datetime:
    """Return when a word in `box` becomes eligible for review again.

    The box is clamped into the interval table, so any box above the last one
    uses the longest interval.
    """
    idx = min(max(box, 0), MAX_BOX)
    return now + timedelta(days=BOX_INTERVALS[idx])


def is_due(stats: WordStats, now: datetime) -> bool:
    return stats.next_review_date is None or stats.next_review_date <= now


def apply_outcome(stats: WordStats, task: Task, success: bool, now: datetime) -> WordStats:
    """Apply Leitner rules for one graded task and return the new stats.

    MATCH never touches stats:
      - graded as a group, only on completion
    Correct:
      - LEARN and retry copies leave stats as they are
      - otherwise bump box (cap MAX_BOX), count the streak, schedule via interval table
    Incorrect:
      - back to box 0, streak reset, due immediately
    """
    if task.type == TaskType.MATCH:
        return stats

    if success:
        if task.type == TaskType.LEARN or task.is_retry:
            return stats
        box = min(stats.box + 1, MAX_BOX)
        return replace(
            stats,
            box=box,
            consecutive_correct=stats.consecutive_correct + 1,
            next_review_date=next_review_time(box, now),
        )

    return replace(
        stats,
        box=0,
        consecutive_correct=0,
        next_review_date=now,
        last_error_date=now,
    )
