from __future__ import annotations

from datetime import datetime, timedelta, timezone

from vocabmaster.models import Task, TaskType, Word, WordStats
from vocabmaster.srs import apply_outcome, is_due, next_review_time


NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
WORD = Word(1, "apple", "n.", "manzana")


def make_task(task_type: TaskType = TaskType.CHOICE, is_retry: bool = False) -> Task:
    return Task("t-1", WORD, task_type, is_retry=is_retry)


def test_next_review_time_interval_table():
    assert next_review_time(0, NOW) == NOW + timedelta(days=1)
    assert next_review_time(3, NOW) == NOW + timedelta(days=7)
    assert next_review_time(5, NOW) == NOW + timedelta(days=30)
    # clamped into the table
    assert next_review_time(9, NOW) == NOW + timedelta(days=30)
    assert next_review_time(-1, NOW) == NOW + timedelta(days=1)


def test_success_promotes_and_schedules():
    s = apply_outcome(WordStats(word_id=1), make_task(), True, NOW)
    assert s.box == 1
    assert s.consecutive_correct == 1
    assert s.next_review_date == NOW + timedelta(days=2)


def test_success_caps_at_max_box():
    s = apply_outcome(WordStats(word_id=1, box=5, consecutive_correct=7), make_task(TaskType.SPELL), True, NOW)
    assert s.box == 5
    assert s.consecutive_correct == 8
    assert s.next_review_date == NOW + timedelta(days=30)


def test_failure_resets_to_box_zero():
    old = WordStats(word_id=1, box=4, consecutive_correct=3, next_review_date=NOW + timedelta(days=7))
    s = apply_outcome(old, make_task(TaskType.SCRAMBLE), False, NOW)
    assert s.box == 0
    assert s.consecutive_correct == 0
    assert s.next_review_date == NOW
    assert s.last_error_date == NOW


def test_learn_and_retry_success_leave_stats():
    old = WordStats(word_id=1, box=2, consecutive_correct=1)
    assert apply_outcome(old, make_task(TaskType.LEARN), True, NOW) == old
    assert apply_outcome(old, make_task(TaskType.CHOICE, is_retry=True), True, NOW) == old


def test_retry_failure_still_resets():
    old = WordStats(word_id=1, box=2, consecutive_correct=1)
    s = apply_outcome(old, make_task(TaskType.SPELL, is_retry=True), False, NOW)
    assert s.box == 0


def test_match_never_changes_stats():
    old = WordStats(word_id=1, box=3)
    assert apply_outcome(old, make_task(TaskType.MATCH), True, NOW) == old
    assert apply_outcome(old, make_task(TaskType.MATCH), False, NOW) == old


def test_is_due():
    assert is_due(WordStats(word_id=1), NOW)
    assert is_due(WordStats(word_id=1, next_review_date=NOW), NOW)
    assert not is_due(WordStats(word_id=1, next_review_date=NOW + timedelta(hours=1)), NOW)
