from __future__ import annotations

"""JSON-compatible encoding of UserProgress.

Stored objects may be partial or from an older version: every missing field
takes its default, unknown fields are ignored.
"""

import json
from datetime import datetime
from typing import Any, Mapping, Optional

from vocabmaster.config import MAX_BOX
from vocabmaster.models import LessonStats, UserProgress, WordStats


class CodecError(ValueError):
    pass


def _dt_to_str(d: Optional[datetime]) -> Optional[str]:
    return d.isoformat() if d is not None else None


def _dt_from(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError as e:
        raise CodecError(f"Invalid datetime: {value!r}") from e


def word_stats_to_dict(s: WordStats) -> dict[str, Any]:
    return {
        "word_id": s.word_id,
        "box": s.box,
        "next_review_date": _dt_to_str(s.next_review_date),
        "consecutive_correct": s.consecutive_correct,
        "last_error_date": _dt_to_str(s.last_error_date),
    }


def progress_to_dict(p: UserProgress) -> dict[str, Any]:
    return {
        "current_lesson_index": p.current_lesson_index,
        "completed_word_ids": list(p.completed_word_ids),
        "word_stats": {str(k): word_stats_to_dict(v) for k, v in p.word_stats.items()},
        "lesson_stats": {
            str(k): {"lesson_index": v.lesson_index, "stars": v.stars, "is_completed": v.is_completed}
            for k, v in p.lesson_stats.items()
        },
        "last_study_date": _dt_to_str(p.last_study_date),
        "total_xp": p.total_xp,
        "day_streak": p.day_streak,
        "reminder_enabled": p.reminder_enabled,
        "reminder_time": p.reminder_time,
    }


def _word_stats_from(key: str, raw: Mapping[str, Any]) -> WordStats:
    word_id = int(raw.get("word_id", key))
    box = int(raw.get("box", 0))
    return WordStats(
        word_id=word_id,
        box=min(max(box, 0), MAX_BOX),
        next_review_date=_dt_from(raw.get("next_review_date")),
        consecutive_correct=int(raw.get("consecutive_correct", 0)),
        last_error_date=_dt_from(raw.get("last_error_date")),
    )


def _lesson_stats_from(key: str, raw: Mapping[str, Any]) -> LessonStats:
    return LessonStats(
        lesson_index=int(raw.get("lesson_index", key)),
        stars=int(raw.get("stars", 0)),
        is_completed=raw.get("is_completed") is True,
    )


def progress_from_dict(data: Mapping[str, Any]) -> UserProgress:
    """Merge stored fields over the defaults of a fresh UserProgress."""
    if not isinstance(data, Mapping):
        raise CodecError(f"Expected an object, got {type(data).__name__}")
    default = UserProgress()
    try:
        word_stats = {
            int(k): _word_stats_from(k, v) for k, v in (data.get("word_stats") or {}).items()
        }
        lesson_stats = {
            int(k): _lesson_stats_from(k, v) for k, v in (data.get("lesson_stats") or {}).items()
        }
        completed = tuple(dict.fromkeys(int(x) for x in data.get("completed_word_ids") or []))
        return UserProgress(
            current_lesson_index=int(data.get("current_lesson_index", default.current_lesson_index)),
            completed_word_ids=completed,
            word_stats=word_stats,
            lesson_stats=lesson_stats,
            last_study_date=_dt_from(data.get("last_study_date")),
            total_xp=int(data.get("total_xp", default.total_xp)),
            day_streak=int(data.get("day_streak", default.day_streak)),
            reminder_enabled=data.get("reminder_enabled", default.reminder_enabled) is True,
            reminder_time=str(data.get("reminder_time") or default.reminder_time),
        )
    except CodecError:
        raise
    except (TypeError, ValueError, AttributeError) as e:
        raise CodecError(f"Malformed progress data: {e}") from e


def dumps_progress(p: UserProgress) -> str:
    return json.dumps(progress_to_dict(p), ensure_ascii=False, separators=(",", ":"))


def loads_progress(s: str) -> UserProgress:
    try:
        data = json.loads(s)
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON: {e}") from e
    return progress_from_dict(data)
