from __future__ import annotations

import random
from datetime import datetime, timezone

from vocabmaster.exercises import MatchBoard, ScrambleChallenge, build_challenge
from vocabmaster.formatters import (
    format_course_list,
    format_dashboard,
    format_feedback,
    format_learn_card,
    format_summary,
    format_task,
)
from vocabmaster.keyboards import kb_courses, kb_match, kb_options, kb_scramble, kb_summary
from vocabmaster.models import LessonStats, Task, TaskType, UserProgress, Word
from vocabmaster.progress import course_list, overview
from vocabmaster.session import SessionState, SessionSummary


NOW = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc)
WORD = Word(1, "R&D", "n.", "I+D <abbr>")
CATALOG = [WORD] + [Word(i, f"word{i}", "n.", f"tr{i}") for i in range(2, 8)]


def callback_data(markup) -> list[str]:
    return [b.callback_data for row in markup.inline_keyboard for b in row]


def test_learn_card_escapes_html():
    text = format_learn_card(WORD)
    assert "<b>R&amp;D</b>" in text
    assert "I+D &lt;abbr&gt;" in text
    assert "I know the word R&amp;D." in text


def test_task_header_shows_position_and_combo():
    tasks = tuple(Task(f"t-{i}", w, TaskType.SPELL) for i, w in enumerate(CATALOG[:3]))
    state = SessionState(mode="lesson", tasks=tasks, current_index=1, combo=3, lesson_index=0)
    text = format_task(state, build_challenge(tasks[1], CATALOG))
    assert "Lesson 1 • 2/3" in text
    assert "x3" in text
    assert "Type the English word" in text


def test_feedback():
    task = Task("t", WORD, TaskType.CHOICE)
    assert format_feedback(True, task, 14) == "✅ Correct! +14 XP"
    assert "R&amp;D" in format_feedback(False, task, 0)


def test_summary_text():
    summary = SessionSummary(
        mode="lesson", lesson_index=1, stars=2, xp=300, errors=1, scorable_tasks=22, day_streak=5, new_word_ids=(7, 8)
    )
    text = format_summary(summary)
    assert "Lesson 2 complete!" in text
    assert "★★☆" in text
    assert "New words learned: 2" in text


def test_dashboard_and_courses():
    progress = UserProgress(
        current_lesson_index=1,
        completed_word_ids=(1, 2, 3, 4, 5, 6),
        lesson_stats={0: LessonStats(lesson_index=0, stars=3, is_completed=True)},
        total_xp=1036,
        day_streak=1,
    )
    ov = overview(progress, CATALOG, 2, NOW)
    assert ov.learned_words == 6
    assert ov.due_words == 6
    assert ov.completed_lessons == 1
    assert "XP: 1036" in format_dashboard(ov)

    cards = course_list(progress, 2)
    assert [(c.index, c.stars, c.is_completed, c.is_current) for c in cards] == [
        (0, 3, True, False),
        (1, 0, False, True),
    ]
    assert "Lesson 1 ★★★" in format_course_list(cards)
    assert callback_data(kb_courses(cards)) == ["lesson:start:0", "lesson:start:1", "ui:menu"]


def test_option_and_summary_keyboards():
    assert callback_data(kb_options(4, ["a", "b"])) == ["task:opt:4:0", "task:opt:4:1", "task:quit"]
    assert callback_data(kb_summary("review"))[0] == "ui:review"
    assert callback_data(kb_summary("lesson"))[0] == "ui:lesson"


def test_scramble_keyboard_hides_picked_tiles():
    ch = ScrambleChallenge(sentence="I run.", translation="Corro.", tiles=["run", "I", "the"])
    data = callback_data(kb_scramble(7, ch, [1]))
    assert "task:tile:7:1" not in data
    assert {"task:tile:7:0", "task:tile:7:2", "task:undo:7", "task:check:7", "task:quit"} <= set(data)


def test_match_keyboard_marks_matched():
    board = MatchBoard.build(CATALOG[:2], random.Random(1))
    first = next(i for i, c in enumerate(board.cards) if c.word_id == 2 and c.side == "en")
    second = next(i for i, c in enumerate(board.cards) if c.word_id == 2 and c.side == "tr")
    board.select(first)
    board.select(second)
    texts = [b.text for row in kb_match(0, board).inline_keyboard for b in row]
    assert texts.count("✅") == 2
