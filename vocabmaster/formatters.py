from __future__ import annotations

import html
from typing import Sequence

from vocabmaster.exercises import (
    AssembleChallenge,
    Challenge,
    ChoiceChallenge,
    MatchBoard,
    ScrambleChallenge,
    SpellChallenge,
    example_sentence,
)
from vocabmaster.models import Task, TaskType, UserProgress, Word
from vocabmaster.progress import LessonCard, ProgressOverview
from vocabmaster.session import SessionState, SessionSummary


def escape_html(s: str) -> str:
    """Escape text for safe HTML rendering in Telegram."""
    return html.escape(s, quote=True)


def stars_line(stars: int) -> str:
    return "★" * stars + "☆" * (3 - stars)


def format_dashboard(ov: ProgressOverview) -> str:
    lines = [
        "<b>VocabMaster</b>",
        f"🔥 Streak: {ov.day_streak} day(s) • ⚡ XP: {ov.total_xp}",
        f"📘 Lesson {ov.current_lesson_index + 1} of {ov.total_lessons} • Completed: {ov.completed_lessons} • Stars: {ov.stars}",
        f"🧠 Learned words: {ov.learned_words} • Due for review: {ov.due_words}",
    ]
    return "\n".join(lines)


def format_course_list(cards: Sequence[LessonCard]) -> str:
    lines = ["<b>Courses</b>", "Pick a lesson:"]
    for c in cards:
        mark = "▶️" if c.is_current else ("✅" if c.is_completed else "▫️")
        lines.append(f"{mark} Lesson {c.index + 1} {stars_line(c.stars)}")
    return "\n".join(lines)


def format_progress_header(state: SessionState) -> str:
    label = "Review" if state.mode == "review" else f"Lesson {(state.lesson_index or 0) + 1}"
    combo = f" • 🔥 x{state.combo}" if state.combo > 1 else ""
    return f"<i>{label} • {state.current_index + 1}/{len(state.tasks)}{combo}</i>"


def format_learn_card(word: Word, is_retry: bool = False) -> str:
    sentence, translation = example_sentence(word)
    parts = []
    if is_retry:
        parts.append("🔁 Let's look at this one again")
    parts.append(f"<b>{escape_html(word.english)}</b> <i>{escape_html(word.pos)}</i>")
    parts.append(escape_html(word.translation))
    parts.append("")
    parts.append(f"- {escape_html(sentence)}")
    if translation:
        parts.append(f"  <i>{escape_html(translation)}</i>")
    return "\n".join(parts)


def format_match(board: MatchBoard) -> str:
    left = (len(board.cards) - len(board.matched)) // 2
    return "\n".join(["<b>Match the pairs</b>", f"Pairs left: {left}"])


def format_scramble(ch: ScrambleChallenge, picked: Sequence[int]) -> str:
    built = " ".join(ch.tiles[i] for i in picked) or "…"
    return "\n".join(
        [
            "<b>Build the sentence</b>",
            f"<i>{escape_html(ch.translation)}</i>",
            "",
            escape_html(built),
        ]
    )


def format_task(state: SessionState, challenge: Challenge, picked: Sequence[int] = ()) -> str:
    """Render the current task of a session."""
    task: Task | None = state.current_task
    if task is None:
        return ""
    header = format_progress_header(state)
    if task.type == TaskType.LEARN:
        body = format_learn_card(task.word, task.is_retry)
    elif isinstance(challenge, ChoiceChallenge):
        body = f"<b>{escape_html(challenge.prompt)}</b>\n\nChoose the correct translation:"
    elif isinstance(challenge, AssembleChallenge):
        body = "\n".join(
            [
                "<b>Fill in the blank</b>",
                f"<i>{escape_html(challenge.translation)}</i>",
                "",
                escape_html(challenge.sentence),
            ]
        )
    elif isinstance(challenge, ScrambleChallenge):
        body = format_scramble(challenge, picked)
    elif isinstance(challenge, SpellChallenge):
        body = "\n".join(
            [
                "<b>Type the English word</b>",
                escape_html(challenge.prompt),
                f"Hint: <code>{escape_html(challenge.hint)}</code>",
            ]
        )
    elif isinstance(challenge, MatchBoard):
        body = format_match(challenge)
    else:
        body = escape_html(task.word.english)
    return f"{header}\n\n{body}"


def format_feedback(correct: bool, task: Task, xp_gain: int) -> str:
    if correct:
        return f"✅ Correct! +{xp_gain} XP"
    return f"❌ Not quite. Answer: <b>{escape_html(task.word.english)}</b> - {escape_html(task.word.translation)}"


def format_summary(summary: SessionSummary) -> str:
    title = "Review complete!" if summary.mode == "review" else f"Lesson {(summary.lesson_index or 0) + 1} complete!"
    lines = [
        f"🎉 <b>{title}</b>",
        stars_line(summary.stars),
        f"XP earned: {summary.xp} • Mistakes: {summary.errors}",
        f"🔥 Streak: {summary.day_streak} day(s)",
    ]
    if summary.new_word_ids:
        lines.append(f"New words learned: {len(summary.new_word_ids)}")
    return "\n".join(lines)


def format_settings(progress: UserProgress) -> str:
    status = "on" if progress.reminder_enabled else "off"
    return (
        "<b>Settings</b>\n"
        f"• Daily reminder: {status}\n"
        f"• Reminder time: {escape_html(progress.reminder_time)}"
    )


def format_reminder(progress: UserProgress) -> str:
    return (
        "Time to practice! 🎓\n"
        f"Keep your {progress.day_streak}-day streak going. Tap /menu to start."
    )
