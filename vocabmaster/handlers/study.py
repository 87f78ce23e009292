from __future__ import annotations

"""Study flow: lesson and review sessions driven through inline buttons.

Pure session logic lives in vocabmaster.session; this module only wires it to
Telegram updates, the live session store and stored progress.
"""

import logging
from datetime import datetime, timezone

from aiogram import F, Router
from aiogram.filters import Command, CommandObject
from aiogram.types import CallbackQuery, InlineKeyboardMarkup, Message

from vocabmaster.catalog import get_catalog, total_lessons
from vocabmaster.db import load_progress, save_progress, set_awaiting_input
from vocabmaster.exercises import (
    AssembleChallenge,
    ChoiceChallenge,
    MatchBoard,
    ScrambleChallenge,
    SpellChallenge,
    build_challenge,
    grade_assemble,
    grade_choice,
    grade_scramble,
    grade_spelling,
)
from vocabmaster.formatters import format_feedback, format_summary, format_task
from vocabmaster.handlers.menu import show_menu
from vocabmaster.keyboards import kb_learn, kb_match, kb_options, kb_scramble, kb_spell, kb_summary
from vocabmaster.models import TaskType
from vocabmaster.session import (
    SessionState,
    start_lesson_session,
    start_review_session,
    submit_outcome,
)
from vocabmaster.store import LiveSession, store
from vocabmaster.ui import SCREEN_STUDY, SCREEN_SUMMARY, show_screen
from vocabmaster.validators import validate_lesson_number


logger = logging.getLogger(__name__)

router = Router()


def _task_keyboard(live: LiveSession) -> InlineKeyboardMarkup:
    n = live.state.current_index
    ch = live.challenge
    if isinstance(ch, (ChoiceChallenge, AssembleChallenge)):
        return kb_options(n, ch.options)
    if isinstance(ch, ScrambleChallenge):
        return kb_scramble(n, ch, live.picked_tiles)
    if isinstance(ch, MatchBoard):
        return kb_match(n, ch)
    if isinstance(ch, SpellChallenge):
        return kb_spell()
    return kb_learn(n)


async def _render(bot, user_id: int, live: LiveSession, prefix: str | None = None) -> None:
    text = format_task(live.state, live.challenge, live.picked_tiles)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=f"{prefix}\n\n{text}" if prefix else text,
        reply_markup=_task_keyboard(live),
        screen_id=SCREEN_STUDY,
    )


async def _begin(bot, user_id: int, state: SessionState) -> None:
    task = state.current_task
    assert task is not None
    # A half-finished settings prompt must not swallow typed answers
    await set_awaiting_input(user_id, None)
    live = LiveSession(state=state, challenge=build_challenge(task, get_catalog()))
    await store.put(user_id, live)
    await _render(bot, user_id, live)


async def start_lesson(bot, user_id: int, lesson_index: int | None = None) -> None:
    catalog = get_catalog()
    progress = await load_progress(user_id)
    try:
        progress, state = start_lesson_session(
            progress, catalog, lesson_index, total_lessons=total_lessons(catalog)
        )
    except ValueError as e:
        logger.warning("Lesson start failed for user %s: %s", user_id, e)
        await show_menu(bot, user_id, prefix="This lesson is not available.")
        return
    await save_progress(user_id, progress)
    await _begin(bot, user_id, state)


async def start_review(bot, user_id: int) -> None:
    progress = await load_progress(user_id)
    state = start_review_session(progress, get_catalog(), datetime.now(timezone.utc))
    if state is None:
        await show_menu(bot, user_id, prefix="Nothing to review yet. Finish a lesson first!")
        return
    await _begin(bot, user_id, state)


async def _submit(bot, user_id: int, live: LiveSession, position: int, success: bool) -> bool:
    """Grade the task at `position`, persist stats and move to the next screen.

    Returns False without grading when the session has already moved past
    `position` (a repeated tap on the same answer).
    """
    async with live.lock:
        if live.state.current_index != position or live.state.is_finished:
            return False
        task = live.state.current_task
        assert task is not None
        progress = await load_progress(user_id)
        outcome = submit_outcome(live.state, progress, success, datetime.now(timezone.utc))
        await save_progress(user_id, outcome.progress)
        live.state = outcome.session

        feedback = None if task.type == TaskType.LEARN else format_feedback(success, task, outcome.xp_gain)
        if outcome.is_finished:
            assert outcome.summary is not None
            await store.clear(user_id)
            text = format_summary(outcome.summary)
            await show_screen(
                bot=bot,
                user_id=user_id,
                text=f"{feedback}\n\n{text}" if feedback else text,
                reply_markup=kb_summary(outcome.summary.mode),
                screen_id=SCREEN_SUMMARY,
            )
            return True

        next_task = outcome.session.current_task
        assert next_task is not None
        live.challenge = build_challenge(next_task, get_catalog())
        live.picked_tiles = []
        await _render(bot, user_id, live, feedback)
        return True


def _task_args(data: str) -> tuple[int, list[int]]:
    """Split `task:<action>:<position>[:<arg>]` into the task position and the args."""
    _, _, *rest = data.split(":")
    position, *args = (int(x) for x in rest)
    return position, args


async def _live_task(cb: CallbackQuery) -> tuple[LiveSession, int, list[int]] | None:
    """The live session a task button belongs to, or None for stale buttons."""
    assert cb.from_user and cb.data
    live = await store.get(cb.from_user.id)
    if live is None or live.state.is_finished:
        await cb.answer("No active session.")
        await show_menu(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
        return None
    try:
        position, args = _task_args(cb.data)
    except ValueError:
        await cb.answer("This question is no longer active")
        return None
    if position != live.state.current_index:
        await cb.answer("This question is no longer active")
        return None
    return live, position, args


@router.message(Command("lesson"))
async def cmd_lesson(message: Message, command: CommandObject) -> None:
    assert message.from_user
    user_id = message.from_user.id
    if not command.args:
        await start_lesson(message.bot, user_id)
        return
    n_lessons = total_lessons(get_catalog())
    ok, err = validate_lesson_number(command.args, n_lessons)
    if not ok:
        await message.answer(err or "Invalid lesson.")
        return
    await start_lesson(message.bot, user_id, int(command.args.strip()) - 1)


@router.message(Command("review"))
async def cmd_review(message: Message) -> None:
    assert message.from_user
    await start_review(message.bot, message.from_user.id)


@router.callback_query(F.data == "ui:lesson")
async def on_lesson(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    live = await store.get(user_id)
    if live is not None and live.state.mode == "lesson" and not live.state.is_finished:
        # Resume the running lesson
        await _render(cb.message.bot, user_id, live)  # type: ignore[union-attr]
    else:
        await start_lesson(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:review")
async def on_review(cb: CallbackQuery) -> None:
    assert cb.from_user
    await start_review(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("lesson:start:"))
async def on_lesson_pick(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    _, _, idx_s = cb.data.split(":", 2)
    await start_lesson(cb.message.bot, cb.from_user.id, int(idx_s))  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:ok:"))
async def on_learn_ok(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, position, _ = found
    if live.challenge is not None:
        await cb.answer()
        return
    await _submit(cb.message.bot, cb.from_user.id, live, position, True)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:opt:"))
async def on_option(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, position, args = found
    ch = live.challenge
    idx = args[0] if args else -1
    if not isinstance(ch, (ChoiceChallenge, AssembleChallenge)) or not (0 <= idx < len(ch.options)):
        await cb.answer("This question is no longer active")
        return
    selected = ch.options[idx]
    correct = grade_choice(selected, ch) if isinstance(ch, ChoiceChallenge) else grade_assemble(selected, ch)
    await _submit(cb.message.bot, cb.from_user.id, live, position, correct)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:tile:"))
async def on_tile(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, _, args = found
    ch = live.challenge
    idx = args[0] if args else -1
    if not isinstance(ch, ScrambleChallenge) or not (0 <= idx < len(ch.tiles)) or idx in live.picked_tiles:
        await cb.answer()
        return
    live.picked_tiles.append(idx)
    await _render(cb.message.bot, cb.from_user.id, live)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:undo:"))
async def on_tile_undo(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, _, _ = found
    if not isinstance(live.challenge, ScrambleChallenge) or not live.picked_tiles:
        await cb.answer()
        return
    live.picked_tiles.pop()
    await _render(cb.message.bot, cb.from_user.id, live)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:check:"))
async def on_tile_check(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, position, _ = found
    ch = live.challenge
    if not isinstance(ch, ScrambleChallenge):
        await cb.answer()
        return
    if not live.picked_tiles:
        await cb.answer("Tap the words to build the sentence first.")
        return
    built = " ".join(ch.tiles[i] for i in live.picked_tiles)
    await _submit(cb.message.bot, cb.from_user.id, live, position, grade_scramble(built, ch))  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data.startswith("task:match:"))
async def on_match(cb: CallbackQuery) -> None:
    found = await _live_task(cb)
    if found is None:
        return
    live, position, args = found
    board = live.challenge
    if not isinstance(board, MatchBoard) or not args:
        await cb.answer()
        return
    event = board.select(args[0])
    if event == "complete":
        await _submit(cb.message.bot, cb.from_user.id, live, position, True)  # type: ignore[union-attr]
    elif event != "ignored":
        await _render(cb.message.bot, cb.from_user.id, live)  # type: ignore[union-attr]
    await cb.answer("Not a pair, try again" if event == "mismatch" else None)


@router.callback_query(F.data == "task:quit")
async def on_quit(cb: CallbackQuery) -> None:
    assert cb.from_user
    # Abandoned sessions are not committed
    await store.clear(cb.from_user.id)
    await show_menu(cb.message.bot, cb.from_user.id, prefix="Session closed.")  # type: ignore[union-attr]
    await cb.answer()


async def _spelling_in_progress(message: Message) -> bool:
    if not message.from_user or not message.text or message.text.startswith("/"):
        return False
    live = await store.get(message.from_user.id)
    return live is not None and isinstance(live.challenge, SpellChallenge)


@router.message(F.text, _spelling_in_progress)
async def on_spelling(message: Message) -> None:
    assert message.from_user and message.text
    user_id = message.from_user.id
    live = await store.get(user_id)
    if live is None or live.state.current_task is None:
        return
    task = live.state.current_task
    correct = grade_spelling(message.text, task.word)
    await _submit(message.bot, user_id, live, live.state.current_index, correct)
