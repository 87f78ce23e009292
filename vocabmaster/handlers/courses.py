from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from vocabmaster.catalog import get_catalog, total_lessons
from vocabmaster.db import load_progress
from vocabmaster.formatters import format_course_list
from vocabmaster.keyboards import kb_courses
from vocabmaster.progress import course_list
from vocabmaster.ui import SCREEN_COURSES, show_screen


router = Router()


async def show_courses(bot, user_id: int) -> None:
    """Lesson picker: one button per lesson with its stars and completion mark."""
    progress = await load_progress(user_id)
    cards = course_list(progress, total_lessons(get_catalog()))
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_course_list(cards),
        reply_markup=kb_courses(cards),
        screen_id=SCREEN_COURSES,
    )


@router.message(Command("courses"))
async def cmd_courses(message: Message) -> None:
    assert message.from_user
    await show_courses(message.bot, message.from_user.id)


@router.callback_query(F.data == "ui:courses")
async def on_courses(cb: CallbackQuery) -> None:
    assert cb.from_user
    await show_courses(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()
