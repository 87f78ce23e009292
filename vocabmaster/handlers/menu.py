from __future__ import annotations

from datetime import datetime, timezone

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from vocabmaster.catalog import get_catalog, total_lessons
from vocabmaster.db import load_progress
from vocabmaster.formatters import format_dashboard
from vocabmaster.keyboards import kb_main_menu
from vocabmaster.progress import overview
from vocabmaster.ui import SCREEN_MENU, show_screen


router = Router()


async def menu_text(user_id: int, prefix: str | None = None) -> str:
    catalog = get_catalog()
    progress = await load_progress(user_id)
    text = format_dashboard(overview(progress, catalog, total_lessons(catalog), datetime.now(timezone.utc)))
    return f"{prefix}\n\n{text}" if prefix else text


async def show_menu(bot, user_id: int, prefix: str | None = None) -> None:
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=await menu_text(user_id, prefix),
        reply_markup=kb_main_menu(),
        screen_id=SCREEN_MENU,
    )


@router.message(Command("menu"))
@router.message(Command("help"))
async def cmd_menu(message: Message) -> None:
    assert message.from_user
    await show_menu(message.bot, message.from_user.id)


@router.callback_query(F.data == "ui:menu")
async def on_menu(cb: CallbackQuery) -> None:
    assert cb.from_user
    await show_menu(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()
