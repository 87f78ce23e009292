from __future__ import annotations

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from ..db import ensure_user, load_progress, save_progress
from ..keyboards import kb_main_menu


router = Router()


@router.message(Command("start"))
async def cmd_start(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    await ensure_user(user_id)
    # Persist defaults so the reminder tick knows about this user
    await save_progress(user_id, await load_progress(user_id))
    await message.answer(
        "Welcome to VocabMaster! Learn six new words per lesson, then keep them fresh with smart review.\n"
        "Use /lesson to continue your course, /review to practise studied words, /courses to pick a lesson.",
        reply_markup=kb_main_menu(),
    )
