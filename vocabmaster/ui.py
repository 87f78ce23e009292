from __future__ import annotations

"""Single-message screens.

Every screen the bot shows (menu, courses, a study task, a summary, settings)
replaces the previous one, so a chat holds one live UI message per user.
"""

import logging

from aiogram import Bot
from aiogram.exceptions import TelegramBadRequest
from aiogram.types import InlineKeyboardMarkup

from vocabmaster.db import get_ui_state, set_ui_state

logger = logging.getLogger(__name__)


SCREEN_MENU = "menu"
SCREEN_COURSES = "courses"
SCREEN_STUDY = "study"
SCREEN_SUMMARY = "summary"
SCREEN_SETTINGS = "settings"


async def _last_message_id(user_id: int) -> int | None:
    row = await get_ui_state(user_id)
    if row is None or not row["last_ui_message_id"]:
        return None
    return int(row["last_ui_message_id"])


async def _try_edit(
    bot: Bot, chat_id: int, message_id: int, text: str, reply_markup: InlineKeyboardMarkup | None
) -> bool:
    try:
        await bot.edit_message_text(chat_id=chat_id, message_id=message_id, text=text, reply_markup=reply_markup)
    except TelegramBadRequest as e:
        logger.debug("Cannot edit message %s in chat %s: %s", message_id, chat_id, e)
        return False
    return True


async def show_screen(
    bot: Bot,
    user_id: int,
    text: str,
    reply_markup: InlineKeyboardMarkup | None,
    screen_id: str,
) -> None:
    """Draw `text` over the user's current UI message, or post a new one.

    A message that cannot be edited (unchanged text, deleted by the user) is
    removed and a fresh one sent. The stored UI state always ends up pointing
    at the message now on screen.
    """
    chat_id = user_id
    message_id = await _last_message_id(user_id)

    if message_id is not None:
        if await _try_edit(bot, chat_id, message_id, text, reply_markup):
            await set_ui_state(user_id, last_ui_message_id=message_id, current_screen=screen_id)
            return
        try:
            await bot.delete_message(chat_id, message_id)
        except TelegramBadRequest:
            pass

    sent = await bot.send_message(chat_id, text, reply_markup=reply_markup)
    await set_ui_state(user_id, last_ui_message_id=sent.message_id, current_screen=screen_id)
