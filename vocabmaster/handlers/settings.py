from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import Command
from aiogram.types import CallbackQuery, Message

from vocabmaster.db import get_ui_state, load_progress, save_progress, set_awaiting_input
from vocabmaster.exercises import SpellChallenge
from vocabmaster.formatters import format_settings
from vocabmaster.keyboards import kb_settings, kb_settings_input_back
from vocabmaster.progress import set_reminder
from vocabmaster.store import store
from vocabmaster.ui import SCREEN_SETTINGS, show_screen
from vocabmaster.validators import validate_hhmm


router = Router()


FIELD_META = {
    "reminder_time": (
        "Reminder time",
        "Daily reminder time, HH:MM in 24h format.",
        validate_hhmm,
    ),
}


async def show_settings(bot, user_id: int) -> None:
    progress = await load_progress(user_id)
    await show_screen(
        bot=bot,
        user_id=user_id,
        text=format_settings(progress),
        reply_markup=kb_settings(progress.reminder_enabled),
        screen_id=SCREEN_SETTINGS,
    )


@router.message(Command("settings"))
async def cmd_settings(message: Message) -> None:
    assert message.from_user
    await show_settings(message.bot, message.from_user.id)


@router.callback_query(F.data == "ui:settings")
async def on_settings_open(cb: CallbackQuery) -> None:
    assert cb.from_user
    await set_awaiting_input(cb.from_user.id, None)
    await show_settings(cb.message.bot, cb.from_user.id)  # type: ignore[union-attr]
    await cb.answer()


@router.callback_query(F.data == "ui:settings.toggle")
async def on_reminder_toggle(cb: CallbackQuery) -> None:
    assert cb.from_user
    user_id = cb.from_user.id
    progress = await load_progress(user_id)
    await save_progress(user_id, set_reminder(progress, not progress.reminder_enabled))
    await show_settings(cb.message.bot, user_id)  # type: ignore[union-attr]
    await cb.answer()


def _input_prompt(field: str, error: str | None = None) -> str:
    title, desc, _ = FIELD_META[field]
    lines = []
    if error:
        lines.append(f"❌ {error}")
        lines.append("")
    lines.append(f"<b>{title}</b>")
    lines.append(f"<i>{desc}</i>")
    lines.append("")
    lines.append("Please enter a new value:")
    return "\n".join(lines)


@router.callback_query(F.data.startswith("ui:settings.input:"))
async def on_open_input(cb: CallbackQuery) -> None:
    assert cb.from_user and cb.data
    user_id = cb.from_user.id
    _, _, field = cb.data.split(":", 2)
    if field not in FIELD_META:
        await cb.answer("Unsupported field.")
        return
    await set_awaiting_input(user_id, field)
    await show_screen(
        bot=cb.message.bot,  # type: ignore[union-attr]
        user_id=user_id,
        text=_input_prompt(field),
        reply_markup=kb_settings_input_back(),
        screen_id=SCREEN_SETTINGS,
    )
    await cb.answer()


async def _awaiting_input(message: Message) -> bool:
    if not message.from_user or not message.text or message.text.startswith("/"):
        return False
    live = await store.get(message.from_user.id)
    if live is not None and isinstance(live.challenge, SpellChallenge):
        # typed text answers the running spelling task
        return False
    state = await get_ui_state(message.from_user.id)
    return bool(state and state["awaiting_input_field"])


@router.message(F.text, _awaiting_input)
async def on_text_input(message: Message) -> None:
    assert message.from_user
    user_id = message.from_user.id
    state = await get_ui_state(user_id)
    field = str(state["awaiting_input_field"]) if state else ""
    if field not in FIELD_META:
        # Unknown field; clear and show settings
        await set_awaiting_input(user_id, None)
        await show_settings(message.bot, user_id)
        return
    _, _, validator = FIELD_META[field]
    ok, err = validator(message.text or "")
    if not ok:
        await show_screen(
            bot=message.bot,
            user_id=user_id,
            text=_input_prompt(field, error=err or "Invalid value."),
            reply_markup=kb_settings_input_back(),
            screen_id=SCREEN_SETTINGS,
        )
        return
    progress = await load_progress(user_id)
    value = (message.text or "").strip()
    await save_progress(user_id, set_reminder(progress, progress.reminder_enabled, value))
    await set_awaiting_input(user_id, None)
    await show_settings(message.bot, user_id)
