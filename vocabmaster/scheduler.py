from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from aiogram import Bot

from vocabmaster.config import DEFAULT_TZ, parse_reminder_time
from vocabmaster.db import (
    get_last_reminder_date,
    list_progress_user_ids,
    load_progress,
    update_last_reminder,
)
from vocabmaster.formatters import format_reminder
from vocabmaster.models import UserProgress

logger = logging.getLogger(__name__)


def should_remind(progress: UserProgress, now_local: datetime, last_reminder: date | None) -> bool:
    """True once per local day, in the minute matching the user's reminder time.

    Only reads settings; never touches session state.
    """
    if not progress.reminder_enabled:
        return False
    if last_reminder == now_local.date():
        return False
    try:
        remind_at = parse_reminder_time(progress.reminder_time)
    except ValueError:
        return False
    return now_local.hour == remind_at.hour and now_local.minute == remind_at.minute


async def daily_tick(bot: Bot, now: datetime | None = None) -> int:
    """Send due reminders; return how many were sent."""
    now = now or datetime.now(timezone.utc)
    now_local = now.astimezone(ZoneInfo(DEFAULT_TZ))
    sent = 0
    for user_id in await list_progress_user_ids():
        progress = await load_progress(user_id)
        last = await get_last_reminder_date(user_id)
        if not should_remind(progress, now_local, last):
            continue
        try:
            await bot.send_message(chat_id=user_id, text=format_reminder(progress))
        except Exception as e:
            # e.g. the user blocked the bot; try again tomorrow
            logger.warning("Reminder to user %s failed: %s", user_id, e)
        else:
            sent += 1
            logger.info("Reminder sent to user %s", user_id)
        await update_last_reminder(user_id, now_local.date())
    return sent
