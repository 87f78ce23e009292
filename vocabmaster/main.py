from __future__ import annotations

import asyncio
import logging
from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode

from vocabmaster.catalog import get_catalog, total_lessons
from vocabmaster.config import BOT_TOKEN, REMINDER_TICK_SECONDS
from vocabmaster.db import init_db
from vocabmaster.handlers import courses, menu, settings, start, study
from vocabmaster.logging_config import setup_logging
from vocabmaster.scheduler import daily_tick

logger = logging.getLogger(__name__)


async def run_scheduler(bot: Bot) -> None:
    while True:
        try:
            await daily_tick(bot)
        except Exception:
            logger.exception("Reminder tick failed")
        await asyncio.sleep(REMINDER_TICK_SECONDS)


async def main() -> None:
    setup_logging()
    if not BOT_TOKEN:
        raise RuntimeError("BOT_TOKEN is not set. Please configure .env")

    await init_db()
    catalog = get_catalog()
    logger.info("Catalog loaded: %d words, %d lessons", len(catalog), total_lessons(catalog))

    bot = Bot(BOT_TOKEN, default=DefaultBotProperties(parse_mode=ParseMode.HTML))
    dp = Dispatcher()

    dp.include_router(start.router)
    dp.include_router(menu.router)
    dp.include_router(courses.router)
    # Settings input is matched before spelling answers
    dp.include_router(settings.router)
    dp.include_router(study.router)

    # Background scheduler
    scheduler = asyncio.create_task(run_scheduler(bot))

    try:
        await dp.start_polling(bot)
    finally:
        scheduler.cancel()
        await bot.session.close()


if __name__ == "__main__":
    with suppress(KeyboardInterrupt):
        asyncio.run(main())
