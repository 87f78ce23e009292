from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
import pytest_asyncio

import vocabmaster.db as dbmod
from vocabmaster.models import UserProgress
from vocabmaster.scheduler import daily_tick, should_remind


AT_EIGHT = datetime(2024, 1, 10, 20, 0, 15, tzinfo=timezone.utc)


def test_should_remind_only_when_enabled():
    assert not should_remind(UserProgress(reminder_time="20:00"), AT_EIGHT, None)
    assert should_remind(UserProgress(reminder_enabled=True, reminder_time="20:00"), AT_EIGHT, None)


def test_should_remind_once_per_day():
    p = UserProgress(reminder_enabled=True, reminder_time="20:00")
    assert not should_remind(p, AT_EIGHT, date(2024, 1, 10))
    assert should_remind(p, AT_EIGHT, date(2024, 1, 9))


def test_should_remind_matches_minute():
    p = UserProgress(reminder_enabled=True, reminder_time="20:01")
    assert not should_remind(p, AT_EIGHT, None)
    assert not should_remind(UserProgress(reminder_enabled=True, reminder_time="bogus"), AT_EIGHT, None)


class FakeBot:
    def __init__(self, fail_for: set[int] | None = None) -> None:
        self.sent: list[tuple[int, str]] = []
        self.fail_for = fail_for or set()

    async def send_message(self, chat_id: int, text: str) -> None:
        if chat_id in self.fail_for:
            raise RuntimeError("bot was blocked by the user")
        self.sent.append((chat_id, text))


@pytest_asyncio.fixture
async def db_file(tmp_path, monkeypatch):
    path = tmp_path / "test.db"
    monkeypatch.setattr(dbmod, "DB_PATH", path, raising=False)
    monkeypatch.setattr("vocabmaster.scheduler.DEFAULT_TZ", "UTC")
    await dbmod.init_db()
    return path


@pytest.mark.asyncio
async def test_daily_tick_sends_once(db_file):
    await dbmod.save_progress(1, UserProgress(reminder_enabled=True, reminder_time="20:00", day_streak=4))
    await dbmod.save_progress(2, UserProgress(reminder_enabled=False, reminder_time="20:00"))
    bot = FakeBot()

    assert await daily_tick(bot, AT_EIGHT) == 1
    assert [chat for chat, _ in bot.sent] == [1]
    assert "4-day streak" in bot.sent[0][1]

    # same minute, next tick: already reminded today
    assert await daily_tick(bot, AT_EIGHT) == 0
    assert await dbmod.get_last_reminder_date(1) == date(2024, 1, 10)


@pytest.mark.asyncio
async def test_daily_tick_skips_failed_send(db_file):
    await dbmod.save_progress(1, UserProgress(reminder_enabled=True, reminder_time="20:00"))
    await dbmod.save_progress(2, UserProgress(reminder_enabled=True, reminder_time="20:00"))
    bot = FakeBot(fail_for={1})
    assert await daily_tick(bot, AT_EIGHT) == 1
    assert [chat for chat, _ in bot.sent] == [2]
