from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

import pytest
import pytest_asyncio

import vocabmaster.db as dbmod
from vocabmaster.models import UserProgress


@pytest_asyncio.fixture
async def db_file(tmp_path: Path, monkeypatch) -> Path:
    # Patch vocabmaster.db.DB_PATH so all DB operations go to the temp file
    path = tmp_path / "test.db"
    monkeypatch.setattr(dbmod, "DB_PATH", path, raising=False)
    await dbmod.init_db()
    return path


@pytest.mark.asyncio
async def test_missing_user_gets_defaults(db_file):
    assert await dbmod.load_progress(1) == UserProgress()


@pytest.mark.asyncio
async def test_save_and_load(db_file):
    p = UserProgress(current_lesson_index=1, completed_word_ids=(1, 2), total_xp=30)
    await dbmod.save_progress(7, p)
    assert await dbmod.load_progress(7) == p

    p2 = UserProgress(total_xp=99)
    await dbmod.save_progress(7, p2)
    assert await dbmod.load_progress(7) == p2
    assert await dbmod.list_progress_user_ids() == [7]


@pytest.mark.asyncio
async def test_corrupt_row_recovers_with_warning(db_file, caplog):
    async with dbmod.get_db() as db:
        await db.execute(
            "INSERT INTO user_progress(user_id, data_json, updated_at) VALUES(?,?,?)",
            (5, "{broken", "2024-01-01T00:00:00"),
        )
        await db.commit()
    with caplog.at_level(logging.WARNING, logger="vocabmaster.db"):
        assert await dbmod.load_progress(5) == UserProgress()
    assert "unreadable" in caplog.text


@pytest.mark.asyncio
async def test_reminder_bookkeeping(db_file):
    assert await dbmod.get_last_reminder_date(3) is None
    await dbmod.update_last_reminder(3, date(2024, 1, 10))
    assert await dbmod.get_last_reminder_date(3) == date(2024, 1, 10)


@pytest.mark.asyncio
async def test_ui_state_keeps_omitted_fields(db_file):
    await dbmod.set_ui_state(4, last_ui_message_id=100, current_screen="menu")
    await dbmod.set_awaiting_input(4, "reminder_time")
    row = await dbmod.get_ui_state(4)
    assert row is not None
    assert row["last_ui_message_id"] == 100
    assert row["current_screen"] == "menu"
    assert row["awaiting_input_field"] == "reminder_time"
    await dbmod.set_awaiting_input(4, None)
    row = await dbmod.get_ui_state(4)
    assert row["awaiting_input_field"] is None
