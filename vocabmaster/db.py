from __future__ import annotations

import contextlib
import logging
from datetime import date, datetime, timezone
from typing import AsyncIterator

import aiosqlite

from vocabmaster.codec import CodecError, dumps_progress, loads_progress
from vocabmaster.config import DB_PATH
from vocabmaster.models import UserProgress

logger = logging.getLogger(__name__)

_SENTINEL = object()


@contextlib.asynccontextmanager
async def get_db() -> AsyncIterator[aiosqlite.Connection]:
    DB_PATH.parent.mkdir(parents=True, exist_ok=True)
    db = await aiosqlite.connect(DB_PATH.as_posix())
    db.row_factory = aiosqlite.Row
    try:
        yield db
    finally:
        await db.close()


async def init_db() -> None:
    async with get_db() as db:
        await db.executescript(
            """
            PRAGMA journal_mode=WAL;

            -- Whole UserProgress aggregate as JSON, one row per user
            CREATE TABLE IF NOT EXISTS user_progress (
                user_id INTEGER PRIMARY KEY,
                data_json TEXT NOT NULL,
                updated_at DATETIME NOT NULL
            );

            CREATE TABLE IF NOT EXISTS user_state (
                user_id INTEGER PRIMARY KEY,
                last_reminder_date DATE
            );

            -- UI state for inline navigation and message cleanup
            CREATE TABLE IF NOT EXISTS user_ui_state (
                user_id INTEGER PRIMARY KEY,
                last_ui_message_id INTEGER,
                current_screen TEXT,
                awaiting_input_field TEXT
            );
            """
        )
        await db.commit()


async def ensure_user(user_id: int) -> None:
    async with get_db() as db:
        await db.execute("INSERT OR IGNORE INTO user_state(user_id) VALUES (?)", (user_id,))
        await db.commit()


async def load_progress(user_id: int) -> UserProgress:
    """Return stored progress, or fresh defaults when missing or unreadable."""
    async with get_db() as db:
        cur = await db.execute("SELECT data_json FROM user_progress WHERE user_id=?", (user_id,))
        row = await cur.fetchone()
    if row is None:
        return UserProgress()
    try:
        return loads_progress(str(row[0]))
    except CodecError as e:
        logger.warning("Stored progress for user %s is unreadable, using defaults: %s", user_id, e)
        return UserProgress()


async def save_progress(user_id: int, progress: UserProgress) -> None:
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_progress(user_id, data_json, updated_at) VALUES(?,?,?) "
            "ON CONFLICT(user_id) DO UPDATE SET data_json=excluded.data_json, updated_at=excluded.updated_at",
            (user_id, dumps_progress(progress), datetime.now(timezone.utc).isoformat()),
        )
        await db.commit()


async def list_progress_user_ids() -> list[int]:
    async with get_db() as db:
        cur = await db.execute("SELECT user_id FROM user_progress")
        return [int(r[0]) for r in await cur.fetchall()]


async def get_last_reminder_date(user_id: int) -> date | None:
    async with get_db() as db:
        cur = await db.execute("SELECT last_reminder_date FROM user_state WHERE user_id=?", (user_id,))
        row = await cur.fetchone()
    if not row or not row[0]:
        return None
    return date.fromisoformat(str(row[0]))


async def update_last_reminder(user_id: int, d: date) -> None:
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_state(user_id, last_reminder_date) VALUES(?, ?) "
            "ON CONFLICT(user_id) DO UPDATE SET last_reminder_date=excluded.last_reminder_date",
            (user_id, d.isoformat()),
        )
        await db.commit()


async def get_ui_state(user_id: int) -> aiosqlite.Row | None:
    """Return UI state row for a user if exists."""
    async with get_db() as db:
        cur = await db.execute(
            "SELECT user_id, last_ui_message_id, current_screen, awaiting_input_field FROM user_ui_state WHERE user_id=?",
            (user_id,),
        )
        return await cur.fetchone()


async def set_ui_state(
    user_id: int,
    last_ui_message_id: int | None = None,
    current_screen: str | None = None,
    awaiting_input_field: str | None | object = _SENTINEL,
) -> None:
    """Upsert UI state fields for the user; omitted fields keep their stored value."""
    row = await get_ui_state(user_id)
    new_msg_id = last_ui_message_id if last_ui_message_id is not None else (
        int(row["last_ui_message_id"]) if row and row["last_ui_message_id"] is not None else None
    )
    new_screen = current_screen if current_screen is not None else (
        str(row["current_screen"]) if row and row["current_screen"] is not None else None
    )
    if awaiting_input_field is _SENTINEL:
        new_awaiting = row["awaiting_input_field"] if row else None
    else:
        new_awaiting = awaiting_input_field
    async with get_db() as db:
        await db.execute(
            "INSERT INTO user_ui_state(user_id, last_ui_message_id, current_screen, awaiting_input_field) VALUES(?,?,?,?) "
            "ON CONFLICT(user_id) DO UPDATE SET last_ui_message_id=excluded.last_ui_message_id, current_screen=excluded.current_screen, awaiting_input_field=excluded.awaiting_input_field",
            (user_id, new_msg_id, new_screen, new_awaiting),
        )
        await db.commit()


async def set_awaiting_input(user_id: int, field: str | None) -> None:
    await set_ui_state(user_id, awaiting_input_field=field)
