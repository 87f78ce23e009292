from __future__ import annotations

import os
from datetime import time
from pathlib import Path
from typing import Final

from dotenv import load_dotenv


load_dotenv()

ROOT_DIR: Final[Path] = Path(__file__).resolve().parents[1]
DATA_DIR: Final[Path] = Path(os.getenv("DATA_DIR", str(ROOT_DIR / "data")))
DB_PATH: Final[Path] = Path(os.getenv("DB_PATH", str(DATA_DIR / "vocabmaster.db")))
CATALOG_PATH: Final[Path] = Path(os.getenv("CATALOG_PATH", str(DATA_DIR / "words.csv")))

BOT_TOKEN: Final[str] = os.getenv("BOT_TOKEN", "")
DEFAULT_TZ: Final[str] = os.getenv("TZ", "UTC")
DEFAULT_REMINDER_TIME: Final[str] = os.getenv("REMINDER_TIME", "20:00")
REMINDER_TICK_SECONDS: Final[int] = int(os.getenv("REMINDER_TICK_SECONDS", "30"))

# Logging
LOG_LEVEL: Final[str] = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_FILE: Final[str | None] = os.getenv("LOG_FILE") or None

# Lessons
WORDS_PER_LESSON: Final[int] = 6
SCRAMBLE_WORDS_PER_LESSON: Final[int] = 3
DECOY_COUNT: Final[int] = 3

# Review
REVIEW_WORD_LIMIT: Final[int] = 12
MATCH_GROUP_SIZE: Final[int] = 6

# Leitner intervals in days for boxes 0..5
BOX_INTERVALS: Final[tuple[int, ...]] = (1, 2, 4, 7, 14, 30)
MAX_BOX: Final[int] = len(BOX_INTERVALS) - 1

# XP reward: base + combo * bonus
XP_BASE: Final[int] = 10
XP_COMBO_BONUS: Final[int] = 2


def parse_reminder_time(s: str | None) -> time:
    s = s or DEFAULT_REMINDER_TIME
    hh, mm = s.split(":", 1)
    return time(hour=int(hh), minute=int(mm))
