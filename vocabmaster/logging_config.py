"""Logging configuration for the bot."""
from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from vocabmaster.config import LOG_FILE, LOG_FORMAT, LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL, log_file: str | None = LOG_FILE) -> None:
    """Configure the root logger with a console handler and an optional rotating file."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.handlers.RotatingFileHandler(
            log_file,
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    # Quiet down chatty libraries
    logging.getLogger("aiogram").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)

    logging.info("Logging configured successfully")
