from __future__ import annotations

"""Input validators for the Settings inline UI."""

from typing import Tuple


def validate_hhmm(text: str) -> Tuple[bool, str | None]:
    s = text.strip()
    if len(s) != 5 or s[2] != ":" or not (s[:2].isdigit() and s[3:].isdigit()):
        return False, "Invalid time. Expected HH:MM (24h)."
    hh = int(s[:2])
    mm = int(s[3:])
    if not (0 <= hh <= 23 and 0 <= mm <= 59):
        return False, "Invalid time. Hours 00–23 and minutes 00–59."
    return True, None


def validate_lesson_number(text: str, total_lessons: int) -> Tuple[bool, str | None]:
    """Validate a 1-based lesson number typed by the user."""
    try:
        n = int(text.strip())
    except ValueError:
        return False, f"Invalid lesson. Expected a number between 1 and {total_lessons}."
    if not (1 <= n <= total_lessons):
        return False, f"Invalid lesson. Expected a number between 1 and {total_lessons}."
    return True, None
