from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from vocabmaster.exercises import MatchBoard, ScrambleChallenge
from vocabmaster.progress import LessonCard


def kb_main_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="▶️ Continue lesson", callback_data="ui:lesson"),
                InlineKeyboardButton(text="🔁 Review", callback_data="ui:review"),
            ],
            [
                InlineKeyboardButton(text="📚 Courses", callback_data="ui:courses"),
                InlineKeyboardButton(text="⚙️ Settings", callback_data="ui:settings"),
            ],
        ]
    )


def kb_courses(cards: Sequence[LessonCard], per_row: int = 4) -> InlineKeyboardMarkup:
    rows: list[list[InlineKeyboardButton]] = []
    for i in range(0, len(cards), per_row):
        rows.append(
            [
                InlineKeyboardButton(
                    text=f"{'✅ ' if c.is_completed else ''}{c.index + 1}",
                    callback_data=f"lesson:start:{c.index}",
                )
                for c in cards[i : i + per_row]
            ]
        )
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def _quit_row() -> list[InlineKeyboardButton]:
    return [InlineKeyboardButton(text="✖️ Quit session", callback_data="task:quit")]


def kb_learn(n: int) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="👍 Got it, next", callback_data=f"task:ok:{n}")],
            _quit_row(),
        ]
    )


def kb_options(n: int, options: Sequence[str]) -> InlineKeyboardMarkup:
    """One button per option; callback data carries the task position and the option index."""
    rows = [
        [InlineKeyboardButton(text=opt, callback_data=f"task:opt:{n}:{i}")]
        for i, opt in enumerate(options)
    ]
    rows.append(_quit_row())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_scramble(n: int, ch: ScrambleChallenge, picked: Sequence[int], per_row: int = 3) -> InlineKeyboardMarkup:
    free = [i for i in range(len(ch.tiles)) if i not in picked]
    rows: list[list[InlineKeyboardButton]] = []
    for j in range(0, len(free), per_row):
        rows.append(
            [
                InlineKeyboardButton(text=ch.tiles[i], callback_data=f"task:tile:{n}:{i}")
                for i in free[j : j + per_row]
            ]
        )
    rows.append(
        [
            InlineKeyboardButton(text="↩️ Undo", callback_data=f"task:undo:{n}"),
            InlineKeyboardButton(text="✔️ Check", callback_data=f"task:check:{n}"),
        ]
    )
    rows.append(_quit_row())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_match(n: int, board: MatchBoard, per_row: int = 2) -> InlineKeyboardMarkup:
    buttons: list[InlineKeyboardButton] = []
    for i, card in enumerate(board.cards):
        if i in board.matched:
            text = "✅"
        elif i in board.selection:
            text = f"👉 {card.text}"
        else:
            text = card.text
        buttons.append(InlineKeyboardButton(text=text, callback_data=f"task:match:{n}:{i}"))
    rows = [buttons[i : i + per_row] for i in range(0, len(buttons), per_row)]
    rows.append(_quit_row())
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_spell() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(inline_keyboard=[_quit_row()])


def kb_summary(mode: str) -> InlineKeyboardMarkup:
    again = "ui:review" if mode == "review" else "ui:lesson"
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🔁 Study again", callback_data=again)],
            [InlineKeyboardButton(text="◀️ Back to menu", callback_data="ui:menu")],
        ]
    )


def kb_settings(reminder_enabled: bool) -> InlineKeyboardMarkup:
    toggle = "🔕 Turn reminder off" if reminder_enabled else "🔔 Turn reminder on"
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text=toggle, callback_data="ui:settings.toggle")],
            [InlineKeyboardButton(text="⏰ Reminder time", callback_data="ui:settings.input:reminder_time")],
            [InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")],
        ]
    )


def kb_settings_input_back() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data="ui:settings")]]
    )
