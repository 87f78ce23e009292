from __future__ import annotations

import asyncio
import random
from types import SimpleNamespace

import pytest
import pytest_asyncio

from vocabmaster.exercises import choice_challenge, spell_challenge
from vocabmaster.handlers import settings as settings_mod
from vocabmaster.handlers import study
from vocabmaster.models import Task, TaskType, UserProgress, Word
from vocabmaster.session import SessionState
from vocabmaster.store import LiveSession, store


USER_ID = 42
WORDS = [Word(i, f"w{i}", "n.", f"tr{i}") for i in range(1, 8)]


class FakeCallback:
    def __init__(self, data: str) -> None:
        self.data = data
        self.from_user = SimpleNamespace(id=USER_ID)
        self.message = SimpleNamespace(bot=None)
        self.answers: list[str | None] = []

    async def answer(self, text: str | None = None, **kwargs) -> None:
        self.answers.append(text)


def make_message(text: str) -> SimpleNamespace:
    return SimpleNamespace(from_user=SimpleNamespace(id=USER_ID), text=text, bot=None)


@pytest_asyncio.fixture
async def saved(monkeypatch):
    """Stored progress kept in a dict; screens are not rendered."""
    data: dict[int, UserProgress] = {}

    async def load_progress(user_id: int) -> UserProgress:
        return data.get(user_id, UserProgress())

    async def save_progress(user_id: int, progress: UserProgress) -> None:
        data[user_id] = progress

    async def noop(*args, **kwargs) -> None:
        return None

    monkeypatch.setattr(study, "load_progress", load_progress)
    monkeypatch.setattr(study, "save_progress", save_progress)
    monkeypatch.setattr(study, "_render", noop)
    monkeypatch.setattr(study, "show_screen", noop)
    monkeypatch.setattr(study, "get_catalog", lambda: WORDS)
    yield data
    await store.clear(USER_ID)


async def start_choice_review() -> LiveSession:
    tasks = tuple(Task(f"review-{i}", w, TaskType.CHOICE) for i, w in enumerate(WORDS[:3]))
    live = LiveSession(
        state=SessionState(mode="review", tasks=tasks),
        challenge=choice_challenge(WORDS[0], WORDS, random.Random(1)),
    )
    await store.put(USER_ID, live)
    return live


@pytest.mark.asyncio
async def test_repeated_tap_is_not_graded_against_next_task(saved):
    live = await start_choice_review()
    correct = live.challenge.options.index("tr1")
    cb = FakeCallback(f"task:opt:0:{correct}")

    await study.on_option(cb)
    assert live.state.current_index == 1

    # same button again, the second task is on screen now
    await study.on_option(cb)
    assert live.state.current_index == 1
    assert live.state.errors == 0
    assert len(live.state.tasks) == 3
    assert cb.answers[-1] == "This question is no longer active"
    assert saved[USER_ID].word_stats[1].box == 1


@pytest.mark.asyncio
async def test_button_without_position_is_rejected(saved):
    live = await start_choice_review()
    cb = FakeCallback("task:opt:0")
    await study.on_option(cb)
    assert live.state.current_index == 0
    assert cb.answers == ["This question is no longer active"]


@pytest.mark.asyncio
async def test_concurrent_taps_grade_once(saved):
    live = await start_choice_review()
    results = await asyncio.gather(
        study._submit(None, USER_ID, live, 0, True),
        study._submit(None, USER_ID, live, 0, False),
    )
    assert sorted(results) == [False, True]
    assert live.state.current_index == 1
    assert len(live.state.tasks) in (3, 5)
    assert live.state.errors == (0 if results[0] else 1)


@pytest.mark.asyncio
async def test_spelling_answer_wins_over_pending_settings_prompt(saved, monkeypatch):
    async def awaiting(user_id: int):
        return {"awaiting_input_field": "reminder_time"}

    monkeypatch.setattr(settings_mod, "get_ui_state", awaiting)
    msg = make_message("w1")
    assert await settings_mod._awaiting_input(msg)

    task = Task("lesson-0", WORDS[0], TaskType.SPELL)
    live = LiveSession(
        state=SessionState(mode="lesson", tasks=(task,), lesson_index=0),
        challenge=spell_challenge(WORDS[0]),
    )
    await store.put(USER_ID, live)
    assert not await settings_mod._awaiting_input(msg)
    assert await study._spelling_in_progress(msg)


@pytest.mark.asyncio
async def test_starting_a_session_clears_settings_prompt(saved, monkeypatch):
    cleared: list[tuple[int, str | None]] = []

    async def set_awaiting_input(user_id: int, field: str | None) -> None:
        cleared.append((user_id, field))

    monkeypatch.setattr(study, "set_awaiting_input", set_awaiting_input)
    saved[USER_ID] = UserProgress(completed_word_ids=(1, 2, 3))
    await study.start_review(None, USER_ID)
    assert cleared == [(USER_ID, None)]
    assert await store.get(USER_ID) is not None
