from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from vocabmaster.exercises import Challenge
from vocabmaster.session import SessionState


@dataclass
class LiveSession:
    """A running session plus the exercise currently on screen.

    Abandoned sessions are dropped with their combo and xp; only a finished
    session is committed to stored progress.
    """

    state: SessionState
    challenge: Challenge = None
    picked_tiles: List[int] = field(default_factory=list)  # SCRAMBLE tile indexes in order
    # Held while an answer is graded and saved
    lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)


class SessionStore:
    def __init__(self) -> None:
        self._data: Dict[int, LiveSession] = {}
        self._lock = asyncio.Lock()

    async def get(self, user_id: int) -> Optional[LiveSession]:
        async with self._lock:
            return self._data.get(user_id)

    async def put(self, user_id: int, live: LiveSession) -> None:
        async with self._lock:
            self._data[user_id] = live

    async def clear(self, user_id: int) -> None:
        async with self._lock:
            self._data.pop(user_id, None)


store = SessionStore()
