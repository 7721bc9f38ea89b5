"""Session management utilities for coordinating active crawls."""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, Generic, Optional, Tuple, TypeVar

SessionKey = Tuple[Optional[int], int, int]

T = TypeVar("T")


class SessionManager(Generic[T]):
    """Track active crawls keyed by guild, channel and player.

    Access to the internal mapping is serialised through an
    :class:`asyncio.Lock` so that several button presses arriving together
    cannot replace or drop each other's sessions.
    """

    __slots__ = ("_sessions", "_lock")

    def __init__(self) -> None:
        self._sessions: Dict[SessionKey, T] = {}
        self._lock = asyncio.Lock()

    @staticmethod
    def make_key(
        guild_id: Optional[int], channel_id: Optional[int], user_id: Optional[int]
    ) -> SessionKey:
        """Build a stable key for a crawl."""

        if channel_id is None:
            raise ValueError("channel_id is required to build a session key")
        if user_id is None:
            raise ValueError("user_id is required to build a session key")
        return (guild_id, channel_id, user_id)

    async def get(self, key: SessionKey) -> Optional[T]:
        async with self._lock:
            return self._sessions.get(key)

    async def set(self, key: SessionKey, session: T) -> T:
        """Store or replace the ``session`` value for ``key``."""

        async with self._lock:
            self._sessions[key] = session
            return session

    async def pop(self, key: SessionKey) -> Optional[T]:
        async with self._lock:
            return self._sessions.pop(key, None)

    async def update(self, key: SessionKey, mutator: Callable[[T], None]) -> Optional[T]:
        """Apply ``mutator`` to the session mapped to ``key``.

        ``mutator`` runs while the lock is held and must be synchronous.
        """

        async with self._lock:
            session = self._sessions.get(key)
            if session is None:
                return None
            mutator(session)
            return session
