"""Ordered delivery of narration lines."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Optional

__all__ = ["ANNOUNCE_DELAY", "Announcer", "clean_messages"]

log = logging.getLogger(__name__)

ANNOUNCE_DELAY = 0.25

Speaker = Callable[[str], Awaitable[None]]


def clean_messages(messages: Iterable[Optional[str]]) -> List[str]:
    """Drop empty entries and surrounding whitespace."""

    cleaned: List[str] = []
    for message in messages:
        if not message:
            continue
        text = str(message).strip()
        if text:
            cleaned.append(text)
    return cleaned


class Announcer:
    """FIFO narration queue drained one message at a time.

    Messages are spoken strictly in the order they were queued, with a fixed
    pause after each so consecutive lines never overlap. Draining is guarded
    by a lock so two callers cannot interleave deliveries.
    """

    __slots__ = ("_speak", "_delay", "_queue", "_lock")

    def __init__(self, speak: Speaker, *, delay: float = ANNOUNCE_DELAY) -> None:
        self._speak = speak
        self._delay = max(0.0, delay)
        self._queue: asyncio.Queue[str] = asyncio.Queue()
        self._lock = asyncio.Lock()

    def announce(self, message: str) -> None:
        self.announce_sequence((message,))

    def announce_sequence(self, messages: Iterable[Optional[str]]) -> int:
        """Queue ``messages`` in order and return how many were accepted."""

        cleaned = clean_messages(messages)
        for message in cleaned:
            self._queue.put_nowait(message)
        return len(cleaned)

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    async def drain(self) -> int:
        """Speak every queued message; return how many were delivered."""

        delivered = 0
        async with self._lock:
            while not self._queue.empty():
                message = self._queue.get_nowait()
                try:
                    await self._speak(message)
                finally:
                    self._queue.task_done()
                delivered += 1
                if self._delay:
                    await asyncio.sleep(self._delay)
        if delivered:
            log.debug("Delivered %s narration lines", delivered)
        return delivered
