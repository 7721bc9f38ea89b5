"""Persistent storage for crawl preferences."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Dict, Optional

__all__ = ["PreferenceStore", "dark_mode_key", "opening_key"]

log = logging.getLogger(__name__)


def opening_key(level_id: str) -> str:
    return f"opening:{level_id}"


def dark_mode_key(user_id: int) -> str:
    return f"dark_mode:{user_id}"


class PreferenceStore:
    """Concurrency-safe string key/value storage backed by a JSON file.

    Storage problems never reach the caller: a file that cannot be read or
    parsed behaves as empty and a failed write keeps the value in memory
    only. Both cases are logged.
    """

    def __init__(self, storage_path: Path) -> None:
        self._storage_path = storage_path
        self._lock = asyncio.Lock()
        self._loaded = False
        self._cache: Dict[str, str] = {}

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        self._loaded = True
        if not self._storage_path.exists():
            self._cache = {}
            return
        try:
            text = await asyncio.to_thread(self._storage_path.read_text, encoding="utf-8")
        except OSError as exc:
            log.warning("Could not read preferences from %s: %s", self._storage_path, exc)
            return
        if not text.strip():
            return
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as exc:
            log.warning("Ignoring malformed preferences file %s: %s", self._storage_path, exc)
            return
        if isinstance(raw, dict):
            self._cache = {
                str(key): value for key, value in raw.items() if isinstance(value, str)
            }

    async def _persist(self) -> None:
        text = json.dumps(self._cache, indent=2, sort_keys=True)
        try:
            await asyncio.to_thread(self._storage_path.parent.mkdir, parents=True, exist_ok=True)
            await asyncio.to_thread(self._storage_path.write_text, text, encoding="utf-8")
        except OSError as exc:
            log.warning("Could not write preferences to %s: %s", self._storage_path, exc)

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            await self._ensure_loaded()
            return self._cache.get(key)

    async def set(self, key: str, value: Optional[str]) -> None:
        """Store ``value`` under ``key``; ``None`` or an empty string removes it."""

        async with self._lock:
            await self._ensure_loaded()
            if value:
                self._cache[key] = value
            elif self._cache.pop(key, None) is None:
                return
            await self._persist()

    async def get_flag(self, key: str) -> bool:
        return (await self.get(key)) == "true"

    async def set_flag(self, key: str, enabled: bool) -> None:
        await self.set(key, "true" if enabled else None)
