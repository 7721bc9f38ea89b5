"""Lookup of level templates by id or display name."""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Sequence

from .models import LevelTemplate

__all__ = ["LevelRegistry"]


class LevelRegistry:
    """Level templates in load order.

    Lookups are case-insensitive and accept either a level's id or its
    optional display ``name``.
    """

    def __init__(self) -> None:
        self._levels: Dict[str, LevelTemplate] = {}
        self._names: Dict[str, str] = {}

    @staticmethod
    def _fold(value: str) -> str:
        return value.strip().lower()

    def register(self, key: str, level: LevelTemplate) -> None:
        level_id = self._fold(key)
        if level_id in self._levels:
            raise ValueError(f"Duplicate level '{key}'")
        self._levels[level_id] = level
        if level.name:
            self._names.setdefault(self._fold(level.name), level_id)

    def _resolve(self, name: str) -> str:
        folded = self._fold(name)
        if folded in self._levels:
            return folded
        return self._names.get(folded, folded)

    def get(self, name: str) -> LevelTemplate:
        if not name:
            raise KeyError("Level name must be provided")
        try:
            return self._levels[self._resolve(name)]
        except KeyError as exc:
            raise KeyError(f"Unknown level '{name}'") from exc

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and bool(name) and self._resolve(name) in self._levels

    def first(self) -> Optional[LevelTemplate]:
        return next(iter(self._levels.values()), None)

    def keys(self) -> Sequence[str]:
        return tuple(self._levels)

    def values(self) -> Sequence[LevelTemplate]:
        return tuple(self._levels.values())

    def __iter__(self) -> Iterator[LevelTemplate]:
        return iter(self._levels.values())

    def __len__(self) -> int:
        return len(self._levels)
