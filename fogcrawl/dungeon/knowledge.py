"""Fog-of-war knowledge and the exploration log."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from fogcrawl.content.models import ItemType
from fogcrawl.grid import Position

from .level import Level

__all__ = ["DiscoveryLog", "KnowledgeState", "LogEntry", "REMEMBERED_TYPES"]

# Occupants whose icon is remembered once seen, in snapshot priority order.
REMEMBERED_TYPES: tuple[ItemType, ...] = (
    ItemType.KEY,
    ItemType.TREASURE,
    ItemType.MONSTER,
    ItemType.VOID,
    ItemType.POTION,
    ItemType.VILLAGER,
    ItemType.WEAPON_SHOP,
    ItemType.ARMOR_SHOP,
    ItemType.INN,
    ItemType.EXIT,
)


@dataclass
class KnowledgeState:
    """What the player has learned about one level instance."""

    visited: Set[Position] = field(default_factory=set)
    wall_bumped: Set[Position] = field(default_factory=set)
    revealed_neighbors: Set[Position] = field(default_factory=set)
    revealed_special: Dict[Position, ItemType] = field(default_factory=dict)

    def enter(self, level: Level, position: Position) -> bool:
        """Record standing on ``position``; return ``True`` on a first visit."""

        first_visit = position not in self.visited
        self.visited.add(position)
        self.reveal_around(level, position)
        return first_visit

    def reveal_around(self, level: Level, position: Position) -> None:
        for _direction, neighbour in position.neighbours():
            if not level.in_bounds(neighbour):
                continue
            if level.has_wall(neighbour):
                self.wall_bumped.add(neighbour)
                continue
            self.revealed_neighbors.add(neighbour)
            special = self._special_type(level, neighbour)
            if special is not None:
                self.revealed_special[neighbour] = special

    @staticmethod
    def _special_type(level: Level, position: Position) -> Optional[ItemType]:
        present = {item.type for item in level.items_at(position)}
        for item_type in REMEMBERED_TYPES:
            if item_type in present:
                return item_type
        return None

    def remember(self, position: Position, item_type: ItemType) -> None:
        self.revealed_special[position] = item_type

    def forget(self, position: Position) -> None:
        self.revealed_special.pop(position, None)

    def bump(self, position: Position) -> None:
        self.wall_bumped.add(position)

    def is_visible(self, level: Level, position: Position) -> bool:
        if position in self.visited:
            return True
        if position in self.wall_bumped and level.blocks_like_wall(position):
            return True
        return position in self.revealed_special or position in self.revealed_neighbors


@dataclass(frozen=True)
class LogEntry:
    position: Position
    text: str


class DiscoveryLog:
    """Append-ordered exploration log."""

    def __init__(self) -> None:
        self._entries: List[LogEntry] = []

    def record_first_visit(self, position: Position, text: str) -> bool:
        """Log ``text`` unless ``position`` already has an entry."""

        if any(entry.position == position for entry in self._entries):
            return False
        self._entries.append(LogEntry(position, text))
        return True

    def append(self, position: Position, text: str) -> None:
        self._entries.append(LogEntry(position, text))

    def latest_first(self) -> tuple[LogEntry, ...]:
        return tuple(reversed(self._entries))

    def __iter__(self) -> Iterator[LogEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
