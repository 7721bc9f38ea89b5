"""Runtime level state and the per-position item index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from fogcrawl.content.models import Item, ItemType, TreasureMeta, RewardKind
from fogcrawl.grid import Position

__all__ = ["Level"]


@dataclass
class Level:
    """A playable copy of a level template.

    Consumed items are removed from :attr:`items`; opening an exit changes the
    item's type in place.
    """

    id: str
    rows: int
    cols: int
    items: List[Item] = field(default_factory=list)
    scenes: Dict[Position, str] = field(default_factory=dict)
    next_level_id: Optional[str] = None
    start: Position = Position(0, 0)

    def in_bounds(self, position: Position) -> bool:
        return 0 <= position.row < self.rows and 0 <= position.col < self.cols

    def items_at(self, position: Position) -> tuple[Item, ...]:
        return tuple(item for item in self.items if item.position == position)

    def has(self, position: Position, *types: ItemType) -> bool:
        return any(item.type in types for item in self.items_at(position))

    def first(self, position: Position, item_type: ItemType) -> Optional[Item]:
        for item in self.items:
            if item.position == position and item.type is item_type:
                return item
        return None

    def has_wall(self, position: Position) -> bool:
        return any(item.type.is_wall for item in self.items_at(position))

    def blocks_like_wall(self, position: Position) -> bool:
        """Out-of-bounds cells behave exactly like walls."""

        return not self.in_bounds(position) or self.has_wall(position)

    def remove_item(self, item_type: ItemType, position: Position) -> int:
        """Remove every ``item_type`` item at ``position``; return how many went."""

        before = len(self.items)
        self.items = [
            item
            for item in self.items
            if not (item.type is item_type and item.position == position)
        ]
        return before - len(self.items)

    def open_exit(self, position: Position) -> bool:
        item = self.first(position, ItemType.EXIT)
        if item is None:
            return False
        item.type = ItemType.EXIT_OPEN
        return True

    def empty_treasure(self) -> int:
        """Mark every chest as empty; return how many were changed."""

        count = 0
        for item in self.items:
            if item.type is ItemType.TREASURE:
                item.meta = TreasureMeta(kind=RewardKind.EMPTY)
                count += 1
        return count

    def scene_at(self, position: Position) -> str:
        return self.scenes.get(position, "")

    def positions(self):
        for row in range(self.rows):
            for col in range(self.cols):
                yield Position(row, col)
