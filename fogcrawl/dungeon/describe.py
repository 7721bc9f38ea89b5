"""Sensory cues and location descriptions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, List, Optional

from fogcrawl.content.models import CustomWallMeta, ItemType
from fogcrawl.grid import Direction, Position

from .level import Level

__all__ = [
    "CUE_ORDER",
    "CellDescription",
    "INN_CUE",
    "Surroundings",
    "cue_at",
    "describe_position",
    "here_summary",
    "is_blocked",
    "surroundings_at",
]

EXIT_CUE = "you see the exit"
FOG_CUE = "mysterious fog"
GLOW_CUE = "faint glow"
WEAPON_SHOP_CUE = "weapon shop"
ARMOR_SHOP_CUE = "armor shop"
INN_CUE = "Inn"
VILLAGER_CUE = "Villager"
GROWL_CUE = "growling sound"
POUCH_CUE = "small pouch"
PASSAGE_CUE = "hidden passage"

# Cue lookup precedence for an open (non-wall) neighbour.
_CUE_PRIORITY: tuple[tuple[frozenset[ItemType], str], ...] = (
    (frozenset({ItemType.DOOR, ItemType.EXIT}), EXIT_CUE),
    (frozenset({ItemType.VOID}), FOG_CUE),
    (frozenset({ItemType.WEAPON_SHOP}), WEAPON_SHOP_CUE),
    (frozenset({ItemType.ARMOR_SHOP}), ARMOR_SHOP_CUE),
    (frozenset({ItemType.INN}), INN_CUE),
    (frozenset({ItemType.VILLAGER}), VILLAGER_CUE),
    (frozenset({ItemType.KEY}), GLOW_CUE),
    (frozenset({ItemType.MONSTER}), GROWL_CUE),
    (frozenset({ItemType.POTION}), POUCH_CUE),
    (frozenset({ItemType.TREASURE}), PASSAGE_CUE),
)

# Order in which cue groups are narrated.
CUE_ORDER: tuple[str, ...] = (
    EXIT_CUE,
    FOG_CUE,
    GLOW_CUE,
    WEAPON_SHOP_CUE,
    ARMOR_SHOP_CUE,
    INN_CUE,
    VILLAGER_CUE,
    GROWL_CUE,
    POUCH_CUE,
    PASSAGE_CUE,
)

_HERE_SUMMARIES: tuple[tuple[ItemType, str], ...] = (
    (ItemType.EXIT, "An exit is here."),
    (ItemType.DOOR, "A door is here."),
    (ItemType.VOID, "A swirling void is here."),
    (ItemType.KEY, "A key is here."),
    (ItemType.MONSTER, "A monster is here."),
    (ItemType.TREASURE, "A treasure chest is here."),
    (ItemType.POTION, "A potion is here."),
    (ItemType.WEAPON_SHOP, "A weapon shop is here."),
    (ItemType.ARMOR_SHOP, "An armor shop is here."),
    (ItemType.VILLAGER, "A villager is here."),
)


def cue_at(level: Level, position: Position) -> Optional[str]:
    """Return the single sensory cue for ``position``, if any."""

    if not level.in_bounds(position):
        return None
    items = level.items_at(position)
    for item in items:
        if item.type is ItemType.CUSTOM_WALL:
            meta = item.meta
            if isinstance(meta, CustomWallMeta) and meta.name:
                return meta.name
            return "wall"
    if any(item.type.is_wall for item in items):
        return None
    present = {item.type for item in items}
    for types, cue in _CUE_PRIORITY:
        if present & types:
            return cue
    return None


def is_blocked(level: Level, position: Position, *, has_key: bool) -> bool:
    """Whether the player could not step onto ``position`` right now."""

    if level.blocks_like_wall(position):
        return True
    if level.has(position, ItemType.DOOR) and not has_key:
        return True
    return level.has(position, ItemType.MONSTER)


@dataclass
class Surroundings:
    """Each of the four directions sorted into exactly one bucket."""

    cues: Dict[str, List[Direction]] = field(default_factory=dict)
    open: List[Direction] = field(default_factory=list)
    blocked: List[Direction] = field(default_factory=list)

    def format(self, *, omit_cues: AbstractSet[str] = frozenset()) -> str:
        parts: list[str] = []
        for cue in CUE_ORDER:
            directions = self.cues.get(cue)
            if directions and cue not in omit_cues:
                parts.append(_group(cue, directions))
        for cue, directions in self.cues.items():
            if cue not in CUE_ORDER and cue not in omit_cues:
                parts.append(_group(cue, directions))
        if self.open:
            parts.append(_group("open path", self.open))
        if self.blocked:
            parts.append(_group("blocked path", self.blocked))
        return " ".join(parts)


def _group(label: str, directions: List[Direction]) -> str:
    return f"{label}: {', '.join(direction.label for direction in directions)}."


def surroundings_at(level: Level, position: Position, *, has_key: bool) -> Surroundings:
    result = Surroundings()
    for direction, neighbour in position.neighbours():
        cue = cue_at(level, neighbour)
        if cue:
            result.cues.setdefault(cue, []).append(direction)
        elif is_blocked(level, neighbour, has_key=has_key):
            result.blocked.append(direction)
        else:
            result.open.append(direction)
    return result


def here_summary(level: Level, position: Position) -> tuple[Optional[ItemType], str]:
    """Return the occupant announced for ``position`` and its sentence."""

    present = {item.type for item in level.items_at(position)}
    for item_type, sentence in _HERE_SUMMARIES:
        if item_type in present:
            return item_type, sentence
    return None, ""


@dataclass(frozen=True)
class CellDescription:
    """A location description kept in parts so pieces can be suppressed."""

    scene: str
    occupant: Optional[ItemType]
    occupant_text: str
    surroundings: Surroundings

    def render(
        self,
        *,
        covered: AbstractSet[ItemType] = frozenset(),
        omit_cues: AbstractSet[str] = frozenset(),
    ) -> str:
        parts: list[str] = []
        if self.scene:
            parts.append(self.scene)
        if self.occupant_text and self.occupant not in covered:
            parts.append(self.occupant_text)
        surroundings = self.surroundings.format(omit_cues=omit_cues)
        if surroundings:
            parts.append(surroundings)
        return " ".join(parts)

    def __str__(self) -> str:
        return self.render()


def describe_position(level: Level, position: Position, *, has_key: bool) -> CellDescription:
    occupant, occupant_text = here_summary(level, position)
    return CellDescription(
        scene=level.scene_at(position),
        occupant=occupant,
        occupant_text=occupant_text,
        surroundings=surroundings_at(level, position, has_key=has_key),
    )
