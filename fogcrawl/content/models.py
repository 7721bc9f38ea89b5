"""Schema models for level content."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Mapping, MutableMapping, Optional, Sequence, Union

from fogcrawl.grid import MAX_GRID_SIZE, Position

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from fogcrawl.dungeon.level import Level

__all__ = [
    "Campaign",
    "CustomWallMeta",
    "Item",
    "ItemMeta",
    "ItemType",
    "LevelTemplate",
    "MonsterMeta",
    "PotionMeta",
    "RewardKind",
    "SchemaError",
    "TreasureMeta",
    "VillagerMeta",
    "WALL_TYPES",
]


class SchemaError(ValueError):
    """Raised when content data fails validation."""


def _coerce_mapping(name: str, value: object) -> MutableMapping[str, object]:
    if isinstance(value, MutableMapping):
        return value
    if isinstance(value, Mapping):
        return dict(value)
    raise SchemaError(f"{name} must be a mapping")


def _coerce_sequence(name: str, value: object) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        return value
    raise SchemaError(f"{name} must be a sequence")


def _coerce_position(name: str, value: object) -> Position:
    if not isinstance(value, str):
        raise SchemaError(f"{name} must be a position key such as 'A1'")
    try:
        return Position.from_key(value)
    except ValueError as exc:
        raise SchemaError(str(exc)) from exc


def _int_or_default(value: object, default: int) -> int:
    # Level files written by hand often carry blanks or strings; anything that
    # is not a non-zero number keeps the default.
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    return number or default


def _optional_int(value: object) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 0


class ItemType(str, Enum):
    """Fixed vocabulary of things that can occupy a cell."""

    WALL = "wall"
    BUSH = "bush"
    FLOWER = "flower"
    CUSTOM_WALL = "custom_wall"
    DOOR = "door"
    KEY = "key"
    TREASURE = "treasure"
    POTION = "potion"
    VOID = "void"
    MONSTER = "monster"
    EXIT = "exit"
    EXIT_OPEN = "exit_open"
    WEAPON_SHOP = "weapon_shop"
    ARMOR_SHOP = "armor_shop"
    INN = "inn"
    VILLAGER = "villager"

    @property
    def is_wall(self) -> bool:
        return self in WALL_TYPES


WALL_TYPES = frozenset(
    {ItemType.WALL, ItemType.BUSH, ItemType.FLOWER, ItemType.CUSTOM_WALL}
)


class RewardKind(str, Enum):
    GOLD = "gold"
    POWER = "power"
    DEFENSE = "defense"
    EMPTY = "empty"

    @classmethod
    def parse(cls, value: object) -> Optional["RewardKind"]:
        if value is None or value == "":
            return None
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise SchemaError(f"Unknown reward kind '{value}'") from exc


@dataclass(frozen=True)
class TreasureMeta:
    """Reward stored in a chest. Without a kind the reward is rolled."""

    kind: Optional[RewardKind] = None
    value: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "TreasureMeta":
        return cls(kind=RewardKind.parse(data.get("kind")), value=_optional_int(data.get("value")))


@dataclass(frozen=True)
class VillagerMeta:
    """Greeting and gift handed out by a villager."""

    text: Optional[str] = None
    kind: Optional[RewardKind] = None
    value: Optional[int] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "VillagerMeta":
        text_raw = data.get("text")
        text = str(text_raw) if text_raw else None
        return cls(
            text=text,
            kind=RewardKind.parse(data.get("kind")),
            value=_optional_int(data.get("value")),
        )


@dataclass(frozen=True)
class MonsterMeta:
    """Combat statistics for a monster placed in a level."""

    hp: int = 6
    attack: int = 2
    defense: int = 0
    name: str = "monster"
    descriptions: tuple[str, ...] = ()

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "MonsterMeta":
        attack_raw = data.get("attack", data.get("atk"))
        defense_raw = data.get("defense", data.get("def"))
        descriptions_raw = data.get("descriptions", ())
        descriptions: tuple[str, ...] = ()
        if descriptions_raw:
            descriptions = tuple(
                str(line) for line in _coerce_sequence("descriptions", descriptions_raw)
            )
        return cls(
            hp=_int_or_default(data.get("hp"), cls.hp),
            attack=_int_or_default(attack_raw, cls.attack),
            defense=_int_or_default(defense_raw, cls.defense),
            name=str(data.get("name") or cls.name),
            descriptions=descriptions,
        )


@dataclass(frozen=True)
class PotionMeta:
    heal: int = 3

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "PotionMeta":
        heal = data.get("heal")
        if isinstance(heal, bool) or not isinstance(heal, int):
            return cls()
        return cls(heal=heal)


@dataclass(frozen=True)
class CustomWallMeta:
    name: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "CustomWallMeta":
        name = data.get("name")
        return cls(name=str(name) if name else None)


ItemMeta = Union[TreasureMeta, VillagerMeta, MonsterMeta, PotionMeta, CustomWallMeta]

_META_TYPES = {
    ItemType.TREASURE: TreasureMeta,
    ItemType.VILLAGER: VillagerMeta,
    ItemType.MONSTER: MonsterMeta,
    ItemType.POTION: PotionMeta,
    ItemType.CUSTOM_WALL: CustomWallMeta,
}


@dataclass
class Item:
    """A typed occupant of a single cell.

    Items are mutable at runtime: an exit is opened by changing its type and a
    chest can be emptied by replacing its metadata.
    """

    type: ItemType
    position: Position
    meta: Optional[ItemMeta] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Item":
        mapping = _coerce_mapping("item", data)
        raw_type = mapping.get("type")
        try:
            item_type = ItemType(str(raw_type).strip().lower())
        except ValueError as exc:
            raise SchemaError(f"Unknown item type '{raw_type}'") from exc
        position = _coerce_position("item pos", mapping.get("pos", mapping.get("position")))
        meta: Optional[ItemMeta] = None
        meta_type = _META_TYPES.get(item_type)
        raw_meta = mapping.get("meta")
        if meta_type is not None:
            meta_map = _coerce_mapping("meta", raw_meta) if raw_meta is not None else {}
            meta = meta_type.from_mapping(meta_map)
        return cls(type=item_type, position=position, meta=meta)


@dataclass(frozen=True)
class LevelTemplate:
    """Hand-authored level definition. Never mutated during play."""

    key: str
    rows: int
    cols: int
    items: tuple[Item, ...] = ()
    scenes: Mapping[Position, str] = field(default_factory=dict)
    next_level_id: Optional[str] = None
    start: Position = Position(0, 0)
    name: Optional[str] = None

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, object]) -> "LevelTemplate":
        mapping = _coerce_mapping("level", data)
        try:
            rows = int(mapping.get("rows", 0))  # type: ignore[arg-type]
            cols = int(mapping.get("cols", 0))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise SchemaError("rows and cols must be integers") from exc
        if not 1 <= rows <= MAX_GRID_SIZE or not 1 <= cols <= MAX_GRID_SIZE:
            raise SchemaError(
                f"Level '{key}' must be between 1 and {MAX_GRID_SIZE} cells in each dimension"
            )
        items: list[Item] = []
        for raw_item in _coerce_sequence("items", mapping.get("items", ())):
            item = Item.from_mapping(_coerce_mapping("item", raw_item))
            if not (0 <= item.position.row < rows and 0 <= item.position.col < cols):
                raise SchemaError(f"Item at {item.position} lies outside level '{key}'")
            items.append(item)
        scenes: dict[Position, str] = {}
        raw_scenes = mapping.get("scenes")
        if raw_scenes:
            for pos_key, text in _coerce_mapping("scenes", raw_scenes).items():
                scenes[_coerce_position("scene key", pos_key)] = str(text)
        start = Position(0, 0)
        if mapping.get("start") is not None:
            start = _coerce_position("start", mapping.get("start"))
        if not (0 <= start.row < rows and 0 <= start.col < cols):
            raise SchemaError(f"Start {start} lies outside level '{key}'")
        for item in items:
            if item.position == start and (
                item.type.is_wall or item.type in (ItemType.VOID, ItemType.MONSTER)
            ):
                raise SchemaError(
                    f"Level '{key}' cannot start on a {item.type.value} at {start}"
                )
        next_raw = mapping.get("next_level", mapping.get("next_level_id"))
        name_raw = mapping.get("name")
        return cls(
            key=str(key).lower(),
            rows=rows,
            cols=cols,
            items=tuple(items),
            scenes=scenes,
            next_level_id=str(next_raw).lower() if next_raw else None,
            start=start,
            name=str(name_raw) if name_raw else None,
        )

    def instantiate(self, *, opening_text: Optional[str] = None) -> "Level":
        """Return a fresh runtime copy that can be mutated freely."""

        from fogcrawl.dungeon.level import Level

        scenes = dict(self.scenes)
        if opening_text:
            scenes[self.start] = opening_text
        return Level(
            id=self.key,
            rows=self.rows,
            cols=self.cols,
            items=copy.deepcopy(list(self.items)),
            scenes=scenes,
            next_level_id=self.next_level_id,
            start=self.start,
        )


@dataclass(frozen=True)
class Campaign:
    """Campaign-wide settings shipped alongside the levels."""

    title: str = "Fog Crawl"
    start_level: Optional[str] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> "Campaign":
        mapping = _coerce_mapping("campaign", data)
        title = str(mapping.get("title") or cls.title)
        start_raw = mapping.get("start_level")
        return cls(title=title, start_level=str(start_raw).lower() if start_raw else None)
