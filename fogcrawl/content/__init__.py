"""Content schemas and registries for crawl levels."""

from .loader import ContentLibrary, ContentLoadError
from .models import (
    WALL_TYPES,
    Campaign,
    CustomWallMeta,
    Item,
    ItemMeta,
    ItemType,
    LevelTemplate,
    MonsterMeta,
    PotionMeta,
    RewardKind,
    SchemaError,
    TreasureMeta,
    VillagerMeta,
)
from .registry import LevelRegistry

__all__ = [
    "Campaign",
    "ContentLibrary",
    "ContentLoadError",
    "CustomWallMeta",
    "Item",
    "ItemMeta",
    "ItemType",
    "LevelRegistry",
    "LevelTemplate",
    "MonsterMeta",
    "PotionMeta",
    "RewardKind",
    "SchemaError",
    "TreasureMeta",
    "VillagerMeta",
    "WALL_TYPES",
]
