"""Runtime level state, fog of war and narration helpers."""

from fogcrawl.content import Item, ItemType, LevelTemplate

from .describe import CellDescription, Surroundings, cue_at, describe_position, here_summary
from .knowledge import DiscoveryLog, KnowledgeState, LogEntry
from .level import Level
from .rewards import Reward, apply_reward, roll_reward

__all__ = [
    "CellDescription",
    "DiscoveryLog",
    "Item",
    "ItemType",
    "KnowledgeState",
    "Level",
    "LevelTemplate",
    "LogEntry",
    "Reward",
    "Surroundings",
    "apply_reward",
    "cue_at",
    "describe_position",
    "here_summary",
    "roll_reward",
]
