"""Utility helpers for resolving chest and villager rewards."""

from __future__ import annotations

import random
from dataclasses import dataclass, replace
from typing import Optional

from fogcrawl.characters import PlayerStats
from fogcrawl.content.models import RewardKind, TreasureMeta, VillagerMeta

__all__ = [
    "GOLD_CHANCE",
    "GOLD_RANGE",
    "POWER_CHANCE",
    "Reward",
    "apply_reward",
    "resolve_villager_reward",
    "roll_reward",
    "roll_treasure_reward",
    "treasure_message",
    "villager_message",
]

# Cumulative thresholds of the random roll: gold, then strength, then defense.
GOLD_CHANCE = 0.65
POWER_CHANCE = 0.85
GOLD_RANGE = (10, 50)


@dataclass(frozen=True)
class Reward:
    """A resolved reward ready to be applied to the player's stats."""

    kind: RewardKind
    amount: int = 0


def roll_reward(rng: random.Random | None = None) -> Reward:
    generator = rng or random
    roll = generator.random()
    if roll < GOLD_CHANCE:
        return Reward(RewardKind.GOLD, generator.randint(*GOLD_RANGE))
    if roll < POWER_CHANCE:
        return Reward(RewardKind.POWER, 1)
    return Reward(RewardKind.DEFENSE, 1)


def roll_treasure_reward(
    meta: Optional[TreasureMeta], rng: random.Random | None = None
) -> Reward:
    """Resolve the contents of a chest.

    Chests marked empty stay empty, an explicit kind is honoured exactly, and
    anything else is rolled.
    """

    if meta is not None and meta.kind is not None:
        if meta.kind is RewardKind.EMPTY:
            return Reward(RewardKind.EMPTY)
        return Reward(meta.kind, meta.value or 0)
    return roll_reward(rng)


def resolve_villager_reward(
    meta: Optional[VillagerMeta], rng: random.Random | None = None
) -> Reward:
    if meta is not None:
        if meta.kind is not None:
            if meta.kind is RewardKind.EMPTY:
                return Reward(RewardKind.EMPTY)
            return Reward(meta.kind, meta.value or 0)
        if meta.value is not None:
            # Older levels stored a bare number, which always meant gold.
            return Reward(RewardKind.GOLD, meta.value)
    return roll_reward(rng)


def apply_reward(stats: PlayerStats, reward: Reward) -> PlayerStats:
    if reward.kind is RewardKind.GOLD:
        return replace(stats, gold=stats.gold + reward.amount)
    if reward.kind is RewardKind.POWER:
        return replace(stats, strength=stats.strength + reward.amount)
    if reward.kind is RewardKind.DEFENSE:
        return replace(stats, defense=stats.defense + reward.amount)
    return stats


def treasure_message(reward: Reward) -> str:
    if reward.kind is RewardKind.GOLD:
        return f"You collect {reward.amount} gold."
    if reward.kind is RewardKind.POWER:
        return f"You gain a power upgrade. Strength increased by {reward.amount}."
    if reward.kind is RewardKind.DEFENSE:
        return f"You gain a defense upgrade. Defense increased by {reward.amount}."
    return "The chest is empty."


def villager_message(reward: Reward) -> str:
    if reward.kind is RewardKind.GOLD:
        return f"The villager gives you {reward.amount} gold."
    if reward.kind is RewardKind.POWER:
        return f"The villager gives you a power upgrade. Strength increased by {reward.amount}."
    if reward.kind is RewardKind.DEFENSE:
        return f"The villager gives you a defense upgrade. Defense increased by {reward.amount}."
    return "The villager has nothing to give you."
