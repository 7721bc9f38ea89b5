"""Combat resolution for bumping into monsters."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import Optional, Tuple

from .characters import PlayerStats
from .content.models import Item, MonsterMeta

__all__ = [
    "CRITICAL_CHANCE",
    "CRITICAL_MULTIPLIER",
    "MISS_CHANCE",
    "AttackResult",
    "ExchangeResult",
    "MonsterState",
    "critical_damage",
    "mitigated_damage",
    "resolve_exchange",
]

MISS_CHANCE = 0.05
CRITICAL_CHANCE = 0.08
CRITICAL_MULTIPLIER = 1.5


@dataclass
class MonsterState:
    """Mutable combat record for a monster that is still alive."""

    hp: int
    attack: int
    defense: int
    name: str = "monster"
    descriptions: Tuple[str, ...] = field(default_factory=tuple)
    next_description: int = 0

    @classmethod
    def from_item(cls, item: Item) -> "MonsterState":
        meta = item.meta if isinstance(item.meta, MonsterMeta) else MonsterMeta()
        return cls(
            hp=meta.hp,
            attack=meta.attack,
            defense=meta.defense,
            name=meta.name,
            descriptions=tuple(meta.descriptions),
        )

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def next_flavor(self) -> Optional[str]:
        """Return the next flavor line, cycling through the list."""

        if not self.descriptions:
            return None
        index = self.next_description % len(self.descriptions)
        self.next_description = (index + 1) % len(self.descriptions)
        return self.descriptions[index]


def mitigated_damage(attack: int, defense: int) -> int:
    return max(0, attack - defense)


def critical_damage(damage: int) -> int:
    """Scale ``damage`` for a critical hit, rounding halves up."""

    return int(math.floor(damage * CRITICAL_MULTIPLIER + 0.5))


@dataclass(frozen=True)
class AttackResult:
    missed: bool
    damage: int = 0
    critical: bool = False

    @property
    def mitigated(self) -> bool:
        """A hit that the target's defense absorbed completely."""

        return not self.missed and self.damage == 0


@dataclass(frozen=True)
class ExchangeResult:
    """Outcome of one player attack and the optional counter-attack."""

    monster_name: str
    player_attack: AttackResult
    counter_attack: Optional[AttackResult]
    flavor: Optional[str]
    stats: PlayerStats
    monster_hp: int

    @property
    def monster_defeated(self) -> bool:
        return self.monster_hp <= 0

    @property
    def player_defeated(self) -> bool:
        return self.stats.defeated

    @property
    def critical(self) -> bool:
        return self.player_attack.critical

    def narrate(self) -> str:
        name = self.monster_name
        parts: list[str] = []
        attack = self.player_attack
        if attack.missed:
            parts.append("Your attack misses.")
        else:
            if attack.mitigated:
                parts.append(f"Your attack couldn't penetrate {name}'s defense.")
            else:
                parts.append(f"You attack {name} for {attack.damage}.")
            if self.flavor:
                parts.append(self.flavor)
        life = max(0, self.stats.life)
        if self.monster_defeated:
            parts.append(f"You defeat {name}. Your life: {life}. {name} life: 0.")
            return " ".join(parts)
        counter = self.counter_attack
        if counter is not None:
            if counter.missed:
                parts.append(f"{name} misses.")
            else:
                parts.append(f"{name} attacks you for {counter.damage}.")
        parts.append(f"Your life: {life}. {name} life: {self.monster_hp}.")
        return " ".join(parts)


def resolve_exchange(
    monster: MonsterState,
    stats: PlayerStats,
    *,
    rng: random.Random | None = None,
) -> ExchangeResult:
    """Resolve a single exchange, mutating ``monster`` in place.

    The player strikes first. The monster answers only if it survives.
    """

    generator = rng or random
    flavor = monster.next_flavor()

    if generator.random() < MISS_CHANCE:
        player_attack = AttackResult(missed=True)
    else:
        damage = mitigated_damage(stats.strength, monster.defense)
        critical = False
        if damage > 0 and generator.random() < CRITICAL_CHANCE:
            critical = True
            damage = critical_damage(damage)
        player_attack = AttackResult(missed=False, damage=damage, critical=critical)
        monster.hp -= damage

    counter_attack: Optional[AttackResult] = None
    if monster.alive:
        if generator.random() < MISS_CHANCE:
            counter_attack = AttackResult(missed=True)
        else:
            damage = mitigated_damage(monster.attack, stats.defense)
            counter_attack = AttackResult(missed=False, damage=damage)
            stats = stats.damage(damage)

    return ExchangeResult(
        monster_name=monster.name,
        player_attack=player_attack,
        counter_attack=counter_attack,
        flavor=flavor,
        stats=stats,
        monster_hp=monster.hp,
    )
