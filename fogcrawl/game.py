"""Game session: movement, cell entry, actions and the level lifecycle."""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Set

from .characters import PlayerStats
from .combat import MonsterState, resolve_exchange
from .content import Campaign, ContentLibrary, ItemType, LevelRegistry, PotionMeta
from .content.models import TreasureMeta, VillagerMeta
from .dungeon.describe import INN_CUE, CellDescription, describe_position
from .dungeon.knowledge import DiscoveryLog, KnowledgeState
from .dungeon.level import Level
from .dungeon.rewards import (
    apply_reward,
    resolve_villager_reward,
    roll_treasure_reward,
    treasure_message,
    villager_message,
)
from .grid import Direction, Position
from .shops import InsufficientFunds, offer_for, purchase

__all__ = ["GameSession", "Outcome", "TurnResult"]

log = logging.getLogger(__name__)

WALL_MESSAGE = "A wall blocks your way."
KEY_REQUIRED_MESSAGE = "Key required."
COMPLETED_MESSAGE = "You found the exit. Press Continue to move on."
VOID_MESSAGE = "You've fallen into the void. Game restarts."
DEFEAT_MESSAGE = "You have been defeated. Restarting level."
CARRY_OVER_MESSAGE = "Next level loaded with your stats carried over."
FINAL_MESSAGE = "You have completed the final level. Congratulations!"
NOTHING_TO_DO_MESSAGE = "There is nothing to use here."
NOT_COMPLETE_MESSAGE = "Find the exit before continuing."
RESTART_MESSAGE = "Level restarted."


class Outcome(str, Enum):
    """What a single input ended up doing."""

    STARTED = "started"
    MOVED = "moved"
    BLOCKED = "blocked"
    COMBAT = "combat"
    VICTORY = "victory"
    DEFEATED = "defeated"
    VOID = "void"
    ACTION = "action"
    NOTHING = "nothing"
    COMPLETED = "completed"
    ADVANCED = "advanced"
    FINISHED = "finished"
    STATUS = "status"
    RESTARTED = "restarted"


@dataclass(frozen=True)
class TurnResult:
    """Narration produced by one input, in the order it should be spoken."""

    outcome: Outcome
    messages: tuple[str, ...] = ()

    @property
    def text(self) -> str:
        return " ".join(self.messages)


class GameSession:
    """All mutable state of one player's crawl.

    Every public method performs one complete, synchronous transition and
    returns the narration it produced; nothing is spoken directly.
    """

    def __init__(
        self,
        levels: LevelRegistry,
        *,
        campaign: Campaign | None = None,
        start_level: str | None = None,
        opening_overrides: Mapping[str, str] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.levels = levels
        self.campaign = campaign or Campaign()
        self._start_level_id = start_level or self.campaign.start_level
        self.opening_overrides: Dict[str, str] = dict(opening_overrides or {})
        self.rng = rng or random.Random()
        self.level: Optional[Level] = None
        self.level_id: Optional[str] = None
        self.player = Position(0, 0)
        self.stats = PlayerStats()
        self.knowledge = KnowledgeState()
        self.log = DiscoveryLog()
        self.monsters: Dict[Position, MonsterState] = {}
        self.completed = False
        self.finished = False

    @classmethod
    def from_library(cls, library: ContentLibrary, **kwargs) -> "GameSession":
        kwargs.setdefault("start_level", library.start_level.key)
        return cls(library.levels, campaign=library.campaign, **kwargs)

    # -- level lifecycle -----------------------------------------------------
    def begin(self) -> TurnResult:
        """Load the campaign's first level with a welcome line."""

        level_id = self._start_level_id
        if level_id is None:
            first = self.levels.first()
            if first is None:
                raise LookupError("No levels are loaded")
            level_id = first.key
        result = self.load_level(level_id)
        return TurnResult(
            Outcome.STARTED,
            (f"Welcome to {self.campaign.title}", *result.messages),
        )

    def load_level(self, level_id: str, *, carry_stats: bool = False) -> TurnResult:
        stats = self.stats if carry_stats else PlayerStats()
        return self._start_level(level_id, stats)

    def _start_level(
        self, level_id: str, stats: PlayerStats, *, empty_treasure: bool = False
    ) -> TurnResult:
        template = self.levels.get(level_id)
        self.level = template.instantiate(opening_text=self.opening_overrides.get(template.key))
        self.level_id = template.key
        if empty_treasure:
            self.level.empty_treasure()
        self.player = self.level.start
        self.stats = stats
        self.knowledge = KnowledgeState()
        self.log = DiscoveryLog()
        self.completed = False
        self.finished = False
        self._init_monsters()
        log.info("Loaded level %s", self.level_id)
        messages = self._enter_cell()
        return TurnResult(Outcome.STARTED, messages)

    def _init_monsters(self) -> None:
        level = self._require_level()
        self.monsters = {
            item.position: MonsterState.from_item(item)
            for item in level.items
            if item.type is ItemType.MONSTER
        }

    def restart(self) -> TurnResult:
        result = self.load_level(self._current_level_id())
        return TurnResult(Outcome.RESTARTED, (*result.messages, RESTART_MESSAGE))

    def confirm(self) -> TurnResult:
        """Advance once the current level is complete."""

        if not self.completed:
            return TurnResult(Outcome.NOTHING, (NOT_COMPLETE_MESSAGE,))
        level = self._require_level()
        if level.next_level_id:
            result = self.load_level(level.next_level_id, carry_stats=True)
            return TurnResult(Outcome.ADVANCED, (*result.messages, CARRY_OVER_MESSAGE))
        self.finished = True
        return TurnResult(Outcome.FINISHED, (FINAL_MESSAGE,))

    # -- queries -------------------------------------------------------------
    def describe(self, position: Position | None = None) -> CellDescription:
        return describe_position(
            self._require_level(),
            position if position is not None else self.player,
            has_key=self.stats.has_key,
        )

    def describe_current(self) -> str:
        return self.describe().render()

    def is_visible(self, position: Position) -> bool:
        return self.knowledge.is_visible(self._require_level(), position)

    def status(self) -> TurnResult:
        return TurnResult(
            Outcome.STATUS,
            (f"You are in {self.player}.", *self.stats.status_lines()),
        )

    # -- movement ------------------------------------------------------------
    def move(self, direction: Direction) -> TurnResult:
        level = self._require_level()
        if self.completed:
            return TurnResult(Outcome.BLOCKED, (COMPLETED_MESSAGE,))

        target = self.player.step(direction)
        if not level.in_bounds(target):
            return TurnResult(Outcome.BLOCKED, (WALL_MESSAGE,))

        if level.has(target, ItemType.DOOR) and not self.stats.has_key:
            self.knowledge.bump(target)
            return TurnResult(Outcome.BLOCKED, (KEY_REQUIRED_MESSAGE, self.describe_current()))

        if level.has_wall(target):
            self.knowledge.bump(target)
            return TurnResult(Outcome.BLOCKED, (WALL_MESSAGE,))

        if level.has(target, ItemType.MONSTER):
            return self._fight(target)

        self.player = target
        return TurnResult(Outcome.MOVED, self._enter_cell())

    def _fight(self, target: Position) -> TurnResult:
        level = self._require_level()
        self.knowledge.remember(target, ItemType.MONSTER)
        self.knowledge.visited.add(target)

        monster = self.monsters.get(target)
        if monster is None:
            item = level.first(target, ItemType.MONSTER)
            assert item is not None
            log.warning("Combat state missing for monster at %s; rebuilding it", target)
            monster = MonsterState.from_item(item)
            self.monsters[target] = monster

        exchange = resolve_exchange(monster, self.stats, rng=self.rng)
        self.stats = exchange.stats
        summary = exchange.narrate()

        if exchange.monster_defeated:
            del self.monsters[target]
            level.remove_item(ItemType.MONSTER, target)
            self.knowledge.forget(target)
            self.player = target
            prefix = ["Critical hit!", summary] if exchange.critical else [summary]
            return TurnResult(Outcome.VICTORY, self._enter_cell(prefix))

        if exchange.player_defeated:
            text = f"{summary} {DEFEAT_MESSAGE}"
            self.log.append(self.player, text)
            log.info("Player defeated by %s on level %s", monster.name, self.level_id)
            result = self.load_level(self._current_level_id())
            return TurnResult(Outcome.DEFEATED, (text, *result.messages))

        full = f"{summary} You are in {self.player}. {self.describe_current()}"
        self.log.append(self.player, full)
        messages = ("Critical hit!", full) if exchange.critical else (full,)
        return TurnResult(Outcome.COMBAT, messages)

    # -- cell entry ----------------------------------------------------------
    def _enter_cell(self, prefix: Sequence[str] = ()) -> tuple[str, ...]:
        level = self._require_level()
        position = self.player
        first_visit = self.knowledge.enter(level, position)
        description = self.describe(position)

        discoveries: List[str] = []
        covered: Set[ItemType] = set()

        if level.has(position, ItemType.KEY) and not self.stats.has_key:
            self.knowledge.remember(position, ItemType.KEY)
            self.stats = replace(self.stats, has_key=True)
            level.remove_item(ItemType.KEY, position)
            discoveries.append("You found a key.")
            covered.add(ItemType.KEY)

        chest = level.first(position, ItemType.TREASURE)
        if chest is not None:
            self.knowledge.remember(position, ItemType.TREASURE)
            meta = chest.meta if isinstance(chest.meta, TreasureMeta) else None
            level.remove_item(ItemType.TREASURE, position)
            reward = roll_treasure_reward(meta, self.rng)
            self.stats = apply_reward(self.stats, reward)
            discoveries.append("You found a treasure chest.")
            discoveries.append(treasure_message(reward))
            covered.add(ItemType.TREASURE)

        villager = level.first(position, ItemType.VILLAGER)
        if villager is not None:
            self.knowledge.remember(position, ItemType.VILLAGER)
            meta = villager.meta if isinstance(villager.meta, VillagerMeta) else None
            level.remove_item(ItemType.VILLAGER, position)
            if meta is not None and meta.text:
                discoveries.append(meta.text)
            reward = resolve_villager_reward(meta, self.rng)
            self.stats = apply_reward(self.stats, reward)
            discoveries.append(villager_message(reward))
            covered.add(ItemType.VILLAGER)

        if level.has(position, ItemType.POTION):
            self.knowledge.remember(position, ItemType.POTION)
            discoveries.append("A potion is here. Press Act to drink.")
            covered.add(ItemType.POTION)

        for shop_type in (ItemType.WEAPON_SHOP, ItemType.ARMOR_SHOP, ItemType.INN):
            offer = offer_for(shop_type)
            if offer is not None and level.has(position, shop_type):
                self.knowledge.remember(position, shop_type)
                discoveries.append(offer.prompt)
                covered.add(shop_type)

        if level.has(position, ItemType.EXIT):
            self.knowledge.remember(position, ItemType.EXIT)
            discoveries.append("An exit is here. Press Act to open.")
            covered.add(ItemType.EXIT)

        if level.has(position, ItemType.EXIT_OPEN):
            self.completed = True
            discoveries.append(COMPLETED_MESSAGE)
            covered.add(ItemType.EXIT)

        if level.has(position, ItemType.DOOR):
            if self.stats.has_key:
                self.stats = replace(self.stats, has_key=False)
                self.completed = True
                discoveries.append("You unlock and open the door. Press Continue to move on.")
            else:
                discoveries.append("A locked door is here. You need a key to open it.")
            covered.add(ItemType.DOOR)

        if level.has(position, ItemType.VOID):
            return self._fall_into_void(position)

        omit_cues = {INN_CUE} if ItemType.INN in covered else set()
        room_text = description.render(covered=covered, omit_cues=omit_cues)
        spoken = [*prefix]
        if discoveries:
            spoken.append(" ".join(discoveries))
        if room_text:
            spoken.append(room_text)

        full_text = " ".join(spoken)
        if first_visit:
            self.log.record_first_visit(position, full_text)
        else:
            self.log.append(position, full_text)
        return tuple(spoken)

    def _fall_into_void(self, position: Position) -> tuple[str, ...]:
        self.log.append(position, VOID_MESSAGE)
        log.info("Player fell into the void on level %s", self.level_id)
        preserved = replace(self.stats, has_key=False)
        result = self._start_level(self._current_level_id(), preserved, empty_treasure=True)
        return (VOID_MESSAGE, *result.messages)

    # -- actions -------------------------------------------------------------
    def act(self) -> TurnResult:
        """Drink, buy or open depending on what is here or next door."""

        level = self._require_level()
        position = self.player

        potion = level.first(position, ItemType.POTION)
        if potion is not None:
            heal = potion.meta.heal if isinstance(potion.meta, PotionMeta) else PotionMeta().heal
            self.stats, gained = self.stats.heal(heal)
            level.remove_item(ItemType.POTION, position)
            result = f"You recover {gained} life." if gained > 0 else "You already feel fine."
            return TurnResult(
                Outcome.ACTION, ("You drink the potion.", result, self.describe_current())
            )

        for shop_type in (ItemType.WEAPON_SHOP, ItemType.ARMOR_SHOP, ItemType.INN):
            offer = offer_for(shop_type)
            if offer is None or not level.has(position, shop_type):
                continue
            try:
                bought = purchase(self.stats, offer)
            except InsufficientFunds as exc:
                return TurnResult(Outcome.NOTHING, (str(exc), self.describe_current()))
            self.stats = bought.stats
            return TurnResult(Outcome.ACTION, (bought.message, self.describe_current()))

        if level.open_exit(position):
            self.completed = True
            return TurnResult(
                Outcome.COMPLETED,
                ("You exit and return to the dungeon.", "Press Continue to move on."),
            )

        for _direction, neighbour in position.neighbours():
            if level.in_bounds(neighbour) and level.open_exit(neighbour):
                self.knowledge.remember(neighbour, ItemType.EXIT)
                return TurnResult(Outcome.ACTION, ("You open the exit.", self.describe_current()))

        return TurnResult(Outcome.NOTHING, (NOTHING_TO_DO_MESSAGE,))

    # -- helpers -------------------------------------------------------------
    def _require_level(self) -> Level:
        if self.level is None:
            raise RuntimeError("No level is loaded; call begin() or load_level() first")
        return self.level

    def _current_level_id(self) -> str:
        self._require_level()
        assert self.level_id is not None
        return self.level_id
