import random

import pytest

from fogcrawl.characters import PlayerStats
from fogcrawl.content import RewardKind, TreasureMeta, VillagerMeta
from fogcrawl.dungeon.rewards import (
    Reward,
    apply_reward,
    resolve_villager_reward,
    roll_reward,
    roll_treasure_reward,
    treasure_message,
    villager_message,
)


class FixedRoll(random.Random):
    def __init__(self, roll: float, amount: int = 10) -> None:
        super().__init__(0)
        self._roll = roll
        self._amount = amount
        self.randint_calls: list[tuple[int, int]] = []

    def random(self) -> float:
        return self._roll

    def randint(self, a: int, b: int) -> int:
        self.randint_calls.append((a, b))
        return self._amount


@pytest.mark.parametrize(
    "roll, expected",
    [
        (0.0, Reward(RewardKind.GOLD, 33)),
        (0.6499, Reward(RewardKind.GOLD, 33)),
        (0.65, Reward(RewardKind.POWER, 1)),
        (0.8499, Reward(RewardKind.POWER, 1)),
        (0.85, Reward(RewardKind.DEFENSE, 1)),
        (0.999, Reward(RewardKind.DEFENSE, 1)),
    ],
)
def test_roll_reward_thresholds(roll: float, expected: Reward) -> None:
    assert roll_reward(FixedRoll(roll, amount=33)) == expected


def test_gold_amount_is_drawn_from_ten_to_fifty() -> None:
    rng = FixedRoll(0.1)
    roll_reward(rng)
    assert rng.randint_calls == [(10, 50)]


def test_seeded_rolls_stay_in_range() -> None:
    rng = random.Random(1234)
    for _ in range(200):
        reward = roll_reward(rng)
        if reward.kind is RewardKind.GOLD:
            assert 10 <= reward.amount <= 50
        else:
            assert reward.amount == 1


def test_empty_chest_never_rolls() -> None:
    rng = FixedRoll(0.0)
    reward = roll_treasure_reward(TreasureMeta(kind=RewardKind.EMPTY), rng)
    assert reward == Reward(RewardKind.EMPTY)
    assert rng.randint_calls == []
    assert treasure_message(reward) == "The chest is empty."


def test_explicit_chest_reward_is_exact() -> None:
    assert roll_treasure_reward(TreasureMeta(kind=RewardKind.DEFENSE, value=2)) == Reward(
        RewardKind.DEFENSE, 2
    )
    assert roll_treasure_reward(TreasureMeta(kind=RewardKind.GOLD)) == Reward(RewardKind.GOLD, 0)


def test_chest_without_kind_is_rolled() -> None:
    assert roll_treasure_reward(None, FixedRoll(0.9)) == Reward(RewardKind.DEFENSE, 1)
    assert roll_treasure_reward(TreasureMeta(), FixedRoll(0.7)) == Reward(RewardKind.POWER, 1)


def test_villager_rewards() -> None:
    assert resolve_villager_reward(VillagerMeta(kind=RewardKind.POWER, value=2)) == Reward(
        RewardKind.POWER, 2
    )
    assert resolve_villager_reward(VillagerMeta(value=12)) == Reward(RewardKind.GOLD, 12)
    assert resolve_villager_reward(VillagerMeta(text="Hello"), FixedRoll(0.1, 40)) == Reward(
        RewardKind.GOLD, 40
    )
    assert resolve_villager_reward(VillagerMeta(kind=RewardKind.EMPTY)) == Reward(RewardKind.EMPTY)


def test_apply_reward_updates_matching_stat() -> None:
    stats = PlayerStats()
    assert apply_reward(stats, Reward(RewardKind.GOLD, 25)).gold == 25
    assert apply_reward(stats, Reward(RewardKind.POWER, 1)).strength == 3
    assert apply_reward(stats, Reward(RewardKind.DEFENSE, 1)).defense == 1
    assert apply_reward(stats, Reward(RewardKind.EMPTY)) == stats


def test_messages() -> None:
    assert treasure_message(Reward(RewardKind.GOLD, 25)) == "You collect 25 gold."
    assert villager_message(Reward(RewardKind.DEFENSE, 1)) == (
        "The villager gives you a defense upgrade. Defense increased by 1."
    )
    assert villager_message(Reward(RewardKind.EMPTY)) == "The villager has nothing to give you."
