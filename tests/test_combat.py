import random

import pytest

from fogcrawl.characters import PlayerStats
from fogcrawl.combat import (
    MonsterState,
    critical_damage,
    mitigated_damage,
    resolve_exchange,
)
from fogcrawl.content import Item, ItemType, MonsterMeta
from fogcrawl.grid import Position


class ScriptedRandom(random.Random):
    def __init__(self, *rolls: float) -> None:
        super().__init__(0)
        self._rolls = list(rolls)

    def random(self) -> float:
        return self._rolls.pop(0)


def make_monster(**overrides) -> MonsterState:
    values = {"hp": 6, "attack": 2, "defense": 0}
    values.update(overrides)
    return MonsterState(**values)


@pytest.mark.parametrize("damage, expected", [(1, 2), (2, 3), (3, 5), (4, 6), (5, 8)])
def test_critical_damage_rounds_half_up(damage: int, expected: int) -> None:
    assert critical_damage(damage) == expected


def test_mitigated_damage_never_negative() -> None:
    assert mitigated_damage(2, 5) == 0
    assert mitigated_damage(5, 2) == 3


def test_plain_exchange() -> None:
    monster = make_monster()
    result = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.5, 0.5, 0.5))
    assert monster.hp == 4
    assert result.stats.life == 8
    assert result.narrate() == (
        "You attack monster for 2. monster attacks you for 2. Your life: 8. monster life: 4."
    )


def test_player_miss_leaves_monster_untouched() -> None:
    monster = make_monster()
    result = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.01, 0.01))
    assert monster.hp == 6
    assert result.player_attack.missed
    assert result.counter_attack is not None and result.counter_attack.missed
    assert result.stats.life == 10
    assert result.narrate().startswith("Your attack misses. monster misses.")


def test_counter_attack_can_miss_on_its_own() -> None:
    monster = make_monster()
    result = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.5, 0.5, 0.01))
    assert monster.hp == 4
    assert not result.player_attack.missed
    assert result.counter_attack is not None and result.counter_attack.missed
    assert result.stats.life == 10
    assert result.narrate() == (
        "You attack monster for 2. monster misses. Your life: 10. monster life: 4."
    )


def test_critical_roll_is_skipped_for_mitigated_hits() -> None:
    monster = make_monster(defense=3)
    # Only two rolls are consumed: the player's miss check and the counter-attack.
    result = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.5, 0.5))
    assert result.player_attack.mitigated
    assert not result.critical
    assert "couldn't penetrate monster's defense" in result.narrate()


def test_killing_blow_skips_counter_attack() -> None:
    monster = make_monster(hp=2, name="rat")
    result = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.5, 0.5))
    assert result.monster_defeated
    assert result.counter_attack is None
    assert result.stats.life == 10
    assert result.narrate().endswith("You defeat rat. Your life: 10. rat life: 0.")


def test_flavor_advances_even_on_a_miss() -> None:
    monster = make_monster(descriptions=("One.", "Two."))
    missed = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.01, 0.5))
    assert missed.flavor == "One."
    assert "One." not in missed.narrate()
    hit = resolve_exchange(monster, PlayerStats(), rng=ScriptedRandom(0.5, 0.5, 0.5))
    assert hit.flavor == "Two."
    assert "Two." in hit.narrate()


def test_monster_state_from_item() -> None:
    item = Item(ItemType.MONSTER, Position(0, 0), MonsterMeta(hp=9, attack=3, name="ogre"))
    state = MonsterState.from_item(item)
    assert (state.hp, state.attack, state.defense, state.name) == (9, 3, 0, "ogre")
    bare = MonsterState.from_item(Item(ItemType.MONSTER, Position(0, 0)))
    assert bare.hp == 6
