import pytest

from fogcrawl.characters import MAX_LIFE, PlayerStats
from fogcrawl.content import ItemType
from fogcrawl.shops import (
    ARMOR_UPGRADE,
    INN_REST,
    WEAPON_UPGRADE,
    InsufficientFunds,
    ShopError,
    offer_for,
    purchase,
)


def test_offers_are_looked_up_by_item_type() -> None:
    assert offer_for(ItemType.WEAPON_SHOP) is WEAPON_UPGRADE
    assert offer_for(ItemType.ARMOR_SHOP) is ARMOR_UPGRADE
    assert offer_for(ItemType.INN) is INN_REST
    assert offer_for(ItemType.KEY) is None


def test_weapon_upgrade() -> None:
    bought = purchase(PlayerStats(gold=20), WEAPON_UPGRADE)
    assert bought.stats.strength == 4
    assert bought.stats.gold == 2
    assert bought.message == "You upgrade your strength by 2. You spent 18 gold."


def test_armor_upgrade() -> None:
    bought = purchase(PlayerStats(gold=14), ARMOR_UPGRADE)
    assert bought.stats.defense == 1
    assert bought.stats.gold == 0


def test_insufficient_funds_leaves_stats_alone() -> None:
    stats = PlayerStats(gold=5)
    with pytest.raises(InsufficientFunds) as excinfo:
        purchase(stats, ARMOR_UPGRADE)
    assert isinstance(excinfo.value, ShopError)
    assert str(excinfo.value) == "You need 14 gold to buy an upgrade."
    assert stats.gold == 5


def test_inn_rest_is_capped_at_max_life() -> None:
    bought = purchase(PlayerStats(life=MAX_LIFE - 3, gold=10), INN_REST)
    assert bought.stats.life == MAX_LIFE
    assert bought.life_gained == 3
    assert "recover 3 life" in bought.message

    full = purchase(PlayerStats(life=MAX_LIFE, gold=10), INN_REST)
    assert full.life_gained == 0
    assert "already at full health" in full.message


def test_shop_prompts() -> None:
    assert WEAPON_UPGRADE.prompt == (
        "Welcome to the weapon shop! Press Act to upgrade your strength 2 points for 18 gold."
    )
    assert INN_REST.shortfall_message == "You need 10 gold to rest at the inn."
