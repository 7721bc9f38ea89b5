"""Upgrades sold at weapon shops, armor shops and inns."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional

from fogcrawl.characters import PlayerStats
from fogcrawl.content.models import ItemType

__all__ = [
    "ARMOR_UPGRADE",
    "INN_REST",
    "InsufficientFunds",
    "Purchase",
    "SHOP_OFFERS",
    "ShopError",
    "ShopOffer",
    "WEAPON_UPGRADE",
    "offer_for",
    "purchase",
]


@dataclass(frozen=True)
class ShopOffer:
    """A single upgrade available at a shop cell."""

    key: str
    name: str
    price: int
    strength: int = 0
    defense: int = 0
    heal: int = 0

    @property
    def prompt(self) -> str:
        if self.heal:
            return (
                f"Welcome to the {self.name}! Press Act to rest and heal "
                f"{self.heal} points for {self.price} gold."
            )
        if self.strength:
            return (
                f"Welcome to the {self.name}! Press Act to upgrade your strength "
                f"{self.strength} points for {self.price} gold."
            )
        return (
            f"Welcome to the {self.name}! Press Act to upgrade your defense "
            f"{self.defense} points for {self.price} gold."
        )

    @property
    def shortfall_message(self) -> str:
        if self.heal:
            return f"You need {self.price} gold to rest at the {self.name}."
        return f"You need {self.price} gold to buy an upgrade."


@dataclass(frozen=True)
class Purchase:
    offer: ShopOffer
    stats: PlayerStats
    life_gained: int = 0

    @property
    def message(self) -> str:
        offer = self.offer
        if offer.heal:
            if self.life_gained > 0:
                return (
                    f"You rest at the {offer.name} and recover {self.life_gained} life. "
                    f"You spent {offer.price} gold."
                )
            return (
                f"You rest at the {offer.name} but you were already at full health. "
                f"You spent {offer.price} gold."
            )
        if offer.strength:
            return f"You upgrade your strength by {offer.strength}. You spent {offer.price} gold."
        return f"You upgrade your defense by {offer.defense}. You spent {offer.price} gold."


class ShopError(RuntimeError):
    """Base error raised when a shop interaction fails."""


class InsufficientFunds(ShopError):
    """Raised when the player cannot afford an offer."""

    def __init__(self, offer: ShopOffer) -> None:
        super().__init__(offer.shortfall_message)
        self.offer = offer


WEAPON_UPGRADE = ShopOffer("weapon_shop", "weapon shop", 18, strength=2)
ARMOR_UPGRADE = ShopOffer("armor_shop", "armor shop", 14, defense=1)
INN_REST = ShopOffer("inn", "inn", 10, heal=8)

SHOP_OFFERS: Dict[ItemType, ShopOffer] = {
    ItemType.WEAPON_SHOP: WEAPON_UPGRADE,
    ItemType.ARMOR_SHOP: ARMOR_UPGRADE,
    ItemType.INN: INN_REST,
}


def offer_for(item_type: ItemType) -> Optional[ShopOffer]:
    return SHOP_OFFERS.get(item_type)


def purchase(stats: PlayerStats, offer: ShopOffer) -> Purchase:
    """Buy ``offer`` and return the updated stats; ``stats`` is left untouched."""

    if stats.gold < offer.price:
        raise InsufficientFunds(offer)
    updated = replace(
        stats,
        gold=stats.gold - offer.price,
        strength=stats.strength + offer.strength,
        defense=stats.defense + offer.defense,
    )
    gained = 0
    if offer.heal:
        updated, gained = updated.heal(offer.heal)
    return Purchase(offer=offer, stats=updated, life_gained=gained)
