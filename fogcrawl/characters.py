"""Player statistics carried through a crawl."""

from __future__ import annotations

from dataclasses import dataclass, replace

__all__ = ["MAX_LIFE", "PlayerStats"]

MAX_LIFE = 100


@dataclass(frozen=True)
class PlayerStats:
    """Immutable snapshot of the player's statistics.

    Every change produces a new instance, so stats carried into the next level
    never alias the previous level's state.
    """

    life: int = 10
    strength: int = 2
    defense: int = 0
    gold: int = 0
    has_key: bool = False

    def heal(self, amount: int) -> tuple["PlayerStats", int]:
        """Return the healed stats and the life actually gained."""

        life = min(MAX_LIFE, self.life + max(0, amount))
        gained = max(0, life - self.life)
        return replace(self, life=max(self.life, life)), gained

    def damage(self, amount: int) -> "PlayerStats":
        return replace(self, life=self.life - max(0, amount))

    @property
    def defeated(self) -> bool:
        return self.life <= 0

    def status_lines(self) -> tuple[str, ...]:
        return (
            f"Life: {self.life}.",
            f"Strength: {self.strength}.",
            f"Defense: {self.defense}.",
            f"Gold: {self.gold}.",
            f"Key: {'Yes' if self.has_key else 'No'}.",
        )
