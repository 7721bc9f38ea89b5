"""Grid coordinates and compass directions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = ["MAX_GRID_SIZE", "Direction", "Position"]

# Column keys are single letters, so a grid can be at most 26 cells wide.
MAX_GRID_SIZE = 26


@dataclass(frozen=True, order=True)
class Position:
    """A cell on a rectangular grid, addressed by zero-based row and column."""

    row: int
    col: int

    @property
    def key(self) -> str:
        """Return the display key, e.g. ``C4`` for row 3, column 2."""

        return f"{chr(ord('A') + self.col)}{self.row + 1}"

    @classmethod
    def from_key(cls, key: str) -> "Position":
        text = key.strip().upper()
        if len(text) < 2 or not text[0].isalpha() or not text[1:].isdigit():
            raise ValueError(f"Invalid position key '{key}'")
        col = ord(text[0]) - ord("A")
        row = int(text[1:]) - 1
        if col < 0 or col >= MAX_GRID_SIZE or row < 0:
            raise ValueError(f"Invalid position key '{key}'")
        return cls(row=row, col=col)

    def step(self, direction: "Direction") -> "Position":
        return Position(self.row + direction.d_row, self.col + direction.d_col)

    def neighbours(self) -> tuple[tuple["Direction", "Position"], ...]:
        return tuple((direction, self.step(direction)) for direction in Direction)

    def __str__(self) -> str:
        return self.key


class Direction(Enum):
    """Cardinal directions in narration order."""

    NORTH = ("north", -1, 0)
    SOUTH = ("south", 1, 0)
    WEST = ("west", 0, -1)
    EAST = ("east", 0, 1)

    def __init__(self, label: str, d_row: int, d_col: int) -> None:
        self.label = label
        self.d_row = d_row
        self.d_col = d_col
