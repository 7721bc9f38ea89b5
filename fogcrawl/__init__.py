"""Fog-of-war grid crawler: game rules and content."""

from .characters import PlayerStats
from .game import GameSession, Outcome, TurnResult
from .grid import Direction, Position
from .sessions import SessionManager

__all__ = [
    "Direction",
    "GameSession",
    "Outcome",
    "PlayerStats",
    "Position",
    "SessionManager",
    "TurnResult",
]
