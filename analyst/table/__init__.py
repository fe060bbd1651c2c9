"""Table engine, players, round state and events."""

from analyst.table.events import EventEmitter, EventType, GameEvent
from analyst.table.state import RoundState
from analyst.table.player import Player
from analyst.table.engine import Table

__all__ = [
    "EventEmitter",
    "EventType",
    "GameEvent",
    "RoundState",
    "Player",
    "Table",
]
