"""Blackjack table simulator for analysing player strategies."""

from analyst.cards import Card, Rank, Shoe, Suit
from analyst.hand import Hand, PlayerHand
from analyst.table import EventType, GameEvent, Player, RoundState, Table

__all__ = [
    "Card",
    "Rank",
    "Shoe",
    "Suit",
    "Hand",
    "PlayerHand",
    "EventType",
    "GameEvent",
    "Player",
    "RoundState",
    "Table",
]
