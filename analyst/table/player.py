"""Players seated at a blackjack table."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING

from analyst.errors import ConfigurationError
from analyst.hand import PlayerHand
from analyst.strategy.base import PlayerStrategy
from analyst.table.events import EventEmitter, EventHandler, EventType

if TYPE_CHECKING:
    from analyst.table.engine import Table

DEFAULT_BANKROLL = 500

_player_numbers = itertools.count()


class Player:
    """
    A player with a strategy and a bankroll.

    The table owns the player's hands and insurance bet for the duration
    of a round; between rounds both are empty.
    """

    def __init__(
        self,
        strategy: PlayerStrategy,
        bankroll: int = DEFAULT_BANKROLL,
        name: str | None = None,
    ) -> None:
        """
        Initialize a player.

        Args:
            strategy: Strategy making this player's decisions
            bankroll: Starting bankroll, must not be negative
            name: Display name (defaults to "Player N")
        """
        number = next(_player_numbers)
        self.name = name if name is not None else f"Player {number}"
        self.strategy = strategy
        self.bankroll = bankroll

        self.table: Table | None = None
        self.hands: list[PlayerHand] = []
        self.insurance_bet = 0
        self.events = EventEmitter()

    @property
    def strategy(self) -> PlayerStrategy:
        """Return the player's strategy."""
        return self._strategy

    @strategy.setter
    def strategy(self, strategy: PlayerStrategy) -> None:
        if strategy is None:
            raise ConfigurationError("Player strategy can not be None")
        self._strategy = strategy

    @property
    def bankroll(self) -> int:
        """Return the player's bankroll."""
        return self._bankroll

    @bankroll.setter
    def bankroll(self, bankroll: int) -> None:
        if bankroll < 0:
            raise ConfigurationError("Bankroll can not be negative")
        self._bankroll = bankroll

    def _adjust_bankroll(self, amount: int) -> int:
        """
        Add amount (negative to deduct) and return the new bankroll.

        Not validated: a strategy betting beyond its bankroll can drive
        this negative.
        """
        self._bankroll += amount
        return self._bankroll

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to this player's events."""
        self.events.subscribe(handler, event_type)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> bool:
        """Unsubscribe from this player's events."""
        return self.events.unsubscribe(handler, event_type)

    @property
    def is_betting(self) -> bool:
        """Check if the player has a hand in the current round."""
        return bool(self.hands)

    def __str__(self) -> str:
        text = f"{self.name}: bankroll = {self.bankroll}"
        if self.table is not None:
            text += f", table = {self.table.name}"
        return text

    def __repr__(self) -> str:
        return f"Player({self.name!r}, bankroll={self.bankroll})"
