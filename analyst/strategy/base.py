"""Strategy interfaces consumed by the table."""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import Enum, auto
from typing import TYPE_CHECKING

from analyst.cards import Card
from analyst.hand import Hand, PlayerHand

if TYPE_CHECKING:
    from analyst.table.engine import Table


class PlayerAction(Enum):
    """Possible player actions."""

    HIT = auto()
    STAND = auto()
    DOUBLE_DOWN = auto()
    SPLIT = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").lower()


class DealerAction(Enum):
    """Possible dealer actions."""

    HIT = auto()
    STAND = auto()

    def __str__(self) -> str:
        return self.name.lower()


class DealerStrategy(ABC):
    """Decides whether the dealer draws another card."""

    @abstractmethod
    def get_action(self, dealer_hand: Hand) -> DealerAction:
        """Return HIT or STAND for the dealer's current hand."""
        ...


class PlayerStrategy(ABC):
    """
    Abstract base class for player strategies.

    Return values are advisory: the table clamps insurance amounts and
    treats illegal or unrecognized actions as STAND. Implementations must
    not modify the table, its players or their hands.
    """

    @abstractmethod
    def get_action(self, hand: PlayerHand, dealer_card: Card) -> PlayerAction:
        """
        Decide the next action for a hand.

        Args:
            hand: The hand being played
            dealer_card: The dealer's up card

        Returns:
            The action to take
        """
        ...

    @abstractmethod
    def get_bet(self, bankroll: int) -> int:
        """
        Return the bet for the next round.

        A bet of 0 sits the player out. Bets must lie within
        [0, bankroll]; the table does not validate them.
        """
        ...

    def get_insurance_bet(self, hand: PlayerHand, bet_amount: int) -> int:
        """Return the insurance amount when the dealer shows an ace."""
        return 0

    def on_shuffle(self) -> None:
        """Called when the table's shoe is reshuffled."""

    def on_card_dealt(self, card: Card) -> None:
        """Called for every card dealt face up at the table."""

    def on_join(self, table: Table) -> None:
        """Called when the player joins a table."""

    def on_leave(self, table: Table) -> None:
        """Called when the player leaves a table."""


class TableMinimumBetMixin:
    """Remembers the minimum bet of the joined table."""

    def __init__(self) -> None:
        self._table: Table | None = None
        self._min_bet = 0

    def on_join(self, table: Table) -> None:
        if self._table is not None:
            return
        self._table = table
        self._min_bet = table.min_bet

    def on_leave(self, table: Table) -> None:
        if table is not self._table:
            return
        self._table = None
        self._min_bet = 0

    @property
    def min_bet(self) -> int:
        """Return the minimum bet of the joined table, or 0."""
        return self._min_bet
