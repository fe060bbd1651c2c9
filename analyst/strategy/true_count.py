"""Card counting strategy that sizes bets by the true count."""

from __future__ import annotations

from typing import TYPE_CHECKING

from analyst.cards import Card
from analyst.counting import CountingSystem, HiLoSystem
from analyst.hand import PlayerHand
from analyst.strategy.base import PlayerAction, PlayerStrategy, TableMinimumBetMixin
from analyst.strategy.basic import BasicPlayerStrategy

if TYPE_CHECKING:
    from analyst.table.engine import Table

DEFAULT_DECKS = 8

# (highest true count, units of the minimum bet)
BET_RAMP: tuple[tuple[float, int], ...] = (
    (1.0, 1),
    (2.0, 2),
    (3.0, 3),
    (4.0, 5),
)
MAX_UNITS = 10
INSURANCE_TRUE_COUNT = 3.0


class TrueCountPlayerStrategy(TableMinimumBetMixin, PlayerStrategy):
    """
    Plays basic strategy and spreads bets with the true count.

    The count comes from an injected counting system (Hi-Lo by default)
    that sees every card the table deals face up.
    """

    def __init__(
        self,
        counting: CountingSystem | None = None,
        play: PlayerStrategy | None = None,
    ) -> None:
        super().__init__()
        self.counting = counting or HiLoSystem()
        self._play = play or BasicPlayerStrategy()
        self._num_decks = DEFAULT_DECKS

    @property
    def true_count(self) -> float:
        """Return the true count for the shoe being dealt."""
        return self.counting.true_count_for_shoe(self._num_decks)

    def get_action(self, hand: PlayerHand, dealer_card: Card) -> PlayerAction:
        return self._play.get_action(hand, dealer_card)

    def get_bet(self, bankroll: int) -> int:
        true_count = self.true_count
        for ceiling, units in BET_RAMP:
            if true_count <= ceiling:
                return min(units * self.min_bet, bankroll)
        return min(MAX_UNITS * self.min_bet, bankroll)

    def get_insurance_bet(self, hand: PlayerHand, bet_amount: int) -> int:
        if self.true_count >= INSURANCE_TRUE_COUNT:
            return bet_amount // 2
        return 0

    def on_shuffle(self) -> None:
        self.counting.reset()

    def on_card_dealt(self, card: Card) -> None:
        self.counting.count_card(card)

    def on_join(self, table: Table) -> None:
        super().on_join(table)
        self._play.on_join(table)
        if self._table is table:
            self._num_decks = table.num_decks

    def on_leave(self, table: Table) -> None:
        super().on_leave(table)
        self._play.on_leave(table)
