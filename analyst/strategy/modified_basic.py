"""Basic strategy adjusted by the true count."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from analyst.cards import Card
from analyst.counting import CountingSystem
from analyst.hand import PlayerHand
from analyst.strategy.base import PlayerAction, PlayerStrategy
from analyst.strategy.basic import BasicPlayerStrategy, upcard_key
from analyst.strategy.deviations import INDEX_PLAYS, IndexPlay, find_index_play, index_play_map
from analyst.strategy.true_count import TrueCountPlayerStrategy

if TYPE_CHECKING:
    from analyst.table.engine import Table


class ModifiedBasicPlayerStrategy(PlayerStrategy):
    """
    Plays basic strategy except where an index play applies.

    Betting, insurance and the count itself come from a wrapped
    TrueCountPlayerStrategy. A double the hand cannot make falls back
    to the index play's basic action.
    """

    def __init__(
        self,
        counting: CountingSystem | None = None,
        index_plays: Iterable[IndexPlay] = INDEX_PLAYS,
    ) -> None:
        self._betting = TrueCountPlayerStrategy(counting=counting)
        self._basic = BasicPlayerStrategy()
        self._plays = index_play_map(index_plays)

    @property
    def counting(self) -> CountingSystem:
        return self._betting.counting

    @property
    def true_count(self) -> float:
        return self._betting.true_count

    def get_action(self, hand: PlayerHand, dealer_card: Card) -> PlayerAction:
        return self.action_for_count(hand, dealer_card, self.true_count)

    def action_for_count(self, hand: PlayerHand, dealer_card: Card, true_count: float) -> PlayerAction:
        """Return the action for a hand at the given true count."""
        play = find_index_play(
            self._plays,
            player_total=hand.high_valid_value,
            is_soft=hand.is_soft,
            is_pair=hand.is_pair,
            dealer_upcard=upcard_key(dealer_card),
            num_cards=len(hand),
        )
        if play is None:
            return self._basic.get_action(hand, dealer_card)

        action = play.get_action(true_count)
        if action == PlayerAction.DOUBLE_DOWN and len(hand) != 2:
            return play.basic_action
        return action

    def get_bet(self, bankroll: int) -> int:
        return self._betting.get_bet(bankroll)

    def get_insurance_bet(self, hand: PlayerHand, bet_amount: int) -> int:
        return self._betting.get_insurance_bet(hand, bet_amount)

    def on_shuffle(self) -> None:
        self._betting.on_shuffle()

    def on_card_dealt(self, card: Card) -> None:
        self._betting.on_card_dealt(card)

    def on_join(self, table: Table) -> None:
        self._betting.on_join(table)

    def on_leave(self, table: Table) -> None:
        self._betting.on_leave(table)
