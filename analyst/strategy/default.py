"""Dealer-style strategies."""

from analyst.cards import Card
from analyst.hand import Hand, PlayerHand
from analyst.strategy.base import (
    DealerAction,
    DealerStrategy,
    PlayerAction,
    PlayerStrategy,
    TableMinimumBetMixin,
)


def _dealer_stands(hand: Hand) -> bool:
    """Stand on 18+ and on hard 17, hit everything else including soft 17."""
    best_value = hand.high_valid_value
    return best_value > 17 or (best_value == 17 and not hand.is_soft)


class DefaultDealerStrategy(DealerStrategy):
    """House rules: the dealer hits soft 17."""

    def get_action(self, dealer_hand: Hand) -> DealerAction:
        if _dealer_stands(dealer_hand):
            return DealerAction.STAND
        return DealerAction.HIT


class DefaultPlayerStrategy(TableMinimumBetMixin, PlayerStrategy):
    """Plays like the dealer and always bets the table minimum."""

    def get_action(self, hand: PlayerHand, dealer_card: Card) -> PlayerAction:
        if _dealer_stands(hand):
            return PlayerAction.STAND
        return PlayerAction.HIT

    def get_bet(self, bankroll: int) -> int:
        return min(self.min_bet, bankroll)
