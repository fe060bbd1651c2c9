"""Hand evaluation for blackjack."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterator

from analyst.cards import Card

if TYPE_CHECKING:
    from analyst.table.player import Player

# Sentinel high valid value of a busted hand.
BUSTED = -1


@dataclass(eq=False)
class Hand:
    """
    A blackjack hand tracking every total its cards can make.

    Each ace may count as 1 or 11, so a hand keeps the full set of
    reachable totals rather than a single best value.
    """

    cards: list[Card] = field(default_factory=list)
    finished: bool = False
    _values: set[int] = field(default_factory=set, init=False, repr=False)
    _high_valid_value: int = field(default=0, init=False, repr=False)

    def __post_init__(self) -> None:
        dealt, self.cards = self.cards, []
        for card in dealt:
            self.add_card(card)

    def add_card(self, card: Card) -> None:
        """Add a card to the hand and rebuild the reachable totals."""
        if not self.cards:
            self._values = {1, 11} if card.is_ace else {card.value}
        else:
            increments = (1, 11) if card.is_ace else (card.value,)
            self._values = {
                total + increment
                for total in self._values
                for increment in increments
            }
        self.cards.append(card)
        self._high_valid_value = max(
            (total for total in self._values if total <= 21),
            default=BUSTED,
        )

    def _reset(self) -> None:
        self.cards = []
        self._values = set()
        self._high_valid_value = 0

    @property
    def values(self) -> frozenset[int]:
        """Return every total this hand can make."""
        return frozenset(self._values)

    @property
    def high_valid_value(self) -> int:
        """
        Return the best total that does not exceed 21.

        Returns BUSTED (-1) if every total exceeds 21.
        """
        return self._high_valid_value

    @property
    def low_value(self) -> int:
        """Return the lowest total, counting every ace as 1."""
        return min(self._values, default=0)

    @property
    def high_value(self) -> int:
        """Return the highest total, counting every ace as 11."""
        return max(self._values, default=0)

    @property
    def is_busted(self) -> bool:
        """Check if even the lowest total exceeds 21."""
        return self.low_value > 21

    @property
    def is_soft(self) -> bool:
        """Check if the best total counts an ace as 11."""
        return not self.is_busted and self.low_value <= self._high_valid_value - 10

    @property
    def is_hard(self) -> bool:
        """Check if the hand is hard (not soft)."""
        return not self.is_soft

    @property
    def is_blackjack(self) -> bool:
        """Check if the hand is 21 with two cards."""
        return len(self.cards) == 2 and self._high_valid_value == 21

    @property
    def num_cards(self) -> int:
        """Return the number of cards in the hand."""
        return len(self.cards)

    def __len__(self) -> int:
        return len(self.cards)

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __str__(self) -> str:
        cards_str = " ".join(str(card) for card in self.cards)
        if self.is_blackjack:
            value_str = "(Blackjack)"
        elif self.is_busted:
            value_str = f"(bust {self.low_value})"
        elif self.is_soft:
            value_str = f"(soft {self._high_valid_value})"
        else:
            value_str = f"({self._high_valid_value})"
        return f"{cards_str} {value_str}"


@dataclass(eq=False)
class PlayerHand(Hand):
    """A player's hand for one round, carrying its bet."""

    bet: int = 0
    from_split: bool = False
    player: Player | None = field(default=None, repr=False)
    settled: bool = False

    @property
    def is_pair(self) -> bool:
        """Check if the hand is two cards of equal value."""
        return len(self.cards) == 2 and self.cards[0].value == self.cards[1].value

    @property
    def is_blackjack(self) -> bool:
        """
        Check if the hand pays as a blackjack.

        A two-card 21 on a hand split from aces is paid as a plain 21, but
        a two-card 21 after splitting any other pair pays as blackjack.
        """
        return super().is_blackjack and (
            not self.from_split or not self.cards[0].is_ace
        )

    def split(self) -> PlayerHand:
        """
        Split a pair into two hands.

        This hand keeps the first card; the returned hand holds the second
        card and carries the same bet.
        """
        if not self.is_pair:
            raise ValueError("Only a pair can be split")

        first_card, split_card = self.cards
        self._reset()
        self.add_card(first_card)
        self.from_split = True

        return PlayerHand(
            cards=[split_card],
            bet=self.bet,
            from_split=True,
            player=self.player,
        )

    @property
    def bet_number(self) -> int:
        """Return the position of this hand among its player's hands, or -1."""
        if self.player is None:
            return -1
        for number, hand in enumerate(self.player.hands):
            if hand is self:
                return number
        return -1

    @property
    def name(self) -> str | None:
        """Return the owning player's name."""
        return self.player.name if self.player is not None else None

    @property
    def bankroll(self) -> int | None:
        """Return the owning player's bankroll."""
        return self.player.bankroll if self.player is not None else None


def compare_hands(player_hand: Hand, dealer_hand: Hand) -> int:
    """
    Compare a finished player hand against the dealer's finished hand.

    Returns:
        1 if player wins
        -1 if dealer wins
        0 if push (tie)
    """
    if player_hand.is_busted:
        return -1
    if dealer_hand.is_busted:
        return 1

    player_value = player_hand.high_valid_value
    dealer_value = dealer_hand.high_valid_value

    if player_value > dealer_value:
        return 1
    if dealer_value > player_value:
        return -1
    return 0
