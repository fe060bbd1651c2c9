"""Basic strategy tables for blackjack."""

from enum import Enum, auto
from typing import Mapping

from analyst.cards import Card
from analyst.hand import PlayerHand
from analyst.strategy.base import PlayerAction, PlayerStrategy, TableMinimumBetMixin


class ChartEntry(Enum):
    """Entries of the strategy chart."""

    HIT = auto()
    STAND = auto()
    SPLIT = auto()

    # Conditional actions (fallback if doubling is not allowed)
    DOUBLE_OR_HIT = auto()  # Double if allowed, else hit
    DOUBLE_OR_STAND = auto()  # Double if allowed, else stand

    def __str__(self) -> str:
        return self.name.replace("_", "/")


# Dealer upcards are keyed 2-11, with 11 standing for an Ace.
DEALER_UPCARDS = range(2, 12)
ChartKey = tuple[int, int]


def upcard_key(card: Card) -> int:
    """Return the chart column for a dealer up card."""
    return 11 if card.is_ace else card.value


class BasicPlayerStrategy(TableMinimumBetMixin, PlayerStrategy):
    """
    Basic strategy lookup tables.

    Pre-computed dictionaries for O(1) lookup, keyed by
    (player total, dealer upcard). Always bets the table minimum and
    never takes insurance.
    """

    def __init__(self) -> None:
        super().__init__()
        self._hard_table = self._build_hard_table()
        self._soft_table = self._build_soft_table()
        self._pair_table = self._build_pair_table()

    def get_action(self, hand: PlayerHand, dealer_card: Card) -> PlayerAction:
        pair_value = None
        if hand.is_pair:
            first_card = hand.cards[0]
            pair_value = 11 if first_card.is_ace else first_card.value

        return self.lookup(
            player_total=hand.high_valid_value,
            dealer_upcard=upcard_key(dealer_card),
            is_soft=hand.is_soft,
            pair_value=pair_value,
            can_double=len(hand) == 2,
        )

    def get_bet(self, bankroll: int) -> int:
        return min(self.min_bet, bankroll)

    def lookup(
        self,
        player_total: int,
        dealer_upcard: int,
        is_soft: bool = False,
        pair_value: int | None = None,
        can_double: bool = True,
    ) -> PlayerAction:
        """
        Get the basic strategy action.

        Args:
            player_total: Player's best hand total
            dealer_upcard: Dealer's upcard value (2-11, Ace=11)
            is_soft: Whether the hand is soft
            pair_value: The card value of a pair (Ace=11), None if not a pair
            can_double: Whether the hand holds exactly two cards

        Returns:
            The recommended action
        """
        entry = None
        if pair_value is not None:
            entry = self._pair_table.get((pair_value, dealer_upcard))
        if entry is None and is_soft:
            entry = self._soft_table.get((player_total, dealer_upcard))
        if entry is None:
            entry = self._hard_table.get((player_total, dealer_upcard))

        if entry is None:
            # Default actions for edge cases
            if player_total >= 17:
                return PlayerAction.STAND
            return PlayerAction.HIT

        return self._resolve_entry(entry, can_double)

    def _resolve_entry(self, entry: ChartEntry, can_double: bool) -> PlayerAction:
        """Resolve conditional entries based on what's allowed."""
        if entry == ChartEntry.DOUBLE_OR_HIT:
            return PlayerAction.DOUBLE_DOWN if can_double else PlayerAction.HIT
        if entry == ChartEntry.DOUBLE_OR_STAND:
            return PlayerAction.DOUBLE_DOWN if can_double else PlayerAction.STAND
        if entry == ChartEntry.SPLIT:
            return PlayerAction.SPLIT
        if entry == ChartEntry.STAND:
            return PlayerAction.STAND
        return PlayerAction.HIT

    def _build_hard_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Build hard totals strategy table."""
        H = ChartEntry.HIT
        S = ChartEntry.STAND
        D = ChartEntry.DOUBLE_OR_HIT

        table: dict[ChartKey, ChartEntry] = {}

        # Hard 4-8: Always hit
        for total in range(4, 9):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = H

        # Hard 9
        for dealer in DEALER_UPCARDS:
            table[(9, dealer)] = D if 3 <= dealer <= 6 else H

        # Hard 10
        for dealer in DEALER_UPCARDS:
            table[(10, dealer)] = H if dealer in (10, 11) else D

        # Hard 11
        for dealer in DEALER_UPCARDS:
            table[(11, dealer)] = D

        # Hard 12
        for dealer in DEALER_UPCARDS:
            table[(12, dealer)] = S if 4 <= dealer <= 6 else H

        # Hard 13-16
        for total in range(13, 17):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = S if dealer <= 6 else H

        # Hard 17+: Always stand
        for total in range(17, 22):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = S

        return table

    def _build_soft_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Build soft totals strategy table."""
        H = ChartEntry.HIT
        S = ChartEntry.STAND
        D = ChartEntry.DOUBLE_OR_HIT
        Ds = ChartEntry.DOUBLE_OR_STAND

        table: dict[ChartKey, ChartEntry] = {}

        # Soft 11 (a lone ace) and soft 12
        for total in (11, 12):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = H

        # Soft 13-14 (A,2 / A,3)
        for total in (13, 14):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = D if dealer in (5, 6) else H

        # Soft 15-16 (A,4 / A,5)
        for total in (15, 16):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = D if 4 <= dealer <= 6 else H

        # Soft 17 (A,6)
        for dealer in DEALER_UPCARDS:
            table[(17, dealer)] = D if 3 <= dealer <= 6 else H

        # Soft 18 (A,7)
        for dealer in range(2, 7):
            table[(18, dealer)] = Ds
        for dealer in (7, 8):
            table[(18, dealer)] = S
        for dealer in (9, 10, 11):
            table[(18, dealer)] = H

        # Soft 19 (A,8): Double against a 6
        for dealer in DEALER_UPCARDS:
            table[(19, dealer)] = Ds if dealer == 6 else S

        # Soft 20-21: Always stand
        for total in (20, 21):
            for dealer in DEALER_UPCARDS:
                table[(total, dealer)] = S

        return table

    def _build_pair_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Build pair splitting strategy table."""
        H = ChartEntry.HIT
        S = ChartEntry.STAND
        P = ChartEntry.SPLIT
        D = ChartEntry.DOUBLE_OR_HIT

        table: dict[ChartKey, ChartEntry] = {}

        # Pairs of 2s and 3s
        for value in (2, 3):
            for dealer in DEALER_UPCARDS:
                table[(value, dealer)] = P if dealer <= 7 else H

        # Pair of 4s
        for dealer in DEALER_UPCARDS:
            table[(4, dealer)] = P if dealer in (5, 6) else H

        # Pair of 5s: Never split, treat as hard 10
        for dealer in DEALER_UPCARDS:
            table[(5, dealer)] = H if dealer in (10, 11) else D

        # Pair of 6s
        for dealer in DEALER_UPCARDS:
            table[(6, dealer)] = P if dealer <= 6 else H

        # Pair of 7s
        for dealer in DEALER_UPCARDS:
            table[(7, dealer)] = P if dealer <= 7 else H

        # Pair of 8s: Always split
        for dealer in DEALER_UPCARDS:
            table[(8, dealer)] = P

        # Pair of 9s
        for dealer in DEALER_UPCARDS:
            table[(9, dealer)] = S if dealer in (7, 10, 11) else P

        # Pair of 10s: Never split
        for dealer in DEALER_UPCARDS:
            table[(10, dealer)] = S

        # Pair of Aces: Always split
        for dealer in DEALER_UPCARDS:
            table[(11, dealer)] = P

        return table

    @property
    def hard_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Return the hard totals strategy table."""
        return self._hard_table

    @property
    def soft_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Return the soft totals strategy table."""
        return self._soft_table

    @property
    def pair_table(self) -> Mapping[ChartKey, ChartEntry]:
        """Return the pair splitting strategy table."""
        return self._pair_table
