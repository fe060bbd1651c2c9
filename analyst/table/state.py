"""Round state enumeration."""

from enum import Enum, auto


class RoundState(Enum):
    """
    Round state machine states.

    Flow: IDLE → NEW_ROUND → BETTING → INITIAL_DEAL → DEALER_UP_CARD →
    DEALER_PEEK → PLAYER_ACTIONS → DEALER_PLAY → SETTLEMENT → CLEANUP → IDLE
    """

    # Between rounds
    IDLE = auto()

    # Round announced, shoe reshuffled if due
    NEW_ROUND = auto()

    # Strategies place bets
    BETTING = auto()

    # Two cards to each betting player
    INITIAL_DEAL = auto()

    # Dealer up card and hole card, insurance offered against an ace
    DEALER_UP_CARD = auto()

    # Dealer checks for blackjack, insurance and naturals resolved
    DEALER_PEEK = auto()

    # Players act on their hands
    PLAYER_ACTIONS = auto()

    # Dealer reveals and draws
    DEALER_PLAY = auto()

    # Remaining hands paid or collected
    SETTLEMENT = auto()

    # Hands discarded
    CLEANUP = auto()

    def __str__(self) -> str:
        return self.name.replace("_", " ").title()
