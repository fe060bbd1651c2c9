"""Card counting systems."""

from abc import ABC, abstractmethod

from analyst.cards import CARDS_PER_DECK, Card


class CountingSystem(ABC):
    """
    A running count over the cards seen since the last shuffle.

    Subclasses supply the tag of each card; the true count divides the
    running count by the decks left in a shoe of known size.
    """

    def __init__(self) -> None:
        self.running_count = 0
        self.cards_seen = 0

    @abstractmethod
    def tag(self, card: Card) -> int:
        """Return the count value of a card."""
        ...

    def count_card(self, card: Card) -> None:
        self.running_count += self.tag(card)
        self.cards_seen += 1

    def true_count_for_shoe(self, num_decks: int) -> float:
        """True count for a shoe of num_decks, estimating what is left from cards seen."""
        cards_left = num_decks * CARDS_PER_DECK - self.cards_seen
        if cards_left <= 0:
            return 0.0
        return self.running_count * CARDS_PER_DECK / cards_left

    def reset(self) -> None:
        self.running_count = 0
        self.cards_seen = 0

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(running_count={self.running_count})"
