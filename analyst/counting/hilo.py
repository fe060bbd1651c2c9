"""Hi-Lo card counting system."""

from analyst.cards import Card
from analyst.counting.base import CountingSystem


class HiLoSystem(CountingSystem):
    """Counts 2-6 as +1, 7-9 as 0 and tens and aces as -1."""

    def tag(self, card: Card) -> int:
        if card.is_ace or card.value == 10:
            return -1
        if card.value <= 6:
            return 1
        return 0
