"""Card and Shoe classes - interned card representations."""

import logging
from dataclasses import dataclass
from enum import Enum, auto
from random import Random
from typing import Iterator

from analyst.errors import ConfigurationError, ShoeExhaustedError

logger = logging.getLogger(__name__)

CARDS_PER_DECK = 52
MIN_DECKS = 6


class Suit(Enum):
    """Card suits."""

    CLUBS = auto()
    DIAMONDS = auto()
    HEARTS = auto()
    SPADES = auto()

    def __str__(self) -> str:
        symbols = {
            Suit.CLUBS: "♣",
            Suit.DIAMONDS: "♦",
            Suit.HEARTS: "♥",
            Suit.SPADES: "♠",
        }
        return symbols[self]


class Rank(Enum):
    """Card ranks."""

    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13
    ACE = 14

    def __str__(self) -> str:
        if self.value <= 10:
            return str(self.value)
        return {
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
            Rank.ACE: "A",
        }[self]

    @property
    def blackjack_value(self) -> int:
        """Return the point value (Ace = 1, face cards = 10)."""
        if self.value <= 10:
            return self.value
        if self == Rank.ACE:
            return 1
        return 10

    @property
    def is_ace(self) -> bool:
        """Check if this rank is an Ace."""
        return self == Rank.ACE

    @property
    def is_ten_value(self) -> bool:
        """Check if this rank has a value of 10."""
        return self.blackjack_value == 10


_SUITS = tuple(Suit)
_RANKS = tuple(Rank)

_RANK_MAP = {
    "2": Rank.TWO,
    "3": Rank.THREE,
    "4": Rank.FOUR,
    "5": Rank.FIVE,
    "6": Rank.SIX,
    "7": Rank.SEVEN,
    "8": Rank.EIGHT,
    "9": Rank.NINE,
    "10": Rank.TEN,
    "T": Rank.TEN,
    "J": Rank.JACK,
    "Q": Rank.QUEEN,
    "K": Rank.KING,
    "A": Rank.ACE,
}

_SUIT_MAP = {
    "C": Suit.CLUBS,
    "♣": Suit.CLUBS,
    "D": Suit.DIAMONDS,
    "♦": Suit.DIAMONDS,
    "H": Suit.HEARTS,
    "♥": Suit.HEARTS,
    "S": Suit.SPADES,
    "♠": Suit.SPADES,
}

# Populated once below; Card.__new__ hands back these instances.
_CARD_TABLE: dict[tuple[Rank, Suit], "Card"] = {}


@dataclass(frozen=True, slots=True)
class Card:
    """
    Immutable playing card.

    There is exactly one instance per (rank, suit); constructing a card
    returns the instance from the module-level table.
    """

    rank: Rank
    suit: Suit

    def __new__(cls, rank: Rank, suit: Suit) -> "Card":
        try:
            return _CARD_TABLE[(rank, suit)]
        except KeyError:
            if not isinstance(rank, Rank) or not isinstance(suit, Suit):
                raise TypeError(f"Invalid rank or suit: {rank!r}, {suit!r}") from None
            return object.__new__(cls)

    def __str__(self) -> str:
        return f"{self.rank}{self.suit}"

    def __repr__(self) -> str:
        return f"Card({self.rank.name}, {self.suit.name})"

    def __reduce__(self):
        return (Card.from_id, (self.card_id,))

    @property
    def value(self) -> int:
        """Return the point value, with an Ace reported as 1."""
        return self.rank.blackjack_value

    @property
    def is_ace(self) -> bool:
        """Check if this card is an Ace."""
        return self.rank.is_ace

    @property
    def is_ten_value(self) -> bool:
        """Check if this card has a value of 10."""
        return self.rank.is_ten_value

    @property
    def card_id(self) -> int:
        """Return the identifier of this card, in [0, 52)."""
        return _SUITS.index(self.suit) * len(_RANKS) + _RANKS.index(self.rank)

    @classmethod
    def get(cls, rank: Rank, suit: Suit) -> "Card":
        """Return the card with the given rank and suit."""
        return _CARD_TABLE[(rank, suit)]

    @classmethod
    def from_id(cls, card_id: int) -> "Card":
        """Return the card with the given identifier."""
        if not 0 <= card_id < CARDS_PER_DECK:
            raise ValueError(f"Card identifier out of range: {card_id}")
        return ALL_CARDS[card_id]

    @classmethod
    def from_string(cls, s: str) -> "Card":
        """Create a card from a string like '2♣', 'AS', 'Kh'."""
        s = s.strip().upper()
        if len(s) < 2:
            raise ValueError(f"Invalid card string: {s}")

        rank_str = s[:-1]
        suit_str = s[-1]

        if rank_str not in _RANK_MAP:
            raise ValueError(f"Invalid rank: {rank_str}")
        if suit_str not in _SUIT_MAP:
            raise ValueError(f"Invalid suit: {suit_str}")

        return cls.get(_RANK_MAP[rank_str], _SUIT_MAP[suit_str])


def _build_card_table() -> tuple[Card, ...]:
    cards = []
    for suit in _SUITS:
        for rank in _RANKS:
            card = Card(rank, suit)
            _CARD_TABLE[(rank, suit)] = card
            cards.append(card)
    return tuple(cards)


ALL_CARDS: tuple[Card, ...] = _build_card_table()


class Shoe:
    """
    A multi-deck shoe for blackjack.

    Cards are dealt by advancing a cursor over a fixed pool. Each shuffle
    picks a new reshuffle mark between two and three decks from the end.
    """

    def __init__(self, num_decks: int = 8, rng: Random | None = None) -> None:
        """
        Initialize and shuffle a shoe with multiple decks.

        Args:
            num_decks: Number of decks in the shoe (at least 6)
            rng: Random number generator for shuffling
        """
        if num_decks < MIN_DECKS:
            raise ConfigurationError(f"Shoe must contain at least {MIN_DECKS} decks")

        self._num_decks = num_decks
        self._rng = rng or Random()
        self._cards: list[Card] = [
            ALL_CARDS[i % CARDS_PER_DECK] for i in range(num_decks * CARDS_PER_DECK)
        ]
        self._next_card = 0
        self._shuffle_mark = 0
        self.shuffle()

    def shuffle(self) -> None:
        """Shuffle every card back into the shoe and pick a new reshuffle mark."""
        self._next_card = 0
        self._rng.shuffle(self._cards)
        self._shuffle_mark = 2 * CARDS_PER_DECK + self._rng.randrange(CARDS_PER_DECK)
        logger.debug(
            "Shuffled %d-deck shoe, reshuffle below %d cards",
            self._num_decks,
            self._shuffle_mark,
        )

    def draw(self) -> Card:
        """Draw the next card from the shoe."""
        if self.is_empty:
            raise ShoeExhaustedError(
                f"Shoe exhausted after dealing {len(self._cards)} cards"
            )
        card = self._cards[self._next_card]
        self._next_card += 1
        return card

    @property
    def needs_shuffle(self) -> bool:
        """Check if fewer cards remain than the reshuffle mark."""
        return self.cards_remaining < self._shuffle_mark

    @property
    def is_empty(self) -> bool:
        """Check if every card has been dealt."""
        return self._next_card == len(self._cards)

    @property
    def shuffle_mark(self) -> int:
        """Return the remaining-card count below which a reshuffle is due."""
        return self._shuffle_mark

    @property
    def cards_remaining(self) -> int:
        """Return the number of cards remaining."""
        return len(self._cards) - self._next_card

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt."""
        return self._next_card

    @property
    def total_cards(self) -> int:
        """Return the total number of cards in a full shoe."""
        return self._num_decks * CARDS_PER_DECK

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self._num_decks

    @property
    def decks_remaining(self) -> float:
        """Return the estimated number of decks remaining."""
        return self.cards_remaining / CARDS_PER_DECK

    def __len__(self) -> int:
        return self.cards_remaining

    def __iter__(self) -> Iterator[Card]:
        return iter(self._cards[self._next_card:])
