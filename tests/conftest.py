"""Pytest fixtures for blackjack analyst tests."""

from random import Random

import pytest

from analyst.cards import Card, Shoe
from analyst.hand import Hand, PlayerHand
from analyst.strategy import DefaultDealerStrategy, PlayerAction, PlayerStrategy
from analyst.table import Player, Table


def cards(text: str) -> list[Card]:
    """Parse a space separated list of cards like 'AS KH 10C'."""
    return [Card.from_string(s) for s in text.split()]


class StackedShoe(Shoe):
    """A shoe whose next cards can be chosen by a test."""

    def stack(self, top_cards: list[Card]) -> None:
        """
        Move top_cards to the front of the undealt cards, in order.

        Cards are swapped into place, so the shoe still holds exactly
        num_decks copies of every card.
        """
        position = self._next_card
        for offset, card in enumerate(top_cards):
            target = position + offset
            index = self._cards.index(card, target)
            self._cards[target], self._cards[index] = self._cards[index], self._cards[target]

    def exhaust(self, leaving: int) -> None:
        """Deal out all but `leaving` cards without triggering a reshuffle."""
        self._next_card = len(self._cards) - leaving
        self._shuffle_mark = 0

    def force_shuffle(self) -> None:
        """Make the next round reshuffle."""
        self._shuffle_mark = self.total_cards + 1


class ScriptedStrategy(PlayerStrategy):
    """Player strategy replaying a fixed list of actions."""

    def __init__(self, actions=(), bet=10, insurance=0):
        self.actions = list(actions)
        self.bet = bet
        self.insurance = insurance
        self.dealt: list[Card] = []
        self.bet_calls = 0
        self.shuffles = 0
        self.joined = []
        self.left = []

    def get_action(self, hand, dealer_card):
        if self.actions:
            return self.actions.pop(0)
        return PlayerAction.STAND

    def get_bet(self, bankroll):
        self.bet_calls += 1
        return self.bet

    def get_insurance_bet(self, hand, bet_amount):
        return self.insurance

    def on_shuffle(self):
        self.shuffles += 1

    def on_card_dealt(self, card):
        self.dealt.append(card)

    def on_join(self, table):
        self.joined.append(table)

    def on_leave(self, table):
        self.left.append(table)


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return Random(42)


@pytest.fixture
def shoe(rng):
    """A shuffled 8-deck shoe."""
    return Shoe(num_decks=8, rng=rng)


@pytest.fixture
def stacked_shoe(rng):
    """A 6-deck shoe the test can stack."""
    return StackedShoe(num_decks=6, rng=rng)


@pytest.fixture
def make_table(stacked_shoe):
    """Factory for a table dealing the given cards first."""

    def _make(deal="", max_players=6, min_bet=10, max_bet=100):
        stacked_shoe.stack(cards(deal))
        return Table(
            max_players=max_players,
            dealer_strategy=DefaultDealerStrategy(),
            min_bet=min_bet,
            max_bet=max_bet,
            name="Test Table",
            shoe=stacked_shoe,
        )

    return _make


@pytest.fixture
def make_player():
    """Factory for a player following a scripted strategy."""

    def _make(*actions, bet=10, insurance=0, bankroll=1000, name=None):
        strategy = ScriptedStrategy(actions, bet=bet, insurance=insurance)
        return Player(strategy, bankroll=bankroll, name=name)

    return _make


@pytest.fixture
def recorder():
    """Event handler recording every event it receives."""

    class Recorder(list):
        def __call__(self, event):
            self.append(event)

        @property
        def types(self):
            return [event.event_type for event in self]

    return Recorder()


@pytest.fixture
def blackjack_hand():
    """A natural blackjack hand."""
    return Hand(cards("AS KH"))


@pytest.fixture
def soft_17_hand():
    """A soft 17 hand (A-6)."""
    return Hand(cards("AS 6H"))


@pytest.fixture
def hard_16_hand():
    """A hard 16 hand (10-6)."""
    return Hand(cards("10S 6H"))


@pytest.fixture
def pair_8s_hand():
    """A pair of 8s hand."""
    return PlayerHand(cards("8S 8H"), bet=10)


@pytest.fixture
def bust_hand():
    """A busted hand."""
    return Hand(cards("10S 6H KC"))
