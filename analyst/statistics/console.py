"""Narrate table events to a text stream."""

import sys
from typing import Callable, TextIO

from analyst.table.events import EventType, GameEvent


def _player(event: GameEvent) -> str:
    return event.data["player"].name


def _value(event: GameEvent) -> int:
    return event.data["hand"].high_valid_value


def _insures(event: GameEvent) -> str:
    if event.data["amount"] > 0:
        return f"{_player(event)} insures {event.data['amount']}"
    return f"{_player(event)} declines insurance"


# One formatter per narrated event type
_MESSAGES: dict[EventType, Callable[[GameEvent], str]] = {
    EventType.ROUND_STARTED: lambda e: (
        f"\nNew round started with {len(e.data['players'])} players"
    ),
    EventType.SHOE_SHUFFLED: lambda e: "The shoe is shuffled.",
    EventType.DEALER_DEALT: lambda e: f"The dealer shows the up card {e.data['card']}",
    EventType.DEALER_REVEALS: lambda e: (
        f"The dealer reveals its down card, has hand {e.data['dealer_hand']}"
    ),
    EventType.DEALER_BLACKJACK: lambda e: (
        f"The dealer reveals a blackjack, {e.data['dealer_hand']}"
    ),
    EventType.DEALER_DRAWS: lambda e: f"The dealer hits, now has hand {e.data['dealer_hand']}",
    EventType.DEALER_STANDS: lambda e: f"The dealer stands with hand {e.data['dealer_hand']}",
    EventType.DEALER_BUSTS: lambda e: f"The dealer busts with hand {e.data['dealer_hand']}",
    EventType.PLAYER_JOINS: lambda e: f"{_player(e)} joins the table",
    EventType.PLAYER_LEAVES: lambda e: f"{_player(e)} leaves the table",
    EventType.PLAYER_BETS: lambda e: f"{_player(e)} bets {e.data['amount']}",
    EventType.PLAYER_INSURES: _insures,
    EventType.PLAYER_DEALT: lambda e: f"{_player(e)} is dealt {e.data['hand']}",
    EventType.PLAYER_DRAWS: lambda e: f"{_player(e)} hits, now has hand {e.data['hand']}",
    EventType.PLAYER_STANDS: lambda e: f"{_player(e)} stands with hand {e.data['hand']}",
    EventType.PLAYER_SPLITS: lambda e: f"{_player(e)} splits with hand {e.data['hand']}",
    EventType.PLAYER_DOUBLES_DOWN: lambda e: (
        f"{_player(e)} doubles down, now has hand {e.data['hand']}"
    ),
    EventType.PLAYER_BUSTS: lambda e: (
        f"{_player(e)} busts with hand {e.data['hand']}, lost {e.data['amount']}"
    ),
    EventType.PLAYER_WINS: lambda e: (
        f"{_player(e)} beat dealer with {_value(e)}, won {e.data['amount']}"
    ),
    EventType.PLAYER_LOSES: lambda e: (
        f"{_player(e)} lost to dealer with {_value(e)}, lost {e.data['amount']}"
    ),
    EventType.PLAYER_BLACKJACK: lambda e: (
        f"{_player(e)} received blackjack, won {e.data['amount']}"
    ),
    EventType.PLAYER_PUSH: lambda e: f"{_player(e)} pushed with dealer on {_value(e)}",
    EventType.INSURANCE_WINS: lambda e: f"{_player(e)} won {e.data['amount']} on insurance",
    EventType.INSURANCE_LOSES: lambda e: f"{_player(e)} lost {e.data['amount']} on insurance",
}


class ConsoleReporter:
    """Table observer printing one line per event."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def __call__(self, event: GameEvent) -> None:
        formatter = _MESSAGES.get(event.event_type)
        if formatter is not None:
            print(formatter(event), file=self._stream or sys.stdout)

    @staticmethod
    def describe(event: GameEvent) -> str | None:
        """Return the narration for an event, or None if it is not narrated."""
        formatter = _MESSAGES.get(event.event_type)
        return formatter(event) if formatter is not None else None
