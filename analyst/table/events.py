"""Table events for the observer system."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from typing import Any, Callable


class EventType(Enum):
    """Types of table events."""

    # Round flow events
    ROUND_STARTED = auto()
    ROUND_ENDED = auto()
    SHOE_SHUFFLED = auto()

    # Dealer events
    DEALER_DEALT = auto()
    DEALER_REVEALS = auto()
    DEALER_BLACKJACK = auto()
    DEALER_DRAWS = auto()
    DEALER_STANDS = auto()
    DEALER_BUSTS = auto()

    # Seating events
    PLAYER_JOINS = auto()
    PLAYER_LEAVES = auto()

    # Betting events
    PLAYER_BETS = auto()
    PLAYER_INSURES = auto()

    # Player action events
    PLAYER_DEALT = auto()
    PLAYER_DRAWS = auto()
    PLAYER_STANDS = auto()
    PLAYER_SPLITS = auto()
    PLAYER_DOUBLES_DOWN = auto()

    # Outcome events
    PLAYER_BUSTS = auto()
    PLAYER_WINS = auto()
    PLAYER_LOSES = auto()
    PLAYER_BLACKJACK = auto()
    PLAYER_PUSH = auto()
    INSURANCE_WINS = auto()
    INSURANCE_LOSES = auto()


# Events that settle a hand and move the player's bankroll
HAND_OUTCOMES = frozenset(
    {
        EventType.PLAYER_BUSTS,
        EventType.PLAYER_WINS,
        EventType.PLAYER_LOSES,
        EventType.PLAYER_BLACKJACK,
        EventType.PLAYER_PUSH,
    }
)


@dataclass(frozen=True)
class GameEvent:
    """
    Immutable table event.

    Events are how the table reports to observers; handlers receive the
    acting player, hand and card together with amounts and bankrolls in
    `data`.
    """

    event_type: EventType
    data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"{self.event_type.name}: {self.data}"


# Type alias for event handlers
EventHandler = Callable[[GameEvent], None]


class EventEmitter:
    """
    Publish/subscribe fan-out for table events.

    Allows subscribing to specific event types or all events. Handler
    lists are copied before dispatch, so a handler may subscribe or
    unsubscribe without disturbing the event being delivered.
    """

    def __init__(self, history_size: int = 0) -> None:
        """
        Initialize the event emitter.

        Args:
            history_size: Number of recent events to keep (0 keeps none)
        """
        self._handlers: dict[EventType | None, list[EventHandler]] = {}
        self._history_size = history_size
        self._event_history: list[GameEvent] = []

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """
        Subscribe to events.

        Args:
            handler: Function to call when event occurs
            event_type: Specific event type to subscribe to, or None for all events
        """
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> bool:
        """
        Unsubscribe from events.

        Returns:
            True if the handler was subscribed
        """
        handlers = self._handlers.get(event_type)
        if handlers is None or handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def emit(self, event: GameEvent) -> None:
        """Emit an event to all subscribers."""
        if self._history_size:
            self._event_history.append(event)
            del self._event_history[: -self._history_size]

        # Type-specific handlers, then catch-all handlers
        handlers = list(self._handlers.get(event.event_type, ()))
        handlers.extend(self._handlers.get(None, ()))
        for handler in handlers:
            handler(event)

    def emit_new(
        self,
        event_type: EventType,
        **data: Any,
    ) -> GameEvent:
        """
        Create and emit a new event.

        Returns:
            The created event
        """
        event = GameEvent(event_type=event_type, data=data)
        self.emit(event)
        return event

    @property
    def history(self) -> list[GameEvent]:
        """Return the retained event history."""
        return self._event_history.copy()

    def clear_history(self) -> None:
        """Clear the event history."""
        self._event_history.clear()

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())
