"""Win/loss bookkeeping driven by table events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from analyst.table.events import EventType, GameEvent

if TYPE_CHECKING:
    from analyst.table.engine import Table
    from analyst.table.player import Player


@dataclass
class PlayerRecord:
    """Outcome counts and streaks for a single player."""

    name: str
    wins: int = 0
    losses: int = 0
    blackjacks: int = 0
    pushes: int = 0
    insurance_wins: int = 0
    insurance_losses: int = 0
    net_gain: int = 0
    wagered: int = 0
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    _streak_length: int = field(default=0, repr=False)
    _on_winning_streak: bool = field(default=False, repr=False)

    @property
    def hands_played(self) -> int:
        """Return the number of settled hands."""
        return self.wins + self.losses + self.blackjacks + self.pushes

    @property
    def current_streak(self) -> int:
        """Return the current streak, positive for wins and negative for losses."""
        return self._streak_length if self._on_winning_streak else -self._streak_length

    def record_win(self, amount: int, wagered: int, blackjack: bool = False) -> None:
        if blackjack:
            self.blackjacks += 1
        else:
            self.wins += 1
        self.net_gain += amount
        self.wagered += wagered

        if not self._on_winning_streak:
            self._streak_length = 0
            self._on_winning_streak = True
        self._streak_length += 1
        self.longest_win_streak = max(self.longest_win_streak, self._streak_length)

    def record_loss(self, amount: int, wagered: int) -> None:
        self.losses += 1
        self.net_gain -= amount
        self.wagered += wagered

        if self._on_winning_streak:
            self._streak_length = 0
            self._on_winning_streak = False
        self._streak_length += 1
        self.longest_loss_streak = max(self.longest_loss_streak, self._streak_length)

    def record_push(self, wagered: int) -> None:
        self.pushes += 1
        self.wagered += wagered
        # A push erases any streak
        self._streak_length = 0

    def record_insurance(self, amount: int, won: bool) -> None:
        if won:
            self.insurance_wins += 1
            self.net_gain += amount
        else:
            self.insurance_losses += 1
            self.net_gain -= amount

    def __str__(self) -> str:
        return (
            f"{self.name}: W={self.wins}, L={self.losses}, BJ={self.blackjacks}, "
            f"P={self.pushes}, IW={self.insurance_wins}, IL={self.insurance_losses}, "
            f"net={self.net_gain}"
        )


class WinLossTracker:
    """
    Table observer tallying outcomes across every seated player.

    The tracker is itself an event handler: pass it to `Table.subscribe`
    or call `attach`. Each settled hand counts once, so a split that wins
    one hand and loses the other adds a win and a loss.
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, Callable[[GameEvent], None]] = {
            EventType.ROUND_ENDED: self._on_round_ended,
            EventType.PLAYER_WINS: self._on_win,
            EventType.PLAYER_BLACKJACK: self._on_blackjack,
            EventType.PLAYER_LOSES: self._on_loss,
            EventType.PLAYER_BUSTS: self._on_loss,
            EventType.PLAYER_PUSH: self._on_push,
            EventType.INSURANCE_WINS: self._on_insurance_win,
            EventType.INSURANCE_LOSES: self._on_insurance_loss,
        }
        self.reset()

    def reset(self) -> None:
        """Clear every count."""
        self.rounds_played = 0
        self.wins = 0
        self.losses = 0
        self.blackjacks = 0
        self.pushes = 0
        self.insurance_wins = 0
        self.insurance_losses = 0
        self.net_gain = 0
        self.wagered = 0
        self._records: dict[Player, PlayerRecord] = {}

    def attach(self, table: Table) -> None:
        """Start observing a table."""
        table.subscribe(self)

    def detach(self, table: Table) -> bool:
        """Stop observing a table."""
        return table.unsubscribe(self)

    def __call__(self, event: GameEvent) -> None:
        handler = self._handlers.get(event.event_type)
        if handler is not None:
            handler(event)

    @property
    def players(self) -> dict[Player, PlayerRecord]:
        """Return the per-player records."""
        return dict(self._records)

    def record_for(self, player: Player) -> PlayerRecord:
        """Return the record of a player, creating an empty one if needed."""
        record = self._records.get(player)
        if record is None:
            record = self._records[player] = PlayerRecord(name=player.name)
        return record

    @property
    def hands_played(self) -> int:
        """Return the number of settled hands."""
        return self.wins + self.losses + self.blackjacks + self.pushes

    @property
    def expected_value(self) -> float:
        """Return the net gain per round played."""
        if self.rounds_played == 0:
            return 0.0
        return self.net_gain / self.rounds_played

    @property
    def edge(self) -> float:
        """Return the net gain per unit wagered on hands."""
        if self.wagered == 0:
            return 0.0
        return self.net_gain / self.wagered

    def _on_round_ended(self, event: GameEvent) -> None:
        self.rounds_played += 1

    def _on_win(self, event: GameEvent) -> None:
        amount, wagered = event.data["amount"], event.data["hand"].bet
        self.wins += 1
        self.net_gain += amount
        self.wagered += wagered
        self.record_for(event.data["player"]).record_win(amount, wagered)

    def _on_blackjack(self, event: GameEvent) -> None:
        amount, wagered = event.data["amount"], event.data["hand"].bet
        self.blackjacks += 1
        self.net_gain += amount
        self.wagered += wagered
        self.record_for(event.data["player"]).record_win(amount, wagered, blackjack=True)

    def _on_loss(self, event: GameEvent) -> None:
        amount, wagered = event.data["amount"], event.data["hand"].bet
        self.losses += 1
        self.net_gain -= amount
        self.wagered += wagered
        self.record_for(event.data["player"]).record_loss(amount, wagered)

    def _on_push(self, event: GameEvent) -> None:
        wagered = event.data["hand"].bet
        self.pushes += 1
        self.wagered += wagered
        self.record_for(event.data["player"]).record_push(wagered)

    def _on_insurance_win(self, event: GameEvent) -> None:
        amount = event.data["amount"]
        self.insurance_wins += 1
        self.net_gain += amount
        self.record_for(event.data["player"]).record_insurance(amount, won=True)

    def _on_insurance_loss(self, event: GameEvent) -> None:
        amount = event.data["amount"]
        self.insurance_losses += 1
        self.net_gain -= amount
        self.record_for(event.data["player"]).record_insurance(amount, won=False)

    def __str__(self) -> str:
        return (
            f"W: {self.wins}, L: {self.losses}, BJ: {self.blackjacks}, "
            f"P: {self.pushes}, IW: {self.insurance_wins}, "
            f"IL: {self.insurance_losses}, net = {self.net_gain}"
        )
