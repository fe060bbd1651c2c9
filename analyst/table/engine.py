"""Blackjack table engine with round state machine."""

import itertools
import logging
from random import Random
from typing import Any

from transitions import Machine

from analyst.cards import Card, Shoe
from analyst.errors import ConfigurationError, RoundInProgressError
from analyst.hand import Hand, PlayerHand, compare_hands
from analyst.strategy.base import DealerAction, DealerStrategy, PlayerAction
from analyst.table.events import EventEmitter, EventHandler, EventType, GameEvent
from analyst.table.player import Player
from analyst.table.state import RoundState

logger = logging.getLogger(__name__)

DEFAULT_DECKS = 8

_table_numbers = itertools.count()


class Table:
    """
    A blackjack table running rounds between a dealer and seated players.

    Each round runs to completion through a fixed sequence of states:
    betting, the initial deal, the dealer's up card and insurance, the
    dealer's peek, player actions, dealer play, settlement and cleanup.
    Observers follow along through `events` and each player's own emitter.
    """

    # State machine states
    STATES = [s.name.lower() for s in RoundState]

    # States a failed round can be aborted from
    _ABORTABLE = [
        s.name.lower()
        for s in RoundState
        if s not in (RoundState.IDLE, RoundState.CLEANUP)
    ]

    # State machine transitions
    TRANSITIONS = [
        {"trigger": "begin_round", "source": "idle", "dest": "new_round"},
        {"trigger": "open_betting", "source": "new_round", "dest": "betting"},
        {"trigger": "deal_players", "source": "betting", "dest": "initial_deal"},
        {"trigger": "deal_dealer", "source": "initial_deal", "dest": "dealer_up_card"},
        {"trigger": "peek", "source": "dealer_up_card", "dest": "dealer_peek"},
        # Dealer blackjack settles every hand at the peek
        {"trigger": "dealer_blackjack", "source": "dealer_peek", "dest": "cleanup"},
        {"trigger": "play_hands", "source": "dealer_peek", "dest": "player_actions"},
        {"trigger": "play_dealer", "source": "player_actions", "dest": "dealer_play"},
        {"trigger": "settle", "source": "dealer_play", "dest": "settlement"},
        {"trigger": "clean_up", "source": "settlement", "dest": "cleanup"},
        {"trigger": "end_round", "source": "cleanup", "dest": "idle"},
        {"trigger": "abort_round", "source": _ABORTABLE, "dest": "cleanup"},
    ]

    def __init__(
        self,
        max_players: int,
        dealer_strategy: DealerStrategy,
        min_bet: int,
        max_bet: int,
        name: str | None = None,
        num_decks: int = DEFAULT_DECKS,
        rng: Random | None = None,
        shoe: Shoe | None = None,
    ) -> None:
        """
        Initialize a new table.

        Args:
            max_players: Number of seats
            dealer_strategy: Strategy the dealer plays
            min_bet: Minimum bet
            max_bet: Maximum bet
            name: Table name (defaults to "Table N")
            num_decks: Number of decks in the shoe
            rng: Random number generator for reproducible shuffles
            shoe: Shoe to deal from, replacing the one built from num_decks
        """
        if max_players < 1:
            raise ConfigurationError("Maximum players must be positive")
        if dealer_strategy is None:
            raise ConfigurationError("Dealer strategy must be provided")
        if min_bet < 0:
            raise ConfigurationError("Minimum bet must not be negative")
        if max_bet < 0:
            raise ConfigurationError("Maximum bet must not be negative")
        if max_bet < min_bet:
            raise ConfigurationError("Maximum bet must not be less than minimum bet")

        number = next(_table_numbers)
        self.name = name if name is not None else f"Table {number}"
        self.max_players = max_players
        self.min_bet = min_bet
        self.max_bet = max_bet
        self.dealer_strategy = dealer_strategy
        self.shoe = shoe if shoe is not None else Shoe(num_decks=num_decks, rng=rng)

        self.dealer_hand: Hand | None = None
        self.rounds_played = 0
        self._players: list[Player] = []
        self.events = EventEmitter()

        # Initialize state machine
        self.machine = Machine(
            model=self,
            states=self.STATES,
            transitions=self.TRANSITIONS,
            initial="idle",
            auto_transitions=False,
            model_attribute="_machine_state",
        )

    @property
    def state(self) -> RoundState:
        """Get current round state as enum."""
        return RoundState[self._machine_state.upper()]  # type: ignore

    @property
    def round_in_progress(self) -> bool:
        """Check if a round is being played."""
        return self.state != RoundState.IDLE

    @property
    def num_decks(self) -> int:
        """Return the number of decks in the shoe."""
        return self.shoe.num_decks

    @property
    def players(self) -> tuple[Player, ...]:
        """Return the seated players in seating order."""
        return tuple(self._players)

    @property
    def num_players(self) -> int:
        """Return the number of seated players."""
        return len(self._players)

    @property
    def has_room(self) -> bool:
        """Check if a seat is free."""
        return len(self._players) < self.max_players

    def subscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> None:
        """Subscribe to table events."""
        self.events.subscribe(handler, event_type)

    def unsubscribe(
        self,
        handler: EventHandler,
        event_type: EventType | None = None,
    ) -> bool:
        """Unsubscribe from table events."""
        return self.events.unsubscribe(handler, event_type)

    def add_player(self, player: Player) -> bool:
        """
        Seat a player.

        Returns:
            True if the player was seated, False if the table is full or
            the player already sits at a table
        """
        self._check_idle("add a player")
        if not self.has_room or player.table is not None:
            return False

        self._players.append(player)
        player.table = self
        player.hands = []
        player.strategy.on_join(self)
        self._player_event(player, EventType.PLAYER_JOINS, table=self)
        return True

    def remove_player(self, player: Player) -> bool:
        """
        Unseat a player.

        Returns:
            True if the player was seated at this table
        """
        self._check_idle("remove a player")
        if player not in self._players:
            return False

        self._players.remove(player)
        player.table = None
        player.hands = []
        player.strategy.on_leave(self)
        self._player_event(player, EventType.PLAYER_LEAVES, table=self)
        return True

    def play_round(self) -> None:
        """Play a single round."""
        self.play_rounds(1)

    def play_rounds(self, num_rounds: int) -> None:
        """
        Play rounds back to back.

        Nothing happens while no player is seated.
        """
        self._check_idle("start a round")
        if not self._players:
            return
        for _ in range(num_rounds):
            self._play_one_round()

    def _check_idle(self, action: str) -> None:
        if self.round_in_progress:
            raise RoundInProgressError(f"Cannot {action} while a round is in progress")

    def _play_one_round(self) -> None:
        self.begin_round()
        try:
            self._start_round()

            self.open_betting()
            self._take_bets()

            self.deal_players()
            self._deal_players()

            self.deal_dealer()
            self._deal_dealer()

            self.peek()
            if self._peek():
                self.dealer_blackjack()
            else:
                self.play_hands()
                self._play_hands()

                self.play_dealer()
                self._play_dealer()

                self.settle()
                self._settle()

                self.clean_up()
        except Exception as exc:
            logger.error("%s: aborting round %d: %s", self.name, self.rounds_played + 1, exc)
            if self.state != RoundState.CLEANUP:
                self.abort_round()
            self._clear_table()
            self.end_round()
            raise

        self._clear_table()
        self.rounds_played += 1
        self.end_round()
        self.events.emit_new(
            EventType.ROUND_ENDED,
            round=self.rounds_played,
            players=self.players,
        )

    def _start_round(self) -> None:
        """Announce the round and reshuffle if the shoe is past its mark."""
        logger.debug("%s: starting round %d", self.name, self.rounds_played + 1)
        self.events.emit_new(EventType.ROUND_STARTED, players=self.players)

        if self.shoe.needs_shuffle:
            self.shoe.shuffle()
            for player in self._players:
                player.strategy.on_shuffle()
            self.events.emit_new(EventType.SHOE_SHUFFLED)

    def _take_bets(self) -> None:
        """Ask every player with money for a bet; a bet of 0 sits out."""
        for player in self._players:
            if player.bankroll <= 0:
                self._player_event(player, EventType.PLAYER_BETS, amount=0)
                continue

            bet = player.strategy.get_bet(player.bankroll)
            if not isinstance(bet, int) or bet < 0:
                logger.warning("%s: invalid bet %r treated as 0", player.name, bet)
                bet = 0
            elif bet > player.bankroll:
                logger.warning(
                    "%s: bet %d exceeds bankroll %d", player.name, bet, player.bankroll
                )

            if bet > 0:
                player.hands.append(PlayerHand(bet=bet, player=player))
            self._player_event(player, EventType.PLAYER_BETS, amount=bet)

    def _deal_players(self) -> None:
        """Deal one card to each betting player, then a second card to each."""
        betting = self._betting_players()
        for player in betting:
            player.hands[0].add_card(self._draw())

        for player in betting:
            hand = player.hands[0]
            hand.add_card(self._draw())
            self._player_event(player, EventType.PLAYER_DEALT, hand=hand)

    def _deal_dealer(self) -> None:
        """Deal the dealer's up card and hole card, offering insurance on an ace."""
        up_card = self.shoe.draw()
        down_card = self.shoe.draw()
        self.dealer_hand = Hand([up_card, down_card])

        self._notify_dealt(up_card)
        self.events.emit_new(EventType.DEALER_DEALT, card=up_card)

        if not up_card.is_ace:
            return

        for player in self._betting_players():
            hand = player.hands[0]
            amount = player.strategy.get_insurance_bet(hand, hand.bet)
            player.insurance_bet = self._clamp_insurance(player, amount, hand.bet)
            self._player_event(
                player,
                EventType.PLAYER_INSURES,
                hand=hand,
                amount=player.insurance_bet,
            )

    def _clamp_insurance(self, player: Player, amount: Any, bet: int) -> int:
        """Clamp an insurance amount to [0, bet // 2]."""
        half_bet = bet // 2
        if not isinstance(amount, int):
            logger.warning("%s: invalid insurance %r treated as 0", player.name, amount)
            return 0
        clamped = min(max(amount, 0), half_bet)
        if clamped != amount:
            logger.warning(
                "%s: insurance %d clamped to %d", player.name, amount, clamped
            )
        return clamped

    def _peek(self) -> bool:
        """
        Check the hole card for a dealer blackjack.

        Resolves insurance either way. On a dealer blackjack every hand is
        settled here; otherwise player naturals are paid.

        Returns:
            True if the dealer has blackjack
        """
        dealer_hand = self.dealer_hand
        up_card, down_card = dealer_hand.cards
        betting = self._betting_players()

        if (up_card.is_ace or up_card.is_ten_value) and dealer_hand.high_valid_value == 21:
            self._notify_dealt(down_card)
            dealer_hand.finished = True
            self.events.emit_new(
                EventType.DEALER_BLACKJACK,
                card=down_card,
                dealer_hand=dealer_hand,
            )

            for player in betting:
                if player.insurance_bet > 0:
                    amount_won = 2 * player.insurance_bet
                    player.insurance_bet = 0
                    bankroll = player._adjust_bankroll(amount_won)
                    self._player_event(
                        player,
                        EventType.INSURANCE_WINS,
                        amount=amount_won,
                        bankroll=bankroll,
                    )

                hand = player.hands[0]
                hand.finished = True
                if hand.high_valid_value == 21:
                    self._push(player, hand)
                else:
                    self._lose(player, hand)
            return True

        for player in betting:
            if player.insurance_bet > 0:
                amount_lost = player.insurance_bet
                player.insurance_bet = 0
                bankroll = player._adjust_bankroll(-amount_lost)
                self._player_event(
                    player,
                    EventType.INSURANCE_LOSES,
                    amount=amount_lost,
                    bankroll=bankroll,
                )

            hand = player.hands[0]
            if hand.is_blackjack:
                self._pay_blackjack(player, hand)
        return False

    def _play_hands(self) -> None:
        """Let each player act on each hand, including hands created by splits."""
        dealer_card = self.dealer_hand.cards[0]
        for player in self._players:
            hands = player.hands
            index = 0
            # Splitting appends to hands; keep going until the list stops growing
            while index < len(hands):
                hand = hands[index]
                index += 1
                while not hand.finished:
                    self._play_action(player, hand, dealer_card)

    def _play_action(self, player: Player, hand: PlayerHand, dealer_card: Card) -> None:
        action = self._get_action(player, hand, dealer_card)

        if action == PlayerAction.HIT:
            self._hit(player, hand, dealer_card)
        elif action == PlayerAction.DOUBLE_DOWN and len(hand) == 2:
            self._double_down(player, hand)
        elif action == PlayerAction.SPLIT and hand.is_pair:
            self._split(player, hand)
        else:
            # STAND, or an action the hand does not allow
            self._stand(player, hand)

    def _get_action(
        self, player: Player, hand: PlayerHand, dealer_card: Card
    ) -> PlayerAction:
        action = player.strategy.get_action(hand, dealer_card)
        if not isinstance(action, PlayerAction):
            logger.warning("%s: unrecognized action %r treated as stand", player.name, action)
            return PlayerAction.STAND
        return action

    def _hit(self, player: Player, hand: PlayerHand, dealer_card: Card) -> None:
        card = self._draw()
        hand.add_card(card)
        self._player_event(player, EventType.PLAYER_DRAWS, hand=hand, card=card)

        if hand.is_busted:
            self._bust(player, hand)
        elif hand.from_split:
            if hand.is_blackjack:
                self._pay_blackjack(player, hand)
            elif hand.cards[0].is_ace:
                # Split aces take one card; a second ace may be split again
                if (
                    hand.is_pair
                    and self._get_action(player, hand, dealer_card) == PlayerAction.SPLIT
                ):
                    self._split(player, hand)
                else:
                    self._stand(player, hand)

    def _double_down(self, player: Player, hand: PlayerHand) -> None:
        hand.bet *= 2
        card = self._draw()
        hand.add_card(card)
        hand.finished = True
        self._player_event(player, EventType.PLAYER_DOUBLES_DOWN, hand=hand, card=card)

        if hand.is_busted:
            self._bust(player, hand)

    def _split(self, player: Player, hand: PlayerHand) -> None:
        self._player_event(player, EventType.PLAYER_SPLITS, hand=hand)
        player.hands.append(hand.split())

    def _stand(self, player: Player, hand: PlayerHand) -> None:
        hand.finished = True
        self._player_event(player, EventType.PLAYER_STANDS, hand=hand)

    def _play_dealer(self) -> None:
        """Reveal the hole card and draw until the dealer strategy stands."""
        dealer_hand = self.dealer_hand
        down_card = dealer_hand.cards[1]
        self._notify_dealt(down_card)
        self.events.emit_new(
            EventType.DEALER_REVEALS,
            card=down_card,
            dealer_hand=dealer_hand,
        )

        while not dealer_hand.is_busted and self._dealer_action() == DealerAction.HIT:
            card = self._draw()
            dealer_hand.add_card(card)
            self.events.emit_new(
                EventType.DEALER_DRAWS,
                card=card,
                dealer_hand=dealer_hand,
            )

        dealer_hand.finished = True
        if dealer_hand.is_busted:
            self.events.emit_new(EventType.DEALER_BUSTS, dealer_hand=dealer_hand)
        else:
            self.events.emit_new(EventType.DEALER_STANDS, dealer_hand=dealer_hand)

    def _dealer_action(self) -> DealerAction:
        action = self.dealer_strategy.get_action(self.dealer_hand)
        if not isinstance(action, DealerAction):
            logger.warning("%s: unrecognized dealer action %r treated as stand", self.name, action)
            return DealerAction.STAND
        return action

    def _settle(self) -> None:
        """Pay or collect every hand not already settled."""
        for player in self._players:
            for hand in player.hands:
                if hand.settled:
                    continue
                outcome = compare_hands(hand, self.dealer_hand)
                if outcome > 0:
                    self._win(player, hand)
                elif outcome < 0:
                    self._lose(player, hand)
                else:
                    self._push(player, hand)

    def _clear_table(self) -> None:
        """Discard the dealer's hand and every player's hands."""
        self.dealer_hand = None
        for player in self._players:
            player.hands.clear()
            player.insurance_bet = 0

    def _pay_blackjack(self, player: Player, hand: PlayerHand) -> None:
        amount_won = hand.bet * 3 // 2
        hand.finished = hand.settled = True
        bankroll = player._adjust_bankroll(amount_won)
        self._player_event(
            player,
            EventType.PLAYER_BLACKJACK,
            hand=hand,
            amount=amount_won,
            bankroll=bankroll,
        )

    def _win(self, player: Player, hand: PlayerHand) -> None:
        hand.settled = True
        bankroll = player._adjust_bankroll(hand.bet)
        self._player_event(
            player,
            EventType.PLAYER_WINS,
            hand=hand,
            amount=hand.bet,
            bankroll=bankroll,
        )

    def _lose(self, player: Player, hand: PlayerHand) -> None:
        hand.settled = True
        bankroll = player._adjust_bankroll(-hand.bet)
        self._player_event(
            player,
            EventType.PLAYER_LOSES,
            hand=hand,
            amount=hand.bet,
            bankroll=bankroll,
        )

    def _bust(self, player: Player, hand: PlayerHand) -> None:
        hand.finished = hand.settled = True
        bankroll = player._adjust_bankroll(-hand.bet)
        self._player_event(
            player,
            EventType.PLAYER_BUSTS,
            hand=hand,
            amount=hand.bet,
            bankroll=bankroll,
        )

    def _push(self, player: Player, hand: PlayerHand) -> None:
        hand.settled = True
        self._player_event(player, EventType.PLAYER_PUSH, hand=hand, amount=0)

    def _draw(self) -> Card:
        """Draw a card face up, letting every strategy see it."""
        card = self.shoe.draw()
        self._notify_dealt(card)
        return card

    def _notify_dealt(self, card: Card) -> None:
        for player in self._players:
            player.strategy.on_card_dealt(card)

    def _betting_players(self) -> list[Player]:
        return [player for player in self._players if player.hands]

    def _player_event(self, player: Player, event_type: EventType, **data: Any) -> None:
        """Emit a player event to the player's observers and the table's."""
        data.setdefault("bankroll", player.bankroll)
        event = GameEvent(event_type=event_type, data={"player": player, **data})
        player.events.emit(event)
        self.events.emit(event)

    def __str__(self) -> str:
        return f"{self.name} ({len(self._players)}/{self.max_players} players)"


def _transition_map(transitions: list[dict[str, Any]]) -> dict[RoundState, frozenset[RoundState]]:
    edges: dict[RoundState, set[RoundState]] = {state: set() for state in RoundState}
    for transition in transitions:
        sources = transition["source"]
        if isinstance(sources, str):
            sources = [sources]
        for source in sources:
            edges[RoundState[source.upper()]].add(RoundState[transition["dest"].upper()])
    return {state: frozenset(dests) for state, dests in edges.items()}


# Legal edges of the round machine, read from Table.TRANSITIONS
VALID_TRANSITIONS = _transition_map(Table.TRANSITIONS)


def is_valid_transition(from_state: RoundState, to_state: RoundState) -> bool:
    """Check whether the round machine can move from one state to another."""
    return to_state in VALID_TRANSITIONS[from_state]
