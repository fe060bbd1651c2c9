"""Tests for the table engine."""

import pytest

from analyst.errors import ConfigurationError, RoundInProgressError, ShoeExhaustedError
from analyst.strategy import DefaultDealerStrategy, DefaultPlayerStrategy, PlayerAction
from analyst.table import EventType, Player, RoundState, Table
from analyst.table.engine import is_valid_transition
from tests.conftest import cards

HIT = PlayerAction.HIT
STAND = PlayerAction.STAND
DOUBLE = PlayerAction.DOUBLE_DOWN
SPLIT = PlayerAction.SPLIT


class TestTableSetup:
    """Tests for table construction and seating."""

    def test_table_creation(self, rng):
        table = Table(6, DefaultDealerStrategy(), 20, 200, rng=rng)
        assert table.max_players == 6
        assert table.min_bet == 20
        assert table.max_bet == 200
        assert table.num_decks == 8
        assert table.players == ()
        assert table.has_room
        assert table.state == RoundState.IDLE
        assert not table.round_in_progress
        assert table.name.startswith("Table ")

    @pytest.mark.parametrize(
        "max_players, min_bet, max_bet",
        [(0, 20, 200), (6, -1, 200), (6, 20, -5), (6, 200, 20)],
    )
    def test_invalid_configuration(self, max_players, min_bet, max_bet):
        with pytest.raises(ConfigurationError):
            Table(max_players, DefaultDealerStrategy(), min_bet, max_bet)

    def test_missing_dealer_strategy(self):
        with pytest.raises(ConfigurationError):
            Table(6, None, 20, 200)

    def test_add_player(self, make_table, make_player, recorder):
        table = make_table()
        table.subscribe(recorder)
        player = make_player(name="Alice")

        assert table.add_player(player)
        assert table.players == (player,)
        assert player.table is table
        assert player.strategy.joined == [table]
        assert recorder.types == [EventType.PLAYER_JOINS]
        assert recorder[0].data["player"] is player

    def test_add_player_to_full_table(self, make_table, make_player):
        table = make_table(max_players=1)
        assert table.add_player(make_player())
        assert not table.has_room
        assert not table.add_player(make_player())
        assert table.num_players == 1

    def test_add_player_seated_elsewhere(self, make_table, make_player, rng):
        table = make_table()
        other = Table(6, DefaultDealerStrategy(), 10, 100, rng=rng)
        player = make_player()
        assert other.add_player(player)
        assert not table.add_player(player)
        assert player.table is other

    def test_remove_player(self, make_table, make_player, recorder):
        table = make_table()
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)

        assert table.remove_player(player)
        assert player.table is None
        assert table.players == ()
        assert player.strategy.left == [table]
        assert recorder.types == [EventType.PLAYER_LEAVES]

    def test_remove_unseated_player(self, make_table, make_player):
        assert not make_table().remove_player(make_player())

    def test_play_rounds_without_players(self, make_table, recorder):
        table = make_table()
        table.subscribe(recorder)
        table.play_rounds(5)
        assert len(recorder) == 0
        assert table.rounds_played == 0

    def test_strategy_learns_table_minimum(self, make_table):
        strategy = DefaultPlayerStrategy()
        table = make_table(min_bet=25)
        table.add_player(Player(strategy))
        assert strategy.get_bet(1000) == 25


class TestRoundFlow:
    """Tests for a plain round and the order of its events."""

    def test_event_sequence(self, make_table, make_player, recorder):
        table = make_table("10S 9H 10C 7D")
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert recorder.types == [
            EventType.ROUND_STARTED,
            EventType.PLAYER_BETS,
            EventType.PLAYER_DEALT,
            EventType.DEALER_DEALT,
            EventType.PLAYER_STANDS,
            EventType.DEALER_REVEALS,
            EventType.DEALER_STANDS,
            EventType.PLAYER_WINS,
            EventType.ROUND_ENDED,
        ]
        assert player.bankroll == 1010
        assert table.rounds_played == 1
        assert table.state == RoundState.IDLE

    def test_deal_order_with_two_players(self, make_table, make_player):
        table = make_table("2S 3S 4S 5S 10C 8D")
        first, second = make_player(), make_player()
        table.add_player(first)
        table.add_player(second)
        hands = {}
        table.subscribe(
            lambda e: hands.setdefault(e.data["player"], list(e.data["hand"].cards)),
            EventType.PLAYER_DEALT,
        )

        table.play_round()

        assert hands[first] == cards("2S 4S")
        assert hands[second] == cards("3S 5S")

    def test_strategies_see_hole_card_only_on_reveal(self, make_table, make_player):
        table = make_table("10S 9H 10C 7D")
        player = make_player()
        table.add_player(player)
        seen_at_action = []
        player.strategy.get_action = lambda hand, card: (
            seen_at_action.append(list(player.strategy.dealt)) or STAND
        )

        table.play_round()

        assert seen_at_action == [cards("10S 9H 10C")]
        assert player.strategy.dealt == cards("10S 9H 10C 7D")

    def test_player_events_reach_player_and_table(self, make_table, make_player, recorder):
        table = make_table("10S 9H 10C 7D")
        player = make_player()
        table.add_player(player)
        player_events = []
        player.subscribe(player_events.append)
        table.subscribe(recorder)

        table.play_round()

        assert [e.event_type for e in player_events] == [
            EventType.PLAYER_BETS,
            EventType.PLAYER_DEALT,
            EventType.PLAYER_STANDS,
            EventType.PLAYER_WINS,
        ]
        assert all(event in recorder for event in player_events)

    def test_hands_cleared_after_round(self, make_table, make_player):
        table = make_table("10S 9H 10C 7D")
        player = make_player()
        table.add_player(player)
        table.play_round()
        assert player.hands == []
        assert player.insurance_bet == 0
        assert table.dealer_hand is None

    def test_play_rounds(self, make_table):
        table = make_table()
        player = Player(DefaultPlayerStrategy(), bankroll=10_000)
        table.add_player(player)
        table.play_rounds(50)
        assert table.rounds_played == 50
        assert table.state == RoundState.IDLE

    def test_reshuffle_notifies_strategies(self, make_table, make_player, recorder, stacked_shoe):
        table = make_table()
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder, EventType.SHOE_SHUFFLED)
        stacked_shoe.force_shuffle()

        table.play_round()

        assert len(recorder) == 1
        assert player.strategy.shuffles == 1

    def test_round_number_on_round_ended(self, make_table, make_player, recorder):
        table = make_table()
        table.add_player(make_player())
        table.subscribe(recorder, EventType.ROUND_ENDED)
        table.play_rounds(3)
        assert [e.data["round"] for e in recorder] == [1, 2, 3]


class TestBetting:
    """Tests for the betting phase."""

    def test_broke_player_bets_zero(self, make_table, make_player, recorder):
        table = make_table("10C 7D")
        player = make_player(bankroll=0)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        bets = [e for e in recorder if e.event_type == EventType.PLAYER_BETS]
        assert bets[0].data["amount"] == 0
        assert player.strategy.bet_calls == 0
        # The dealer is still dealt and played
        assert EventType.DEALER_DEALT in recorder.types
        assert EventType.DEALER_STANDS in recorder.types
        assert EventType.PLAYER_DEALT not in recorder.types

    def test_zero_bet_sits_out(self, make_table, make_player, recorder):
        table = make_table()
        player = make_player(bet=0)
        table.add_player(player)
        table.subscribe(recorder)
        table.play_round()
        assert player.bankroll == 1000
        assert EventType.PLAYER_DEALT not in recorder.types

    def test_negative_bet_sits_out(self, make_table, make_player, caplog):
        table = make_table()
        player = make_player(bet=-10)
        table.add_player(player)
        table.play_round()
        assert player.bankroll == 1000
        assert "invalid bet" in caplog.text


class TestInsurance:
    """Tests for insurance and the dealer's peek."""

    def test_insurance_pays_on_dealer_blackjack(self, make_table, make_player, recorder):
        table = make_table("10S 7H AS KH")
        player = make_player(bet=100, insurance=50)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert EventType.DEALER_BLACKJACK in recorder.types
        assert EventType.INSURANCE_WINS in recorder.types
        assert EventType.PLAYER_LOSES in recorder.types
        assert EventType.PLAYER_STANDS not in recorder.types
        # +100 on insurance, -100 on the hand
        assert player.bankroll == 1000

    def test_insurance_lost_without_dealer_blackjack(self, make_table, make_player, recorder):
        table = make_table("10S 8H AS 7C")
        player = make_player(bet=10, insurance=5)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        insurance = [e for e in recorder if e.event_type == EventType.INSURANCE_LOSES]
        assert insurance[0].data["amount"] == 5
        assert EventType.PLAYER_PUSH in recorder.types
        assert player.bankroll == 995

    def test_insurance_clamped_to_half_bet(self, make_table, make_player, recorder, caplog):
        table = make_table("10S 8H AS 7C")
        player = make_player(bet=10, insurance=20)
        table.add_player(player)
        table.subscribe(recorder, EventType.PLAYER_INSURES)

        table.play_round()

        assert recorder[0].data["amount"] == 5
        assert "clamped" in caplog.text

    def test_negative_insurance_clamped_to_zero(self, make_table, make_player, recorder):
        table = make_table("10S 8H AS 7C")
        player = make_player(bet=10, insurance=-3)
        table.add_player(player)
        table.subscribe(recorder, EventType.PLAYER_INSURES)
        table.play_round()
        assert recorder[0].data["amount"] == 0
        assert player.bankroll == 1000

    def test_no_insurance_against_ten(self, make_table, make_player, recorder):
        table = make_table("10S 7H KS AC")
        player = make_player(insurance=5)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert EventType.PLAYER_INSURES not in recorder.types
        assert EventType.DEALER_BLACKJACK in recorder.types
        assert player.bankroll == 990

    def test_blackjacks_push(self, make_table, make_player, recorder):
        table = make_table("AS KD AH QC")
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert EventType.PLAYER_PUSH in recorder.types
        assert EventType.PLAYER_BLACKJACK not in recorder.types
        assert player.bankroll == 1000

    def test_dealer_hole_card_seen_once_on_blackjack(self, make_table, make_player):
        table = make_table("10S 7H AS KH")
        player = make_player()
        table.add_player(player)
        table.play_round()
        assert player.strategy.dealt == cards("10S 7H AS KH")

    def test_player_blackjack_pays_three_to_two(self, make_table, make_player, recorder):
        table = make_table("AS KD 9H 8C")
        player = make_player(bet=10)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        blackjack = [e for e in recorder if e.event_type == EventType.PLAYER_BLACKJACK]
        assert blackjack[0].data["amount"] == 15
        assert player.bankroll == 1015
        assert EventType.PLAYER_STANDS not in recorder.types
        assert EventType.PLAYER_WINS not in recorder.types

    def test_odd_blackjack_payout_rounds_down(self, make_table, make_player):
        table = make_table("AS KD 9H 8C")
        player = make_player(bet=25)
        table.add_player(player)
        table.play_round()
        assert player.bankroll == 1037


class TestPlayerActions:
    """Tests for hitting, doubling and splitting."""

    def test_bust(self, make_table, make_player, recorder):
        table = make_table("10S 6H 10C 7D KS")
        player = make_player(HIT)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert EventType.PLAYER_BUSTS in recorder.types
        assert EventType.PLAYER_LOSES not in recorder.types
        # The dealer still plays out
        assert EventType.DEALER_STANDS in recorder.types
        assert player.bankroll == 990

    def test_double_down(self, make_table, make_player, recorder):
        table = make_table("6S 5H 6C 10D KS QH")
        player = make_player(DOUBLE)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        doubled = [e for e in recorder if e.event_type == EventType.PLAYER_DOUBLES_DOWN]
        assert doubled[0].data["hand"].bet == 20
        assert doubled[0].data["card"] == cards("KS")[0]
        assert EventType.DEALER_BUSTS in recorder.types
        assert player.bankroll == 1020

    def test_double_down_bust(self, make_table, make_player):
        table = make_table("10S 5H 10C 7D KS")
        player = make_player(DOUBLE)
        table.add_player(player)
        table.play_round()
        assert player.bankroll == 980

    def test_double_after_hit_is_stand(self, make_table, make_player, recorder):
        table = make_table("2S 3H 10C 8D 4C")
        player = make_player(HIT, DOUBLE)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert EventType.PLAYER_DOUBLES_DOWN not in recorder.types
        assert EventType.PLAYER_STANDS in recorder.types
        assert player.bankroll == 990

    def test_split_non_pair_is_stand(self, make_table, make_player, recorder):
        table = make_table("10S 9H 10C 7D")
        player = make_player(SPLIT)
        table.add_player(player)
        table.subscribe(recorder)
        table.play_round()
        assert EventType.PLAYER_SPLITS not in recorder.types
        assert player.bankroll == 1010

    def test_unrecognized_action_is_stand(self, make_table, make_player, caplog):
        table = make_table("10S 9H 10C 7D")
        player = make_player(None)
        table.add_player(player)
        table.play_round()
        assert player.bankroll == 1010
        assert "unrecognized action" in caplog.text

    def test_split_eights(self, make_table, make_player, recorder):
        table = make_table("8S 8H 6C 10D 3C 10S KS 9H")
        player = make_player(SPLIT, HIT, DOUBLE, HIT, STAND)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        wins = [e for e in recorder if e.event_type == EventType.PLAYER_WINS]
        assert [e.data["amount"] for e in wins] == [20, 10]
        assert [e.data["hand"].cards for e in wins] == [
            cards("8S 3C 10S"),
            cards("8H KS"),
        ]
        assert player.bankroll == 1030

    def test_split_aces_take_one_card_and_resplit(self, make_table, make_player, recorder):
        table = make_table("AS AH 9C 8D KS AD 9S 7H")
        player = make_player(SPLIT, HIT, HIT, SPLIT, HIT, HIT)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert recorder.types.count(EventType.PLAYER_SPLITS) == 2
        assert EventType.PLAYER_BLACKJACK not in recorder.types
        wins = [e for e in recorder if e.event_type == EventType.PLAYER_WINS]
        assert [e.data["hand"].cards for e in wins] == [
            cards("AS KS"),
            cards("AH 9S"),
            cards("AD 7H"),
        ]
        assert player.strategy.actions == []
        assert player.bankroll == 1030

    def test_split_aces_stand_without_asking(self, make_table, make_player):
        table = make_table("AS AH 9C 8D 5S 6H")
        # Further HITs would be used if the split hands were offered a choice
        player = make_player(SPLIT, HIT, HIT, HIT, HIT)
        table.add_player(player)
        table.play_round()
        assert player.strategy.actions == [HIT, HIT]

    def test_split_tens_then_ace_pays_blackjack(self, make_table, make_player, recorder):
        table = make_table("KS KH 7C 10D AS 9S")
        player = make_player(SPLIT, HIT, HIT, STAND)
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        blackjack = [e for e in recorder if e.event_type == EventType.PLAYER_BLACKJACK]
        assert blackjack[0].data["amount"] == 15
        assert player.bankroll == 1025

    def test_bet_number_of_split_hands(self, make_table, make_player):
        table = make_table("8S 8H 6C 10D 3C 10S KS 9H")
        player = make_player(SPLIT, HIT, DOUBLE, HIT, STAND)
        table.add_player(player)
        numbers = []
        player.subscribe(
            lambda e: numbers.append(e.data["hand"].bet_number),
            EventType.PLAYER_WINS,
        )
        table.play_round()
        assert numbers == [0, 1]


class TestDealerPlay:
    """Tests for the dealer's turn and settlement."""

    def test_dealer_hits_soft_17(self, make_table, make_player, recorder):
        table = make_table("10S 9H AS 6C 2D")
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)

        table.play_round()

        assert recorder.types.count(EventType.DEALER_DRAWS) == 1
        assert EventType.PLAYER_PUSH in recorder.types
        assert player.bankroll == 1000

    def test_dealer_stands_on_hard_17(self, make_table, make_player, recorder):
        table = make_table("10S 8H 10C 7D")
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)
        table.play_round()
        assert EventType.DEALER_DRAWS not in recorder.types
        assert player.bankroll == 1010

    def test_player_loses_to_higher_dealer(self, make_table, make_player):
        table = make_table("10S 7H 10C 9D")
        player = make_player()
        table.add_player(player)
        table.play_round()
        assert player.bankroll == 990

    def test_two_players_settle_independently(self, make_table, make_player):
        table = make_table("10S 10H 9S 6H 10C 8D")
        winner, loser = make_player(), make_player()
        table.add_player(winner)
        table.add_player(loser)
        table.play_round()
        assert winner.bankroll == 1010
        assert loser.bankroll == 990


class TestRoundErrors:
    """Tests for aborted rounds and re-entrancy."""

    def test_shoe_exhaustion_aborts_round(self, make_table, make_player, stacked_shoe, recorder):
        table = make_table()
        player = make_player()
        table.add_player(player)
        table.subscribe(recorder)
        stacked_shoe.exhaust(leaving=3)

        with pytest.raises(ShoeExhaustedError):
            table.play_round()

        assert table.state == RoundState.IDLE
        assert table.dealer_hand is None
        assert player.hands == []
        assert player.bankroll == 1000
        assert EventType.ROUND_ENDED not in recorder.types
        assert table.rounds_played == 0

    def test_add_player_during_round(self, make_table, make_player):
        table = make_table()
        table.add_player(make_player())
        late = make_player()
        table.subscribe(lambda e: table.add_player(late), EventType.ROUND_STARTED)

        with pytest.raises(RoundInProgressError):
            table.play_round()

        assert table.state == RoundState.IDLE
        assert late.table is None

    def test_remove_player_during_round(self, make_table, make_player):
        table = make_table()
        player = make_player()
        table.add_player(player)
        table.subscribe(lambda e: table.remove_player(player), EventType.PLAYER_DEALT)

        with pytest.raises(RoundInProgressError):
            table.play_round()

        assert player.table is table

    def test_nested_round(self, make_table, make_player):
        table = make_table()
        table.add_player(make_player())
        table.subscribe(lambda e: table.play_round(), EventType.DEALER_DEALT)

        with pytest.raises(RoundInProgressError):
            table.play_round()

        assert not table.round_in_progress

    def test_table_usable_after_abort(self, make_table, make_player, stacked_shoe):
        table = make_table()
        player = make_player()
        table.add_player(player)
        stacked_shoe.exhaust(leaving=3)
        with pytest.raises(ShoeExhaustedError):
            table.play_round()

        stacked_shoe.shuffle()
        table.play_round()
        assert table.rounds_played == 1


class TestRoundState:
    """Tests for the round state transitions."""

    def test_valid_transitions(self):
        assert is_valid_transition(RoundState.IDLE, RoundState.NEW_ROUND)
        assert is_valid_transition(RoundState.DEALER_PEEK, RoundState.CLEANUP)
        assert is_valid_transition(RoundState.CLEANUP, RoundState.IDLE)

    def test_invalid_transitions(self):
        assert not is_valid_transition(RoundState.IDLE, RoundState.SETTLEMENT)
        assert not is_valid_transition(RoundState.SETTLEMENT, RoundState.IDLE)

    def test_edges_match_machine(self):
        """Test that the edge map is read from the machine's transitions."""
        for transition in Table.TRANSITIONS:
            sources = transition["source"]
            if isinstance(sources, str):
                sources = [sources]
            for source in sources:
                assert is_valid_transition(
                    RoundState[source.upper()], RoundState[transition["dest"].upper()]
                )

    def test_mid_round_states_can_abort(self):
        for state in RoundState:
            if state in (RoundState.IDLE, RoundState.CLEANUP):
                assert not is_valid_transition(state, RoundState.CLEANUP)
            else:
                assert is_valid_transition(state, RoundState.CLEANUP)

    def test_states_visited_in_order(self, make_table, make_player):
        table = make_table("10S 9H 10C 7D")
        table.add_player(make_player())
        visited = []
        for event_type in EventType:
            table.subscribe(lambda e: visited.append(table.state), event_type)

        table.play_round()

        order = list(dict.fromkeys(visited))
        assert order == [
            RoundState.NEW_ROUND,
            RoundState.BETTING,
            RoundState.INITIAL_DEAL,
            RoundState.DEALER_UP_CARD,
            RoundState.PLAYER_ACTIONS,
            RoundState.DEALER_PLAY,
            RoundState.SETTLEMENT,
            RoundState.IDLE,
        ]

    def test_dealer_blackjack_skips_player_actions(self, make_table, make_player):
        table = make_table("10S 7H AS KH")
        table.add_player(make_player())
        visited = []
        table.subscribe(lambda e: visited.append(table.state))
        table.play_round()
        assert RoundState.DEALER_PEEK in visited
        assert RoundState.PLAYER_ACTIONS not in visited
        assert RoundState.SETTLEMENT not in visited
