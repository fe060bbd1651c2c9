"""Command line blackjack simulator."""

import argparse
import logging
from random import Random
from typing import Callable, Sequence

from analyst.statistics import ConsoleReporter, WinLossTracker
from analyst.strategy import (
    BasicPlayerStrategy,
    DefaultDealerStrategy,
    DefaultPlayerStrategy,
    ModifiedBasicPlayerStrategy,
    PlayerStrategy,
    TrueCountPlayerStrategy,
)
from analyst.table import Player, Table
from config import AppConfig, config as default_config

logger = logging.getLogger(__name__)

TABLE_NAME = "Table1"

# Player strategy factories selectable with --strategy
STRATEGIES: dict[str, Callable[[], PlayerStrategy]] = {
    "default": DefaultPlayerStrategy,
    "basic": BasicPlayerStrategy,
    "true_count": TrueCountPlayerStrategy,
    "modified_basic": ModifiedBasicPlayerStrategy,
}


def _positive_int(text: str) -> int:
    value = int(text)
    if value <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {text}")
    return value


def _player_names(text: str) -> list[str]:
    names = [name.strip() for name in text.split(",") if name.strip()]
    if not names:
        raise argparse.ArgumentTypeError("expected at least one player name")
    return names


def build_parser(app_config: AppConfig = default_config) -> argparse.ArgumentParser:
    """Build the argument parser, taking defaults from configuration."""
    parser = argparse.ArgumentParser(
        prog="blackjack-analyst",
        description="simulate rounds of blackjack and report the results.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--num-rounds",
        type=_positive_int,
        required=True,
        help="number of rounds to play.",
    )
    parser.add_argument(
        "--player-names",
        type=_player_names,
        required=True,
        help="comma separated names of the players to seat.",
    )
    parser.add_argument(
        "--strategy",
        choices=sorted(STRATEGIES),
        default="default",
        help="strategy every player follows.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="print every table event.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=app_config.simulation.seed,
        help="random seed for reproducible shuffles.",
    )
    parser.add_argument(
        "--bankroll",
        type=_positive_int,
        default=app_config.simulation.starting_bankroll,
        help="starting bankroll of each player.",
    )
    return parser


def run(args: argparse.Namespace, app_config: AppConfig = default_config) -> WinLossTracker:
    """Play the requested rounds and print the summary."""
    table_config = app_config.table
    table = Table(
        name=TABLE_NAME,
        max_players=table_config.max_players,
        dealer_strategy=DefaultDealerStrategy(),
        min_bet=table_config.min_bet,
        max_bet=table_config.max_bet,
        num_decks=table_config.num_decks,
        rng=Random(args.seed),
    )

    tracker = WinLossTracker()
    tracker.attach(table)
    if args.verbose:
        table.subscribe(ConsoleReporter())

    strategy_factory = STRATEGIES[args.strategy]
    for name in args.player_names:
        player = Player(strategy_factory(), bankroll=args.bankroll, name=name)
        if not table.add_player(player):
            logger.warning("No seat for %s at %s", name, table.name)

    logger.debug("Playing %d rounds at %s", args.num_rounds, table)
    table.play_rounds(args.num_rounds)

    print(f"\n{tracker}")
    for player in table.players:
        print(player)
    return tracker


def main(argv: Sequence[str] | None = None) -> int:
    """Console script entry point."""
    app_config = default_config
    logging.basicConfig(
        level=app_config.log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    args = build_parser(app_config).parse_args(argv)
    run(args, app_config)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
