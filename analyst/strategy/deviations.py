"""Index plays: departures from basic strategy driven by the true count."""

from dataclasses import dataclass
from typing import Iterable, Mapping

from analyst.strategy.base import PlayerAction

H = PlayerAction.HIT
S = PlayerAction.STAND
D = PlayerAction.DOUBLE_DOWN
P = PlayerAction.SPLIT

PlayKey = tuple[int, bool, bool, int]


@dataclass(frozen=True)
class IndexPlay:
    """
    A hand whose correct play depends on the count.

    When the true count is at or above the index, play `deviation_action`,
    otherwise `basic_action`.
    """

    # Hand description; a pair is keyed by its total
    player_total: int
    is_soft: bool
    is_pair: bool
    dealer_upcard: int  # 2-11 (11 = Ace)

    basic_action: PlayerAction
    deviation_action: PlayerAction
    index: float

    # Applies to the first two cards only
    two_cards_only: bool = False

    @property
    def key(self) -> PlayKey:
        return (self.player_total, self.is_soft, self.is_pair, self.dealer_upcard)

    def should_deviate(self, true_count: float) -> bool:
        return true_count >= self.index

    def get_action(self, true_count: float) -> PlayerAction:
        """Return the action for the given true count."""
        if self.should_deviate(true_count):
            return self.deviation_action
        return self.basic_action

    def __str__(self) -> str:
        if self.is_pair:
            hand = f"pair of {self.player_total // 2}s"
        else:
            hand = f"{'soft' if self.is_soft else 'hard'} {self.player_total}"
        upcard = "A" if self.dealer_upcard == 11 else str(self.dealer_upcard)
        return f"{hand} vs {upcard}: {self.deviation_action} at TC {self.index:+g}"


def _plays(
    total: int,
    basic_action: PlayerAction,
    deviation_action: PlayerAction,
    indexes: Mapping[int, float],
    is_soft: bool = False,
    is_pair: bool = False,
    two_cards_only: bool = False,
) -> list[IndexPlay]:
    return [
        IndexPlay(total, is_soft, is_pair, upcard, basic_action, deviation_action, index, two_cards_only)
        for upcard, index in indexes.items()
    ]


# Modified basic strategy chart, multi-deck, dealer hits soft 17
INDEX_PLAYS: tuple[IndexPlay, ...] = (
    # Pairs
    *_plays(20, S, P, {5: 5, 6: 4}, is_pair=True),
    *_plays(18, S, P, {2: -2, 3: -3, 4: -5, 5: -5, 7: 3, 11: 3}, is_pair=True),
    *_plays(12, H, P, {2: -1, 3: -3, 4: -4}, is_pair=True),
    *_plays(8, H, P, {4: 3, 5: -1, 6: -2}, is_pair=True),
    *_plays(6, H, P, {2: -2, 3: -5}, is_pair=True),
    *_plays(4, H, P, {2: -4, 3: -5}, is_pair=True),
    # Soft doubles
    *_plays(20, S, D, {5: 5, 6: 5}, is_soft=True, two_cards_only=True),
    *_plays(19, S, D, {3: 5, 4: 3, 5: 1, 6: 1}, is_soft=True, two_cards_only=True),
    *_plays(18, S, D, {2: 1, 3: -1, 4: -5}, is_soft=True, two_cards_only=True),
    *_plays(17, S, D, {2: 1, 3: -2, 4: -5}, is_soft=True, two_cards_only=True),
    *_plays(16, H, D, {3: 3, 4: -2, 5: -5}, is_soft=True, two_cards_only=True),
    *_plays(15, H, D, {3: 5, 4: -1, 5: -4}, is_soft=True, two_cards_only=True),
    *_plays(14, H, D, {4: 1, 5: -2, 6: -4}, is_soft=True, two_cards_only=True),
    *_plays(13, H, D, {4: 2, 5: -1, 6: -2}, is_soft=True, two_cards_only=True),
    *_plays(18, H, S, {11: 1}, is_soft=True),
    # Hard stands
    *(IndexPlay(total, False, False, 11, H, S, -5) for total in range(17, 21)),
    *_plays(16, H, S, {9: 4, 10: 0, 11: 3}),
    *_plays(15, H, S, {10: 3, 11: 5}),
    *_plays(14, H, S, {2: -3, 3: -4, 4: -5}),
    *_plays(13, H, S, {2: -1, 3: -2, 4: -4, 5: -5, 6: -5}),
    *_plays(12, H, S, {2: 2, 3: 1, 4: 0, 5: -1, 6: -2}),
    # Hard doubles
    *_plays(11, H, D, {9: -4, 10: -3, 11: 1}),
    *_plays(10, H, D, {8: -4, 9: -1, 10: 4, 11: 4}),
    *_plays(9, H, D, {2: 1, 3: -1, 4: -2, 5: -4, 6: -5, 7: 3}),
    *_plays(8, H, D, {4: 5, 5: 3, 6: 2}),
)


def index_play_map(plays: Iterable[IndexPlay]) -> dict[PlayKey, IndexPlay]:
    """Key index plays by hand and dealer upcard, rejecting duplicates."""
    by_key: dict[PlayKey, IndexPlay] = {}
    for play in plays:
        if play.key in by_key:
            raise ValueError(f"Duplicate index play: {play}")
        by_key[play.key] = play
    return by_key


def find_index_play(
    plays: Mapping[PlayKey, IndexPlay],
    player_total: int,
    is_soft: bool,
    is_pair: bool,
    dealer_upcard: int,
    num_cards: int = 2,
) -> IndexPlay | None:
    """
    Find the index play for a hand, whatever the count.

    Args:
        plays: Index plays keyed by `index_play_map`
        player_total: Player's best hand total
        is_soft: Whether the hand is soft
        is_pair: Whether the hand is a pair
        dealer_upcard: Dealer's upcard (2-11)
        num_cards: Number of cards in the hand

    Returns:
        The matching IndexPlay, or None when basic strategy applies
    """
    play = plays.get((player_total, is_soft, is_pair, dealer_upcard))
    if play is None or (play.two_cards_only and num_cards != 2):
        return None
    return play
