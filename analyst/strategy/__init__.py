"""Player and dealer strategies."""

from analyst.strategy.base import (
    DealerAction,
    DealerStrategy,
    PlayerAction,
    PlayerStrategy,
)
from analyst.strategy.basic import BasicPlayerStrategy
from analyst.strategy.default import DefaultDealerStrategy, DefaultPlayerStrategy
from analyst.strategy.modified_basic import ModifiedBasicPlayerStrategy
from analyst.strategy.true_count import TrueCountPlayerStrategy

__all__ = [
    "DealerAction",
    "DealerStrategy",
    "PlayerAction",
    "PlayerStrategy",
    "BasicPlayerStrategy",
    "DefaultDealerStrategy",
    "DefaultPlayerStrategy",
    "ModifiedBasicPlayerStrategy",
    "TrueCountPlayerStrategy",
]
