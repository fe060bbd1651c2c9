"""Configuration management with environment variable support."""

import os
from dataclasses import dataclass, field


def _parse_seed() -> int | None:
    """Parse BJ_SEED environment variable."""
    seed = os.getenv("BJ_SEED", "").strip()
    return int(seed) if seed else None


@dataclass(frozen=True)
class TableConfig:
    """Default table configuration."""

    num_decks: int = field(default_factory=lambda: int(os.getenv("BJ_NUM_DECKS", "8")))
    max_players: int = field(default_factory=lambda: int(os.getenv("BJ_MAX_PLAYERS", "6")))
    min_bet: int = field(default_factory=lambda: int(os.getenv("BJ_MIN_BET", "20")))
    max_bet: int = field(default_factory=lambda: int(os.getenv("BJ_MAX_BET", "200")))


@dataclass(frozen=True)
class SimulationConfig:
    """Simulation run configuration."""

    starting_bankroll: int = field(
        default_factory=lambda: int(os.getenv("BJ_STARTING_BANKROLL", "100000"))
    )
    seed: int | None = field(default_factory=_parse_seed)


@dataclass(frozen=True)
class AppConfig:
    """Application configuration."""

    log_level: str = field(
        default_factory=lambda: os.getenv("BJ_LOG_LEVEL", "WARNING").upper()
    )

    table: TableConfig = field(default_factory=TableConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


# Global configuration instance
config = AppConfig()
