"""Exceptions raised by the simulator."""


class AnalystError(Exception):
    """Base class for simulator errors."""


class ConfigurationError(AnalystError, ValueError):
    """A table, shoe or player was constructed with invalid parameters."""


class ShoeExhaustedError(AnalystError, IndexError):
    """A card was requested from a shoe with no cards left."""


class RoundInProgressError(AnalystError, RuntimeError):
    """The table was modified while a round was being played."""
