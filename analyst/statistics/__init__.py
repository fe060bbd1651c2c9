"""Observers gathering and reporting table statistics."""

from analyst.statistics.console import ConsoleReporter
from analyst.statistics.win_loss import PlayerRecord, WinLossTracker

__all__ = [
    "ConsoleReporter",
    "PlayerRecord",
    "WinLossTracker",
]
