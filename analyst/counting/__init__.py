"""Card counting systems."""

from analyst.counting.base import CountingSystem
from analyst.counting.hilo import HiLoSystem

__all__ = [
    "CountingSystem",
    "HiLoSystem",
]
