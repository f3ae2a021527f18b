"""Derived statistics for catalog records."""

from .manager import DerivedStatsManager, to_megabytes, total_size
from .progress import RebuildProgress, RebuildStats

__all__ = [
    "DerivedStatsManager",
    "RebuildProgress",
    "RebuildStats",
    "to_megabytes",
    "total_size",
]
