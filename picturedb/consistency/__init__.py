"""Consistency checks and maintenance for the catalog."""

from .checker import ConsistencyChecker, DriftReport, DriftState
from .purge import PurgeResult, purge_negative_favorites, remove_directory

__all__ = [
    "ConsistencyChecker",
    "DriftReport",
    "DriftState",
    "PurgeResult",
    "purge_negative_favorites",
    "remove_directory",
]
