"""picturedb - a catalog of image directories with cached statistics."""

__version__ = "1.3.0"

from picturedb.catalog import CatalogStore
from picturedb.consistency import ConsistencyChecker
from picturedb.database import Database
from picturedb.navigator import DirectoryNavigator
from picturedb.stats import DerivedStatsManager

__all__ = [
    "CatalogStore",
    "ConsistencyChecker",
    "Database",
    "DerivedStatsManager",
    "DirectoryNavigator",
]
