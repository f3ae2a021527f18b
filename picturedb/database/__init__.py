"""Database module for picturedb."""

from .connection import Database
from .models import (
    CatalogRecord,
    CombinedRecord,
    CreatorSummary,
    DerivedStats,
    QueryContext,
    QueryTarget,
    SortOrder,
)
from .schema import create_schema

__all__ = [
    "Database",
    "create_schema",
    "CatalogRecord",
    "CombinedRecord",
    "CreatorSummary",
    "DerivedStats",
    "QueryContext",
    "QueryTarget",
    "SortOrder",
]
