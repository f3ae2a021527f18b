"""Data models for the database."""

import sqlite3
from dataclasses import dataclass, field
from enum import Enum


class QueryTarget(Enum):
    """Relation a catalog query reads from."""

    CATALOG = "pictures"
    COMBINED = "vw_pictures"


class SortOrder(Enum):
    """Ordering applied to record listings."""

    ASC = "asc"
    DESC = "desc"
    TITLE = "title"

    @property
    def clause(self) -> str:
        return {
            SortOrder.ASC: "id ASC",
            SortOrder.DESC: "id DESC",
            SortOrder.TITLE: "title ASC, id ASC",
        }[self]


@dataclass
class CatalogRecord:
    """Represents a row of the pictures table."""

    id: int | None
    title: str
    creator: str
    path: str
    media: str = ""
    mark: str = ""
    fav: int = 0
    info: str = ""
    date: str | None = None
    count: int = 0

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "CatalogRecord":
        return cls(
            id=row["id"],
            title=row["title"],
            creator=row["creator"],
            path=row["path"],
            media=row["media"],
            mark=row["mark"],
            fav=row["fav"],
            info=row["info"],
            date=row["date"],
            count=row["count"],
        )


@dataclass
class CombinedRecord(CatalogRecord):
    """Represents a row of the vw_pictures view."""

    file_count: int = 0
    total_size_mb: int = 0

    @classmethod
    def from_row(cls, row: sqlite3.Row) -> "CombinedRecord":
        return cls(
            id=row["id"],
            title=row["title"],
            creator=row["creator"],
            path=row["path"],
            media=row["media"],
            mark=row["mark"],
            fav=row["fav"],
            info=row["info"],
            date=row["date"],
            count=row["count"],
            file_count=row["file_count"],
            total_size_mb=row["total_size"],
        )


@dataclass
class DerivedStats:
    """Represents a row of the pictures_ex table."""

    id: int
    file_count: int
    total_size_mb: int


@dataclass
class CreatorSummary:
    """Record count and best favorite score for one creator."""

    creator: str
    record_count: int
    max_fav: int


@dataclass
class QueryContext:
    """Mark, filter and order remembered by the caller between requests.

    An empty mark or filter means the criterion is not applied. When both are
    set, the mark wins.
    """

    mark: str = ""
    filter: str = ""
    order: SortOrder = field(default=SortOrder.ASC)
