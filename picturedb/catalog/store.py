"""CRUD and query surface over catalog records."""

import logging
import sqlite3
from collections.abc import Iterable
from typing import Any

from picturedb.database import (
    CatalogRecord,
    CombinedRecord,
    CreatorSummary,
    Database,
    QueryContext,
    QueryTarget,
    SortOrder,
)
from picturedb.errors import DuplicatePathError, NotFoundError

logger = logging.getLogger(__name__)

CATALOG_TABLE = QueryTarget.CATALOG.value


class CatalogStore:
    """Reads and writes the pictures table.

    Reads can target either the catalog table or the combined view; each write
    touches a single catalog row and is committed on its own.
    """

    def __init__(self, db: Database):
        self.db = db

    # -- writes -------------------------------------------------------------

    def insert(self, record: CatalogRecord) -> int:
        """Insert a record and return its new id.

        The date defaults to today when the record carries none.
        """
        try:
            cursor = self.db.execute(
                f"""
                INSERT INTO {CATALOG_TABLE} (title, creator, path, media, mark, info, date)
                VALUES (?, ?, ?, ?, ?, ?, COALESCE(?, date()))
                """,
                (
                    record.title,
                    record.creator,
                    record.path,
                    record.media,
                    record.mark,
                    record.info,
                    record.date,
                ),
            )
        except sqlite3.IntegrityError as e:
            if _is_duplicate_path(e):
                logger.error("Store rejected duplicate path: %s", record.path)
                raise DuplicatePathError(record.path) from e
            raise

        assert cursor.lastrowid is not None
        logger.info("Inserted record id=%d path=%s", cursor.lastrowid, record.path)
        return cursor.lastrowid

    def update(self, record_id: int, record: CatalogRecord) -> bool:
        """Overwrite the editable fields of a record. Returns False if absent."""
        try:
            cursor = self.db.execute(
                f"""
                UPDATE {CATALOG_TABLE}
                SET title = ?, creator = ?, path = ?, media = ?, mark = ?, fav = ?, info = ?
                WHERE id = ?
                """,
                (
                    record.title,
                    record.creator,
                    record.path,
                    record.media,
                    record.mark,
                    record.fav,
                    record.info,
                    record_id,
                ),
            )
        except sqlite3.IntegrityError as e:
            if _is_duplicate_path(e):
                logger.error("Store rejected duplicate path: %s", record.path)
                raise DuplicatePathError(record.path) from e
            raise
        return cursor.rowcount > 0

    def delete(self, record_id: int) -> bool:
        cursor = self.db.execute(f"DELETE FROM {CATALOG_TABLE} WHERE id = ?", (record_id,))
        if cursor.rowcount:
            logger.info("Deleted record id=%d", record_id)
        return cursor.rowcount > 0

    def increment_count(self, record_id: int) -> None:
        self.db.execute(
            f"UPDATE {CATALOG_TABLE} SET count = count + 1 WHERE id = ?",
            (record_id,),
        )

    def increment_fav(self, record_id: int, add: int = 1) -> None:
        self.db.execute(
            f"UPDATE {CATALOG_TABLE} SET fav = fav + ? WHERE id = ?",
            (add, record_id),
        )

    # -- single-row reads ---------------------------------------------------

    def get_by_id(
        self, record_id: int, target: QueryTarget = QueryTarget.CATALOG
    ) -> CatalogRecord | None:
        records = self._select(target, "id = ?", (record_id,))
        return records[0] if records else None

    def get_by_path(
        self, path: str, target: QueryTarget = QueryTarget.CATALOG
    ) -> CatalogRecord | None:
        """Return the record registered for ``path``, or None."""
        records = self._select(target, "path = ?", (path,))
        return records[0] if records else None

    def require(
        self, record_id: int, target: QueryTarget = QueryTarget.CATALOG
    ) -> CatalogRecord:
        """Like ``get_by_id`` but raises NotFoundError for callers that cannot continue."""
        record = self.get_by_id(record_id, target)
        if record is None:
            raise NotFoundError(f"No record with id={record_id}.")
        return record

    def get_max_id(self) -> int | None:
        row = self.db.fetchone(f"SELECT max(id) AS max_id FROM {CATALOG_TABLE}")
        return row["max_id"] if row else None

    def count(self, target: QueryTarget = QueryTarget.CATALOG) -> int:
        row = self.db.fetchone(f"SELECT count(*) AS n FROM {target.value}")
        return row["n"] if row else 0

    # -- listings -----------------------------------------------------------

    def query_all(
        self,
        target: QueryTarget = QueryTarget.CATALOG,
        order: SortOrder = SortOrder.ASC,
    ) -> list[CatalogRecord]:
        return self._select(target, order_by=order.clause)

    def query_by_filter(
        self,
        text: str,
        target: QueryTarget = QueryTarget.CATALOG,
        order: SortOrder = SortOrder.ASC,
    ) -> list[CatalogRecord]:
        """Records whose title, path or info contains ``text``."""
        return self._select(
            target,
            "instr(title, ?) OR instr(path, ?) OR instr(info, ?)",
            (text, text, text),
            order.clause,
        )

    def query_by_mark(
        self,
        mark: str,
        target: QueryTarget = QueryTarget.CATALOG,
        order: SortOrder = SortOrder.ASC,
    ) -> list[CatalogRecord]:
        return self._select(target, "mark = ?", (mark,), order.clause)

    def query_by_fav(self, target: QueryTarget = QueryTarget.CATALOG) -> list[CatalogRecord]:
        return self._select(target, "fav > 0", order_by="fav DESC, id ASC")

    def query_by_count(self, target: QueryTarget = QueryTarget.CATALOG) -> list[CatalogRecord]:
        return self._select(target, "count > 0", order_by="count DESC, id ASC")

    def query_by_creator(
        self, creator: str, target: QueryTarget = QueryTarget.CATALOG
    ) -> list[CatalogRecord]:
        return self._select(target, "creator = ?", (creator,))

    def query_negative_fav(self) -> list[CatalogRecord]:
        return self._select(QueryTarget.CATALOG, "fav < 0")

    def query(
        self, context: QueryContext, target: QueryTarget = QueryTarget.COMBINED
    ) -> list[CatalogRecord]:
        """Apply the caller's remembered mark or filter with its order."""
        if context.mark:
            return self.query_by_mark(context.mark, target, context.order)
        if context.filter:
            return self.query_by_filter(context.filter, target, context.order)
        return self.query_all(target, context.order)

    def list_ids(self) -> list[int]:
        rows = self.db.fetchall(f"SELECT id FROM {CATALOG_TABLE} ORDER BY id")
        return [row["id"] for row in rows]

    def list_marks(self) -> list[str]:
        rows = self.db.fetchall(
            f"""
            SELECT DISTINCT mark FROM {CATALOG_TABLE}
            WHERE mark IS NOT NULL AND mark <> ''
            ORDER BY mark
            """
        )
        return [row["mark"] for row in rows]

    def list_creators(self) -> list[CreatorSummary]:
        rows = self.db.fetchall(
            f"""
            SELECT creator, count(*) AS cnt, max(fav) AS max_fav
            FROM {CATALOG_TABLE}
            GROUP BY creator
            ORDER BY creator
            """
        )
        return [
            CreatorSummary(
                creator=row["creator"], record_count=row["cnt"], max_fav=row["max_fav"] or 0
            )
            for row in rows
        ]

    def _select(
        self,
        target: QueryTarget,
        where: str = "",
        params: Iterable[Any] = (),
        order_by: str = "id ASC",
    ) -> list[CatalogRecord]:
        # Only fixed fragments reach the SQL text; values always go through params.
        sql = f"SELECT * FROM {target.value}"
        if where:
            sql += f" WHERE {where}"
        if order_by:
            sql += f" ORDER BY {order_by}"

        row_type = CombinedRecord if target is QueryTarget.COMBINED else CatalogRecord
        return [row_type.from_row(row) for row in self.db.fetchall(sql, params)]


def _is_duplicate_path(error: sqlite3.IntegrityError) -> bool:
    message = str(error)
    return "UNIQUE" in message and f"{CATALOG_TABLE}.path" in message
