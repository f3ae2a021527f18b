"""Database connection management."""

import logging
import sqlite3
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Self

from .schema import create_schema

logger = logging.getLogger(__name__)

MEMORY = ":memory:"


class Database:
    """SQLite handle shared by the catalog components.

    Every write issued through ``execute`` is committed on its own; there is no
    transaction spanning several statements.
    """

    def __init__(self, db_path: Path | str, enforce_foreign_keys: bool = True):
        self.db_path = db_path
        self.enforce_foreign_keys = enforce_foreign_keys
        self._conn: sqlite3.Connection | None = None

    @property
    def is_memory(self) -> bool:
        return str(self.db_path) == MEMORY

    def connect(self) -> sqlite3.Connection:
        if self._conn is None:
            if not self.is_memory:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
            logger.debug("Opening database %s", self.db_path)
            self._conn = sqlite3.connect(self.db_path)
            self._conn.row_factory = sqlite3.Row
            pragma = "ON" if self.enforce_foreign_keys else "OFF"
            self._conn.execute(f"PRAGMA foreign_keys = {pragma}")
            create_schema(self._conn)
        return self._conn

    @property
    def conn(self) -> sqlite3.Connection:
        return self.connect()

    def execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        """Run one parameterized write statement and commit it."""
        try:
            cursor = self.conn.execute(sql, tuple(params))
        except sqlite3.Error:
            self.conn.rollback()
            raise
        self.conn.commit()
        return cursor

    def fetchone(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Row | None:
        return self.conn.execute(sql, tuple(params)).fetchone()

    def fetchall(self, sql: str, params: Iterable[Any] = ()) -> list[sqlite3.Row]:
        return self.conn.execute(sql, tuple(params)).fetchall()

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> Self:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
