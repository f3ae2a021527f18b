"""Database schema definition."""

import sqlite3

SCHEMA_SQL = """
-- Catalog records, one per registered image directory
CREATE TABLE IF NOT EXISTS pictures (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    title TEXT,
    creator TEXT,
    path TEXT NOT NULL UNIQUE,
    media TEXT,
    mark TEXT,
    fav INTEGER DEFAULT 0,
    info TEXT,
    date TEXT,
    count INTEGER DEFAULT 0
);

-- Derived statistics, one row per catalog record
CREATE TABLE IF NOT EXISTS pictures_ex (
    id INTEGER PRIMARY KEY REFERENCES pictures(id) ON DELETE CASCADE,
    file_count INTEGER NOT NULL DEFAULT 0,
    total_size INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_pictures_mark ON pictures(mark);
CREATE INDEX IF NOT EXISTS idx_pictures_creator ON pictures(creator);
CREATE INDEX IF NOT EXISTS idx_pictures_fav ON pictures(fav) WHERE fav <> 0;

-- Combined view; inner join so a missing stats row shows up as a count mismatch
CREATE VIEW IF NOT EXISTS vw_pictures AS
    SELECT p.id, p.title, p.creator, p.path, p.media, p.mark, p.fav,
           p.info, p.date, p.count,
           x.file_count, x.total_size
    FROM pictures p
    JOIN pictures_ex x ON x.id = p.id;
"""


def create_schema(conn: sqlite3.Connection) -> None:
    """Create tables, indexes and the combined view."""
    conn.executescript(SCHEMA_SQL)
    conn.commit()
