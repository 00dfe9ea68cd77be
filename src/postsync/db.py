"""DB connection and schema: local SQLite.

Connections are opened in autocommit mode (isolation_level=None); callers
group statements with explicit BEGIN/COMMIT via ArticleStore.transaction().
"""

from __future__ import annotations

import sqlite3
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from postsync.config import PostsyncConfig

MEMORY = ":memory:"


def connect(db_path: Path | str) -> sqlite3.Connection:
    """Open a SQLite connection with WAL mode and foreign key enforcement.

    Pass ":memory:" for a throwaway in-memory database.
    """
    if str(db_path) != MEMORY:
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        # A 0-byte file is left behind by an interrupted first write; sqlite
        # reports it as an opaque I/O error on PRAGMA.
        if db_path.exists() and db_path.stat().st_size == 0:
            msg = f"SQLite DB is empty (0 bytes): {db_path}\nFix: rm {db_path}* && postsync update"
            raise sqlite3.OperationalError(msg)
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    try:
        conn.execute("PRAGMA journal_mode=WAL")
        conn.execute("PRAGMA foreign_keys=ON")
    except sqlite3.OperationalError as exc:
        conn.close()
        raise sqlite3.OperationalError(
            f"Failed to open DB {db_path}, it may be corrupt.\n"
            f"Original error: {exc}"
        ) from exc
    return conn


def get_conn(cfg: PostsyncConfig) -> sqlite3.Connection:
    """Return a connection to the configured store with the schema in place."""
    conn = connect(cfg.db_path)
    ensure_schema(conn)
    return conn


def ensure_schema(conn: sqlite3.Connection) -> None:
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS articles (
            article_id   INTEGER PRIMARY KEY AUTOINCREMENT,
            slug         TEXT NOT NULL UNIQUE,
            published    TEXT NOT NULL,     -- YYYY-MM-DD HH:MM:SS
            hidden       INTEGER NOT NULL DEFAULT 0,
            title        TEXT NOT NULL,
            summary_html TEXT NOT NULL DEFAULT '',
            full_html    TEXT NOT NULL,
            full_plain   TEXT NOT NULL      -- derived from full_html on every save
        );

        CREATE TABLE IF NOT EXISTS article_tags (
            article_id INTEGER NOT NULL REFERENCES articles(article_id) ON DELETE CASCADE,
            tag        TEXT NOT NULL,
            PRIMARY KEY (article_id, tag)
        );
        CREATE INDEX IF NOT EXISTS article_tags_tag ON article_tags(tag);
        CREATE INDEX IF NOT EXISTS articles_published ON articles(published);
    """)
