"""ArticleStore: the storage operations the sync engine needs, over SQLite.

    store = ArticleStore(conn)
    with store.transaction():
        article_id = store.lookup_id("hello-world")
        ...

Write methods do not commit on their own; wrap them in transaction().
sqlite3.Error propagates from every method.
"""

from __future__ import annotations

import contextlib
import json
from typing import TYPE_CHECKING

from postsync.models import StoredArticle

if TYPE_CHECKING:
    import sqlite3
    from collections.abc import Iterable, Iterator

    from postsync.models import Article

_COLUMNS = "article_id, slug, title, published, hidden, summary_html, full_html, full_plain"


class ArticleStore:
    """SQLite-backed article store."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    @contextlib.contextmanager
    def transaction(self) -> Iterator[ArticleStore]:
        """BEGIN ... COMMIT, or ROLLBACK and re-raise on any exception."""
        self.conn.execute("BEGIN")
        try:
            yield self
        except BaseException:
            # Some errors (SQLITE_FULL, SQLITE_IOERR) already rolled back.
            if self.conn.in_transaction:
                self.conn.execute("ROLLBACK")
            raise
        self.conn.execute("COMMIT")

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def lookup_id(self, slug: str) -> int | None:
        row = self.conn.execute(
            "SELECT article_id FROM articles WHERE slug = ?", (slug,)
        ).fetchone()
        return row[0] if row else None

    def insert(self, article: Article) -> int:
        """Insert a new row; returns the storage-assigned article_id."""
        row = article.to_row()
        cur = self.conn.execute(
            "INSERT INTO articles(slug, published, hidden, title, summary_html, full_html, full_plain) "
            "VALUES (:slug, :published, :hidden, :title, :summary_html, :full_html, :full_plain)",
            row,
        )
        return int(cur.lastrowid)  # type: ignore[arg-type]

    def update(self, article_id: int, article: Article) -> None:
        """Overwrite the mutable columns of an existing row. The slug is kept."""
        row = article.to_row()
        row["article_id"] = article_id
        self.conn.execute(
            "UPDATE articles SET published = :published, hidden = :hidden, title = :title, "
            "summary_html = :summary_html, full_html = :full_html, full_plain = :full_plain "
            "WHERE article_id = :article_id",
            row,
        )

    def delete_tags(self, article_id: int) -> None:
        self.conn.execute("DELETE FROM article_tags WHERE article_id = ?", (article_id,))

    def insert_tags(self, article_id: int, tags: Iterable[str]) -> None:
        self.conn.executemany(
            "INSERT OR REPLACE INTO article_tags(article_id, tag) VALUES (?, ?)",
            [(article_id, tag) for tag in tags],
        )

    def delete_except(self, slugs: Iterable[str]) -> int:
        """Delete every article whose slug is not in slugs. Returns rows deleted.

        Tag rows go with them (ON DELETE CASCADE). The slug list travels as a
        single JSON parameter, so its length is not bounded by SQLite's
        host-parameter limit.
        """
        cur = self.conn.execute(
            "DELETE FROM articles WHERE slug NOT IN (SELECT value FROM json_each(?))",
            (json.dumps(list(slugs)),),
        )
        return cur.rowcount

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def tags_for(self, article_id: int) -> list[str]:
        rows = self.conn.execute(
            "SELECT tag FROM article_tags WHERE article_id = ? ORDER BY tag", (article_id,)
        ).fetchall()
        return [r[0] for r in rows]

    def _from_row(self, row: tuple) -> StoredArticle:
        article_id, slug, title, published, hidden, summary_html, full_html, full_plain = row
        return StoredArticle(
            article_id=article_id,
            slug=slug,
            title=title,
            published=published,
            hidden=bool(hidden),
            summary_html=summary_html or "",
            full_html=full_html or "",
            full_plain=full_plain or "",
            tags=self.tags_for(article_id),
        )

    def get(self, slug: str) -> StoredArticle | None:
        row = self.conn.execute(
            f"SELECT {_COLUMNS} FROM articles WHERE slug = ?", (slug,)  # noqa: S608
        ).fetchone()
        return self._from_row(row) if row else None

    def list_articles(self, *, tag: str | None = None, include_hidden: bool = True) -> list[StoredArticle]:
        """Articles newest first, optionally filtered by tag and visibility."""
        sql = f"SELECT {_COLUMNS} FROM articles"  # noqa: S608
        where: list[str] = []
        params: list[object] = []
        if tag is not None:
            where.append("article_id IN (SELECT article_id FROM article_tags WHERE tag = ?)")
            params.append(tag)
        if not include_hidden:
            where.append("hidden = 0")
        if where:
            sql += " WHERE " + " AND ".join(where)
        sql += " ORDER BY published DESC, slug"
        return [self._from_row(r) for r in self.conn.execute(sql, params).fetchall()]

    def slugs(self) -> list[str]:
        return [r[0] for r in self.conn.execute("SELECT slug FROM articles ORDER BY slug").fetchall()]

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM articles").fetchone()[0])
