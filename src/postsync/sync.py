"""Sync a batch of loaded articles into the store.

For each article, in its own transaction:
    lookup by slug -> update in place | insert
    delete all tag rows for the article, insert the current tag set
Then, once every article has committed, delete stored articles whose slug is
not in the batch. An empty batch never deletes anything.

The first failure rolls back the current article and aborts the run; articles
already committed stay committed and the reconciliation delete does not run.
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from postsync.errors import StorageError
from postsync.loader import check_unique_slugs, load_sources
from postsync.markup import make_renderer

if TYPE_CHECKING:
    from collections.abc import Sequence

    from postsync.config import PostsyncConfig
    from postsync.models import Article
    from postsync.store import ArticleStore

logger = logging.getLogger("postsync.sync")


@dataclass
class SyncStats:
    inserted: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    deleted: int = 0
    reconciled: bool = False      # False when the empty-batch guard skipped deletion

    @property
    def total(self) -> int:
        return len(self.inserted) + len(self.updated)


class SyncEngine:
    """Upserts articles and reconciles the store against the batch."""

    def __init__(self, store: ArticleStore) -> None:
        self.store = store

    def save(self, article: Article) -> tuple[int, bool]:
        """Upsert one article and replace its tags in a single transaction.

        Returns (article_id, created).
        """
        try:
            with self.store.transaction() as store:
                article_id = store.lookup_id(article.slug)
                created = article_id is None
                if article_id is None:
                    article_id = store.insert(article)
                else:
                    store.update(article_id, article)
                store.delete_tags(article_id)
                store.insert_tags(article_id, article.tags)
        except sqlite3.Error as exc:
            msg = f"saving article {article.slug!r} failed: {exc}"
            raise StorageError(msg) from exc
        return article_id, created

    def reconcile(self, slugs: Sequence[str]) -> int | None:
        """Delete stored articles not in slugs. Returns None if slugs is empty."""
        if not slugs:
            logger.info("empty batch: skipping reconciliation")
            return None
        try:
            with self.store.transaction() as store:
                deleted = store.delete_except(slugs)
        except sqlite3.Error as exc:
            msg = f"deleting stale articles failed: {exc}"
            raise StorageError(msg) from exc
        if deleted:
            logger.info("removed %d stale article(s)", deleted)
        return deleted

    def sync(self, articles: Sequence[Article]) -> SyncStats:
        check_unique_slugs(articles)
        stats = SyncStats()
        for article in articles:
            article_id, created = self.save(article)
            if created:
                stats.inserted.append(article.slug)
                logger.info("inserted %s (id=%d, %d tag(s))", article.slug, article_id, len(article.tags))
            else:
                stats.updated.append(article.slug)
                logger.info("updated %s (id=%d, %d tag(s))", article.slug, article_id, len(article.tags))

        deleted = self.reconcile([a.slug for a in articles])
        if deleted is not None:
            stats.deleted = deleted
            stats.reconciled = True
        return stats


def run_update(cfg: PostsyncConfig, store: ArticleStore) -> SyncStats:
    """Load every configured source and sync the batch into store."""
    articles = load_sources(cfg.sources, make_renderer(cfg.markdown))
    return SyncEngine(store).sync(articles)
