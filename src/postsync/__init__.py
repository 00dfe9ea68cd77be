"""Markdown articles as source of truth, SQLite as the synced store.

Layout:
    articles/
        2020-01-02.hello-world.md     # one article per file; slug = name minus last extension
    .postsync/
        articles.db                   # SQLite: articles + article_tags

Article file:
    title: Hello world                # header: key: value lines, blank line ends it
    date: 2020-01-02 13:37:00
    tags: misc, python
    hidden: no

    Teaser paragraph.
    ~~more~~                          # summary split marker
    Rest of the article.

`postsync update` loads every source file, upserts each article (and its tag
set) in its own transaction, then deletes stored articles that have no source
file left.
"""

from postsync.config import PostsyncConfig, init_config, load_config
from postsync.loader import load_article, load_dir, load_sources
from postsync.models import Article
from postsync.store import ArticleStore
from postsync.sync import SyncEngine, SyncStats

__all__ = [
    "Article",
    "ArticleStore",
    "PostsyncConfig",
    "SyncEngine",
    "SyncStats",
    "init_config",
    "load_article",
    "load_config",
    "load_dir",
    "load_sources",
]
