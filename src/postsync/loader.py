"""Load article files from disk into Article values.

Entry points:
    load_article(path, render)        # one file
    load_dir(directory, render)       # every regular file in a directory
    load_sources(sources, render)     # all configured source dirs, as one batch
"""

from __future__ import annotations

import logging
from fnmatch import fnmatch
from pathlib import Path
from typing import TYPE_CHECKING

from postsync.body import split_body
from postsync.errors import ArticleError, DuplicateSlugError, EncodingError
from postsync.header import parse_header
from postsync.markup import render as default_render
from postsync.models import Article

if TYPE_CHECKING:
    from collections.abc import Iterable

    from postsync.config import SourceConfig
    from postsync.markup import Renderer

logger = logging.getLogger("postsync.loader")


def slug_from_path(path: Path | str) -> str:
    """Base filename minus its last dot-delimited segment.

    ``2020-01-02.my-post.md`` -> ``2020-01-02.my-post``.
    """
    return Path(path).name.rpartition(".")[0]


def parse_article(lines: Iterable[str], slug: str, render: Renderer = default_render) -> Article:
    """Parse header then body from one shared line iterator."""
    it = iter(lines)
    header = parse_header(it)
    body = split_body(it, render)
    return Article.from_parts(slug, header, body)


def load_article(path: Path | str, render: Renderer = default_render) -> Article:
    """Load one article file. OSError and ArticleError propagate as-is."""
    path = Path(path)
    slug = slug_from_path(path)
    with path.open(encoding="utf-8") as f:
        try:
            article = parse_article(f, slug, render)
        except ArticleError as exc:
            exc.path = path
            raise
        except UnicodeDecodeError as exc:
            msg = f"not valid UTF-8 text ({exc.reason})"
            raise EncodingError(msg, path) from exc
    logger.debug("loaded %s -> %s", path, slug)
    return article


def list_article_files(directory: Path | str, include: str = "*") -> list[Path]:
    """Non-directory entries directly inside directory, sorted by name.

    Raises OSError if the directory cannot be listed. Dangling symlinks are
    listed so that opening them fails loudly.
    """
    directory = Path(directory)
    return sorted(
        p for p in directory.iterdir()
        if not p.is_dir() and fnmatch(p.name, include)
    )


def load_dir(directory: Path | str, render: Renderer = default_render, include: str = "*") -> list[Article]:
    """Load every article in directory; the first failure aborts."""
    return [load_article(p, render) for p in list_article_files(directory, include)]


def check_unique_slugs(articles: Iterable[Article]) -> None:
    seen: set[str] = set()
    for a in articles:
        if a.slug in seen:
            msg = f"duplicate slug in batch: {a.slug!r}"
            raise DuplicateSlugError(msg)
        seen.add(a.slug)


def load_sources(sources: Iterable[SourceConfig], render: Renderer = default_render) -> list[Article]:
    """Load all configured source directories into one batch."""
    articles: list[Article] = []
    for src in sources:
        loaded = load_dir(src.abs_path, render, src.include)
        logger.info("loaded %d article(s) from %s", len(loaded), src.abs_path)
        articles.extend(loaded)
    check_unique_slugs(articles)
    return articles
