"""Data models for loaded articles."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from postsync.markup import plain_text

# Timestamp format of the ``date`` header and of the ``published`` column.
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class ArticleHeader:
    """Fields collected from the header block of a source file."""

    title: str
    published: datetime
    hidden: bool = False
    tags: frozenset[str] = field(default_factory=frozenset)


@dataclass
class ArticleBody:
    """Rendered body fragments."""

    full_html: str
    summary_html: str = ""         # empty when the body has no split marker


@dataclass(frozen=True)
class Article:
    """A fully loaded article, ready to be synced.

    ``full_plain`` is derived from ``full_html`` on access and is never stored
    on the instance.
    """

    slug: str
    title: str
    published: datetime
    full_html: str
    summary_html: str = ""
    hidden: bool = False
    tags: frozenset[str] = field(default_factory=frozenset)

    @classmethod
    def from_parts(cls, slug: str, header: ArticleHeader, body: ArticleBody) -> Article:
        return cls(
            slug=slug,
            title=header.title,
            published=header.published,
            hidden=header.hidden,
            tags=header.tags,
            summary_html=body.summary_html,
            full_html=body.full_html,
        )

    @property
    def full_plain(self) -> str:
        """Tag-free, entity-decoded text of ``full_html`` for search."""
        return plain_text(self.full_html)

    @property
    def published_str(self) -> str:
        return self.published.strftime(DATE_FORMAT)

    def to_row(self) -> dict[str, object]:
        """Column values for the ``articles`` table (identity excluded)."""
        return {
            "slug": self.slug,
            "published": self.published_str,
            "hidden": int(self.hidden),
            "title": self.title,
            "summary_html": self.summary_html,
            "full_html": self.full_html,
            "full_plain": self.full_plain,
        }


@dataclass
class StoredArticle:
    """An article row read back from the store."""

    article_id: int
    slug: str
    title: str
    published: str
    hidden: bool
    summary_html: str = ""
    full_html: str = ""
    full_plain: str = ""
    tags: list[str] = field(default_factory=list)
