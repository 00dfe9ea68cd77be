"""Parse the ``key: value`` header block at the top of an article file.

    title: Hello world
    date: 2020-01-02 13:37:00
    tags: go, python ,, misc
    hidden: yes

    Body starts after the first blank line...

Keys are case-insensitive; unknown keys are ignored. ``title`` and ``date``
are mandatory.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import TYPE_CHECKING

from postsync.errors import BrokenHeaderError, DateFormatError, MissingMandatoryHeadersError
from postsync.models import DATE_FORMAT, ArticleHeader

if TYPE_CHECKING:
    from collections.abc import Iterator

# Zero-padded fields; only the hour may be a single digit.
_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2} \d{1,2}:\d{2}:\d{2}\Z", re.ASCII)


def split_tags(value: str) -> frozenset[str]:
    """Comma-separated tags -> set, trimmed, empty pieces dropped."""
    return frozenset(t for t in (part.strip() for part in value.split(",")) if t)


def parse_date(value: str) -> datetime:
    msg = f"invalid date {value!r}: expected YYYY-MM-DD HH:MM:SS"
    if _DATE_RE.match(value) is None:
        raise DateFormatError(msg)
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError as exc:
        raise DateFormatError(msg) from exc


def parse_header(lines: Iterator[str]) -> ArticleHeader:
    """Consume header lines up to (and including) the first blank line.

    The iterator is left positioned at the first body line, so the caller can
    hand it straight to the body splitter.
    """
    title: str | None = None
    published: datetime | None = None
    hidden = False
    tags: frozenset[str] = frozenset()

    for raw in lines:
        line = raw.strip()
        if not line:
            break

        key, sep, value = line.partition(":")
        if not sep:
            raise BrokenHeaderError(f"header line without ':' separator: {line!r}")

        key = key.strip().lower()
        value = value.strip()

        if key == "title":
            title = value or None  # an empty title counts as missing
        elif key == "tags":
            tags = split_tags(value)
        elif key == "date":
            published = parse_date(value)
        elif key == "hidden":
            hidden = value.lower() == "yes"

    missing = [name for name, seen in (("title", title), ("date", published)) if seen is None]
    if missing:
        raise MissingMandatoryHeadersError(f"missing mandatory header(s): {', '.join(missing)}")

    return ArticleHeader(title=title, published=published, hidden=hidden, tags=tags)  # type: ignore[arg-type]
