"""Split an article body into summary and full HTML.

A line like ``~~more~~`` (two or more tildes on each side, any case, optional
surrounding whitespace) marks the end of the summary. Marker lines never reach
the renderer. The buffer is cumulative: each marker renders everything seen so
far, so with several markers the summary ends at the last one.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from postsync.models import ArticleBody

if TYPE_CHECKING:
    from collections.abc import Iterable

    from postsync.markup import Renderer

_MORE_RE = re.compile(r"^\s*~~+(?i:more)~~+\s*$")


def is_split_marker(line: str) -> bool:
    return _MORE_RE.match(line) is not None


def _chomp(line: str) -> str:
    """Drop the line terminator (``\\n`` or ``\\r\\n``) only."""
    return line.removesuffix("\n").removesuffix("\r")


def split_body(lines: Iterable[str], render: Renderer) -> ArticleBody:
    """Consume the remaining lines and render summary and full fragments.

    Renderer errors propagate unchanged.
    """
    buf: list[str] = []
    summary_html = ""

    for raw in lines:
        line = _chomp(raw)
        if is_split_marker(line):
            summary_html = render("".join(buf))
            continue
        buf.append(line + "\n")

    return ArticleBody(full_html=render("".join(buf)), summary_html=summary_html)
