"""Markdown rendering and plain-text projection of rendered HTML.

render(text)        markdown -> HTML fragment (fenced code, tables, Pygments classes)
plain_text(html)    HTML -> text with tags removed and entities decoded

The renderer is passed around as a plain callable so the loader can be driven
with any ``Callable[[str], str]`` (tests use a recording fake).
"""

from __future__ import annotations

import html as _html
import re
from collections.abc import Callable
from typing import TYPE_CHECKING

import markdown

from postsync.errors import RenderError

if TYPE_CHECKING:
    from postsync.config import MarkdownConfig

Renderer = Callable[[str], str]

# A tag is "<", then any mix of unquoted non-">" characters and quoted
# attribute values, then ">". One character per repetition keeps matching
# linear on unterminated input.
_TAG_RE = re.compile(r"""<(?:[^>'"]|'[^']*'|"[^"]*")*>""")
_ENTITY_RE = re.compile(r"&[^;]*;")

_BASE_EXTENSIONS = ["fenced_code", "tables"]


def make_renderer(cfg: MarkdownConfig | None = None) -> Renderer:
    """Build a markdown renderer from the [markdown] config section."""
    extensions: list[str] = list(_BASE_EXTENSIONS)
    extension_configs: dict[str, dict[str, object]] = {}
    if cfg is None or cfg.highlight:
        extensions.append("codehilite")
        extension_configs["codehilite"] = {
            "css_class": cfg.css_class if cfg is not None else "highlight",
            "guess_lang": False,
        }

    def _render(text: str) -> str:
        try:
            return markdown.markdown(
                text,
                extensions=extensions,
                extension_configs=extension_configs,
                output_format="html",
            )
        except Exception as exc:
            raise RenderError(f"markdown rendering failed: {exc}") from exc

    return _render


render: Renderer = make_renderer()


def plain_text(html: str) -> str:
    """Strip tag-like tokens from html, then decode character entities.

    Best effort: malformed markup is left as text, never an error.
    """
    text = _TAG_RE.sub("", html)
    return _ENTITY_RE.sub(lambda m: _html.unescape(m.group(0)), text)
