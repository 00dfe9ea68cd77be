"""Shared fixtures for postsync tests."""

from datetime import datetime
from pathlib import Path

import pytest

from postsync.db import MEMORY, connect, ensure_schema
from postsync.models import Article
from postsync.store import ArticleStore


class RecordingRenderer:
    """Fake markdown renderer: records every input and wraps it in <render>."""

    def __init__(self):
        self.calls = []

    def __call__(self, text):
        self.calls.append(text)
        return f"<render>{text}</render>"


@pytest.fixture
def renderer():
    return RecordingRenderer()


@pytest.fixture
def store():
    conn = connect(MEMORY)
    ensure_schema(conn)
    yield ArticleStore(conn)
    conn.close()


@pytest.fixture
def write_article(tmp_path):
    """Write an article file: write_article(name, header_lines, body) -> Path."""

    def _write(name, header=None, body="Body text.\n", directory=None):
        if header is None:
            header = ["title: Test Article", "date: 2020-01-02 13:37:00"]
        target_dir = Path(directory) if directory else tmp_path / "articles"
        target_dir.mkdir(parents=True, exist_ok=True)
        path = target_dir / name
        path.write_text("\n".join(header) + "\n\n" + body, encoding="utf-8")
        return path

    return _write


def make_article(slug, title=None, tags=(), hidden=False, html="<p>hi</p>", summary=""):
    return Article(
        slug=slug,
        title=title or slug.title(),
        published=datetime(2020, 1, 2, 13, 37, 0),
        full_html=html,
        summary_html=summary,
        hidden=hidden,
        tags=frozenset(tags),
    )
