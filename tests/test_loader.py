"""Tests for loading article files from disk."""

from datetime import datetime

import pytest

from postsync.config import SourceConfig
from postsync.errors import (
    ArticleError,
    BrokenHeaderError,
    DateFormatError,
    DuplicateSlugError,
    EncodingError,
    MissingMandatoryHeadersError,
    RenderError,
)
from postsync.loader import list_article_files, load_article, load_dir, load_sources, parse_article, slug_from_path


class TestSlugFromPath:
    @pytest.mark.parametrize("name,slug", [
        ("2020-01-02.my-post.md", "2020-01-02.my-post"),
        ("hello.md", "hello"),
        ("archive.tar.gz", "archive.tar"),
        ("/some/dir/post.txt", "post"),
        ("noext", ""),
    ])
    def test_drops_only_last_extension(self, name, slug):
        assert slug_from_path(name) == slug


class TestLoadArticle:
    def test_full_article(self, write_article, renderer):
        path = write_article(
            "2020-01-02.my-post.md",
            header=[
                "title: My Post",
                "date: 2020-01-02 13:37:00",
                "tags: a, b ,a,, c",
                "hidden: Yes",
            ],
            body="before\n~~~more~~~\nafter\n",
        )
        article = load_article(path, renderer)

        assert article.slug == "2020-01-02.my-post"
        assert article.title == "My Post"
        assert article.published == datetime(2020, 1, 2, 13, 37)
        assert article.hidden is True
        assert article.tags == {"a", "b", "c"}
        assert article.summary_html == "<render>before\n</render>"
        assert article.full_html == "<render>before\nafter\n</render>"

    def test_full_plain_derived_from_full_html(self, write_article, renderer):
        path = write_article("p.md", body="x &amp; y\n")
        article = load_article(path, renderer)
        assert article.full_plain == "x & y\n"

    def test_article_is_immutable(self, write_article, renderer):
        import dataclasses

        article = load_article(write_article("p.md"), renderer)
        with pytest.raises(dataclasses.FrozenInstanceError):
            article.title = "changed"  # type: ignore[misc]

    def test_default_renderer(self, write_article):
        article = load_article(write_article("p.md", body="Hello *there*\n"))
        assert article.full_html == "<p>Hello <em>there</em></p>"
        assert article.full_plain == "Hello there"

    def test_missing_file(self, tmp_path, renderer):
        with pytest.raises(FileNotFoundError):
            load_article(tmp_path / "nope.md", renderer)

    @pytest.mark.parametrize("header,exc_type", [
        (["title: T", "oops", "date: 2020-01-02 00:00:00"], BrokenHeaderError),
        (["title: T"], MissingMandatoryHeadersError),
        (["title: T", "date: tomorrow"], DateFormatError),
    ])
    def test_errors_keep_their_kind_and_gain_path(self, write_article, renderer, header, exc_type):
        path = write_article("bad.md", header=header)
        with pytest.raises(exc_type) as info:
            load_article(path, renderer)
        assert info.value.path == path
        assert str(path) in str(info.value)

    def test_render_error_propagates(self, write_article):
        def broken(text):
            raise RenderError("renderer exploded")

        path = write_article("p.md")
        with pytest.raises(RenderError) as info:
            load_article(path, broken)
        assert info.value.path == path

    def test_invalid_utf8(self, tmp_path, renderer):
        path = tmp_path / "latin1.md"
        path.write_bytes(b"title: caf\xe9\ndate: 2020-01-02 00:00:00\n\nbody\n")
        with pytest.raises(EncodingError) as info:
            load_article(path, renderer)
        assert isinstance(info.value, ArticleError)
        assert info.value.path == path
        assert str(path) in str(info.value)


class TestParseArticle:
    def test_header_and_body_share_the_stream(self, renderer):
        lines = ["title: T\n", "date: 2020-01-02 00:00:00\n", "\n", "key: value looking body\n"]
        article = parse_article(lines, "slug", renderer)
        assert renderer.calls == ["key: value looking body\n"]
        assert article.slug == "slug"


class TestLoadDir:
    def test_loads_all_regular_files_sorted(self, tmp_path, write_article, renderer):
        d = tmp_path / "articles"
        write_article("b.md", directory=d)
        write_article("a.md", directory=d)
        write_article("c.txt", directory=d)
        (d / "subdir").mkdir()

        articles = load_dir(d, renderer)
        assert [a.slug for a in articles] == ["a", "b", "c"]

    def test_include_pattern(self, tmp_path, write_article, renderer):
        d = tmp_path / "articles"
        write_article("a.md", directory=d)
        write_article("notes.txt", directory=d)
        assert [p.name for p in list_article_files(d, "*.md")] == ["a.md"]

    def test_first_failure_aborts(self, tmp_path, write_article, renderer):
        d = tmp_path / "articles"
        write_article("a.md", directory=d)
        write_article("b.md", header=["title: only"], directory=d)
        with pytest.raises(ArticleError):
            load_dir(d, renderer)

    def test_missing_directory(self, tmp_path, renderer):
        with pytest.raises(FileNotFoundError):
            load_dir(tmp_path / "missing", renderer)

    def test_empty_directory(self, tmp_path, renderer):
        (tmp_path / "empty").mkdir()
        assert load_dir(tmp_path / "empty", renderer) == []

    def test_dangling_symlink_is_not_skipped(self, tmp_path, write_article, renderer):
        d = tmp_path / "articles"
        write_article("a.md", directory=d)
        (d / "gone.md").symlink_to(tmp_path / "missing.md")
        assert [p.name for p in list_article_files(d)] == ["a.md", "gone.md"]
        with pytest.raises(FileNotFoundError):
            load_dir(d, renderer)


class TestLoadSources:
    def test_merges_directories(self, tmp_path, write_article, renderer):
        write_article("a.md", directory=tmp_path / "one")
        write_article("b.md", directory=tmp_path / "two")
        sources = [SourceConfig(path="one").resolve(tmp_path), SourceConfig(path="two").resolve(tmp_path)]
        assert [a.slug for a in load_sources(sources, renderer)] == ["a", "b"]

    def test_duplicate_slug_across_directories(self, tmp_path, write_article, renderer):
        write_article("post.md", directory=tmp_path / "one")
        write_article("post.txt", directory=tmp_path / "two")
        sources = [SourceConfig(path="one").resolve(tmp_path), SourceConfig(path="two").resolve(tmp_path)]
        with pytest.raises(DuplicateSlugError, match="post"):
            load_sources(sources, renderer)

    def test_no_sources(self, renderer):
        assert load_sources([], renderer) == []
