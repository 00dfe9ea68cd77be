"""postsync CLI: load markdown articles and sync them into SQLite.

Commands:
    postsync init [NAME]        create postsync.toml + articles/ + the store
    postsync update             load all sources, sync, reconcile, notify
    postsync check [FILES...]   parse articles without touching the store
    postsync list               list stored articles
    postsync show SLUG          dump one stored article
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path

import click

from postsync.config import PostsyncConfig, init_config, load_config
from postsync.db import get_conn
from postsync.errors import ArticleError, PostsyncError
from postsync.loader import list_article_files, load_article
from postsync.markup import make_renderer
from postsync.notify import notify_update
from postsync.store import ArticleStore
from postsync.sync import run_update

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_cfg(ctx: click.Context) -> PostsyncConfig:
    config_file = ctx.obj.get("config_file") if ctx.obj else None
    try:
        return load_config(config_file=config_file)
    except PostsyncError as exc:
        raise click.ClickException(str(exc)) from exc


def _open_store(cfg: PostsyncConfig) -> ArticleStore:
    cfg.ensure_dirs()
    try:
        return ArticleStore(get_conn(cfg))
    except sqlite3.Error as exc:
        raise click.ClickException(str(exc)) from exc


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(name)s %(message)s",
    )


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="postsync")
@click.option("--config", "config_file", type=click.Path(dir_okay=False), default=None,
              help="Path to postsync.toml (default: search upward from cwd)")
@click.pass_context
def cli(ctx: click.Context, config_file: str | None) -> None:
    """postsync: markdown articles -> SQLite."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file


# ---------------------------------------------------------------------------
# postsync init
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("name", required=False)
@click.option("--dir", "root", default=".", show_default=True, help="Project root")
def init(name: str | None, root: str) -> None:
    """Create postsync.toml, the articles/ directory and an empty store."""
    root_path = Path(root).resolve()
    try:
        config_path = init_config(root_path, name=name)
        click.echo(f"Created {config_path}")
    except FileExistsError:
        click.echo("postsync.toml already exists, skipping init")

    cfg = load_config(root_path)
    for src in cfg.sources:
        src.abs_path.mkdir(parents=True, exist_ok=True)
        click.echo(f"Source dir : {src.abs_path}")
    store = _open_store(cfg)
    store.conn.close()
    click.echo(f"Store      : {cfg.db_path}")


# ---------------------------------------------------------------------------
# postsync update
# ---------------------------------------------------------------------------


@cli.command()
@click.option("--notify/--no-notify", default=True, show_default=True,
              help="POST to notify.url after a successful sync")
@click.option("-v", "--verbose", is_flag=True, help="Log every file loaded")
@click.pass_context
def update(ctx: click.Context, notify: bool, verbose: bool) -> None:
    """Sync all articles from the configured sources into the store."""
    _setup_logging(verbose)
    cfg = _load_cfg(ctx)
    if not cfg.sources:
        click.echo("No [[sources]] configured; nothing will be deleted.", err=True)

    store = _open_store(cfg)
    try:
        stats = run_update(cfg, store)
    except (PostsyncError, OSError) as exc:
        raise click.ClickException(str(exc)) from exc
    finally:
        store.conn.close()

    click.echo(
        f"Synced {stats.total} article(s): {len(stats.inserted)} new, "
        f"{len(stats.updated)} updated, {stats.deleted} removed"
    )

    if notify:
        try:
            if notify_update(cfg.notify):
                click.echo("Notified server")
        except PostsyncError as exc:
            raise click.ClickException(str(exc)) from exc


# ---------------------------------------------------------------------------
# postsync check
# ---------------------------------------------------------------------------


@cli.command()
@click.argument("files", nargs=-1, type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def check(ctx: click.Context, files: tuple[str, ...]) -> None:
    """Parse articles and report problems. Does not touch the store.

    With no FILES, checks every file in every configured source.
    """
    cfg = _load_cfg(ctx)
    render = make_renderer(cfg.markdown)

    paths: list[Path] = [Path(f) for f in files]
    if not paths:
        for src in cfg.sources:
            try:
                paths.extend(list_article_files(src.abs_path, src.include))
            except OSError as exc:
                raise click.ClickException(str(exc)) from exc

    seen: dict[str, Path] = {}
    failures = 0
    for p in paths:
        try:
            article = load_article(p, render)
        except (ArticleError, OSError) as exc:
            failures += 1
            click.echo(f"FAIL {exc}", err=True)
            continue
        if article.slug in seen:
            failures += 1
            click.echo(f"FAIL {p}: duplicate slug {article.slug!r} (also {seen[article.slug]})", err=True)
            continue
        seen[article.slug] = p
        click.echo(f"ok   {article.slug}  {article.title}")

    click.echo(f"{len(paths) - failures}/{len(paths)} article(s) ok")
    if failures:
        raise SystemExit(1)


# ---------------------------------------------------------------------------
# postsync list / show
# ---------------------------------------------------------------------------


@cli.command("list")
@click.option("--tag", default=None, help="Only articles with this tag")
@click.option("--visible-only", is_flag=True, help="Hide articles marked hidden")
@click.pass_context
def list_cmd(ctx: click.Context, tag: str | None, visible_only: bool) -> None:
    """List stored articles, newest first."""
    cfg = _load_cfg(ctx)
    store = _open_store(cfg)
    try:
        articles = store.list_articles(tag=tag, include_hidden=not visible_only)
    finally:
        store.conn.close()

    if not articles:
        click.echo("No articles.")
        return
    for a in articles:
        flag = " [hidden]" if a.hidden else ""
        tags = f"  ({', '.join(a.tags)})" if a.tags else ""
        click.echo(f"{a.published}  {a.slug:<30} {a.title}{flag}{tags}")


@cli.command()
@click.argument("slug")
@click.option("--plain", is_flag=True, help="Print the plain-text projection instead of HTML")
@click.pass_context
def show(ctx: click.Context, slug: str, plain: bool) -> None:
    """Show one stored article."""
    cfg = _load_cfg(ctx)
    store = _open_store(cfg)
    try:
        article = store.get(slug)
    finally:
        store.conn.close()

    if article is None:
        raise click.ClickException(f"No such article: {slug}")

    click.echo(f"# {article.title}  [{article.slug}]")
    click.echo(f"published: {article.published}")
    click.echo(f"hidden: {'yes' if article.hidden else 'no'}")
    click.echo(f"tags: {', '.join(article.tags)}")
    click.echo("")
    if plain:
        click.echo(article.full_plain)
        return
    if article.summary_html:
        click.echo("--- summary ---")
        click.echo(article.summary_html)
        click.echo("--- full ---")
    click.echo(article.full_html)
