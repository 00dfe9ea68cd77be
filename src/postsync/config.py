"""PostsyncConfig: project-local config for article syncing.

Default layout (all relative to the project root):

    postsync.toml          # project config
    .env                   # optional: POSTSYNC_NOTIFY_URL, POSTSYNC_SECRET (gitignore this)
    articles/              # article sources, one file per article
    .postsync/
        articles.db        # SQLite store
        .gitignore         # auto-written: ignores the db

postsync.toml example:

    [postsync]
    name = "my-site"
    # db_path = ".postsync/articles.db"   # default

    [[sources]]
    path = "articles"
    include = "*"

    [markdown]
    highlight = true
    css_class = "highlight"

    [notify]
    url = "https://example.org/update"
    secret = ""       # or POSTSYNC_SECRET in .env
    timeout = 10.0
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from postsync.errors import ConfigError

_CONFIG_FILENAME = "postsync.toml"
_DEFAULT_DB_PATH = ".postsync/articles.db"
_ENV_PREFIX = "POSTSYNC_"
_GITIGNORE_CONTENT = "*.db\n*.db-*\n"


@dataclass
class SourceConfig:
    """A [[sources]] entry in postsync.toml."""
    path: str                               # relative to project root
    include: str = "*"                      # fnmatch pattern on file names

    @property
    def abs_path(self) -> Path:
        """Caller must set _root first via resolve()."""
        return self._root / self.path  # type: ignore[attr-defined]

    def resolve(self, root: Path) -> SourceConfig:
        """Attach the project root for abs_path resolution."""
        self._root = root  # type: ignore[attr-defined]
        return self


@dataclass
class MarkdownConfig:
    highlight: bool = True
    css_class: str = "highlight"


@dataclass
class NotifyConfig:
    url: str = ""      # empty = no post-sync request
    secret: str = ""
    timeout: float = 10.0

    @property
    def enabled(self) -> bool:
        return bool(self.url)


@dataclass
class PostsyncConfig:
    """Resolved configuration for a postsync project."""

    root: Path                      # directory that contains postsync.toml
    name: str = ""
    db_path: Path = field(default_factory=Path)
    sources: list[SourceConfig] = field(default_factory=list)
    markdown: MarkdownConfig = field(default_factory=MarkdownConfig)
    notify: NotifyConfig = field(default_factory=NotifyConfig)

    def ensure_dirs(self) -> None:
        """Create the db directory and its .gitignore."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_path.parent / ".gitignore"
        if self.db_path.parent != self.root and not gitignore.exists():
            gitignore.write_text(_GITIGNORE_CONTENT)


def _load_env(root: Path) -> dict[str, str]:
    """Read the postsync secrets from root/.env.

    Only POSTSYNC_* keys are kept; an optional ``export`` prefix and matching
    surrounding quotes are removed.
    """
    path = root / ".env"
    if not path.is_file():
        return {}
    secrets: dict[str, str] = {}
    for raw in path.read_text().splitlines():
        entry = raw.strip().removeprefix("export ").strip()
        if entry.startswith("#"):
            continue
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key.startswith(_ENV_PREFIX):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        secrets[key] = value
    return secrets


def _parse_sources(raw: Any, root: Path) -> list[SourceConfig]:
    if not isinstance(raw, list):
        msg = "[[sources]] must be an array of tables"
        raise ConfigError(msg)
    sources: list[SourceConfig] = []
    for i, s in enumerate(raw):
        if not isinstance(s, dict) or not s.get("path"):
            msg = f"sources[{i}] needs a 'path'"
            raise ConfigError(msg)
        sources.append(SourceConfig(path=str(s["path"]), include=str(s.get("include", "*"))).resolve(root))
    return sources


def load_config(root: Path | str | None = None, *, config_file: Path | str | None = None) -> PostsyncConfig:
    """Load postsync.toml.

    config_file wins if given; otherwise search upward from root (or cwd).
    """
    if config_file is not None:
        config_path = Path(config_file).resolve()
        if not config_path.exists():
            msg = f"config file not found: {config_path}"
            raise ConfigError(msg)
        root_path = config_path.parent
    else:
        root_path = _find_root(Path(root).resolve() if root else Path.cwd())
        config_path = root_path / _CONFIG_FILENAME

    raw: dict[str, Any] = {}
    if config_path.exists():
        try:
            with config_path.open("rb") as f:
                raw = tomllib.load(f)
        except tomllib.TOMLDecodeError as exc:
            msg = f"{config_path}: {exc}"
            raise ConfigError(msg) from exc

    # .env overrides postsync.toml for secrets
    env = _load_env(root_path)

    ps_section = raw.get("postsync", {})
    md_section = raw.get("markdown", {})
    nt_section = raw.get("notify", {})

    timeout = float(nt_section.get("timeout", 10.0))
    if timeout <= 0:
        msg = "notify.timeout must be positive"
        raise ConfigError(msg)

    return PostsyncConfig(
        root=root_path,
        name=ps_section.get("name", root_path.name),
        db_path=root_path / ps_section.get("db_path", _DEFAULT_DB_PATH),
        sources=_parse_sources(raw.get("sources", []), root_path),
        markdown=MarkdownConfig(
            highlight=bool(md_section.get("highlight", True)),
            css_class=str(md_section.get("css_class", "highlight")),
        ),
        notify=NotifyConfig(
            url=env.get("POSTSYNC_NOTIFY_URL") or str(nt_section.get("url", "")),
            secret=env.get("POSTSYNC_SECRET") or str(nt_section.get("secret", "")),
            timeout=timeout,
        ),
    )


def _find_root(start: Path) -> Path:
    """Nearest directory at or above start holding postsync.toml, else start."""
    return next(
        (d for d in (start, *start.parents) if (d / _CONFIG_FILENAME).is_file()),
        start,
    )


def init_config(root: Path, name: str | None = None) -> Path:
    """Write a default postsync.toml at root. Raises if already exists."""
    config_path = root / _CONFIG_FILENAME
    if config_path.exists():
        msg = f"postsync.toml already exists at {config_path}"
        raise FileExistsError(msg)

    project_name = name or root.name
    content = f"""\
[postsync]
name = "{project_name}"
# db_path = ".postsync/articles.db"   # default

# One entry per article directory; all of them are synced as one batch.
[[sources]]
path = "articles"
# include = "*"        # file name pattern

# [markdown]
# highlight = true     # Pygments classes on fenced code blocks
# css_class = "highlight"

# [notify]
# url = ""             # POSTed with the secret after every successful update
# secret = ""          # or set POSTSYNC_SECRET in .env
# timeout = 10.0
"""
    config_path.write_text(content)
    return config_path
