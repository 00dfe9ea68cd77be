"""Exceptions raised while loading and syncing articles."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class PostsyncError(Exception):
    """Base exception for postsync."""


class ConfigError(PostsyncError):
    """Raised when postsync.toml is missing required values or is invalid."""


class ArticleError(PostsyncError):
    """A single article file could not be loaded.

    ``path`` is filled in by the loader once the failing file is known; the
    concrete subclass is never changed on the way up.
    """

    def __init__(self, message: str, path: Path | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        if self.path is not None:
            return f"{self.path}: {msg}"
        return msg


class BrokenHeaderError(ArticleError):
    """A header line has no ``key: value`` separator."""


class MissingMandatoryHeadersError(ArticleError):
    """The header block ended without a title or a date."""


class DateFormatError(ArticleError, ValueError):
    """The date header does not match ``YYYY-MM-DD HH:MM:SS``."""


class EncodingError(ArticleError):
    """The file is not valid UTF-8 text."""


class RenderError(ArticleError):
    """The markdown renderer rejected the body text."""


class DuplicateSlugError(PostsyncError):
    """Two files in one batch map to the same slug."""


class StorageError(PostsyncError):
    """A database read or write failed; the current transaction was rolled back."""


class NotifyError(PostsyncError):
    """The post-sync update request failed or was refused."""
