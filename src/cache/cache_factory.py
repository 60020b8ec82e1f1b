# src/cache/cache_factory.py - v1
"""Factory for cache store instantiation."""

from __future__ import annotations

from pathlib import Path

from imgup.cache.base_cache_store import BaseCacheStore
from imgup.config.settings import Settings

DEFAULT_CACHE_PATH = Path("~/.config/imgup/uploads.db")


def default_cache_path() -> Path:
    """Well-known cache location under the user's config directory."""
    return DEFAULT_CACHE_PATH.expanduser()


def create_cache_store(settings: Settings | None = None) -> BaseCacheStore:
    """Open the upload cache.

    The caller owns the returned store and must close() it.

    Args:
        settings: Application settings. Defaults to the well-known path.

    Raises:
        StorageError: If the database cannot be opened or initialised.
    """
    from imgup.cache.sqlite_store import SqliteCacheStore

    db_path = default_cache_path() if settings is None else settings.resolved_cache_path
    return SqliteCacheStore(db_path=db_path)
