# src/duplicate/checker.py - v1
"""Duplicate checker: local cache first, then remote search.

Decision flow per file:
  1. Fingerprint the file (FileError propagates)
  2. Cache lookup; a hit is returned without asking the remote
  3. No searcher for the active service -> not a duplicate
  4. Precise search by fingerprint; transport errors are logged and skipped
  5. Metadata search as last resort; transport errors propagate
Remote hits are written through to the cache.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from imgup.cache.fingerprint import get_file_info
from imgup.cache.models import UploadRecord
from imgup.core.errors import StorageError, TransportError
from imgup.core.models import FileInfo

if TYPE_CHECKING:
    from imgup.cache.base_cache_store import BaseCacheStore
    from imgup.duplicate.base_searcher import BaseRemoteSearcher

logger = logging.getLogger(__name__)


class DuplicateChecker:
    """Check whether a file is already represented on the active service."""

    def __init__(self, cache_store: BaseCacheStore, service: str) -> None:
        self._cache_store = cache_store
        self._service = service
        self._searchers: dict[str, BaseRemoteSearcher] = {}

    @property
    def service(self) -> str:
        return self._service

    def set_service(self, service: str) -> None:
        """Change the active service."""
        self._service = service

    def register_searcher(self, service: str, searcher: BaseRemoteSearcher) -> None:
        """Add a service-specific searcher."""
        self._searchers[service] = searcher

    async def check(self, path: str | Path) -> UploadRecord | None:
        """Return the existing upload for a file, or None."""
        return await self.check_info(get_file_info(path))

    async def check_info(self, info: FileInfo) -> UploadRecord | None:
        """Same as check() for an already fingerprinted file."""
        cached = await self._cache_store.lookup(info.fingerprint)
        if cached is not None:
            logger.debug("Cache hit for %s: %s/%s", info.filename, cached.service, cached.remote_id)
            return cached

        searcher = self._searchers.get(self._service)
        if searcher is None:
            return None

        try:
            found = await searcher.search_by_fingerprint(info.fingerprint)
        except TransportError as e:
            logger.warning(
                "Fingerprint search failed, falling back to metadata search: %s", e,
                extra={"data": {
                    "service": self._service,
                    "fingerprint": info.fingerprint,
                    "error": str(e),
                }},
            )
            found = None

        if found is not None:
            logger.info("Found %s on %s by fingerprint", info.filename, self._service)
            await self._write_through(found)
            return found

        found = await searcher.search_by_metadata(info)
        if found is not None:
            logger.info("Found %s on %s by metadata", info.filename, self._service)
            await self._write_through(found)
            return found

        return None

    async def record(self, upload: UploadRecord) -> None:
        """Save an upload to the cache."""
        await self._cache_store.record(upload)

    async def _write_through(self, upload: UploadRecord) -> None:
        try:
            await self._cache_store.record(upload)
        except StorageError as e:
            logger.warning(
                "Failed to cache remote match: %s", e,
                extra={"data": {
                    "service": upload.service,
                    "remote_id": upload.remote_id,
                    "fingerprint": upload.fingerprint,
                    "error": str(e),
                }},
            )
