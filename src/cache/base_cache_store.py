# src/cache/base_cache_store.py - v1
"""Abstract cache store interface."""

from __future__ import annotations

from abc import ABC, abstractmethod

from imgup.cache.models import UploadRecord


class BaseCacheStore(ABC):
    """Persistent fingerprint -> upload record table.

    Implementations raise StorageError for any backend failure; a failed
    lookup must never look like a miss.
    """

    @abstractmethod
    async def lookup(self, fingerprint: str) -> UploadRecord | None:
        """Point lookup by fingerprint."""

    @abstractmethod
    async def record(self, upload: UploadRecord) -> None:
        """Upsert a record, replacing any row with the same fingerprint."""

    @abstractmethod
    async def find_by_remote_id(
        self, service: str, remote_id: str
    ) -> UploadRecord | None:
        """Lookup by (service, remote_id)."""

    @abstractmethod
    async def find_by_filename(self, filename: str) -> list[UploadRecord]:
        """All records for a filename, newest first."""

    def close(self) -> None:
        """Release backend resources."""
