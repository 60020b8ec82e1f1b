# src/duplicate/base_searcher.py - v1
"""Abstract remote searcher interface.

Both methods return None when nothing matches. They raise TransportError
only for transport, authentication or service failures, so callers can
tell "confirmed absent" apart from "could not ask".
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from imgup.cache.models import UploadRecord
from imgup.core.models import FileInfo


class BaseRemoteSearcher(ABC):
    """Finds an existing remote asset for a local file."""

    @abstractmethod
    async def search_by_fingerprint(self, fingerprint: str) -> UploadRecord | None:
        """Precise search using the fingerprint stored on the asset at upload time."""

    @abstractmethod
    async def search_by_metadata(self, info: FileInfo) -> UploadRecord | None:
        """Approximate search by filename, confirmed by hash when the remote exposes one."""


def candidate_matches(info: FileInfo, names: list[str], remote_md5: str = "") -> bool:
    """Filter for metadata search candidates.

    The filename stem must appear in one of the candidate's names; a
    remote hash, when present, must equal the local fingerprint.
    """
    stem = info.stem.casefold()
    if not any(stem in name.casefold() for name in names if name):
        return False
    if remote_md5 and remote_md5.lower() != info.fingerprint.lower():
        return False
    return True
