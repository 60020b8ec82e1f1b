# src/duplicate/searchers/smugmug_searcher.py - v1
"""SmugMug searcher.

SmugMug has no tag search for checksums, but every image exposes the MD5
of the archived original, so the precise path scans the album.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from imgup.cache.models import UploadRecord
from imgup.core.models import FileInfo
from imgup.duplicate.base_searcher import BaseRemoteSearcher, candidate_matches
from imgup.services.models import RemoteAsset

if TYPE_CHECKING:
    from imgup.config.settings import Settings
    from imgup.services.adapters.smugmug_client import SmugMugClient


class SmugMugSearcher(BaseRemoteSearcher):
    """Searches the configured SmugMug album."""

    def __init__(self, client: SmugMugClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, client: SmugMugClient, settings: Settings) -> SmugMugSearcher:
        return cls(client)

    async def search_by_fingerprint(self, fingerprint: str) -> UploadRecord | None:
        for asset in await self._client.list_album_images():
            if asset.md5 and asset.md5.lower() == fingerprint.lower():
                return _to_record(asset, fingerprint)
        return None

    async def search_by_metadata(self, info: FileInfo) -> UploadRecord | None:
        for asset in await self._client.search_images(info.stem):
            if candidate_matches(info, [asset.filename, asset.title], asset.md5):
                record = _to_record(asset, info.fingerprint)
                record.size_bytes = info.size_bytes
                return record
        return None


def _to_record(asset: RemoteAsset, fingerprint: str) -> UploadRecord:
    return UploadRecord(
        fingerprint=fingerprint,
        service="smugmug",
        remote_id=asset.remote_id,
        remote_url=asset.page_url,
        image_url=asset.image_url,
        filename=asset.filename,
    )
