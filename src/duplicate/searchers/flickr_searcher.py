# src/duplicate/searchers/flickr_searcher.py - v1
"""Flickr searcher: machine-tag lookup, then title search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from imgup.cache.fingerprint import checksum_tag
from imgup.cache.models import UploadRecord
from imgup.core.models import FileInfo
from imgup.duplicate.base_searcher import BaseRemoteSearcher, candidate_matches
from imgup.services.models import RemoteAsset

if TYPE_CHECKING:
    from imgup.config.settings import Settings
    from imgup.services.adapters.flickr_client import FlickrClient

logger = logging.getLogger(__name__)

_FINGERPRINT_PAGE = 10
_METADATA_PAGE = 20


class FlickrSearcher(BaseRemoteSearcher):
    """Searches the authenticated user's photos, or all of Flickr without a user id."""

    def __init__(
        self,
        client: FlickrClient,
        user_id: str = "",
        namespace: str = "imgup",
    ) -> None:
        self._client = client
        self._user_id = user_id
        self._namespace = namespace
        self._warned_unscoped = False

    @classmethod
    def from_settings(cls, client: FlickrClient, settings: Settings) -> FlickrSearcher:
        return cls(
            client,
            user_id=settings.flickr_user_id,
            namespace=settings.machine_tag_namespace,
        )

    async def search_by_fingerprint(self, fingerprint: str) -> UploadRecord | None:
        self._warn_if_unscoped()
        assets = await self._client.search_photos(
            user_id=self._user_id,
            machine_tags=[checksum_tag(fingerprint, self._namespace)],
            per_page=_FINGERPRINT_PAGE,
        )
        if not assets:
            return None
        return self._to_record(assets[0], fingerprint)

    async def search_by_metadata(self, info: FileInfo) -> UploadRecord | None:
        self._warn_if_unscoped()
        assets = await self._client.search_photos(
            user_id=self._user_id,
            text=info.stem,
            per_page=_METADATA_PAGE,
        )
        for asset in assets:
            if candidate_matches(info, [asset.title], self._stored_checksum(asset)):
                record = self._to_record(asset, info.fingerprint)
                record.filename = info.filename
                record.size_bytes = info.size_bytes
                return record
        return None

    def _stored_checksum(self, asset: RemoteAsset) -> str:
        prefix = f"{self._namespace}:checksum=".lower()
        for tag in asset.tags:
            if tag.lower().startswith(prefix):
                return tag[len(prefix):].strip('"')
        return ""

    def _warn_if_unscoped(self) -> None:
        if self._user_id or self._warned_unscoped:
            return
        self._warned_unscoped = True
        logger.warning(
            "Flickr user ID not set; duplicate search covers all of Flickr",
            extra={"data": {"service": "flickr", "scope": "global"}},
        )

    @staticmethod
    def _to_record(asset: RemoteAsset, fingerprint: str) -> UploadRecord:
        return UploadRecord(
            fingerprint=fingerprint,
            service="flickr",
            remote_id=asset.remote_id,
            remote_url=asset.page_url,
            image_url=asset.image_url,
        )
