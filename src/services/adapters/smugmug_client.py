# src/services/adapters/smugmug_client.py - v1
"""SmugMug v2 client implementing BaseServiceClient.

Uploads go to the upload host with X-Smug-* headers and no metadata;
title, caption, keywords and visibility are set afterwards with PATCH
calls on the image resource.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from imgup.core.errors import FileError, RemoteApiError
from imgup.services.base_client import BaseServiceClient, parse_json, send_request
from imgup.services.models import ImageSize, RemoteAsset

if TYPE_CHECKING:
    from imgup.config.settings import Settings

logger = logging.getLogger(__name__)

SMUGMUG_API_URL = "https://api.smugmug.com"
SMUGMUG_UPLOAD_URL = "https://upload.smugmug.com/"

_PAGE_SIZE = 100
_MAX_PAGES = 50


class SmugMugClient(BaseServiceClient):
    """SmugMug API v2 client scoped to one album."""

    size_preference = ("X3Large", "X2Large", "XLarge", "Large", "Medium", "Original")

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        album_key: str,
        api_url: str = SMUGMUG_API_URL,
        upload_url: str = SMUGMUG_UPLOAD_URL,
    ) -> None:
        self._http = http_client
        self._album_key = album_key
        self._api_url = api_url.rstrip("/")
        self._upload_url = upload_url
        # image key -> web page URL from the upload response
        self._web_urls: dict[str, str] = {}

    @classmethod
    def from_settings(
        cls, http_client: httpx.AsyncClient, settings: Settings
    ) -> SmugMugClient:
        return cls(
            http_client,
            album_key=settings.smugmug_album_key,
            api_url=settings.smugmug_api_url,
            upload_url=settings.smugmug_upload_url,
        )

    @property
    def service_name(self) -> str:
        return "smugmug"

    @property
    def album_key(self) -> str:
        return self._album_key

    # --- Upload-then-annotate operations ---

    async def upload_bytes(self, path: str | Path) -> str:
        if not self._album_key:
            raise RemoteApiError("no SmugMug album configured", service="smugmug")

        file_path = Path(path)
        try:
            fh = file_path.open("rb")
        except FileNotFoundError as e:
            raise FileError(str(file_path), "not_found") from e
        except OSError as e:
            raise FileError(str(file_path), "read_failure", str(e)) from e

        headers = {
            "Accept": "application/json",
            "X-Smug-AlbumUri": f"/api/v2/album/{self._album_key}",
            "X-Smug-ResponseType": "JSON",
            "X-Smug-Version": "v2",
            "X-Smug-Filename": file_path.name,
        }
        with fh:
            resp = await send_request(
                self._http, "smugmug", "POST", self._upload_url,
                headers=headers,
                files={"file": (file_path.name, fh, "application/octet-stream")},
            )

        data = parse_json(resp, "smugmug")
        stat = data.get("stat", "")
        if stat and stat != "ok":
            raise RemoteApiError(
                f"smugmug upload failed: {data.get('message', stat)}",
                service="smugmug",
            )

        image = data.get("Image") or {}
        image_key = image.get("ImageKey") or _key_from_uri(
            image.get("ImageUri") or image.get("AlbumImageUri") or image.get("Uri") or ""
        )
        if not image_key:
            raise RemoteApiError("no image URI in upload response", service="smugmug")
        web_url = image.get("URL") or image.get("WebUri")
        if web_url:
            self._web_urls[image_key] = web_url
        logger.debug("SmugMug upload returned image key %s", image_key)
        return image_key

    async def set_fields(self, remote_id: str, title: str, description: str) -> None:
        payload: dict[str, Any] = {}
        if title:
            payload["Title"] = title
        if description:
            payload["Caption"] = description
        if payload:
            await self._patch_image(remote_id, payload)

    async def add_tags(self, remote_id: str, tags: list[str]) -> None:
        keywords = [t.strip() for t in tags if t.strip()]
        if keywords:
            await self._patch_image(remote_id, {"Keywords": "; ".join(keywords)})

    async def set_visibility(self, remote_id: str, is_private: bool) -> None:
        await self._patch_image(remote_id, {"Hidden": is_private})

    async def get_page_url(self, remote_id: str) -> str:
        data = await self._get(f"/api/v2/image/{remote_id}")
        image = (data.get("Response") or {}).get("Image") or {}
        return image.get("WebUri") or self.default_page_url(remote_id)

    async def get_sizes(self, remote_id: str) -> list[ImageSize]:
        data = await self._get(f"/api/v2/image/{remote_id}!sizedetails")
        details = (data.get("Response") or {}).get("ImageSizeDetails") or {}
        sizes: list[ImageSize] = []
        for key, value in details.items():
            if not key.startswith("ImageSize") or not isinstance(value, dict):
                continue
            url = value.get("Url")
            if not url:
                continue
            sizes.append(
                ImageSize(
                    label=key[len("ImageSize"):],
                    width=int(value.get("Width") or 0),
                    height=int(value.get("Height") or 0),
                    url=url,
                )
            )
        return sizes

    def default_page_url(self, remote_id: str) -> str:
        """Web URL from the upload response, else the image URL itself.

        A gallery page URL needs the owner's nickname and folder path,
        which only the API can tell.
        """
        return self._web_urls.get(remote_id) or self.default_image_url(remote_id)

    def default_image_url(self, remote_id: str) -> str:
        return f"https://photos.smugmug.com/photos/i-{remote_id}/0/O/i-{remote_id}.jpg"

    # --- Search ---

    async def list_album_images(self) -> list[RemoteAsset]:
        """All images in the configured album, following pagination."""
        assets: list[RemoteAsset] = []
        path: str | None = f"/api/v2/album/{self._album_key}!images"
        params: dict[str, str] | None = {"start": "1", "count": str(_PAGE_SIZE)}
        for _ in range(_MAX_PAGES):
            data = await self._get(path, params=params)
            response = data.get("Response") or {}
            assets.extend(_to_asset(img) for img in response.get("AlbumImage") or [])
            path = (response.get("Pages") or {}).get("NextPage") or None
            params = None  # NextPage already carries the query string
            if path is None:
                break
        else:
            logger.warning(
                "Album scan stopped after %d pages; images beyond %d are not checked",
                _MAX_PAGES, len(assets),
                extra={"data": {
                    "service": "smugmug",
                    "album_key": self._album_key,
                    "pages": _MAX_PAGES,
                    "images_scanned": len(assets),
                }},
            )
        return assets

    async def search_images(self, text: str, count: int = 50) -> list[RemoteAsset]:
        """Free-text image search scoped to the configured album."""
        data = await self._get(
            "/api/v2/image!search",
            params={
                "Scope": f"/api/v2/album/{self._album_key}",
                "Text": text,
                "count": str(count),
            },
        )
        images = (data.get("Response") or {}).get("Image") or []
        return [_to_asset(img) for img in images]

    # --- Internals ---

    async def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        resp = await send_request(
            self._http, "smugmug", "GET", f"{self._api_url}{path}",
            params=params, headers={"Accept": "application/json"},
        )
        return parse_json(resp, "smugmug")

    async def _patch_image(self, remote_id: str, payload: dict[str, Any]) -> None:
        await send_request(
            self._http, "smugmug", "PATCH", f"{self._api_url}/api/v2/image/{remote_id}",
            json=payload, headers={"Accept": "application/json"},
        )


def _key_from_uri(uri: str) -> str:
    """Extract an image key from a URI like /api/v2/image/bRX7kBM-0."""
    last = uri.rstrip("/").rsplit("/", 1)[-1]
    key, dash, version = last.rpartition("-")
    if dash and version.isdigit() and key:
        return key
    return last


def _to_asset(image: dict[str, Any]) -> RemoteAsset:
    web_uri = image.get("WebUri") or ""
    return RemoteAsset(
        remote_id=image.get("ImageKey", ""),
        title=image.get("Title") or "",
        filename=image.get("FileName") or "",
        md5=(image.get("ArchivedMD5") or "").lower(),
        page_url=web_uri,
        image_url=image.get("ArchivedUri") or web_uri,
    )
