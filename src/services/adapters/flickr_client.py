# src/services/adapters/flickr_client.py - v1
"""Flickr client implementing BaseServiceClient.

Uses the REST endpoint with format=json and the multipart upload endpoint,
which answers in XML with a <photoid> element.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import httpx

from imgup.core.errors import FileError, RemoteApiError
from imgup.services.base_client import BaseServiceClient, parse_json, send_request
from imgup.services.models import ImageSize, RemoteAsset

if TYPE_CHECKING:
    from imgup.config.settings import Settings

logger = logging.getLogger(__name__)

FLICKR_API_URL = "https://api.flickr.com/services/rest/"
FLICKR_UPLOAD_URL = "https://up.flickr.com/services/upload/"

_PHOTO_ID_RE = re.compile(r"<photoid>\s*([^<\s]+)\s*</photoid>")
_ERR_RE = re.compile(r'<err[^>]*msg="([^"]*)"')


class FlickrClient(BaseServiceClient):
    """Flickr REST and upload client."""

    size_preference = ("Large 2048", "Large 1600", "Large", "Large 1024")

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        user_id: str = "",
        api_url: str = FLICKR_API_URL,
        upload_url: str = FLICKR_UPLOAD_URL,
    ) -> None:
        self._http = http_client
        self._user_id = user_id
        self._api_url = api_url
        self._upload_url = upload_url
        # photo id -> (server, secret) seen in getInfo answers
        self._static_parts: dict[str, tuple[str, str]] = {}

    @classmethod
    def from_settings(
        cls, http_client: httpx.AsyncClient, settings: Settings
    ) -> FlickrClient:
        return cls(
            http_client,
            user_id=settings.flickr_user_id,
            api_url=settings.flickr_api_url,
            upload_url=settings.flickr_upload_url,
        )

    @property
    def service_name(self) -> str:
        return "flickr"

    @property
    def supports_machine_tags(self) -> bool:
        return True

    @property
    def user_id(self) -> str:
        return self._user_id

    # --- Upload-then-annotate operations ---

    async def upload_bytes(self, path: str | Path) -> str:
        file_path = Path(path)
        try:
            fh = file_path.open("rb")
        except FileNotFoundError as e:
            raise FileError(str(file_path), "not_found") from e
        except OSError as e:
            raise FileError(str(file_path), "read_failure", str(e)) from e

        with fh:
            resp = await send_request(
                self._http, "flickr", "POST", self._upload_url,
                files={"photo": (file_path.name, fh, "application/octet-stream")},
            )

        body = resp.text
        if 'stat="fail"' in body or "<err" in body:
            match = _ERR_RE.search(body)
            detail = match.group(1) if match else body[:200]
            raise RemoteApiError(f"flickr upload rejected: {detail}", service="flickr")

        match = _PHOTO_ID_RE.search(body)
        if not match:
            raise RemoteApiError(
                f"failed to parse photo ID from response: {body[:200]}",
                service="flickr",
            )
        photo_id = match.group(1)
        logger.debug("Flickr upload returned photo id %s", photo_id)
        return photo_id

    async def set_fields(self, remote_id: str, title: str, description: str) -> None:
        await self._call(
            "flickr.photos.setMeta",
            {"photo_id": remote_id, "title": title, "description": description},
        )

    async def add_tags(self, remote_id: str, tags: list[str]) -> None:
        if not tags:
            return
        await self._call(
            "flickr.photos.addTags",
            {"photo_id": remote_id, "tags": format_tags(tags)},
        )

    async def set_visibility(self, remote_id: str, is_private: bool) -> None:
        await self._call(
            "flickr.photos.setPerms",
            {
                "photo_id": remote_id,
                "is_public": "0" if is_private else "1",
                "is_friend": "0",
                "is_family": "0",
            },
        )

    async def get_page_url(self, remote_id: str) -> str:
        data = await self._call(
            "flickr.photos.getInfo", {"photo_id": remote_id}, http_method="GET"
        )
        photo = data.get("photo") or {}
        if photo.get("server") and photo.get("secret"):
            self._static_parts[remote_id] = (str(photo["server"]), str(photo["secret"]))
        for url in (photo.get("urls") or {}).get("url") or []:
            if url.get("type") == "photopage" and url.get("_content"):
                return url["_content"]
        owner = (photo.get("owner") or {}).get("nsid") or self._user_id
        if not owner:
            return self.default_page_url(remote_id)
        return f"https://www.flickr.com/photos/{owner}/{photo.get('id', remote_id)}"

    async def get_sizes(self, remote_id: str) -> list[ImageSize]:
        data = await self._call(
            "flickr.photos.getSizes", {"photo_id": remote_id}, http_method="GET"
        )
        sizes = (data.get("sizes") or {}).get("size") or []
        return [
            ImageSize(
                label=s.get("label", ""),
                width=int(s.get("width") or 0),
                height=int(s.get("height") or 0),
                url=s["source"],
            )
            for s in sizes
            if s.get("source")
        ]

    def default_page_url(self, remote_id: str) -> str:
        if self._user_id:
            return f"https://www.flickr.com/photos/{self._user_id}/{remote_id}"
        return f"https://www.flickr.com/photo.gne?id={remote_id}"

    def default_image_url(self, remote_id: str) -> str:
        """Static image URL when getInfo has revealed server and secret.

        Otherwise the photo.gne link, which redirects to the photo page
        rather than serving image bytes.
        """
        parts = self._static_parts.get(remote_id)
        if parts:
            return _static_url(parts[0], remote_id, parts[1])
        return f"https://www.flickr.com/photo.gne?id={remote_id}"

    # --- Search ---

    async def search_photos(
        self,
        user_id: str = "",
        machine_tags: list[str] | None = None,
        text: str = "",
        per_page: int = 10,
    ) -> list[RemoteAsset]:
        """flickr.photos.search; an empty user_id searches all of Flickr."""
        params: dict[str, str] = {
            "per_page": str(per_page),
            "extras": "machine_tags,url_l,url_o",
        }
        if user_id:
            params["user_id"] = user_id
        if machine_tags:
            params["machine_tags"] = ",".join(machine_tags)
            params["machine_tag_mode"] = "all"
        if text:
            params["text"] = text

        data = await self._call("flickr.photos.search", params, http_method="GET")
        photos = (data.get("photos") or {}).get("photo") or []
        return [self._to_asset(p) for p in photos]

    # --- Internals ---

    def _to_asset(self, photo: dict[str, Any]) -> RemoteAsset:
        photo_id = str(photo.get("id", ""))
        owner = photo.get("owner") or self._user_id
        server = photo.get("server")
        secret = photo.get("secret")
        if server and secret:
            image_url = _static_url(server, photo_id, secret)
        else:
            image_url = photo.get("url_l") or photo.get("url_o") or ""
        page_url = (
            f"https://www.flickr.com/photos/{owner}/{photo_id}"
            if owner else self.default_page_url(photo_id)
        )
        return RemoteAsset(
            remote_id=photo_id,
            title=photo.get("title") or "",
            tags=(photo.get("machine_tags") or "").split(),
            page_url=page_url,
            image_url=image_url,
        )

    async def _call(
        self,
        method: str,
        params: dict[str, str],
        http_method: str = "POST",
    ) -> dict[str, Any]:
        """Invoke a REST method and check the stat field."""
        query = {"method": method, "format": "json", "nojsoncallback": "1", **params}
        if http_method == "POST":
            resp = await send_request(
                self._http, "flickr", "POST", self._api_url, data=query
            )
        else:
            resp = await send_request(
                self._http, "flickr", "GET", self._api_url, params=query
            )

        data = parse_json(resp, "flickr")
        if data.get("stat") != "ok":
            raise RemoteApiError(
                f"{method}: API error: {data.get('message', 'unknown error')}",
                service="flickr",
            )
        return data


def _static_url(server: str, photo_id: str, secret: str) -> str:
    return f"https://live.staticflickr.com/{server}/{photo_id}_{secret}_b.jpg"


def format_tags(tags: list[str]) -> str:
    """Join tags for the Flickr tags parameter, quoting multi-word tags."""
    parts = []
    for tag in tags:
        tag = tag.strip().replace('"', "")
        if not tag:
            continue
        parts.append(f'"{tag}"' if " " in tag else tag)
    return " ".join(parts)
