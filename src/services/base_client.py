# src/services/base_client.py - v1
"""Abstract remote photo service client.

Clients wrap an already authenticated httpx.AsyncClient; request signing
is configured by whoever builds that client.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

import httpx

from imgup.services.models import ImageSize
from imgup.core.errors import RemoteApiError, TransportError

logger = logging.getLogger(__name__)

_MAX_ERROR_BODY = 200


class BaseServiceClient(ABC):
    """Remote operations used by the upload orchestrator."""

    # Size labels in order of preference for the embeddable image URL.
    size_preference: tuple[str, ...] = ()

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Service identifier (flickr, smugmug)."""

    @property
    def supports_machine_tags(self) -> bool:
        """Whether namespace:key=value tags are searchable on this service."""
        return False

    @abstractmethod
    async def upload_bytes(self, path: str | Path) -> str:
        """Upload raw file bytes with no metadata. Returns the remote id."""

    @abstractmethod
    async def set_fields(self, remote_id: str, title: str, description: str) -> None:
        """Set title and description."""

    @abstractmethod
    async def add_tags(self, remote_id: str, tags: list[str]) -> None:
        """Attach tags."""

    @abstractmethod
    async def set_visibility(self, remote_id: str, is_private: bool) -> None:
        """Set privacy."""

    @abstractmethod
    async def get_page_url(self, remote_id: str) -> str:
        """Canonical web page URL of an asset."""

    @abstractmethod
    async def get_sizes(self, remote_id: str) -> list[ImageSize]:
        """Available renditions of an asset."""

    @abstractmethod
    def default_page_url(self, remote_id: str) -> str:
        """Page URL built without any network call."""

    @abstractmethod
    def default_image_url(self, remote_id: str) -> str:
        """Image URL built without any network call. Contains the remote id."""


async def send_request(
    http: httpx.AsyncClient,
    service: str,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    """Send a request and turn transport failures and non-2xx answers into TransportError."""
    try:
        resp = await http.request(method, url, **kwargs)
    except httpx.HTTPError as e:
        raise TransportError(
            f"{service} request failed: {e}", service=service
        ) from e

    if resp.is_success:
        return resp

    content_type = resp.headers.get("content-type", "")
    body = resp.text
    if "text/html" in content_type or body.lstrip().startswith("<"):
        detail = "(HTML response)"
    elif len(body) > _MAX_ERROR_BODY:
        detail = body[:_MAX_ERROR_BODY] + "..."
    else:
        detail = body
    raise RemoteApiError(
        f"{service} request failed with status {resp.status_code}: {detail}",
        service=service,
        status_code=resp.status_code,
    )


def parse_json(resp: httpx.Response, service: str) -> dict[str, Any]:
    """Decode a JSON object body."""
    try:
        data = resp.json()
    except ValueError as e:
        raise TransportError(
            f"{service}: failed to parse response: {e}", service=service
        ) from e
    if not isinstance(data, dict):
        raise TransportError(
            f"{service}: unexpected response shape", service=service
        )
    return data
