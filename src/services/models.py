# src/services/models.py - v1
"""Remote service models: ImageSize, RemoteAsset."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImageSize(BaseModel):
    """One rendition listed by a get-available-sizes call."""

    label: str
    width: int = 0
    height: int = 0
    url: str


class RemoteAsset(BaseModel):
    """A search candidate returned by a remote service."""

    remote_id: str
    title: str = ""
    filename: str = ""
    md5: str = ""
    tags: list[str] = Field(default_factory=list)
    page_url: str = ""
    image_url: str = ""
