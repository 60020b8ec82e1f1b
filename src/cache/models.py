# src/cache/models.py - v1
"""Cache domain model: UploadRecord."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator


def _now_seconds() -> datetime:
    return datetime.now(timezone.utc).replace(microsecond=0)


class UploadRecord(BaseModel):
    """One confirmed upload of a file fingerprint to a remote service.

    Keyed by fingerprint. Recording the same fingerprint again replaces
    the whole row.
    """

    fingerprint: str
    service: str
    remote_id: str
    remote_url: str
    image_url: str = ""
    upload_time: datetime = Field(default_factory=_now_seconds)
    filename: str = ""
    size_bytes: int = 0

    @field_validator("upload_time")
    @classmethod
    def normalize_upload_time(cls, v: datetime) -> datetime:  # noqa: N805
        """Stored with one-second resolution in UTC."""
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc).replace(microsecond=0)
