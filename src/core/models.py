# src/core/models.py - v1
"""Upload domain models: FileInfo, UploadWarning, UploadOutcome."""

from __future__ import annotations

from pydantic import BaseModel, Field


class FileInfo(BaseModel):
    """Per-call description of a local file. Never persisted."""

    path: str
    fingerprint: str
    size_bytes: int
    filename: str

    @property
    def stem(self) -> str:
        """Filename without its final extension."""
        name, dot, _ext = self.filename.rpartition(".")
        return name if dot and name else self.filename


class UploadWarning(BaseModel):
    """Non-fatal failure of one annotation step."""

    step: str
    error: str

    @property
    def message(self) -> str:
        return f"Failed to {self.step.replace('_', ' ')}: {self.error}"


class UploadOutcome(BaseModel):
    """Result of ensuring a file is represented on a remote service."""

    remote_id: str
    page_url: str
    image_url: str
    warnings: list[UploadWarning] = Field(default_factory=list)
    duplicate: bool = False

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)
