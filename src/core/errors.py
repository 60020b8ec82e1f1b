# src/core/errors.py - v1
"""Exception hierarchy for the upload core.

Propagation policy:
  FileError         fatal, raised immediately
  StorageError      fatal to duplicate checking
  TransportError    swallowed for precise search, raised for metadata search
  RemoteStepError   raised only for the raw upload step
"""

from __future__ import annotations

from typing import Literal


class ImgupError(Exception):
    """Base class for all imgup errors."""


class FileError(ImgupError):
    """Local file could not be found or read."""

    def __init__(
        self,
        path: str,
        kind: Literal["not_found", "read_failure"],
        reason: str = "",
    ) -> None:
        self.path = path
        self.kind = kind
        self.reason = reason
        label = "file not found" if kind == "not_found" else "cannot read file"
        msg = f"{label}: {path}"
        if reason:
            msg = f"{msg} ({reason})"
        super().__init__(msg)


class StorageError(ImgupError):
    """Local cache could not be opened, initialised or queried."""


class TransportError(ImgupError):
    """Network, authentication or service failure talking to a remote service."""

    def __init__(self, message: str, service: str = "", status_code: int | None = None) -> None:
        self.service = service
        self.status_code = status_code
        super().__init__(message)


class RemoteApiError(TransportError):
    """The service answered, but reported a failure status."""


class RemoteStepError(ImgupError):
    """A step of the upload sequence failed."""

    def __init__(self, step: str, message: str, service: str = "") -> None:
        self.step = step
        self.service = service
        super().__init__(f"{step} failed: {message}")


class UnsupportedServiceError(ValueError):
    """Raised when a service name is not registered."""
