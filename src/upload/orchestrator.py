# src/upload/orchestrator.py - v1
"""Upload orchestrator: upload raw bytes, then annotate.

Step order is fixed:
  1. upload_bytes     fatal; nothing was created, nothing to roll back
  2. set_fields       only when title or description is non-empty
  3. add_tags         only when tags are present
  4. set_visibility   only when the upload is private
  5. resolve URLs     never fails; falls back to deterministic URLs
Failures in steps 2-4 become UploadWarnings. There are no retries.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING, Awaitable, Callable

from imgup.core.errors import FileError, RemoteStepError, TransportError
from imgup.core.models import UploadOutcome, UploadWarning
from imgup.logging.context import set_step_context

if TYPE_CHECKING:
    from imgup.services.base_client import BaseServiceClient
    from imgup.services.models import ImageSize

logger = logging.getLogger(__name__)


class UploadOrchestrator:
    """Run the upload-then-annotate sequence against one service client."""

    def __init__(self, client: BaseServiceClient) -> None:
        self._client = client

    @property
    def client(self) -> BaseServiceClient:
        return self._client

    async def upload(
        self,
        path: str | Path,
        title: str = "",
        description: str = "",
        tags: list[str] | None = None,
        is_private: bool = False,
    ) -> UploadOutcome:
        """Upload a file and attach its metadata.

        Raises:
            FileError: The file disappeared or became unreadable.
            RemoteStepError: The raw upload failed (step="upload").
        """
        start_ns = time.monotonic_ns()
        service = self._client.service_name
        warnings: list[UploadWarning] = []

        set_step_context("upload")
        try:
            remote_id = await self._client.upload_bytes(path)
        except FileError:
            raise
        except TransportError as e:
            raise RemoteStepError("upload", str(e), service=service) from e
        finally:
            set_step_context(None)
        logger.info("Uploaded %s to %s as %s", Path(path).name, service, remote_id)

        if title or description:
            await self._annotate(
                "set_fields", warnings,
                lambda: self._client.set_fields(remote_id, title, description),
            )

        if tags:
            await self._annotate(
                "add_tags", warnings,
                lambda: self._client.add_tags(remote_id, list(tags)),
            )

        if is_private:
            await self._annotate(
                "set_visibility", warnings,
                lambda: self._client.set_visibility(remote_id, True),
            )

        page_url = await self._resolve_page_url(remote_id)
        image_url = await self._resolve_image_url(remote_id)

        logger.debug(
            "Upload sequence finished in %d ms with %d warning(s)",
            (time.monotonic_ns() - start_ns) // 1_000_000, len(warnings),
        )
        return UploadOutcome(
            remote_id=remote_id,
            page_url=page_url,
            image_url=image_url,
            warnings=warnings,
        )

    async def _annotate(
        self,
        step: str,
        warnings: list[UploadWarning],
        call: Callable[[], Awaitable[None]],
    ) -> None:
        set_step_context(step)
        try:
            await call()
        except Exception as e:
            warnings.append(UploadWarning(step=step, error=str(e)))
            logger.warning(
                "Step %s failed: %s", step, e,
                exc_info=not isinstance(e, TransportError),
                extra={"data": {"step": step, "service": self._client.service_name, "error": str(e)}},
            )
        finally:
            set_step_context(None)

    async def _resolve_page_url(self, remote_id: str) -> str:
        try:
            url = await self._client.get_page_url(remote_id)
        except Exception as e:
            logger.info("Page URL lookup failed, using default: %s", e, exc_info=True)
            url = ""
        return url or self._client.default_page_url(remote_id)

    async def _resolve_image_url(self, remote_id: str) -> str:
        try:
            sizes = await self._client.get_sizes(remote_id)
        except Exception as e:
            logger.info("Size lookup failed, using default image URL: %s", e, exc_info=True)
            sizes = []
        url = pick_image_url(sizes, self._client.size_preference)
        return url or self._client.default_image_url(remote_id)


def pick_image_url(sizes: list[ImageSize], preference: tuple[str, ...]) -> str:
    """Best image URL by label preference, else the first listed size.

    Returns an empty string when no size has a URL.
    """
    by_label = {s.label: s.url for s in sizes if s.url}
    for label in preference:
        if label in by_label:
            return by_label[label]
    for size in sizes:
        if size.url:
            return size.url
    return ""
