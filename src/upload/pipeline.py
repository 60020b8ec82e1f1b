# src/upload/pipeline.py - v1
"""Upload pipeline: ensure a file is represented on a service.

Composes the content hasher, the duplicate checker and the upload
orchestrator. Every successful upload is recorded so later checks hit
the local cache.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from imgup.cache.fingerprint import checksum_tag, get_file_info
from imgup.cache.models import UploadRecord
from imgup.core.errors import StorageError
from imgup.core.models import FileInfo, UploadOutcome, UploadWarning
from imgup.logging.context import clear_context, set_file_context
from imgup.upload.orchestrator import UploadOrchestrator

if TYPE_CHECKING:
    from imgup.duplicate.checker import DuplicateChecker
    from imgup.services.base_client import BaseServiceClient

logger = logging.getLogger(__name__)


class UploadPipeline:
    """Duplicate-aware upload of single files to one service.

    Args:
        service: Active service name; recorded on every UploadRecord.
        client: Authenticated service client.
        checker: Duplicate checker sharing the process-wide cache store.
        orchestrator: Upload orchestrator. Built from client when None.
        machine_tag_namespace: Namespace of the checksum machine tag.
    """

    def __init__(
        self,
        service: str,
        client: BaseServiceClient,
        checker: DuplicateChecker,
        orchestrator: UploadOrchestrator | None = None,
        machine_tag_namespace: str = "imgup",
    ) -> None:
        self._service = service
        self._client = client
        self._checker = checker
        self._orchestrator = orchestrator or UploadOrchestrator(client)
        self._namespace = machine_tag_namespace

    @property
    def service(self) -> str:
        return self._service

    async def ensure_uploaded(
        self,
        path: str | Path,
        title: str = "",
        description: str = "",
        tags: list[str] | None = None,
        is_private: bool = False,
        force_upload: bool = False,
    ) -> UploadOutcome:
        """Return the remote representation of a file, uploading it if needed.

        Raises:
            FileError: The file cannot be read.
            StorageError: The cache failed during the duplicate check.
            TransportError: The metadata search failed.
            RemoteStepError: The raw upload failed.
        """
        info = get_file_info(path)
        set_file_context(info.filename, self._service, info.fingerprint)
        try:
            if not force_upload:
                existing = await self._checker.check_info(info)
                if existing is not None:
                    logger.info(
                        "Duplicate of %s/%s, skipping upload",
                        existing.service, existing.remote_id,
                    )
                    return UploadOutcome(
                        remote_id=existing.remote_id,
                        page_url=existing.remote_url,
                        image_url=existing.image_url,
                        duplicate=True,
                    )
            else:
                logger.debug("Forced upload, skipping duplicate check")

            outcome = await self._orchestrator.upload(
                info.path,
                title=title,
                description=description,
                tags=self._upload_tags(tags, info),
                is_private=is_private,
            )
            await self._record(info, outcome)
            return outcome
        finally:
            clear_context()

    def _upload_tags(self, tags: list[str] | None, info: FileInfo) -> list[str]:
        upload_tags = list(tags or [])
        if self._client.supports_machine_tags:
            upload_tags.append(checksum_tag(info.fingerprint, self._namespace))
        return upload_tags

    async def _record(self, info: FileInfo, outcome: UploadOutcome) -> None:
        upload = UploadRecord(
            fingerprint=info.fingerprint,
            service=self._service,
            remote_id=outcome.remote_id,
            remote_url=outcome.page_url,
            image_url=outcome.image_url,
            filename=info.filename,
            size_bytes=info.size_bytes,
        )
        try:
            await self._checker.record(upload)
        except StorageError as e:
            # The upload itself succeeded; only future detection degrades.
            outcome.warnings.append(UploadWarning(step="record_cache", error=str(e)))
            logger.warning(
                "Failed to cache upload: %s", e,
                extra={"data": {"remote_id": outcome.remote_id, "error": str(e)}},
            )
