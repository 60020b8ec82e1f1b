# src/upload/batch.py - v1
"""Batch upload: independent per-image pipelines run concurrently."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from imgup.core.errors import ImgupError
from imgup.core.models import UploadOutcome

if TYPE_CHECKING:
    from imgup.upload.pipeline import UploadPipeline

logger = logging.getLogger(__name__)


class UploadRequest(BaseModel):
    """One image of a batch."""

    path: Path
    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    is_private: bool = False


class BatchItemResult(BaseModel):
    """Outcome or error for one image of a batch."""

    path: Path
    outcome: UploadOutcome | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchResult(BaseModel):
    """Summary of a batch run, items in request order."""

    items: list[BatchItemResult] = Field(default_factory=list)
    uploaded: int = 0
    duplicates: int = 0
    errors: int = 0
    duration_seconds: float = 0.0


async def upload_batch(
    pipeline: UploadPipeline,
    requests: list[UploadRequest],
    concurrency: int = 4,
    common_tags: list[str] | None = None,
    force_upload: bool = False,
) -> BatchResult:
    """Ensure every requested image is uploaded.

    A failing image is reported in its BatchItemResult and does not stop
    the other images.

    Args:
        pipeline: Shared pipeline (one service, one cache).
        requests: Images to process.
        concurrency: Maximum pipelines in flight.
        common_tags: Tags appended to every image's own tags.
        force_upload: Skip duplicate checks for all images.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be >= 1")

    t0 = time.monotonic()
    semaphore = asyncio.Semaphore(concurrency)
    extra_tags = list(common_tags or [])

    async def _one(req: UploadRequest) -> BatchItemResult:
        async with semaphore:
            try:
                outcome = await pipeline.ensure_uploaded(
                    req.path,
                    title=req.title,
                    description=req.description,
                    tags=[*req.tags, *extra_tags],
                    is_private=req.is_private,
                    force_upload=force_upload,
                )
            except ImgupError as e:
                logger.error("Upload of %s failed: %s", req.path.name, e)
                return BatchItemResult(path=req.path, error=str(e))
            return BatchItemResult(path=req.path, outcome=outcome)

    items = await asyncio.gather(*(_one(r) for r in requests))

    result = BatchResult(items=list(items), duration_seconds=time.monotonic() - t0)
    for item in result.items:
        if item.outcome is None:
            result.errors += 1
        elif item.outcome.duplicate:
            result.duplicates += 1
        else:
            result.uploaded += 1

    logger.info(
        "Batch complete: %d uploaded, %d duplicate(s), %d error(s)",
        result.uploaded, result.duplicates, result.errors,
    )
    return result
