# src/api/facade.py - v1
"""Public API facade: single- and batch-upload entry points.

Usage:
    from imgup.api.facade import ensure_uploaded
    async with create_http_client(settings, auth=my_oauth) as http:
        outcome = await ensure_uploaded(path, http_client=http, cache_store=store)

The caller owns the cache store and the HTTP client; the facade opens and
closes neither.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx

from imgup.config.settings import Settings
from imgup.core.models import UploadOutcome
from imgup.duplicate.checker import DuplicateChecker
from imgup.duplicate.searcher_factory import create_searcher
from imgup.services.client_factory import create_service_client
from imgup.upload import batch as batch_upload
from imgup.upload.batch import BatchResult, UploadRequest
from imgup.upload.pipeline import UploadPipeline

if TYPE_CHECKING:
    from imgup.cache.base_cache_store import BaseCacheStore

logger = logging.getLogger(__name__)


def create_http_client(
    settings: Settings | None = None,
    auth: httpx.Auth | None = None,
) -> httpx.AsyncClient:
    """HTTP client with the configured timeout.

    Args:
        settings: Global settings. Loaded from .env if None.
        auth: Request signer (e.g. an OAuth 1.0a httpx.Auth) supplied by the caller.
    """
    settings = settings or Settings()
    return httpx.AsyncClient(
        auth=auth,
        timeout=httpx.Timeout(settings.http_timeout_s),
        follow_redirects=True,
    )


def build_pipeline(
    http_client: httpx.AsyncClient,
    cache_store: BaseCacheStore,
    settings: Settings | None = None,
    service: str | None = None,
) -> UploadPipeline:
    """Wire client, searcher, checker and orchestrator for one service.

    Raises:
        UnsupportedServiceError: If the service is not registered.
    """
    settings = settings or Settings()
    service = service or settings.default_service

    client = create_service_client(service, http_client, settings)
    checker = DuplicateChecker(cache_store=cache_store, service=service)
    searcher = create_searcher(service, client, settings)
    if searcher is not None:
        checker.register_searcher(service, searcher)

    return UploadPipeline(
        service=service,
        client=client,
        checker=checker,
        machine_tag_namespace=settings.machine_tag_namespace,
    )


async def ensure_uploaded(
    path: str | Path,
    *,
    http_client: httpx.AsyncClient,
    cache_store: BaseCacheStore,
    settings: Settings | None = None,
    service: str | None = None,
    title: str = "",
    description: str = "",
    tags: list[str] | None = None,
    is_private: bool = False,
    force: bool = False,
) -> UploadOutcome:
    """Upload one image unless it is already on the service.

    Duplicate checking is skipped when force is set or when
    Settings.duplicate_check is disabled; the upload is recorded either way.
    """
    settings = settings or Settings()
    pipeline = build_pipeline(http_client, cache_store, settings, service)
    return await pipeline.ensure_uploaded(
        path,
        title=title,
        description=description,
        tags=tags,
        is_private=is_private,
        force_upload=force or not settings.duplicate_check,
    )


async def upload_batch(
    requests: list[UploadRequest],
    *,
    http_client: httpx.AsyncClient,
    cache_store: BaseCacheStore,
    settings: Settings | None = None,
    service: str | None = None,
    common_tags: list[str] | None = None,
    force: bool = False,
) -> BatchResult:
    """Upload several images concurrently; see upload.batch.upload_batch."""
    settings = settings or Settings()
    pipeline = build_pipeline(http_client, cache_store, settings, service)
    logger.info("Uploading %d image(s) to %s", len(requests), pipeline.service)
    return await batch_upload.upload_batch(
        pipeline,
        requests,
        concurrency=settings.batch_concurrency,
        common_tags=common_tags,
        force_upload=force or not settings.duplicate_check,
    )
