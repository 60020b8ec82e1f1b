# tests/unit/duplicate/test_unit_checker.py - v1
"""Tests for duplicate/checker.py - cache-first duplicate detection."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from imgup.cache.models import UploadRecord
from imgup.core.errors import FileError, RemoteApiError, StorageError, TransportError
from imgup.duplicate.base_searcher import BaseRemoteSearcher
from imgup.duplicate.checker import DuplicateChecker


def _remote(fp: str, remote_id: str = "r1", service: str = "flickr") -> UploadRecord:
    return UploadRecord(
        fingerprint=fp, service=service, remote_id=remote_id,
        remote_url=f"https://example.test/{remote_id}",
        image_url=f"https://img.example.test/{remote_id}.jpg",
    )


def _searcher(by_fp=None, by_meta=None) -> AsyncMock:
    searcher = AsyncMock(spec=BaseRemoteSearcher)
    for method, result in (
        (searcher.search_by_fingerprint, by_fp),
        (searcher.search_by_metadata, by_meta),
    ):
        if isinstance(result, Exception):
            method.side_effect = result
        else:
            method.return_value = result
    return searcher


class TestCacheFirst:
    @pytest.mark.asyncio
    async def test_cache_hit_skips_remote(self, cache_store, sample_image, sample_record):
        await cache_store.record(sample_record)
        searcher = _searcher()
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)

        assert await checker.check(sample_image) == sample_record
        searcher.search_by_fingerprint.assert_not_called()
        searcher.search_by_metadata.assert_not_called()

    @pytest.mark.asyncio
    async def test_cache_hit_regardless_of_active_service(self, cache_store, sample_image, sample_record):
        await cache_store.record(sample_record)
        checker = DuplicateChecker(cache_store, "smugmug")
        result = await checker.check(sample_image)
        assert result.service == "flickr"

    @pytest.mark.asyncio
    async def test_no_searcher_means_not_duplicate(self, cache_store, sample_image):
        checker = DuplicateChecker(cache_store, "flickr")
        assert await checker.check(sample_image) is None

    @pytest.mark.asyncio
    async def test_searcher_for_other_service_not_used(self, cache_store, sample_image):
        searcher = _searcher()
        checker = DuplicateChecker(cache_store, "smugmug")
        checker.register_searcher("flickr", searcher)
        assert await checker.check(sample_image) is None
        searcher.search_by_fingerprint.assert_not_called()

    @pytest.mark.asyncio
    async def test_set_service(self, cache_store):
        checker = DuplicateChecker(cache_store, "flickr")
        checker.set_service("smugmug")
        assert checker.service == "smugmug"


class TestRemoteSearch:
    @pytest.mark.asyncio
    async def test_fingerprint_hit_written_through(self, cache_store, sample_image, hello_md5):
        found = _remote(hello_md5)
        searcher = _searcher(by_fp=found)
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)

        assert await checker.check(sample_image) == found
        searcher.search_by_metadata.assert_not_called()
        assert (await cache_store.lookup(hello_md5)).remote_id == "r1"

    @pytest.mark.asyncio
    async def test_metadata_hit_after_fingerprint_miss(self, cache_store, sample_image, hello_md5):
        found = _remote(hello_md5, "meta1")
        searcher = _searcher(by_fp=None, by_meta=found)
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)

        assert await checker.check(sample_image) == found
        info = searcher.search_by_metadata.call_args.args[0]
        assert info.fingerprint == hello_md5
        assert (await cache_store.lookup(hello_md5)).remote_id == "meta1"

    @pytest.mark.asyncio
    async def test_both_miss(self, cache_store, sample_image, hello_md5):
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", _searcher())
        assert await checker.check(sample_image) is None
        assert await cache_store.lookup(hello_md5) is None

    @pytest.mark.asyncio
    async def test_fingerprint_transport_error_swallowed(self, cache_store, sample_image, hello_md5, caplog):
        found = _remote(hello_md5, "meta2")
        searcher = _searcher(by_fp=RemoteApiError("rate limited", service="flickr"), by_meta=found)
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)

        with caplog.at_level(logging.WARNING, logger="imgup"):
            assert await checker.check(sample_image) == found
        warning = next(r for r in caplog.records if "Fingerprint search failed" in r.getMessage())
        assert warning.data["fingerprint"] == hello_md5
        assert warning.data["error"] == "rate limited"

    @pytest.mark.asyncio
    async def test_metadata_transport_error_propagates(self, cache_store, sample_image):
        searcher = _searcher(by_meta=TransportError("down", service="flickr"))
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)
        with pytest.raises(TransportError, match="down"):
            await checker.check(sample_image)

    @pytest.mark.asyncio
    async def test_write_through_failure_still_returns_match(self, sample_image, hello_md5, caplog):
        store = AsyncMock()
        store.lookup.return_value = None
        store.record.side_effect = StorageError("disk full")
        found = _remote(hello_md5)
        checker = DuplicateChecker(store, "flickr")
        checker.register_searcher("flickr", _searcher(by_fp=found))

        with caplog.at_level(logging.WARNING, logger="imgup"):
            assert await checker.check(sample_image) == found
        assert any("Failed to cache remote match" in r.getMessage() for r in caplog.records)


class TestFailures:
    @pytest.mark.asyncio
    async def test_missing_file(self, cache_store, tmp_path):
        checker = DuplicateChecker(cache_store, "flickr")
        with pytest.raises(FileError):
            await checker.check(tmp_path / "nope.jpg")

    @pytest.mark.asyncio
    async def test_cache_failure_propagates(self, sample_image):
        store = AsyncMock()
        store.lookup.side_effect = StorageError("database is locked")
        searcher = _searcher()
        checker = DuplicateChecker(store, "flickr")
        checker.register_searcher("flickr", searcher)
        with pytest.raises(StorageError):
            await checker.check(sample_image)
        searcher.search_by_fingerprint.assert_not_called()

    @pytest.mark.asyncio
    async def test_record_propagates_storage_error(self, sample_record):
        store = AsyncMock()
        store.record.side_effect = StorageError("readonly")
        checker = DuplicateChecker(store, "flickr")
        with pytest.raises(StorageError):
            await checker.record(sample_record)
