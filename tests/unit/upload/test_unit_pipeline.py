# tests/unit/upload/test_unit_pipeline.py - v1
"""Tests for upload/pipeline.py - ensure_uploaded."""

from __future__ import annotations

import logging
from unittest.mock import AsyncMock

import pytest

from imgup.cache.models import UploadRecord
from imgup.core.errors import FileError, RemoteStepError, StorageError, TransportError
from imgup.duplicate.checker import DuplicateChecker
from imgup.logging.context import get_context
from imgup.upload.pipeline import UploadPipeline


def _pipeline(client, store, service="flickr") -> UploadPipeline:
    return UploadPipeline(service, client, DuplicateChecker(store, service))


class TestEnsureUploaded:
    @pytest.mark.asyncio
    async def test_new_file_uploaded_and_recorded(self, fake_client, cache_store, sample_image, hello_md5):
        outcome = await _pipeline(fake_client, cache_store).ensure_uploaded(
            sample_image, title="Sunset", tags=["sea"],
        )
        assert outcome.duplicate is False
        assert outcome.remote_id == "12345"

        rec = await cache_store.lookup(hello_md5)
        assert rec.service == "flickr"
        assert rec.remote_id == "12345"
        assert rec.remote_url == outcome.page_url
        assert rec.image_url == outcome.image_url
        assert rec.filename == "sunset.jpg"
        assert rec.size_bytes == 11

    @pytest.mark.asyncio
    async def test_checksum_tag_appended(self, fake_client, cache_store, sample_image, hello_md5):
        await _pipeline(fake_client, cache_store).ensure_uploaded(sample_image, tags=["sea"])
        assert ("add_tags", "12345", ["sea", f"imgup:checksum={hello_md5}"]) in fake_client.calls

    @pytest.mark.asyncio
    async def test_no_checksum_tag_without_machine_tags(self, make_client, cache_store, sample_image):
        client = make_client(name="smugmug", machine_tags=False)
        await _pipeline(client, cache_store, "smugmug").ensure_uploaded(sample_image)
        assert "add_tags" not in client.step_names()

    @pytest.mark.asyncio
    async def test_duplicate_short_circuits(self, fake_client, cache_store, sample_image, sample_record):
        await cache_store.record(sample_record)
        outcome = await _pipeline(fake_client, cache_store).ensure_uploaded(sample_image, title="x")
        assert outcome.duplicate is True
        assert outcome.remote_id == "999"
        assert outcome.page_url == sample_record.remote_url
        assert outcome.image_url == sample_record.image_url
        assert outcome.warnings == []
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_force_upload_bypasses_and_overwrites(
        self, fake_client, cache_store, sample_image, sample_record, hello_md5,
    ):
        await cache_store.record(sample_record)
        outcome = await _pipeline(fake_client, cache_store).ensure_uploaded(
            sample_image, force_upload=True,
        )
        assert outcome.duplicate is False
        assert fake_client.step_names()[0] == "upload_bytes"
        assert (await cache_store.lookup(hello_md5)).remote_id == "12345"

    @pytest.mark.asyncio
    async def test_second_call_hits_cache(self, fake_client, cache_store, sample_image):
        pipeline = _pipeline(fake_client, cache_store)
        first = await pipeline.ensure_uploaded(sample_image)
        fake_client.calls.clear()
        second = await pipeline.ensure_uploaded(sample_image)
        assert second.duplicate is True
        assert second.remote_id == first.remote_id
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_warnings_do_not_prevent_recording(self, make_client, cache_store, sample_image, hello_md5):
        client = make_client(fail_steps={"set_fields", "add_tags", "set_visibility"})
        outcome = await _pipeline(client, cache_store).ensure_uploaded(
            sample_image, title="t", is_private=True,
        )
        assert len(outcome.warnings) == 3
        assert await cache_store.lookup(hello_md5) is not None

    @pytest.mark.asyncio
    async def test_context_cleared(self, fake_client, cache_store, sample_image):
        await _pipeline(fake_client, cache_store).ensure_uploaded(sample_image)
        assert get_context().as_dict() == {}


class TestPipelineFailures:
    @pytest.mark.asyncio
    async def test_size_lookup_crash_still_records(self, fake_client, cache_store, sample_image, hello_md5):
        async def wrong_shape(remote_id):
            raise AttributeError("'list' object has no attribute 'get'")

        fake_client.get_sizes = wrong_shape
        outcome = await _pipeline(fake_client, cache_store).ensure_uploaded(sample_image)
        assert outcome.remote_id == "12345"
        rec = await cache_store.lookup(hello_md5)
        assert rec is not None
        assert rec.image_url == "https://img.example.test/default/12345.jpg"

    @pytest.mark.asyncio
    async def test_missing_file(self, fake_client, cache_store, tmp_path):
        with pytest.raises(FileError):
            await _pipeline(fake_client, cache_store).ensure_uploaded(tmp_path / "missing.jpg")
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_upload_failure_not_recorded(self, make_client, cache_store, sample_image, hello_md5):
        client = make_client(fail_steps={"upload"})
        with pytest.raises(RemoteStepError):
            await _pipeline(client, cache_store).ensure_uploaded(sample_image)
        assert await cache_store.lookup(hello_md5) is None

    @pytest.mark.asyncio
    async def test_check_storage_error_aborts_before_upload(self, fake_client, sample_image):
        store = AsyncMock()
        store.lookup.side_effect = StorageError("locked")
        with pytest.raises(StorageError):
            await _pipeline(fake_client, store).ensure_uploaded(sample_image)
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_metadata_search_failure_aborts(self, fake_client, cache_store, sample_image):
        searcher = AsyncMock()
        searcher.search_by_fingerprint.return_value = None
        searcher.search_by_metadata.side_effect = TransportError("down")
        checker = DuplicateChecker(cache_store, "flickr")
        checker.register_searcher("flickr", searcher)
        with pytest.raises(TransportError):
            await UploadPipeline("flickr", fake_client, checker).ensure_uploaded(sample_image)
        assert fake_client.calls == []

    @pytest.mark.asyncio
    async def test_record_failure_becomes_warning(self, fake_client, sample_image, caplog):
        store = AsyncMock()
        store.lookup.return_value = None
        store.record.side_effect = StorageError("disk full")
        with caplog.at_level(logging.WARNING, logger="imgup"):
            outcome = await _pipeline(fake_client, store).ensure_uploaded(sample_image)
        assert outcome.remote_id == "12345"
        assert [w.step for w in outcome.warnings] == ["record_cache"]
        assert any("Failed to cache upload" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_record_uses_pipeline_service(self, make_client, sample_image):
        store = AsyncMock()
        store.lookup.return_value = None
        client = make_client(name="smugmug", machine_tags=False)
        await _pipeline(client, store, "smugmug").ensure_uploaded(sample_image)
        recorded: UploadRecord = store.record.call_args.args[0]
        assert recorded.service == "smugmug"
