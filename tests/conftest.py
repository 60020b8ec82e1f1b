# tests/conftest.py - v1
"""Shared test fixtures for all unit and integration tests.

Provides an in-memory fake service client, sample image files and a
temporary SQLite cache. No network access: remote calls are faked.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from imgup.cache.models import UploadRecord
from imgup.cache.sqlite_store import SqliteCacheStore
from imgup.core.errors import RemoteApiError
from imgup.logging.context import clear_context
from imgup.services.base_client import BaseServiceClient
from imgup.services.models import ImageSize

# MD5 of b"hello world"
HELLO_MD5 = "5eb63bbbe01eeed093cb22bb8f5acdc3"


class FakeServiceClient(BaseServiceClient):
    """Records calls; any step listed in fail_steps raises RemoteApiError."""

    size_preference = ("Large", "Medium")

    def __init__(
        self,
        name: str = "flickr",
        remote_id: str = "12345",
        fail_steps: set[str] | None = None,
        sizes: list[ImageSize] | None = None,
        page_url: str = "https://example.test/photos/12345",
        machine_tags: bool = True,
    ) -> None:
        self.name = name
        self.remote_id = remote_id
        self.fail_steps = set(fail_steps or ())
        self.sizes = sizes if sizes is not None else [
            ImageSize(label="Medium", url="https://img.example.test/m.jpg"),
            ImageSize(label="Large", url="https://img.example.test/l.jpg"),
        ]
        self.page_url = page_url
        self.machine_tags = machine_tags
        self.calls: list[tuple] = []

    @property
    def service_name(self) -> str:
        return self.name

    @property
    def supports_machine_tags(self) -> bool:
        return self.machine_tags

    def _maybe_fail(self, step: str) -> None:
        if step in self.fail_steps:
            raise RemoteApiError(f"{step} rejected", service=self.name, status_code=500)

    async def upload_bytes(self, path):
        self.calls.append(("upload_bytes", str(path)))
        self._maybe_fail("upload")
        return self.remote_id

    async def set_fields(self, remote_id, title, description):
        self.calls.append(("set_fields", remote_id, title, description))
        self._maybe_fail("set_fields")

    async def add_tags(self, remote_id, tags):
        self.calls.append(("add_tags", remote_id, list(tags)))
        self._maybe_fail("add_tags")

    async def set_visibility(self, remote_id, is_private):
        self.calls.append(("set_visibility", remote_id, is_private))
        self._maybe_fail("set_visibility")

    async def get_page_url(self, remote_id):
        self.calls.append(("get_page_url", remote_id))
        self._maybe_fail("get_page_url")
        return self.page_url

    async def get_sizes(self, remote_id):
        self.calls.append(("get_sizes", remote_id))
        self._maybe_fail("get_sizes")
        return list(self.sizes)

    def default_page_url(self, remote_id):
        return f"https://example.test/default/{remote_id}"

    def default_image_url(self, remote_id):
        return f"https://img.example.test/default/{remote_id}.jpg"

    def step_names(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture(autouse=True)
def _reset_log_context():
    clear_context()
    yield
    clear_context()


@pytest.fixture
def fake_client() -> FakeServiceClient:
    return FakeServiceClient()


@pytest.fixture
def sample_image(tmp_path: Path) -> Path:
    """A small file with known content and MD5."""
    path = tmp_path / "sunset.jpg"
    path.write_bytes(b"hello world")
    return path


@pytest.fixture
def other_image(tmp_path: Path) -> Path:
    path = tmp_path / "beach.jpg"
    path.write_bytes(b"a different image")
    return path


@pytest.fixture
def cache_store(tmp_path: Path):
    store = SqliteCacheStore(tmp_path / "cache" / "uploads.db")
    yield store
    store.close()


@pytest.fixture
def sample_record() -> UploadRecord:
    return UploadRecord(
        fingerprint=HELLO_MD5,
        service="flickr",
        remote_id="999",
        remote_url="https://www.flickr.com/photos/me/999",
        image_url="https://live.staticflickr.com/1/999_abc_b.jpg",
        upload_time=datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc),
        filename="sunset.jpg",
        size_bytes=11,
    )


@pytest.fixture
def make_client():
    """Factory for FakeServiceClient with custom behaviour."""
    return FakeServiceClient


@pytest.fixture
def hello_md5() -> str:
    return HELLO_MD5
