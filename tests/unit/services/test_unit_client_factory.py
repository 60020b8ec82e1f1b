# tests/unit/services/test_unit_client_factory.py - v1
"""Tests for services/client_factory.py."""

from __future__ import annotations

import httpx
import pytest

from imgup.config.settings import Settings
from imgup.core.errors import UnsupportedServiceError
from imgup.services import client_factory
from imgup.services.adapters.flickr_client import FlickrClient
from imgup.services.adapters.smugmug_client import SmugMugClient
from imgup.services.client_factory import (
    available_services,
    create_service_client,
    register_service,
)


@pytest.fixture
def http():
    return httpx.AsyncClient()


class TestCreateServiceClient:
    def test_flickr(self, http):
        settings = Settings(_env_file=None, flickr_user_id="me@N00")
        client = create_service_client("flickr", http, settings)
        assert isinstance(client, FlickrClient)
        assert client.user_id == "me@N00"

    def test_smugmug(self, http):
        settings = Settings(_env_file=None, smugmug_album_key="alb1")
        client = create_service_client("smugmug", http, settings)
        assert isinstance(client, SmugMugClient)
        assert client.album_key == "alb1"

    def test_unsupported(self, http):
        with pytest.raises(UnsupportedServiceError, match="picasa"):
            create_service_client("picasa", http)

    def test_available(self):
        assert {"flickr", "smugmug"} <= set(available_services())

    def test_register_custom(self, http, monkeypatch):
        monkeypatch.setattr(client_factory, "_SERVICE_REGISTRY", dict(client_factory._SERVICE_REGISTRY))
        register_service("flickr2", "imgup.services.adapters.flickr_client.FlickrClient")
        client = create_service_client("flickr2", http, Settings(_env_file=None))
        assert isinstance(client, FlickrClient)
