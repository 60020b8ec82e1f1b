# src/services/client_factory.py - v1
"""Factory: instantiate a service client from its name.

The registry maps service names to adapter class paths and imports them
lazily. Each adapter builds itself from Settings via from_settings().
"""

from __future__ import annotations

import importlib
import logging

import httpx

from imgup.config.settings import Settings
from imgup.core.errors import UnsupportedServiceError
from imgup.services.base_client import BaseServiceClient

logger = logging.getLogger(__name__)

_SERVICE_REGISTRY: dict[str, str] = {
    "flickr": "imgup.services.adapters.flickr_client.FlickrClient",
    "smugmug": "imgup.services.adapters.smugmug_client.SmugMugClient",
}


def create_service_client(
    service: str,
    http_client: httpx.AsyncClient,
    settings: Settings | None = None,
) -> BaseServiceClient:
    """Instantiate the adapter for a service.

    Args:
        service: Service identifier (flickr, smugmug).
        http_client: Authenticated HTTP client; signing is its concern.
        settings: Application settings. Defaults are used when None.

    Raises:
        UnsupportedServiceError: If the service is not registered.
    """
    if service not in _SERVICE_REGISTRY:
        raise UnsupportedServiceError(
            f"Unsupported service: {service!r}. "
            f"Available: {', '.join(sorted(_SERVICE_REGISTRY))}"
        )

    client_cls = _import_class(_SERVICE_REGISTRY[service])
    logger.debug("Creating service client: %s", service)
    return client_cls.from_settings(http_client, settings or Settings())


def register_service(name: str, class_path: str) -> None:
    """Register a custom service adapter.

    The class must implement BaseServiceClient and a from_settings()
    classmethod taking (http_client, settings).
    """
    _SERVICE_REGISTRY[name] = class_path
    logger.info("Registered service client: %s -> %s", name, class_path)


def available_services() -> list[str]:
    return sorted(_SERVICE_REGISTRY)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
