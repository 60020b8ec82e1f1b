# src/duplicate/searcher_factory.py - v1
"""Factory: name-keyed registry of remote searchers."""

from __future__ import annotations

import importlib
import logging

from imgup.config.settings import Settings
from imgup.duplicate.base_searcher import BaseRemoteSearcher
from imgup.services.base_client import BaseServiceClient

logger = logging.getLogger(__name__)

_SEARCHER_REGISTRY: dict[str, str] = {
    "flickr": "imgup.duplicate.searchers.flickr_searcher.FlickrSearcher",
    "smugmug": "imgup.duplicate.searchers.smugmug_searcher.SmugMugSearcher",
}


def create_searcher(
    service: str,
    client: BaseServiceClient,
    settings: Settings | None = None,
) -> BaseRemoteSearcher | None:
    """Build the remote searcher for a service.

    Returns None when no searcher is registered; the checker then runs in
    local-cache-only mode.
    """
    class_path = _SEARCHER_REGISTRY.get(service)
    if class_path is None:
        logger.debug("No remote searcher registered for %s", service)
        return None

    module_path, class_name = class_path.rsplit(".", 1)
    searcher_cls = getattr(importlib.import_module(module_path), class_name)
    return searcher_cls.from_settings(client, settings or Settings())


def register_searcher_class(name: str, class_path: str) -> None:
    """Register a searcher class path for a service.

    The class must implement BaseRemoteSearcher and a from_settings()
    classmethod taking (client, settings).
    """
    _SEARCHER_REGISTRY[name] = class_path
    logger.info("Registered remote searcher: %s -> %s", name, class_path)


def unregister_searcher_class(name: str) -> None:
    _SEARCHER_REGISTRY.pop(name, None)
