"""imgup: duplicate-aware photo uploads to Flickr and SmugMug."""

from imgup.version import __version__

__all__ = ["__version__"]
