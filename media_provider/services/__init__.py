"""Provider services module."""

from .images import ImageVariantGenerator
from .provider import MediaStorageProvider, build_store_settings, init

__all__ = [
    "ImageVariantGenerator",
    "MediaStorageProvider",
    "build_store_settings",
    "init",
]
