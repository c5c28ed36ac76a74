"""Object store module.

Provides the object store protocol with an S3-compatible implementation.
"""

from .base import ObjectStore
from .exceptions import (
    StorageDeleteError,
    StorageError,
    StorageUploadError,
)
from .s3 import S3ObjectStore, S3StoreSettings
from .schemas import (
    Dimensions,
    GeneratedVariant,
    MediaFile,
    UploadResult,
)

__all__ = [
    # Protocol
    "ObjectStore",
    # Implementation
    "S3ObjectStore",
    "S3StoreSettings",
    # Schemas
    "Dimensions",
    "GeneratedVariant",
    "MediaFile",
    "UploadResult",
    # Exceptions
    "StorageDeleteError",
    "StorageError",
    "StorageUploadError",
]
