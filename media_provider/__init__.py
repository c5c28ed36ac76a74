"""S3-compatible media upload provider with image variants."""

from media_provider.services import MediaStorageProvider, init

__all__ = ["MediaStorageProvider", "init"]
