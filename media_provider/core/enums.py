from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

from media_provider.core.exceptions import InvalidConfigurationError

if TYPE_CHECKING:
    from media_provider.core.config import ProviderConfig


class AccessLevel(str, Enum):
    """Canned ACLs accepted for uploaded objects."""

    PRIVATE = "private"
    PUBLIC_READ = "public-read"
    PUBLIC_READ_WRITE = "public-read-write"
    AUTHENTICATED_READ = "authenticated-read"
    BUCKET_OWNER_READ = "bucket-owner-read"
    BUCKET_OWNER_FULL_CONTROL = "bucket-owner-full-control"


DEFAULT_ACCESS_LEVEL = AccessLevel.PUBLIC_READ


def resolve_access_level(config: ProviderConfig) -> AccessLevel:
    """Resolve the ACL applied to uploaded objects.

    Raises:
        InvalidConfigurationError: If the configured value is not a known ACL.
    """
    if not config.access_level:
        return DEFAULT_ACCESS_LEVEL
    try:
        return AccessLevel(config.access_level)
    except ValueError as e:
        choices = ", ".join(level.value for level in AccessLevel)
        raise InvalidConfigurationError(
            f"The object access level: {config.access_level} is not valid. "
            f"Please choose from: {choices}"
        ) from e


class MediaKind(str, Enum):
    """Broad category of a stored file, derived from its extension."""

    IMAGE = "image"
    VIDEO = "video"
    OTHER = "other"

    @classmethod
    def from_extension(cls, ext: str) -> MediaKind:
        """Classify an extension (with or without leading dot)."""
        normalized = ext.lower().lstrip(".")
        if normalized in IMAGE_EXTENSIONS:
            return cls.IMAGE
        if normalized in VIDEO_EXTENSIONS:
            return cls.VIDEO
        return cls.OTHER


class ImageFormat(str, Enum):
    """Image formats the variant pipeline can re-encode."""

    PNG = "png"
    JPEG = "jpeg"
    WEBP = "webp"

    @classmethod
    def from_extension(cls, ext: str) -> ImageFormat | None:
        """Get format from file extension, None when unsupported."""
        return IMAGE_EXTENSIONS.get(ext.lower().lstrip("."))

    @property
    def content_type(self) -> str:
        """Get MIME type for format."""
        return f"image/{self.value}"

    @property
    def pillow_format(self) -> str:
        """Format name understood by Pillow's ``Image.save``."""
        return self.value.upper()


class VideoFormat(str, Enum):
    """Video containers routed to the video store."""

    MP4 = "mp4"
    MOV = "mov"
    WMV = "wmv"
    FLV = "flv"
    AVI = "avi"
    WEBM = "webm"
    MKV = "mkv"


IMAGE_EXTENSIONS: dict[str, ImageFormat] = {
    "png": ImageFormat.PNG,
    "jpg": ImageFormat.JPEG,
    "jpeg": ImageFormat.JPEG,
    "webp": ImageFormat.WEBP,
}
VIDEO_EXTENSIONS = frozenset(fmt.value for fmt in VideoFormat)

# Hash prefixes the CMS core gives to variants it derives itself
RESERVED_VARIANT_PREFIXES = ("thumbnail_", "large_", "medium_", "small_")

WEBP_CONTENT_TYPE = ImageFormat.WEBP.content_type
WEBP_EXTENSION = ".webp"
