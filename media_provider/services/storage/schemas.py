"""Media file DTOs using msgspec."""

from __future__ import annotations

import msgspec

from media_provider.core.enums import MediaKind


class Dimensions(msgspec.Struct, frozen=True, kw_only=True):
    """Pixel size of an inspected image."""

    width: int
    height: int | None = None


class MediaFile(msgspec.Struct, kw_only=True):
    """An asset handed over by the CMS for storage.

    The CMS core constructs it before calling ``upload`` and sets
    ``dimensions`` once it has inspected the image. ``upload`` mutates
    ``buffer``, ``size`` and ``url`` in place; ``delete`` reads ``hash``,
    ``ext``, ``path`` and ``url`` back to rebuild the same object keys.
    """

    hash: str
    ext: str
    mime: str
    buffer: bytes = b""
    path: str | None = None
    dimensions: Dimensions | None = None
    size: float | None = None  # kilobytes
    url: str | None = None

    def __post_init__(self) -> None:
        # Binary strings carry one byte per code point
        if isinstance(self.buffer, str):
            self.buffer = self.buffer.encode("latin-1")

    @property
    def width(self) -> int | None:
        return self.dimensions.width if self.dimensions else None

    @property
    def kind(self) -> MediaKind:
        return MediaKind.from_extension(self.ext)

    @property
    def is_video(self) -> bool:
        return self.kind is MediaKind.VIDEO


class GeneratedVariant(msgspec.Struct, kw_only=True):
    """Resized, re-encoded copy of an original image, tagged with its name."""

    buffer: bytes
    mime: str
    ext: str
    name: str


class UploadResult(msgspec.Struct, kw_only=True):
    """Result of a successful object upload."""

    object_key: str
    location: str
    url: str  # location, or custom domain URL when one is configured
