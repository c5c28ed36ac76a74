"""Provider configuration.

`ProviderConfig` is the immutable view the pipelines work with. It is decoded
from the option mapping handed over by the CMS (camelCase keys) or built from
environment variables through `Settings`.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import lru_cache
from typing import Any, Literal

import msgspec
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from media_provider.core.exceptions import InvalidConfigurationError

DEFAULT_QUALITY = 80

# Custom domain value that disables URL rewriting
DISABLED_DOMAIN = "-"

ResizeFit = Literal["cover", "contain", "fill", "inside", "outside"]

# Anchor used when cropping (cover) or padding (contain)
ResizePosition = Literal[
    "centre",
    "center",
    "top",
    "right",
    "bottom",
    "left",
    "right top",
    "right bottom",
    "left bottom",
    "left top",
    "north",
    "northeast",
    "east",
    "southeast",
    "south",
    "southwest",
    "west",
    "northwest",
]


class ResizeOptions(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Resize parameters for a variant or for oversized originals.

    Keys other than these are ignored.
    """

    width: int | None = None
    height: int | None = None
    fit: ResizeFit = "cover"
    position: ResizePosition = "centre"
    background: str | list[int] | None = None  # contain padding colour
    without_enlargement: bool = False

    @property
    def is_noop(self) -> bool:
        """True when neither dimension is set."""
        return self.width is None and self.height is None


class VariantSpec(msgspec.Struct, frozen=True, kw_only=True):
    """Named resize specification, e.g. ``thumbnail``."""

    name: str
    options: ResizeOptions | None = None


class ProviderConfig(msgspec.Struct, frozen=True, kw_only=True, rename="camel"):
    """Immutable provider configuration resolved once at initialization."""

    region: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    endpoint: str | None = None
    params: dict[str, Any] = msgspec.field(default_factory=dict)

    video_access_key_id: str | None = None
    video_secret_access_key: str | None = None
    video_endpoint: str | None = None
    video_params: dict[str, Any] = msgspec.field(default_factory=dict)

    prefix: str | None = None
    access_level: str | None = None
    custom_domain: str | None = None
    custom_video_domain: str | None = None

    thumbnails: list[VariantSpec] | None = None
    webp: bool = False
    quality: int = DEFAULT_QUALITY
    optimize: ResizeOptions | None = None

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> ProviderConfig:
        """Decode the CMS option mapping.

        Raises:
            InvalidConfigurationError: If an option has the wrong shape.
        """
        try:
            return msgspec.convert(dict(options), cls, strict=False)
        except msgspec.ValidationError as e:
            raise InvalidConfigurationError(f"Invalid provider options: {e}") from e

    @property
    def key_prefix(self) -> str:
        """Object key prefix with surrounding whitespace removed."""
        return self.prefix.strip() if self.prefix else ""

    @property
    def has_thumbnails(self) -> bool:
        return bool(self.thumbnails)

    @property
    def video_domain(self) -> str | None:
        """Custom video domain, None when unset or disabled."""
        if self.custom_video_domain and self.custom_video_domain != DISABLED_DOMAIN:
            return self.custom_video_domain
        return None


class Settings(BaseSettings):
    """Provider settings loaded from environment variables (``MEDIA_*``)."""

    model_config = SettingsConfigDict(
        env_prefix="MEDIA_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(default=False, description="Enable debug logging")

    # Default store
    region: str | None = Field(default=None, description="Object store region")
    access_key_id: str | None = Field(default=None, description="Access key ID")
    secret_access_key: str | None = Field(default=None, description="Secret access key")
    endpoint: str | None = Field(default=None, description="S3-compatible endpoint URL")
    bucket: str | None = Field(default=None, description="Bucket for images and documents")
    custom_domain: str | None = Field(
        default=None,
        description="Public URL base replacing the store location ('-' disables)",
    )

    # Video store
    video_access_key_id: str | None = Field(default=None, description="Video store access key ID")
    video_secret_access_key: str | None = Field(
        default=None,
        description="Video store secret access key",
    )
    video_endpoint: str | None = Field(default=None, description="Video store endpoint URL")
    video_bucket: str | None = Field(default=None, description="Bucket for video files")
    custom_video_domain: str | None = Field(
        default=None,
        description="Public URL base for video files ('-' disables)",
    )

    # Keys and ACL
    prefix: str | None = Field(default=None, description="Prefix prepended to every object key")
    access_level: str | None = Field(default=None, description="Canned ACL for uploads")

    # Image processing
    thumbnails: list[dict[str, Any]] = Field(
        default_factory=list,
        description="Variant specs as JSON: [{name, options}]",
    )
    webp: bool = Field(default=False, description="Also produce WebP variants")
    quality: int = Field(default=DEFAULT_QUALITY, ge=1, le=100, description="Encoder quality")
    optimize: dict[str, Any] = Field(
        default_factory=dict,
        description="Resize options applied to originals of unknown size",
    )

    def to_provider_config(self) -> ProviderConfig:
        """Build the immutable provider configuration."""
        options: dict[str, Any] = {
            "region": self.region,
            "accessKeyId": self.access_key_id,
            "secretAccessKey": self.secret_access_key,
            "endpoint": self.endpoint,
            "params": {"Bucket": self.bucket} if self.bucket else {},
            "videoAccessKeyId": self.video_access_key_id,
            "videoSecretAccessKey": self.video_secret_access_key,
            "videoEndpoint": self.video_endpoint,
            "videoParams": {"Bucket": self.video_bucket} if self.video_bucket else {},
            "prefix": self.prefix,
            "accessLevel": self.access_level,
            "customDomain": self.custom_domain,
            "customVideoDomain": self.custom_video_domain,
            "thumbnails": self.thumbnails or None,
            "webp": self.webp,
            "quality": self.quality,
            "optimize": self.optimize,
        }
        return ProviderConfig.from_options(options)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reset_settings() -> None:
    """Reset cached settings (useful for testing)."""
    get_settings.cache_clear()
