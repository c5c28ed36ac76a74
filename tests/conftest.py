"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from io import BytesIO
from typing import Any
from unittest.mock import AsyncMock

import pytest
from PIL import Image

from media_provider.core.config import ProviderConfig
from media_provider.services import MediaStorageProvider, build_store_settings
from media_provider.services.storage import (
    MediaFile,
    S3ObjectStore,
    S3StoreSettings,
    UploadResult,
)


def make_image(fmt: str = "PNG", size: tuple[int, int] = (400, 200), mode: str = "RGB") -> bytes:
    """Render a solid test image in ``fmt``."""
    output = BytesIO()
    Image.new(mode, size, color="red").save(output, format=fmt)
    return output.getvalue()


def recording_store(settings: S3StoreSettings) -> S3ObjectStore:
    """S3 store whose upload/delete calls are recorded instead of sent."""
    store = S3ObjectStore(settings)

    def fake_upload(*, object_key: str, body: bytes, content_type: str, acl: Any) -> UploadResult:
        location = store.object_location(object_key)
        return UploadResult(
            object_key=object_key,
            location=location,
            url=store.public_url(object_key, location),
        )

    store.upload = AsyncMock(side_effect=fake_upload)  # type: ignore[method-assign]
    store.delete = AsyncMock(return_value=None)  # type: ignore[method-assign]
    return store


@pytest.fixture
def provider_options() -> dict[str, Any]:
    """CMS option mapping as the host hands it over."""
    return {
        "region": "eu-west-1",
        "accessKeyId": " AKIATEST ",
        "secretAccessKey": " secret ",
        "params": {"Bucket": "media-bucket"},
        "videoAccessKeyId": "AKIAVIDEO",
        "videoSecretAccessKey": "video-secret",
        "videoEndpoint": "https://video.storage.example.com",
        "videoParams": {"Bucket": "video-bucket"},
        "prefix": "media/",
        "customDomain": "https://cdn.example.com",
        "customVideoDomain": "https://video.example.com",
        "thumbnails": [
            {"name": "thumbnail", "options": {"width": 50}},
            {"name": "medium", "options": {"width": 100, "height": 100, "fit": "inside"}},
        ],
        "webp": True,
        "quality": 80,
    }


@pytest.fixture
def provider_config(provider_options: dict[str, Any]) -> ProviderConfig:
    """Provide resolved provider configuration."""
    return ProviderConfig.from_options(provider_options)


@pytest.fixture
def default_store(provider_config: ProviderConfig) -> S3ObjectStore:
    """Default store with recorded calls."""
    return recording_store(build_store_settings(provider_config)[0])


@pytest.fixture
def video_store(provider_config: ProviderConfig) -> S3ObjectStore:
    """Video store with recorded calls."""
    return recording_store(build_store_settings(provider_config)[1])


@pytest.fixture
def provider(
    provider_config: ProviderConfig,
    default_store: S3ObjectStore,
    video_store: S3ObjectStore,
) -> MediaStorageProvider:
    """Provider wired to recording stores and the real image generator."""
    return MediaStorageProvider(
        provider_config,
        store=default_store,
        video_store=video_store,
    )


@pytest.fixture
def png_file() -> MediaFile:
    """Fresh PNG upload with unknown dimensions."""
    return MediaFile(
        hash="abc123",
        ext=".png",
        mime="image/png",
        buffer=make_image("PNG"),
        path="uploads",
    )


@pytest.fixture
def video_file() -> MediaFile:
    """MP4 upload."""
    return MediaFile(
        hash="clip42",
        ext=".mp4",
        mime="video/mp4",
        buffer=b"\x00\x00\x00\x18ftypmp42",
    )
