"""Upload provider - orchestrates image variants and the object stores.

This is the entry point the CMS file-storage layer talks to. It decides which
store an asset belongs to, derives image variants before uploading, and
removes every derived object again on delete.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from media_provider.core.config import ProviderConfig
from media_provider.core.enums import (
    RESERVED_VARIANT_PREFIXES,
    WEBP_EXTENSION,
    AccessLevel,
    MediaKind,
    resolve_access_level,
)
from media_provider.services.images import ImageVariantGenerator
from media_provider.services.storage import (
    GeneratedVariant,
    MediaFile,
    ObjectStore,
    S3ObjectStore,
    S3StoreSettings,
)

logger = logging.getLogger(__name__)


def variant_key(name: str, file_hash: str, ext: str) -> str:
    """Key of a derived object: ``{name}_{hash}{ext}``."""
    return f"{name}_{file_hash}{ext}"


def original_key(file: MediaFile) -> str:
    """Key of the original object: ``{hash}{ext}``."""
    return f"{file.hash}{file.ext}"


def build_store_settings(config: ProviderConfig) -> tuple[S3StoreSettings, S3StoreSettings]:
    """Build independent settings for the default and the video store."""
    default = S3StoreSettings(
        region=config.region,
        access_key_id=config.access_key_id,
        secret_access_key=config.secret_access_key,
        endpoint=config.endpoint,
        params=config.params,
        prefix=config.key_prefix,
        custom_domain=config.custom_domain,
    )
    video = S3StoreSettings(
        region=config.region,
        access_key_id=config.video_access_key_id,
        secret_access_key=config.video_secret_access_key,
        endpoint=config.video_endpoint,
        params=config.video_params,
        prefix=config.key_prefix,
        custom_domain=config.custom_video_domain,
    )
    return default, video


class MediaStorageProvider:
    """Uploads and deletes media assets across a default and a video store."""

    def __init__(
        self,
        config: ProviderConfig,
        *,
        store: ObjectStore | None = None,
        video_store: ObjectStore | None = None,
        generator: ImageVariantGenerator | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Resolved provider configuration.
            store: Store for images and other files (built from config if omitted).
            video_store: Store for video files (built from config if omitted).
            generator: Image variant generator (built from config if omitted).
        """
        self._config = config
        if store is None or video_store is None:
            default_settings, video_settings = build_store_settings(config)
            store = store or S3ObjectStore(default_settings)
            video_store = video_store or S3ObjectStore(video_settings)
        self._store = store
        self._video_store = video_store
        self._generator = generator or ImageVariantGenerator(config)

    @classmethod
    def from_options(cls, options: Mapping[str, Any]) -> MediaStorageProvider:
        """Build a provider from the CMS option mapping."""
        return cls(ProviderConfig.from_options(options))

    @property
    def config(self) -> ProviderConfig:
        return self._config

    def is_thumbnailable(self, file: MediaFile) -> bool:
        """Whether variants are derived for ``file``.

        Requires configured thumbnails, an image extension, and a hash that
        is not itself a derived variant's.
        """
        return (
            self._config.has_thumbnails
            and file.kind is MediaKind.IMAGE
            and not file.hash.startswith(RESERVED_VARIANT_PREFIXES)
        )

    def store_for(self, file: MediaFile) -> ObjectStore:
        """Store holding the original object of ``file``."""
        if file.is_video:
            return self._video_store
        # Re-encoded assets may no longer carry a video extension
        video_domain = self._config.video_domain
        if video_domain and file.url and video_domain in file.url:
            return self._video_store
        return self._store

    def access_level_for(self, ext: str) -> AccessLevel:
        """ACL for an object with extension ``ext``; video objects stay private."""
        access_level = resolve_access_level(self._config)
        if MediaKind.from_extension(ext) is MediaKind.VIDEO:
            return AccessLevel.PRIVATE
        return access_level

    async def upload(self, file: MediaFile) -> None:
        """Upload ``file`` and its image variants, then set ``file.url``.

        Raises:
            InvalidConfigurationError: If the configured access level is invalid.
            ImageProcessingError: If a variant or the original cannot be re-encoded.
            StorageUploadError: If any object upload fails. Variants already
                uploaded are left in place.
        """
        if self.is_thumbnailable(file):
            batches = await self._generator.generate(file)
            await asyncio.gather(
                *(self._upload_variant(file, image) for images in batches for image in images)
            )

            if file.dimensions is None:
                file.buffer = await self._generator.optimize(file)
                file.size = round(len(file.buffer) / 1000, 2)

        store = self._video_store if file.is_video else self._store
        object_key = store.build_object_key(file, original_key(file))
        result = await store.upload(
            object_key=object_key,
            body=file.buffer,
            content_type=file.mime,
            acl=self.access_level_for(file.ext),
        )
        file.url = result.url

    async def _upload_variant(self, file: MediaFile, image: GeneratedVariant) -> None:
        # Variants are image-derived, so the video ACL override never applies
        object_key = self._store.build_object_key(
            file, variant_key(image.name, file.hash, image.ext)
        )
        await self._store.upload(
            object_key=object_key,
            body=image.buffer,
            content_type=image.mime,
            acl=self.access_level_for(image.ext),
        )

    def derived_keys(self, file: MediaFile) -> list[str]:
        """Keys of every derived object that may exist for ``file``.

        These live in the default store regardless of where the original is.
        """
        keys: list[str] = []
        if self.is_thumbnailable(file):
            for spec in self._config.thumbnails or []:
                keys.append(variant_key(spec.name, file.hash, file.ext))
                if self._config.webp:
                    keys.append(variant_key(spec.name, file.hash, WEBP_EXTENSION))
        if self._config.webp:
            keys.append(f"{file.hash}{WEBP_EXTENSION}")
        return [self._store.build_object_key(file, key) for key in keys]

    async def delete(self, file: MediaFile) -> None:
        """Delete ``file`` and every derived object.

        Derived objects are deleted concurrently with the original. Their
        failures are logged and swallowed; only a failure deleting the
        original is raised.

        Raises:
            StorageDeleteError: If deleting the original fails.
        """
        side_keys = self.derived_keys(file)
        store = self.store_for(file)
        object_key = store.build_object_key(file, original_key(file))

        outcomes = await asyncio.gather(
            *(self._store.delete(key) for key in side_keys),
            store.delete(object_key),
            return_exceptions=True,
        )

        *side_outcomes, primary_outcome = outcomes
        for key, outcome in zip(side_keys, side_outcomes):
            if isinstance(outcome, Exception):
                logger.warning(f"Failed to delete derived file {key}: {outcome}")

        if isinstance(primary_outcome, BaseException):
            raise primary_outcome

    async def health_check(self) -> dict[str, bool]:
        """Check both stores.

        Returns:
            Mapping of store name to health status.
        """
        default_ok, video_ok = await asyncio.gather(
            self._store.health_check(),
            self._video_store.health_check(),
        )
        return {"default": default_ok, "video": video_ok}

    async def close(self) -> None:
        """Close both stores."""
        await self._store.close()
        await self._video_store.close()


def init(options: Mapping[str, Any]) -> MediaStorageProvider:
    """Create the provider the CMS registers for file storage."""
    provider = MediaStorageProvider.from_options(options)
    logger.info(
        f"Initialized media provider (thumbnails={len(provider.config.thumbnails or [])}, "
        f"webp={provider.config.webp})"
    )
    return provider
