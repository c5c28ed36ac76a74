"""S3-compatible object store implementation."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING, Any
from urllib.parse import quote, urlsplit

import aioboto3
from botocore.config import Config
from botocore.exceptions import ClientError

from media_provider.core.config import DISABLED_DOMAIN

from .exceptions import StorageDeleteError, StorageUploadError
from .schemas import MediaFile, UploadResult

if TYPE_CHECKING:
    from types_aiobotocore_s3 import S3Client

    from media_provider.core.enums import AccessLevel

logger = logging.getLogger(__name__)

DEFAULT_REGION = "us-east-1"


class S3StoreSettings:
    """Configuration for one S3-compatible store."""

    def __init__(
        self,
        *,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        endpoint: str | None = None,
        params: dict[str, Any] | None = None,
        prefix: str = "",
        custom_domain: str | None = None,
    ) -> None:
        self.region = region
        self.access_key_id = access_key_id.strip() if access_key_id else None
        self.secret_access_key = secret_access_key.strip() if secret_access_key else None
        self.endpoint = endpoint
        self.params = dict(params or {})
        self.prefix = prefix
        self.custom_domain = custom_domain

    @property
    def has_credentials(self) -> bool:
        """Explicit credentials are used only when both parts are present."""
        return bool(self.access_key_id and self.secret_access_key)

    @property
    def bucket(self) -> str | None:
        return self.params.get("Bucket")

    @property
    def public_domain(self) -> str | None:
        """Custom domain, None when unset or disabled with ``-``."""
        if self.custom_domain and self.custom_domain != DISABLED_DOMAIN:
            return self.custom_domain
        return None


class S3ObjectStore:
    """S3-compatible object store.

    Each instance owns its own aioboto3 session so that stores with
    different credentials never share SDK state.
    """

    def __init__(self, settings: S3StoreSettings) -> None:
        """Initialize the store.

        Args:
            settings: Store configuration.
        """
        self._settings = settings
        if settings.has_credentials:
            self._session = aioboto3.Session(
                aws_access_key_id=settings.access_key_id,
                aws_secret_access_key=settings.secret_access_key,
                region_name=settings.region,
            )
        else:
            # Fall back to the default credential chain
            self._session = aioboto3.Session(region_name=settings.region)
        self._client_config = Config(
            signature_version="s3v4",
            retries={"max_attempts": 3, "mode": "adaptive"},
            connect_timeout=10,
            read_timeout=30,
        )

    @property
    def settings(self) -> S3StoreSettings:
        return self._settings

    @asynccontextmanager
    async def _get_client(self) -> AsyncIterator[S3Client]:
        """Get S3 client with context management.

        Yields:
            Configured S3 client.
        """
        async with self._session.client(  # type: ignore[reportGeneralTypeIssues]
            "s3",
            endpoint_url=self._endpoint_url,
            config=self._client_config,
        ) as client:
            yield client

    @property
    def _endpoint_url(self) -> str | None:
        endpoint = self._settings.endpoint
        if endpoint and "://" not in endpoint:
            return f"https://{endpoint}"
        return endpoint

    def build_object_key(self, file: MediaFile, key: str) -> str:
        """Build the full object key for a file.

        Key format: ``{prefix}{path/}{key}``
        """
        path = f"{file.path}/" if file.path else ""
        return f"{self._settings.prefix}{path}{key}"

    def object_location(self, object_key: str) -> str:
        """Virtual-hosted style URL of an object."""
        quoted = quote(object_key)
        bucket = self._settings.bucket
        endpoint_url = self._endpoint_url

        if endpoint_url:
            parts = urlsplit(endpoint_url)
            base_path = parts.path.rstrip("/")
            host = f"{bucket}.{parts.netloc}" if bucket else parts.netloc
            return f"{parts.scheme}://{host}{base_path}/{quoted}"

        region = self._settings.region or DEFAULT_REGION
        return f"https://{bucket}.s3.{region}.amazonaws.com/{quoted}"

    def public_url(self, object_key: str, location: str) -> str:
        """URL stored on the file: custom domain when configured, else location."""
        if domain := self._settings.public_domain:
            return f"{domain}/{object_key}"
        return location

    async def upload(
        self,
        *,
        object_key: str,
        body: bytes,
        content_type: str,
        acl: AccessLevel,
    ) -> UploadResult:
        """Put an object into the store."""
        try:
            async with self._get_client() as client:
                # Request fields override bound params of the same name
                await client.put_object(
                    **{
                        **self._settings.params,
                        "Key": object_key,
                        "Body": body,
                        "ContentType": content_type,
                        "ACL": acl.value,
                    }
                )

            logger.info(f"Uploaded file: {object_key} ({len(body)} bytes, acl={acl.value})")

        except ClientError as e:
            logger.error(f"Upload failed for {object_key}: {e}")
            raise StorageUploadError(
                f"Failed to upload file: {e.response['Error']['Message']}",
                cause=e,
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error uploading {object_key}: {e}")
            raise StorageUploadError(f"Upload failed: {e}", cause=e) from e

        location = self.object_location(object_key)
        return UploadResult(
            object_key=object_key,
            location=location,
            url=self.public_url(object_key, location),
        )

    async def delete(self, object_key: str) -> None:
        """Delete an object from the store."""
        try:
            async with self._get_client() as client:
                await client.delete_object(
                    Bucket=self._settings.bucket,
                    Key=object_key,
                )
            logger.info(f"Deleted file: {object_key}")

        except ClientError as e:
            logger.error(f"Delete failed for {object_key}: {e}")
            raise StorageDeleteError(
                f"Failed to delete file: {e.response['Error']['Message']}",
                cause=e,
            ) from e
        except Exception as e:
            logger.error(f"Unexpected error deleting {object_key}: {e}")
            raise StorageDeleteError(f"Delete failed: {e}", cause=e) from e

    async def health_check(self) -> bool:
        """Check if the bucket is accessible."""
        try:
            async with self._get_client() as client:
                await client.head_bucket(Bucket=self._settings.bucket)
                return True
        except Exception as e:
            logger.warning(f"Health check failed for bucket {self._settings.bucket}: {e}")
            return False

    async def close(self) -> None:
        """Close any open connections.

        Note: aioboto3 manages connections per-context, so this is a no-op.
        Kept for protocol compliance.
        """
        pass
