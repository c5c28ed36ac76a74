"""Object store protocol definition."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from media_provider.core.enums import AccessLevel

    from .schemas import MediaFile, UploadResult


@runtime_checkable
class ObjectStore(Protocol):
    """Protocol for object store backends.

    One instance serves one bucket with its own credentials, endpoint and
    custom domain. Key layout is shared by every backend so that delete
    rebuilds exactly the keys upload wrote.
    """

    def build_object_key(self, file: MediaFile, key: str) -> str:
        """Build the full object key for a file.

        Key format: ``{prefix}{path/}{key}`` where ``key`` is
        ``{variantName_}{hash}{ext}``.
        """
        ...

    async def upload(
        self,
        *,
        object_key: str,
        body: bytes,
        content_type: str,
        acl: AccessLevel,
    ) -> UploadResult:
        """Put an object.

        Args:
            object_key: Full key from `build_object_key`.
            body: Raw object bytes.
            content_type: MIME type stored with the object.
            acl: Canned ACL applied to the object.

        Returns:
            Upload result with the object location and public URL.

        Raises:
            StorageUploadError: If the put fails.
        """
        ...

    async def delete(self, object_key: str) -> None:
        """Delete an object by key.

        Deleting a key that does not exist is not an error.

        Raises:
            StorageDeleteError: If the delete request fails.
        """
        ...

    async def health_check(self) -> bool:
        """Check if the bucket is reachable.

        Returns:
            True if storage is healthy, False otherwise.
        """
        ...

    async def close(self) -> None:
        """Close any open connections.

        Called during host shutdown.
        """
        ...
