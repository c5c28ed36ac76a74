"""Object store exceptions."""

from __future__ import annotations


class StorageError(Exception):
    """Base exception for object store operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class StorageUploadError(StorageError):
    """Raised when putting an object fails."""


class StorageDeleteError(StorageError):
    """Raised when deleting an object fails."""
