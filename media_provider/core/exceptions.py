"""Provider-level exceptions."""

from __future__ import annotations


class InvalidConfigurationError(ValueError):
    """Raised when provider configuration holds an unusable value."""


class ImageProcessingError(Exception):
    """Raised when an image cannot be decoded, resized or re-encoded."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause
