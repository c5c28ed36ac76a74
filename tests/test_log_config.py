"""Tests for logging setup."""

import logging
from collections.abc import Iterator

import pytest

from media_provider.core.config import Settings
from media_provider.core.log_config import configure_logging


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Put root and library loggers back after the test."""
    names = ["", "media_provider", "botocore", "aiobotocore", "PIL"]
    saved = {
        name: (logging.getLogger(name).level, logging.getLogger(name).propagate) for name in names
    }
    root_handlers = logging.getLogger().handlers[:]
    yield
    for name, (level, propagate) in saved.items():
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.propagate = propagate
    logging.getLogger().handlers[:] = root_handlers


@pytest.mark.usefixtures("restore_logging")
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_debug_level(self) -> None:
        """Test debug settings lower the package level."""
        configure_logging(Settings(debug=True))

        assert logging.getLogger("media_provider").level == logging.DEBUG
        assert logging.getLogger("botocore").level == logging.WARNING

    def test_info_level(self) -> None:
        """Test default settings log at info."""
        configure_logging(Settings(debug=False))

        assert logging.getLogger("media_provider").level == logging.INFO
        assert logging.getLogger().level == logging.INFO
