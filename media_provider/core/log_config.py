"""Logging setup for hosts embedding the provider."""

import logging.config

from media_provider.core.config import Settings, get_settings


def configure_logging(settings: Settings | None = None) -> None:
    """Apply the provider logging configuration.

    Hosts with their own logging setup can skip this; every module logs
    through ``logging.getLogger(__name__)`` under the ``media_provider`` tree.
    """
    settings = settings or get_settings()
    level = "DEBUG" if settings.debug else "INFO"

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {
                "level": level,
                "handlers": ["console"],
            },
            "formatters": {
                "standard": {
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                },
            },
            "loggers": {
                "media_provider": {
                    "level": level,
                    "propagate": True,
                },
                "botocore": {
                    "level": "WARNING",
                    "propagate": False,
                },
                "aiobotocore": {
                    "level": "WARNING",
                    "propagate": False,
                },
                "PIL": {
                    "level": "WARNING",
                    "propagate": False,
                },
            },
        }
    )
