"""
Logging configuration for HumanLenk.

Configures application-wide logging from the environment settings: a console
handler always, plus a file handler when `LOG_FILE` is set.
"""

import logging
import logging.config

from humanlenk.database.config.config import Settings


def setup_logging(settings: Settings):
    """Set up logging configuration for the application using environment settings."""
    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "level": settings.LOG_LEVEL,
        },
    }
    if settings.LOG_FILE:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "formatter": "standard",
            "level": settings.LOG_LEVEL,
            "filename": settings.LOG_FILE,
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            },
        },
        "handlers": handlers,
        "root": {
            "handlers": list(handlers),
            "level": settings.LOG_LEVEL,
        },
        "loggers": {
            "humanlenk": {
                "level": settings.LOG_LEVEL,
            },
        },
    }
    logging.config.dictConfig(logging_config)
