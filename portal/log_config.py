"""
Logging configuration for the portal client.
"""

import logging
import logging.config
from typing import Any, Dict, Optional

from portal.config import get_settings

LOGGING_CONFIG: Dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    },
    "loggers": {
        "portal": {
            "handlers": ["console"],
            "level": "INFO",
            "propagate": False,
        },
        "httpx": {
            "handlers": ["console"],
            "level": "WARNING",
            "propagate": False,
        },
    },
}


def setup_logging(level: Optional[str] = None) -> None:
    """Apply the logging config, overriding the portal level from settings."""
    config = dict(LOGGING_CONFIG)
    config["loggers"] = {name: dict(cfg) for name, cfg in LOGGING_CONFIG["loggers"].items()}
    config["loggers"]["portal"]["level"] = (level or get_settings().LOG_LEVEL).upper()
    logging.config.dictConfig(config)
