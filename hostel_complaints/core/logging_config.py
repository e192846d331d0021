"""
Logging setup
"""
import logging
import logging.config
from typing import Optional

from hostel_complaints.core.config import settings


def configure_logging(level: Optional[str] = None) -> None:
    """Install a single console handler for the application loggers"""
    level = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            },
        },
        "loggers": {
            "hostel_complaints": {
                "handlers": ["console"],
                "level": level,
                "propagate": False,
            },
        },
    })
    logging.getLogger(__name__).debug("Logging configured at %s", level)
