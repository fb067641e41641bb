"""Process logging for the tracker API and its maintenance scripts.

``FITTRACK_LOG_LEVEL`` sets the root level. Telemetry lines go through the
``fittrack.telemetry`` logger, which has its own level so event logs can be
silenced or kept independently (``FITTRACK_TELEMETRY_LOG_LEVEL``). The HTTP
client loggers used by the exercise guide stay at WARNING unless
``FITTRACK_DEBUG_HTTP=1``.
"""

import logging
import os
from logging.config import dictConfig

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
HTTP_CLIENT_LOGGERS = ("httpx", "openai", "uvicorn.access")


def configure_logging() -> None:
    level = os.getenv("FITTRACK_LOG_LEVEL", "INFO").upper()
    telemetry_level = os.getenv("FITTRACK_TELEMETRY_LOG_LEVEL", level).upper()
    http_level = "DEBUG" if os.getenv("FITTRACK_DEBUG_HTTP", "0") == "1" else "WARNING"

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {"format": DEFAULT_LOG_FORMAT},
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "loggers": {
                "fittrack.telemetry": {"level": telemetry_level},
                **{name: {"level": http_level} for name in HTTP_CLIENT_LOGGERS},
            },
            "root": {
                "handlers": ["console"],
                "level": level,
            },
        }
    )
