"""Logging setup shared by the Flask factory and gunicorn workers."""
from __future__ import annotations
import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Send package logs to stderr at ``level``.

    Only the ``session_gateway`` logger tree is configured; third-party
    loggers (urllib3, werkzeug) keep their own settings.
    """
    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"default": {"format": LOG_FORMAT}},
        "handlers": {
            "stderr": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "stream": "ext://sys.stderr",
            },
        },
        "loggers": {
            "session_gateway": {
                "handlers": ["stderr"],
                "level": level,
                "propagate": False,
            },
        },
    })
