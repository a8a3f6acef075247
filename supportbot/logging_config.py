"""
Logging setup shared by the bot and the uvicorn server it runs under.

Access log lines for the health probes are dropped; everything else goes
to stdout.
"""

import logging
import logging.config
from typing import Any, Dict

HEALTH_PATHS = ("/healthz", "/health")


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access lines for GET requests on the health probes."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        message = record.getMessage()
        return not ("GET" in message and any(path in message for path in HEALTH_PATHS))


def get_logging_config(level: str = "INFO") -> Dict[str, Any]:
    """dictConfig for the application; also passed to uvicorn.run."""
    level = level.upper()
    stdout = "ext://sys.stdout"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"health_check_filter": {"()": HealthCheckFilter}},
        "formatters": {
            "default": {"format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": stdout},
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": stdout,
                "filters": ["health_check_filter"],
            },
        },
        "loggers": {
            # uvicorn and uvicorn.error fall through to the root handler
            "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            "supportbot": {"handlers": ["default"], "level": level, "propagate": False},
        },
        "root": {"level": level, "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(get_logging_config(level))
