"""
Logging configuration for the gateway and the pixie-query command.

The server logs to stdout and drops uvicorn access lines for liveness
checks. The command logs to stderr so its stdout stays machine readable.
"""

import logging
import logging.config
from typing import Any, Dict, Iterable, Tuple

HEALTH_PATHS: Tuple[str, ...] = ("/healthz",)

# Loggers whose level follows the configured level
APP_LOGGERS = ("pixie_gateway", "pxapi")
SERVER_LOGGERS = ("uvicorn", "uvicorn.error")

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class HealthCheckFilter(logging.Filter):
    """Drop uvicorn access records for GET requests on health paths."""

    def __init__(self, paths: Iterable[str] = HEALTH_PATHS):
        super().__init__()
        self.paths = tuple(paths)

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name != "uvicorn.access":
            return True
        # uvicorn passes (client, method, path, http_version, status)
        args = record.args
        if isinstance(args, tuple) and len(args) == 5:
            method, path = args[1], str(args[2])
            return not (method == "GET" and path.split("?", 1)[0] in self.paths)
        message = record.getMessage()
        return not any(f'"GET {path} ' in message or f'"GET {path}?' in message for path in self.paths)


def get_logging_config(
    level: str = "INFO",
    stream: str = "ext://sys.stdout",
    health_paths: Iterable[str] = HEALTH_PATHS,
) -> Dict[str, Any]:
    """
    Build a dictConfig dictionary.

    Args:
        level: Level for the gateway and pxapi loggers
        stream: Handler target, in dictConfig "ext://" form
        health_paths: Request paths whose access lines are dropped
    """
    level = level.upper()
    loggers: Dict[str, Any] = {
        name: {"handlers": ["default"], "level": level, "propagate": False} for name in APP_LOGGERS
    }
    for name in SERVER_LOGGERS:
        loggers[name] = {"handlers": ["default"], "level": "INFO", "propagate": False}
    loggers["uvicorn.access"] = {"handlers": ["access"], "level": "INFO", "propagate": False}

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "health_check_filter": {"()": HealthCheckFilter, "paths": tuple(health_paths)},
        },
        "formatters": {
            "default": {"format": DEFAULT_FORMAT},
            "access": {"format": "%(message)s"},
        },
        "handlers": {
            "default": {"class": "logging.StreamHandler", "formatter": "default", "stream": stream},
            "access": {
                "class": "logging.StreamHandler",
                "formatter": "access",
                "stream": stream,
                "filters": ["health_check_filter"],
            },
        },
        "loggers": loggers,
        "root": {"level": "WARNING", "handlers": ["default"]},
    }


def configure_logging(level: str = "INFO", stream: str = "ext://sys.stdout") -> None:
    logging.config.dictConfig(get_logging_config(level, stream=stream))
