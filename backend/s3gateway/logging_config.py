"""
Log output for the gateway.

Every line about a store call can carry the bucket, the requested path and
the store operation as structured fields. Development gets a readable
colored console; anything else gets one JSON object per line. Object
bodies and credentials are never handed to a logger.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict

# Fields the gateway passes through ``extra=`` on store related log calls
GATEWAY_FIELDS = ("bucket", "path", "operation", "status_code", "error_type", "duration_ms")

CONSOLE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Library loggers and the level they are held at
QUIET_LOGGERS = {
    "uvicorn.access": logging.WARNING,
    "uvicorn.error": logging.INFO,
    "boto3": logging.WARNING,
    "botocore": logging.WARNING,
    "s3transfer": logging.WARNING,
    "urllib3": logging.WARNING,
}


def gateway_fields(record: logging.LogRecord) -> Dict[str, Any]:
    """The store context attached to a record, if any."""
    return {field: getattr(record, field) for field in GATEWAY_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with the gateway fields at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(gateway_fields(record))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Console formatter that colors the level name when writing to a terminal."""

    LEVEL_COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, fmt: str = CONSOLE_FORMAT, datefmt: str = CONSOLE_DATE_FORMAT, use_colors: bool = True):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelname)
        if not (self.use_colors and color and sys.stdout.isatty()):
            return super().format(record)

        # The record is shared with other handlers
        levelname = record.levelname
        record.levelname = f"{color}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def build_formatter(is_development: bool) -> logging.Formatter:
    if is_development:
        return ColoredConsoleFormatter()
    return JSONFormatter()


def setup_logging(log_level_name: str = "INFO", is_development: bool = True) -> None:
    """
    Route all gateway logging to stdout at the configured level.

    Unknown level names fall back to INFO. Calling this again replaces the
    previous handler, so tests and reloads do not duplicate lines.
    """
    log_level = getattr(logging, log_level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(build_formatter(is_development))

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers = [handler]

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).info(
        f"Gateway logging ready: level={logging.getLevelName(log_level)}, "
        f"format={'console' if is_development else 'json'}"
    )


def get_logger(name: str) -> logging.Logger:
    """
    Logger for a gateway module.

    Usage:
        logger = get_logger(__name__)
        logger.warning("Listing failed", extra={"path": "folder/", "operation": "list_objects"})
    """
    return logging.getLogger(name)
