"""Logging setup for redissampler.

The library is silent by default: the ``redissampler`` logger only carries a
NullHandler. Logs always go to stderr or a file, never stdout, which is
reserved for the report itself.

    import redissampler

    redissampler.enable_console_logging(level="DEBUG")   # one line per sampled key
    redissampler.enable_json_logging()                    # structured stderr logs
    redissampler.configure_from_env()                     # what the CLI does

Environment variables read by configure_from_env():
    RS_LOGGING: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    RS_LOG_FILE: Path to a rotating log file
    RS_LOG_JSON: "1" for JSON records
"""

from __future__ import annotations

import json
import logging
import os
import sys
from datetime import UTC, datetime
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Literal

__all__ = [
    "configure_from_env",
    "enable_console_logging",
    "enable_file_logging",
    "enable_json_logging",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

LOGGER_NAME = "redissampler"
_logger = logging.getLogger(LOGGER_NAME)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class JsonFormatter(logging.Formatter):
    """Single-line JSON records for log shippers.

    Keys: ``time`` (UTC, millisecond ISO-8601), ``level``, ``logger``,
    ``message`` and, for records carrying an exception, ``error`` (the
    exception class name) and ``traceback``.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "time": datetime.fromtimestamp(record.created, tz=UTC).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0] is not None:
            entry["error"] = record.exc_info[0].__name__
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def _level(level: str | int) -> int:
    """Resolve a level name or number; unknown names fall back to INFO."""
    if isinstance(level, int):
        return level
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def _install(handler: logging.Handler, level: LogLevel | int) -> None:
    numeric = _level(level)
    handler.setLevel(numeric)
    _logger.setLevel(numeric)
    _logger.addHandler(handler)


def enable_console_logging(
    level: LogLevel | int = "INFO",
    format: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> logging.StreamHandler:
    """Log to stderr with a plain-text format.

    Returns:
        The created StreamHandler.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(format, date_format))
    _install(handler, level)
    return handler


def enable_file_logging(
    path: str | Path,
    level: LogLevel | int = "INFO",
    max_bytes: int = DEFAULT_MAX_BYTES,
    backup_count: int = DEFAULT_BACKUP_COUNT,
    json_format: bool = False,
) -> RotatingFileHandler:
    """Log to a size-rotated file, creating parent directories as needed.

    Args:
        path: Log file path.
        level: Log level name or int.
        max_bytes: Rotate once the file reaches this size.
        backup_count: Number of rotated files to keep.
        json_format: Write JsonFormatter records instead of plain text.

    Returns:
        The created RotatingFileHandler.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_bytes, backupCount=backup_count)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, DEFAULT_DATE_FORMAT))
    _install(handler, level)
    return handler


def enable_json_logging(level: LogLevel | int = "INFO") -> logging.StreamHandler:
    """Log JSON records to stderr."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter())
    _install(handler, level)
    return handler


def configure_from_env() -> None:
    """Enable logging from RS_LOGGING / RS_LOG_FILE / RS_LOG_JSON.

    Does nothing when neither RS_LOGGING nor RS_LOG_FILE is set.
    """
    level = os.environ.get("RS_LOGGING", "").upper()
    log_file = os.environ.get("RS_LOG_FILE", "")
    use_json = os.environ.get("RS_LOG_JSON", "") == "1"

    if not level and not log_file:
        return

    level = level or "INFO"
    if log_file:
        enable_file_logging(log_file, level=level, json_format=use_json)
    elif use_json:
        enable_json_logging(level=level)
    else:
        enable_console_logging(level=level)
