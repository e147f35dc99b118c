"""
BeatCheck Logging
=================

Logging for the fetching core. Everything logs under the ``beatcheck``
logger tree. The CLI renders records in color on stderr, and log files are
written as JSON lines. Components use ``get_logger_for_component`` so each
record carries the component name and, where relevant, the feed id or URL.
"""

import logging
import logging.handlers
import sys
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional


ROOT_LOGGER = "beatcheck"

# Attributes every LogRecord has; anything else came in through ``extra``.
_STANDARD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "taskName"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with ``extra`` context under its own key."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS
        }
        if context:
            payload["extra"] = context

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """Short ``[HH:MM:SS] LEVEL logger:func:line - message`` lines with ANSI colors."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.RESET)
        clock = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        line = (
            f"{color}[{clock}] {record.levelname:8}{self.RESET} "
            f"{record.name}:{record.funcName}:{record.lineno} - {record.getMessage()}"
        )
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logger(
    name: str = ROOT_LOGGER,
    level: str = "INFO",
    log_file: Optional[str] = None,
    console: bool = True,
    structured: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> logging.Logger:
    """Attach console and file handlers to ``name``.

    Any handlers already on the logger are replaced, so calling this twice
    does not duplicate output.

    Args:
        name: Logger to configure
        level: Level name such as "DEBUG" or "WARNING"
        log_file: Rotating JSON log file, created with its parent directory
        console: Emit to stderr
        structured: Use JSON on the console too
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files to keep

    Returns:
        The configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers.clear()

    if console:
        # stdout is reserved for command output
        stream = logging.StreamHandler(sys.stderr)
        stream.setFormatter(StructuredFormatter() if structured else ColoredConsoleFormatter())
        logger.addHandler(stream)

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        rotating = logging.handlers.RotatingFileHandler(
            path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8"
        )
        rotating.setFormatter(StructuredFormatter())
        logger.addHandler(rotating)

    return logger


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter that merges its context into each call's ``extra``."""

    def process(self, msg: Any, kwargs: Dict[str, Any]) -> tuple:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


def get_logger_for_component(
    component_name: str,
    feed_id: Optional[int] = None,
    url: Optional[str] = None,
) -> LoggerAdapter:
    """Logger named ``beatcheck.<component_name>`` with context attached.

    Args:
        component_name: Short component name, e.g. "feed_fetcher"
        feed_id: Feed the records relate to
        url: Feed or article URL the records relate to
    """
    context: Dict[str, Any] = {"component": component_name}
    if feed_id is not None:
        context["feed_id"] = feed_id
    if url:
        context["url"] = url

    return LoggerAdapter(logging.getLogger(f"{ROOT_LOGGER}.{component_name}"), context)


def configure_application_logging(
    log_level: str = "INFO",
    log_file: Optional[str] = None,
    enable_console: bool = True,
    structured_logging: bool = False,
    max_file_size: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """Configure the ``beatcheck`` logger tree and quiet library loggers."""
    setup_logger(
        name=ROOT_LOGGER,
        level=log_level,
        log_file=log_file,
        console=enable_console,
        structured=structured_logging,
        max_file_size=max_file_size,
        backup_count=backup_count,
    )

    for noisy in ("aiohttp", "feedparser"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


class PerformanceLogger:
    """Times a block and logs its duration and outcome.

    Usage::

        with PerformanceLogger(logger, "refresh", feed_count=12):
            ...
    """

    def __init__(self, logger: logging.Logger, operation: str, **context):
        self.logger = logger
        self.operation = operation
        self.context = context
        self.start_time: Optional[datetime] = None

    def __enter__(self) -> "PerformanceLogger":
        self.start_time = datetime.now(timezone.utc)
        self.logger.debug(f"Starting {self.operation}", extra=dict(self.context))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time is None:
            return

        elapsed = (datetime.now(timezone.utc) - self.start_time).total_seconds()
        context = {**self.context, "duration_seconds": elapsed, "success": exc_type is None}

        if exc_type:
            self.logger.error(f"Failed {self.operation} in {elapsed:.3f}s", extra=context)
        else:
            self.logger.info(f"Completed {self.operation} in {elapsed:.3f}s", extra=context)
