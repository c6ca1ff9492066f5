"""
Logging Module - Centralized logging configuration
=================================================

This module provides logging setup and utilities including:
- Structured JSON logging for the log file
- Colored console output
- Per-conversation context (session id, user id) attached to records
"""

import logging
import sys
import json
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Dict, Any

ROOT_LOGGER_NAME = "wellness"


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Each record becomes one JSON object per line, including any
    conversation context set through `set_log_context`.
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        context = getattr(record, "context", None)
        if context:
            log_data["context"] = context

        return json.dumps(log_data, default=str)


class ColoredFormatter(logging.Formatter):
    """Console formatter that highlights the level name with ANSI colors."""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        timestamp = datetime.now().strftime("%H:%M:%S")

        formatted = (
            f"{color}[{record.levelname}]{self.RESET} "
            f"{timestamp} | {record.name} | {record.getMessage()}"
        )

        context = getattr(record, "context", None)
        if context:
            pairs = " ".join(f"{k}={v}" for k, v in context.items())
            formatted += f" ({pairs})"

        if record.exc_info:
            formatted += f"\n{self.formatException(record.exc_info)}"

        return formatted


class ContextFilter(logging.Filter):
    """
    Logging filter that copies thread-local context onto each record.

    The chat service sets the active session and user here so every
    line logged while handling a message can be traced back to it.
    """

    _context = threading.local()

    @classmethod
    def set_context(cls, **kwargs) -> None:
        if not hasattr(cls._context, "data"):
            cls._context.data = {}
        cls._context.data.update(kwargs)

    @classmethod
    def clear_context(cls) -> None:
        cls._context.data = {}

    @classmethod
    def get_context(cls) -> Dict[str, Any]:
        return dict(getattr(cls._context, "data", {}))

    def filter(self, record: logging.LogRecord) -> bool:
        data = getattr(self._context, "data", None)
        if data:
            merged = dict(getattr(record, "context", None) or {})
            merged.update(data)
            record.context = merged
        return True


class LoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that merges its bound fields into the record context."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = kwargs.get("extra", {})
        context = dict(self.extra)
        context.update(extra.pop("context", {}))
        if context:
            extra["context"] = context
        kwargs["extra"] = extra
        return msg, kwargs


_configured = False


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = True,
    console_output: bool = True
) -> None:
    """
    Set up logging for the application.

    Should be called once at startup; later calls are ignored until
    `reset_logging` is used.

    Args:
        log_dir: Directory for the rotating log file (optional)
        log_level: Minimum level to capture
        json_format: Write the log file as JSON lines
        console_output: Also log to stdout
    """
    global _configured

    if _configured:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    root_logger.handlers.clear()
    root_logger.propagate = False

    context_filter = ContextFilter()

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredFormatter())
        console_handler.addFilter(context_filter)
        root_logger.addHandler(console_handler)

    if log_dir:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            log_path / "wellness.log",
            maxBytes=1_000_000,
            backupCount=3,
            encoding="utf-8"
        )
        if json_format:
            file_handler.setFormatter(JSONFormatter())
        else:
            file_handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
                )
            )
        file_handler.addFilter(context_filter)
        root_logger.addHandler(file_handler)

    _configured = True


def reset_logging() -> None:
    """Remove all handlers so `setup_logging` can run again."""
    global _configured

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        handler.close()
        root_logger.removeHandler(handler)
    _configured = False


def get_logger(name: str, **extra) -> LoggerAdapter:
    """
    Get a logger under the application namespace.

    Args:
        name: Dotted component name, e.g. "services.chat"
        **extra: Fields bound to every record from this logger

    Example:
        logger = get_logger("services.chat", component="chat")
        logger.info("Reply generated", extra={"context": {"category": "anxiety"}})
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return LoggerAdapter(logging.getLogger(name), extra)


def set_log_context(**kwargs) -> None:
    """Set thread-local context included in subsequent log records."""
    ContextFilter.set_context(**kwargs)


def clear_log_context() -> None:
    """Clear thread-local logging context."""
    ContextFilter.clear_context()


@contextmanager
def log_context(**kwargs):
    """
    Temporarily add context fields for the current thread.

    Fields present before entering are restored on exit.
    """
    previous = ContextFilter.get_context()
    ContextFilter.set_context(**kwargs)
    try:
        yield
    finally:
        ContextFilter.clear_context()
        if previous:
            ContextFilter.set_context(**previous)
