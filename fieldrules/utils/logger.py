"""
fieldrules Logger
=================

Structured logging with pluggable handlers.
"""

from __future__ import annotations

import json
import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional, TextIO, Union


class LogLevel(IntEnum):
    """Log levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL

    @classmethod
    def parse(cls, value: Union[str, int, "LogLevel"]) -> "LogLevel":
        """
        Resolve a level from a name or number.

        Raises:
            ValueError: If the level is not known
        """
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int):
            return cls(value)
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Unknown log level: {value}") from None


@dataclass
class LogRecord:
    """
    Structured log record.

    Attributes:
        level: Log level
        message: Log message
        timestamp: Record timestamp
        context: Additional key-values
        exception: Exception info
    """

    level: LogLevel
    message: str
    timestamp: datetime = field(default_factory=datetime.now)
    context: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None
    logger_name: str = "fieldrules"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        data: Dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "logger": self.logger_name,
            "message": self.message,
        }

        if self.context:
            data["context"] = self.context

        if self.exception:
            data["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
            }

        return data

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), default=str)


class LogFormatter:
    """Base log formatter."""

    def format(self, record: LogRecord) -> str:
        raise NotImplementedError


class TextFormatter(LogFormatter):
    """
    Plain text formatter.

    Example output:
        2026-01-15 10:30:45 [WARNING] fieldrules: Rule already registered name=step
    """

    _colors = {
        LogLevel.DEBUG: "\033[36m",
        LogLevel.INFO: "\033[32m",
        LogLevel.WARNING: "\033[33m",
        LogLevel.ERROR: "\033[31m",
        LogLevel.CRITICAL: "\033[35m",
    }
    _reset = "\033[0m"

    def __init__(
        self,
        format_string: Optional[str] = None,
        date_format: str = "%Y-%m-%d %H:%M:%S",
        colors: bool = True,
        stream: Optional[TextIO] = None,
    ):
        self.format_string = format_string or "{timestamp} [{level}] {logger}: {message}"
        self.date_format = date_format
        stream = stream or sys.stderr
        self.colors = colors and hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: LogRecord) -> str:
        """Format as text."""
        level = record.level.name
        if self.colors:
            level = f"{self._colors.get(record.level, '')}{level}{self._reset}"

        message = record.message
        if record.context:
            pairs = " ".join(f"{k}={v}" for k, v in record.context.items())
            message = f"{message} {pairs}"

        output = self.format_string.format(
            timestamp=record.timestamp.strftime(self.date_format),
            level=level,
            message=message,
            logger=record.logger_name,
        )

        if record.exception:
            output += "\n" + "".join(
                traceback.format_exception_only(type(record.exception), record.exception)
            ).rstrip()

        return output


class JsonFormatter(LogFormatter):
    """JSON-lines formatter for structured logging."""

    def format(self, record: LogRecord) -> str:
        return record.to_json()


class StreamHandler:
    """Writes formatted records to a stream (stderr by default)."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        formatter: Optional[LogFormatter] = None,
        level: LogLevel = LogLevel.DEBUG,
    ):
        self.stream = stream or sys.stderr
        self.formatter = formatter or TextFormatter(stream=self.stream)
        self.level = level

    def handle(self, record: LogRecord) -> None:
        """Emit record if it passes the handler level."""
        if record.level >= self.level:
            self.stream.write(self.formatter.format(record) + "\n")
            self.stream.flush()


class Logger:
    """
    Structured logger.

    Example:
        logger = get_logger("fieldrules.registry")
        logger.warning("Rule already registered", name="step")

        # With context
        run_logger = logger.with_context(fields=3)
        run_logger.debug("Validation finished")
    """

    def __init__(
        self,
        name: str = "fieldrules",
        level: LogLevel = LogLevel.WARNING,
        handlers: Optional[List[StreamHandler]] = None,
    ):
        self.name = name
        self.level = level
        self._handlers = handlers if handlers is not None else []
        self._context: Dict[str, Any] = {}

    @property
    def handlers(self) -> List[StreamHandler]:
        return self._handlers

    def add_handler(self, handler: StreamHandler) -> "Logger":
        """Add log handler."""
        self._handlers.append(handler)
        return self

    def with_context(self, **context: Any) -> "Logger":
        """Create a logger sharing handlers, with extra context."""
        child = Logger(name=self.name, level=self.level, handlers=self._handlers)
        child._context = {**self._context, **context}
        return child

    def is_enabled_for(self, level: LogLevel) -> bool:
        return level >= self.level

    def _log(
        self,
        level: LogLevel,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        if level < self.level:
            return

        record = LogRecord(
            level=level,
            message=message,
            context={**self._context, **context},
            exception=exception,
            logger_name=self.name,
        )

        for handler in self._handlers:
            try:
                handler.handle(record)
            except (OSError, ValueError):
                pass  # closed stream

    def debug(self, message: str, **context: Any) -> None:
        self._log(LogLevel.DEBUG, message, **context)

    def info(self, message: str, **context: Any) -> None:
        self._log(LogLevel.INFO, message, **context)

    def warning(self, message: str, **context: Any) -> None:
        self._log(LogLevel.WARNING, message, **context)

    def error(
        self,
        message: str,
        exception: Optional[BaseException] = None,
        **context: Any,
    ) -> None:
        self._log(LogLevel.ERROR, message, exception, **context)


_loggers: Dict[str, Logger] = {}


def get_logger(name: str = "fieldrules", level: Optional[LogLevel] = None) -> Logger:
    """
    Get or create a named logger.

    Child loggers (`fieldrules.registry`) share the handlers and level of
    the root `fieldrules` logger until configured separately.
    """
    if name not in _loggers:
        root = _loggers.get("fieldrules")
        if root is None:
            root = Logger(name="fieldrules", handlers=[StreamHandler()])
            _loggers["fieldrules"] = root

        if name == "fieldrules":
            logger = root
        else:
            logger = Logger(name=name, level=root.level, handlers=root.handlers)
        _loggers[name] = logger

    logger = _loggers[name]
    if level is not None:
        logger.level = level
    return logger


def configure_logging(
    level: Union[str, LogLevel] = LogLevel.INFO,
    format: str = "text",
    stream: Optional[TextIO] = None,
    colors: bool = True,
) -> Logger:
    """
    Configure the `fieldrules` loggers.

    Args:
        level: Minimum level (name or LogLevel)
        format: Output format ("text" or "json")
        stream: Output stream (stderr by default)
        colors: Enable colored text output on terminals

    Returns:
        Root logger
    """
    level = LogLevel.parse(level)
    stream = stream or sys.stderr

    if format == "json":
        formatter: LogFormatter = JsonFormatter()
    else:
        formatter = TextFormatter(colors=colors, stream=stream)

    handlers = [StreamHandler(stream=stream, formatter=formatter, level=level)]

    for name, logger in _loggers.items():
        logger.level = level
        logger._handlers = handlers

    root = _loggers.get("fieldrules")
    if root is None:
        root = Logger(name="fieldrules", level=level, handlers=handlers)
        _loggers["fieldrules"] = root
    return root
