"""
fieldrules Utilities
====================

Structured logging.
"""

from fieldrules.utils.logger import (
    JsonFormatter,
    LogLevel,
    LogRecord,
    Logger,
    StreamHandler,
    TextFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "LogLevel",
    "LogRecord",
    "Logger",
    "StreamHandler",
    "TextFormatter",
    "JsonFormatter",
    "get_logger",
    "configure_logging",
]
