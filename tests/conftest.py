"""Shared test fixtures."""

import io

import pytest

from fieldrules.utils.logger import Logger, LogLevel, StreamHandler, TextFormatter
from fieldrules.validation import RuleRegistry, Validation


@pytest.fixture
def log_stream() -> io.StringIO:
    """Fixture capturing log output."""
    return io.StringIO()


@pytest.fixture
def logger(log_stream) -> Logger:
    """Fixture providing a debug logger writing to `log_stream`."""
    handler = StreamHandler(
        stream=log_stream,
        formatter=TextFormatter(colors=False, stream=log_stream),
    )
    return Logger(name="fieldrules.test", level=LogLevel.DEBUG, handlers=[handler])


@pytest.fixture
def registry(logger) -> RuleRegistry:
    """Fixture providing a fresh registry with the built-in rules."""
    return RuleRegistry.with_defaults(logger=logger)


@pytest.fixture
def validation(registry, logger) -> Validation:
    """Fixture providing an engine bound to the fresh registry."""
    return Validation(registry=registry, logger=logger)
