"""
Pytest fixtures for the chit fund test suite.

Provides:
- The reference 5L / 20-member scheme
- The month-1 worked example snapshot
- Log capture for the chitfund logger hierarchy
"""

import json
import logging
from io import StringIO

import pytest

from chitfund_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from tests.builders import make_scheme, worked_example_snapshot


@pytest.fixture
def scheme():
    """500000 value, 20 participants, 20 months, 3% commission."""
    return make_scheme()


@pytest.fixture
def worked_example():
    return worked_example_snapshot()


class LogCapture:
    """Collects JSON log lines written by the chitfund loggers."""

    def __init__(self, stream: StringIO):
        self._stream = stream

    def records(self) -> list[dict]:
        lines = self._stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    def messages(self) -> list[str]:
        return [r["message"] for r in self.records()]


@pytest.fixture
def log_capture():
    """Route chitfund logs (DEBUG and up) into an in-memory JSON stream."""
    reset_logging()
    LogContext.clear()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(level=logging.DEBUG, handler=handler)
    yield LogCapture(stream)
    LogContext.clear()
    reset_logging()
