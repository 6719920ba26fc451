"""Rate limiter bounded context test configuration.

The rate limiter is storage-agnostic, so unit tests run against the
in-memory key/value store and a manually advanced clock. Loggers are
MagicMocks so tests can assert on structured log calls.
"""

from unittest.mock import MagicMock

import pytest

from docguard.infrastructure.storage import MemoryKeyValueStore

START_MS = 1_700_000_000_000


class FakeClock:
    """Millisecond clock advanced explicitly by tests."""

    def __init__(self, start: int = START_MS) -> None:
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def mock_logger():
    """Logger whose ``bind`` returns the same mock, so calls are visible."""
    logger = MagicMock()
    logger.bind.return_value = logger
    return logger
