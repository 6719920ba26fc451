"""Shared test fixtures (clock, storage, logger, transport, settings)."""

from unittest.mock import MagicMock

import pytest

from docguard.core.config import Settings
from docguard.infrastructure.storage import MemoryKeyValueStore
from tests.fakes import FakeClock, RecordingTransport


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


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def test_settings():
    """Settings with small limits so scenarios stay short."""
    return Settings(
        max_overlay_opens=3,
        max_document_clicks=2,
        document_window_ms=60_000,
        overlay_window_ms=60_000,
        batch_size=10,
        flush_interval_ms=30_000,
        locale="en",
        collector_api_key="collector-secret",
        telemetry_api_key="collector-secret",
        collector_allowed_origins="https://docs.example.org,https://portal.example.org",
    )
