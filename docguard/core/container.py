"""Centralized dependency container.

Application-scoped singletons are ``@lru_cache`` decorated functions.
Adapter imports happen inside the factories so that infrastructure modules
can import from core without circular imports.

Usage:
    ```python
    from docguard.core.container import get_logger, get_key_value_store

    logger = get_logger()
    store = get_key_value_store()
    ```
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from docguard.core.config import Settings, settings

if TYPE_CHECKING:
    from docguard.domain.protocols import (
        EventSinkProtocol,
        KeyValueStoreProtocol,
        LoggerProtocol,
        TelemetryTransportProtocol,
    )


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection:
    - development: ConsoleAdapter (human-readable)
    - testing/ci/production: ConsoleAdapter (JSON)

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    from docguard.infrastructure.logging import ConsoleAdapter

    return ConsoleAdapter(use_json=not settings.is_development, level=settings.log_level)


def get_key_value_store(config: Settings | None = None) -> "KeyValueStoreProtocol":
    """Create the key/value store selected by configuration.

    Args:
        config: Settings to read (defaults to the global settings).

    Returns:
        FileKeyValueStore when ``storage_path`` is set, otherwise a fresh
        MemoryKeyValueStore.
    """
    from docguard.infrastructure.storage import FileKeyValueStore, MemoryKeyValueStore

    config = config or settings
    if config.storage_path:
        return FileKeyValueStore(config.storage_path)
    return MemoryKeyValueStore()


def get_transport(config: Settings | None = None) -> "TelemetryTransportProtocol":
    """Create the HTTP transport pointed at the configured collector."""
    from docguard.infrastructure.telemetry import HttpTelemetryTransport

    config = config or settings
    return HttpTelemetryTransport(
        endpoint=config.telemetry_endpoint,
        api_key=config.telemetry_api_key,
        origin=config.telemetry_origin,
        logger=get_logger(),
        beacon_timeout=config.beacon_timeout_seconds,
    )


def get_event_sink(config: Settings | None = None) -> "EventSinkProtocol":
    """Create the collector's event sink (bounded in-memory retention)."""
    from docguard.collector.sinks import InMemoryEventSink

    config = config or settings
    return InMemoryEventSink(logger=get_logger(), max_events=config.collector_max_events)
