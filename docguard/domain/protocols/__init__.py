"""Domain protocols (ports) package.

Infrastructure adapters implement these protocols without inheritance
(PEP 544 structural subtyping).

Usage:
    from docguard.domain.protocols import KeyValueStoreProtocol, LoggerProtocol
"""

from docguard.domain.protocols.event_sink_protocol import EventSinkProtocol
from docguard.domain.protocols.key_value_store_protocol import KeyValueStoreProtocol
from docguard.domain.protocols.logger_protocol import LoggerProtocol
from docguard.domain.protocols.telemetry_transport_protocol import (
    TelemetryTransportProtocol,
)

__all__ = [
    "EventSinkProtocol",
    "KeyValueStoreProtocol",
    "LoggerProtocol",
    "TelemetryTransportProtocol",
]
