"""Reference collector for docguard telemetry batches."""

from docguard.collector.app import CORS_HEADERS, create_app
from docguard.collector.ingestion import IngestionLimiter
from docguard.collector.processing import (
    EventProcessor,
    IngestResult,
    RequestContext,
    validate_event,
)
from docguard.collector.sinks import InMemoryEventSink

__all__ = [
    "CORS_HEADERS",
    "EventProcessor",
    "InMemoryEventSink",
    "IngestResult",
    "IngestionLimiter",
    "RequestContext",
    "create_app",
    "validate_event",
]
