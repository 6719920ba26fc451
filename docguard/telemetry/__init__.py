"""Telemetry bounded context.

Architecture:
    - models.py: TelemetryEvent, Batch, EventType, Severity
    - classifier.py: pure suspicious-pattern classification
    - session.py: per-session numbering and environment metadata
    - pipeline.py: queue, size/timer/unload triggers, bounded requeue
    - recorder.py: build -> classify -> enqueue
    - security_logger.py: local log line mirrored as an event
"""

from docguard.telemetry.classifier import ClassificationResult, classify
from docguard.telemetry.models import (
    COLLECTOR_EVENT_TYPES,
    Batch,
    EventType,
    Severity,
    TelemetryEvent,
)
from docguard.telemetry.pipeline import DeliveryPipeline
from docguard.telemetry.recorder import TelemetryRecorder
from docguard.telemetry.security_logger import SecurityLogger, event_type_from_message
from docguard.telemetry.session import SessionContext

__all__ = [
    "COLLECTOR_EVENT_TYPES",
    "Batch",
    "ClassificationResult",
    "DeliveryPipeline",
    "EventType",
    "SecurityLogger",
    "SessionContext",
    "Severity",
    "TelemetryEvent",
    "TelemetryRecorder",
    "classify",
    "event_type_from_message",
]
