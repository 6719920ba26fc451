"""Event recording: build, classify, enqueue.

Every tracked action goes through the same three steps so that no event
reaches the queue unclassified.
"""

from typing import Any

from docguard.domain.protocols import LoggerProtocol
from docguard.telemetry.classifier import apply_classification, classify
from docguard.telemetry.models import EventType, TelemetryEvent
from docguard.telemetry.pipeline import DeliveryPipeline
from docguard.telemetry.session import SessionContext


class TelemetryRecorder:
    """Builds, classifies and queues telemetry events for one session."""

    def __init__(
        self,
        session: SessionContext,
        pipeline: DeliveryPipeline,
        logger: LoggerProtocol,
    ) -> None:
        self.session = session
        self.pipeline = pipeline
        self._logger = logger

    async def track(
        self, event_type: EventType, metadata: dict[str, Any] | None = None
    ) -> TelemetryEvent | None:
        """Record one event.

        Args:
            event_type: What happened.
            metadata: Event-specific context.

        Returns:
            The queued (classified) event, or None when telemetry is disabled.
        """
        if not self.pipeline.enabled:
            return None

        event = self.session.build_event(event_type, metadata)
        result = classify(event)
        event = apply_classification(event, result)

        if result.is_suspicious:
            self._logger.warning(
                "suspicious_event",
                event_type=event.event_type.value,
                event_number=event.event_number,
                flags=list(result.flags),
            )

        await self.pipeline.enqueue(event)
        return event
