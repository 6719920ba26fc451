"""Collector event processing: enrich -> validate -> classify -> store.

Request envelope:
    - Single event: a JSON object with at least ``eventType``.
    - Batch: ``{"events": [...], "batchId": "..."}``. A batch is accepted or
      rejected as a whole; nothing is stored if any event is invalid.

Server-side enrichment overwrites ``timestamp``, ``clientIP``,
``userAgent``, ``referer``, ``country`` and ``eventId``. Events flagged
suspicious get ``securityFlags`` and ``severity=HIGH`` and raise an alert
before they are stored.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from docguard.core.clock import Clock, iso_timestamp, now_ms
from docguard.core.enums import ErrorCode
from docguard.core.errors import DomainError
from docguard.core.result import Failure, Result, Success
from docguard.domain.protocols import EventSinkProtocol, LoggerProtocol
from docguard.telemetry.classifier import classify
from docguard.telemetry.identifiers import generate_event_id
from docguard.telemetry.models import COLLECTOR_EVENT_TYPES, Severity

REQUIRED_FIELDS = ("eventType", "timestamp")


@dataclass(frozen=True, slots=True, kw_only=True)
class RequestContext:
    """Request facts used for enrichment (from edge-network headers)."""

    client_ip: str = "unknown"
    user_agent: str | None = None
    referer: str | None = None
    country: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class IngestResult:
    """Accepted events of one request."""

    event_ids: list[str]
    batch_id: str | None = None
    is_batch: bool = False


def validate_event(event: Mapping[str, Any]) -> Result[None, DomainError]:
    """Check required fields and the event type whitelist."""
    for field in REQUIRED_FIELDS:
        if not event.get(field):
            return Failure(
                error=DomainError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message=f"Missing required field '{field}'",
                    details={"field": field},
                )
            )
    event_type = event["eventType"]
    if not isinstance(event_type, str) or event_type not in COLLECTOR_EVENT_TYPES:
        return Failure(
            error=DomainError(
                code=ErrorCode.INVALID_EVENT_TYPE,
                message="Event type is not accepted by the collector",
                details={"event_type": str(event_type)},
            )
        )
    return Success(value=None)


class EventProcessor:
    """Turns a request body into stored events."""

    def __init__(
        self,
        sink: EventSinkProtocol,
        logger: LoggerProtocol,
        *,
        clock: Clock = now_ms,
    ) -> None:
        self._sink = sink
        self._logger = logger
        self._clock = clock

    def enrich(self, event: Mapping[str, Any], context: RequestContext) -> dict[str, Any]:
        now = self._clock()
        return {
            **event,
            "timestamp": iso_timestamp(now),
            "clientIP": context.client_ip,
            "userAgent": context.user_agent,
            "referer": context.referer,
            "country": context.country,
            "eventId": generate_event_id(now),
        }

    async def ingest(
        self, body: Any, context: RequestContext
    ) -> Result[IngestResult, DomainError]:
        """Validate and store every event of a request body.

        Returns:
            Success(IngestResult) with the assigned event ids, or
            Failure(DomainError) when the body or any event is invalid.
        """
        if not isinstance(body, dict):
            return Failure(
                error=DomainError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="Request body must be a JSON object",
                )
            )

        is_batch = "events" in body
        raw_events = body["events"] if is_batch else [body]
        if not isinstance(raw_events, list) or not raw_events:
            return Failure(
                error=DomainError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="Batch must contain a non-empty 'events' list",
                )
            )

        enriched: list[dict[str, Any]] = []
        for raw in raw_events:
            if not isinstance(raw, dict):
                return Failure(
                    error=DomainError(
                        code=ErrorCode.VALIDATION_FAILED,
                        message="Every event must be a JSON object",
                    )
                )
            event = self.enrich(raw, context)
            match validate_event(event):
                case Failure(error=err):
                    return Failure(error=err)
                case Success():
                    enriched.append(event)

        for event in enriched:
            result = classify(event)
            if result.is_suspicious:
                event["securityFlags"] = list(result.flags)
                event["severity"] = Severity.HIGH.value
                await self._sink.alert(event)
            await self._sink.store(event)

        return Success(
            value=IngestResult(
                event_ids=[event["eventId"] for event in enriched],
                batch_id=body.get("batchId") if is_batch else None,
                is_batch=is_batch,
            )
        )
