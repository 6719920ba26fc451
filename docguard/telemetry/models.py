"""Telemetry event models.

Wire format uses camelCase keys (``eventType``, ``sessionId``,
``eventNumber``, ``sessionDurationMs``, ``securityFlags``); Python code uses
snake_case attributes. ``to_wire`` produces the JSON body fragment.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class EventType(str, Enum):
    """Telemetry event types emitted by the client."""

    OVERLAY_OPENED = "overlay_opened"
    OVERLAY_CLOSED = "overlay_closed"
    DOCUMENT_CLICKED = "document_clicked"
    SECURITY_WARNING = "security_warning"
    SECURITY_BLOCK = "security_block"
    SHEET_EDIT_ACCESSED = "sheet_edit_accessed"
    ERROR = "error"
    SECURITY_EVENT = "security_event"


COLLECTOR_EVENT_TYPES: frozenset[str] = frozenset(
    {
        EventType.OVERLAY_OPENED.value,
        EventType.OVERLAY_CLOSED.value,
        EventType.DOCUMENT_CLICKED.value,
        EventType.SECURITY_WARNING.value,
        EventType.SECURITY_BLOCK.value,
        EventType.SHEET_EDIT_ACCESSED.value,
        EventType.ERROR.value,
    }
)
"""Event types the collector accepts. ``security_event`` is not among them."""


class Severity(str, Enum):
    """Severity attached by the classifier."""

    LOW = "LOW"
    HIGH = "HIGH"


class TelemetryEvent(BaseModel):
    """One telemetry event.

    Immutable once built; the classifier's fields are attached by producing
    a copy (``model_copy``) before the event is queued.

    Attributes:
        event_type: What happened.
        session_id: Session that produced the event.
        event_number: Position in the session (1-based, strictly increasing).
        session_duration_ms: Milliseconds since the session started.
        url: Location of the page or tool that produced the event.
        metadata: Open key/value context.
        security_flags: Classifier flags, in check order.
        severity: Classifier severity.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    event_type: EventType
    session_id: str
    event_number: int = Field(..., ge=1)
    session_duration_ms: int = Field(..., ge=0)
    url: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    security_flags: tuple[str, ...] | None = None
    severity: Severity | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


@dataclass(frozen=True, slots=True, kw_only=True)
class Batch:
    """Snapshot of queued events sent in one request.

    Attributes:
        events: Events in queue order.
        batch_id: Fresh identifier per send attempt.
    """

    events: tuple[TelemetryEvent, ...]
    batch_id: str

    def to_wire(self) -> dict[str, Any]:
        return {
            "events": [event.to_wire() for event in self.events],
            "batchId": self.batch_id,
        }
