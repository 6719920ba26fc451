"""Security log with remote mirroring.

``log_security`` writes a local structured log line and mirrors it as a
telemetry event whose type is inferred from the message text.
"""

from typing import Any

from docguard.domain.protocols import LoggerProtocol
from docguard.telemetry.models import EventType, TelemetryEvent
from docguard.telemetry.recorder import TelemetryRecorder

_MESSAGE_EVENT_TYPES: tuple[tuple[str, EventType], ...] = (
    ("Blocked", EventType.SECURITY_BLOCK),
    ("opened Google Sheets", EventType.SHEET_EDIT_ACCESSED),
    ("User opened:", EventType.DOCUMENT_CLICKED),
    ("Bookmarklet initialized", EventType.OVERLAY_OPENED),
    ("Failed to load", EventType.ERROR),
)


def event_type_from_message(message: str) -> EventType:
    """Map a security log message to a telemetry event type.

    Examples:
        >>> event_type_from_message("Blocked javascript: URL")
        <EventType.SECURITY_BLOCK: 'security_block'>
        >>> event_type_from_message("Rate limits reset by user")
        <EventType.SECURITY_EVENT: 'security_event'>
    """
    for fragment, event_type in _MESSAGE_EVENT_TYPES:
        if fragment in message:
            return event_type
    return EventType.SECURITY_EVENT


class SecurityLogger:
    """Local + remote security logging.

    Attributes:
        enabled: When False, nothing is logged locally or remotely.
    """

    def __init__(
        self,
        recorder: TelemetryRecorder,
        logger: LoggerProtocol,
        *,
        enabled: bool = True,
    ) -> None:
        self._recorder = recorder
        self._logger = logger
        self.enabled = enabled

    async def log_security(
        self, level: str, message: str, metadata: dict[str, Any] | None = None
    ) -> TelemetryEvent | None:
        """Log a security message locally and mirror it remotely.

        Args:
            level: "info", "warn"/"warning" or "error".
            message: Human-readable message (also drives the event type).
            metadata: Extra context for both the log line and the event.

        Returns:
            The queued telemetry event, or None if nothing was queued.
        """
        if not self.enabled:
            return None

        context = dict(metadata or {})
        match level:
            case "warn" | "warning":
                self._logger.warning("security_log", message=message, metadata=context)
            case "error":
                self._logger.error("security_log", message=message, metadata=context)
            case _:
                self._logger.info("security_log", message=message, metadata=context)

        return await self._recorder.track(
            event_type_from_message(message),
            {"level": level, "message": message, **context},
        )
