"""Event sinks for the collector.

InMemoryEventSink keeps the most recent events in a bounded ring; older
events are evicted first. Alerts are written to the structured log.
"""

from collections import deque
from typing import Any

from docguard.domain.protocols import LoggerProtocol


class InMemoryEventSink:
    """Bounded in-memory retention with log-based alerting.

    Note: Does NOT inherit from EventSinkProtocol (structural typing).

    Attributes:
        max_events: Retention bound.
        alerts: Events for which an alert was raised (bounded the same way).
    """

    def __init__(self, *, logger: LoggerProtocol, max_events: int = 10_000) -> None:
        self._logger = logger
        self.max_events = max_events
        self._events: deque[dict[str, Any]] = deque(maxlen=max_events)
        self.alerts: deque[dict[str, Any]] = deque(maxlen=max_events)

    @property
    def events(self) -> list[dict[str, Any]]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    async def store(self, event: dict[str, Any]) -> None:
        self._events.append(event)
        self._logger.info(
            "collector_event_stored",
            event_id=event.get("eventId"),
            event_type=event.get("eventType"),
        )

    async def alert(self, event: dict[str, Any]) -> None:
        self.alerts.append(event)
        self._logger.warning(
            "security_alert",
            event_id=event.get("eventId"),
            event_type=event.get("eventType"),
            flags=event.get("securityFlags"),
            client_ip=event.get("clientIP"),
            country=event.get("country"),
        )
