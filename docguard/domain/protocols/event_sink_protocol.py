"""EventSinkProtocol: where the collector puts accepted events.

Implementations decide retention (in-memory ring, log stream, external
service). Alerting for suspicious events goes through ``alert``.
"""

from typing import Any, Protocol


class EventSinkProtocol(Protocol):
    """Protocol for collector event storage and alerting."""

    async def store(self, event: dict[str, Any]) -> None:
        """Persist one enriched event."""
        ...

    async def alert(self, event: dict[str, Any]) -> None:
        """Raise an alert for an event carrying security flags."""
        ...
