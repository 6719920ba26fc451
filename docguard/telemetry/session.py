"""Per-session telemetry state.

Holds what the event builder needs across calls: the session id, the event
counter and the session start time. One instance lives for one session.
"""

from typing import Any

from docguard.core.clock import Clock, now_ms
from docguard.telemetry.identifiers import generate_session_id
from docguard.telemetry.models import EventType, TelemetryEvent


class SessionContext:
    """Builds numbered telemetry events for one session.

    Attributes:
        session_id: ``sess_<ms>_<random>`` identifier.
        started_at_ms: Session start (epoch ms).
        url: Location reported with every event.
        environment: Client facts merged into every event's metadata
            (user agent, language, platform, timezone, ...).
    """

    def __init__(
        self,
        *,
        url: str = "",
        environment: dict[str, Any] | None = None,
        clock: Clock = now_ms,
    ) -> None:
        self._clock = clock
        self.started_at_ms = clock()
        self.session_id = generate_session_id(self.started_at_ms)
        self.url = url
        self.environment = dict(environment or {})
        self._event_counter = 0

    @property
    def event_count(self) -> int:
        return self._event_counter

    def build_event(
        self, event_type: EventType, metadata: dict[str, Any] | None = None
    ) -> TelemetryEvent:
        """Create the next event of the session.

        Caller metadata takes precedence over environment facts on key clashes.
        """
        self._event_counter += 1
        return TelemetryEvent(
            event_type=event_type,
            session_id=self.session_id,
            event_number=self._event_counter,
            session_duration_ms=max(0, self._clock() - self.started_at_ms),
            url=self.url,
            metadata={**self.environment, **(metadata or {})},
        )
