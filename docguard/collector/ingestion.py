"""Per-client-IP request cap for the collector.

Counts requests (not events) per client IP over a one-minute sliding
window, reusing AttemptStore over a private in-memory store.

Client IPs come from a request header, so the set of keys is unbounded
input. Once per window, logs with no attempt left inside the window are
deleted; the store then holds at most the clients seen in the last two
windows.
"""

from docguard.core.clock import Clock, now_ms
from docguard.domain.protocols import LoggerProtocol
from docguard.infrastructure.storage import MemoryKeyValueStore
from docguard.rate_limiter.attempt_store import AttemptStore
from docguard.rate_limiter.config import ActionPolicy
from docguard.rate_limiter.models import RateLimitDecision

INGESTION_WINDOW_MS = 60_000


class IngestionLimiter:
    """Sliding-window request cap keyed by client IP.

    Attributes:
        per_minute: Requests accepted per client IP per window.
        window_ms: Window length.
    """

    def __init__(
        self,
        per_minute: int,
        logger: LoggerProtocol,
        *,
        window_ms: int = INGESTION_WINDOW_MS,
        clock: Clock = now_ms,
    ) -> None:
        self.per_minute = per_minute
        self.window_ms = window_ms
        self._logger = logger
        self._clock = clock
        self._store = MemoryKeyValueStore()
        self._attempts = AttemptStore(
            self._store, logger, prefix="collector:", clock=clock
        )
        self._last_sweep_ms = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._store.keys())

    def check(self, client_ip: str) -> RateLimitDecision:
        """Record one request from ``client_ip`` and decide on it."""
        self._sweep_expired()
        action = f"ip_{client_ip}"
        return self._attempts.record_and_check(
            action,
            ActionPolicy(action=action, max_attempts=self.per_minute, window_ms=self.window_ms),
        )

    def _sweep_expired(self) -> None:
        now = self._clock()
        if now - self._last_sweep_ms < self.window_ms:
            return
        self._last_sweep_ms = now

        key_prefix = self._attempts.key_for("")
        removed = sum(
            1
            for key in self._store.keys()
            if self._attempts.prune(key.removeprefix(key_prefix), self.window_ms)
        )
        if removed:
            self._logger.debug(
                "collector_ingestion_swept",
                removed=removed,
                remaining=self.tracked_clients,
            )
