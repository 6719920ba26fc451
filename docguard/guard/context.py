"""Per-session guard context.

Owns every component that lives for one browsing session: the limiters,
the lockout manager, the session's telemetry recorder and its delivery
pipeline. Handlers receive the context explicitly instead of reaching for
module globals.

Usage:
    ```python
    context = GuardContext.start(settings, url="https://docs.example/list")
    outcome = await context.guard_for(ACTION_DOCUMENT_CLICK).run(open_document)
    ...
    await context.shutdown()
    ```
"""

import asyncio
from dataclasses import dataclass
from typing import Any

from docguard.core.clock import Clock, now_ms
from docguard.core.config import Settings
from docguard.core.constants import ACTION_DOCUMENT_CLICK, ACTION_OVERLAY_OPEN
from docguard.domain.protocols import (
    KeyValueStoreProtocol,
    LoggerProtocol,
    TelemetryTransportProtocol,
)
from docguard.guard.action_guard import ActionGuard
from docguard.integrity.history import HashHistory
from docguard.integrity.verifier import IntegrityVerifier
from docguard.rate_limiter.factory import build_rate_limiting
from docguard.rate_limiter.lockout import LockoutManager
from docguard.rate_limiter.service import RateLimiterService
from docguard.telemetry.models import EventType
from docguard.telemetry.pipeline import DeliveryPipeline
from docguard.telemetry.recorder import TelemetryRecorder
from docguard.telemetry.security_logger import SecurityLogger
from docguard.telemetry.session import SessionContext

# action -> (event type when allowed, violation reason when denied)
_ACTION_BINDINGS: dict[str, tuple[EventType, str]] = {
    ACTION_OVERLAY_OPEN: (EventType.OVERLAY_OPENED, "Massa obertures de l'overlay"),
    ACTION_DOCUMENT_CLICK: (EventType.DOCUMENT_CLICKED, "Massa clics a documents"),
}


@dataclass(slots=True, kw_only=True)
class GuardContext:
    """Components scoped to one session."""

    settings: Settings
    store: KeyValueStoreProtocol
    logger: LoggerProtocol
    limiters: RateLimiterService
    lockout: LockoutManager
    session: SessionContext
    pipeline: DeliveryPipeline
    recorder: TelemetryRecorder
    security_logger: SecurityLogger
    integrity: IntegrityVerifier
    clock: Clock = now_ms
    beacon: asyncio.Future[bool] | None = None

    @classmethod
    def start(
        cls,
        settings: Settings,
        *,
        store: KeyValueStoreProtocol | None = None,
        transport: TelemetryTransportProtocol | None = None,
        logger: LoggerProtocol | None = None,
        clock: Clock = now_ms,
        url: str = "",
        environment: dict[str, Any] | None = None,
    ) -> "GuardContext":
        """Wire a new session from configuration.

        Args:
            settings: Limits, lockout, delivery and locale configuration.
            store: Key/value persistence (defaults to the configured store).
            transport: Collector transport (defaults to HTTP).
            logger: Structured logger (defaults to the container logger).
            clock: Millisecond clock.
            url: Page the session runs on.
            environment: Client environment attached to every event.

        Returns:
            A ready GuardContext. Nothing is scheduled until the first event.
        """
        from docguard.core import container

        if logger is None:
            logger = container.get_logger()
        if store is None:
            store = container.get_key_value_store(settings)
        if transport is None:
            transport = container.get_transport(settings)

        limiters, lockout = build_rate_limiting(settings, store, logger, clock=clock)
        session = SessionContext(url=url, environment=environment, clock=clock)
        session_logger = logger.bind(session_id=session.session_id)
        pipeline = DeliveryPipeline(
            transport,
            session_logger,
            batch_size=settings.batch_size,
            flush_interval_ms=settings.flush_interval_ms,
            requeue_ceiling=settings.requeue_ceiling,
            enabled=settings.telemetry_enabled,
        )
        recorder = TelemetryRecorder(session, pipeline, session_logger)
        security_logger = SecurityLogger(
            recorder, session_logger, enabled=settings.telemetry_enabled
        )
        integrity = IntegrityVerifier(
            expected_hash=settings.integrity_expected_hash,
            history=HashHistory(
                store,
                session_logger,
                prefix=settings.storage_prefix,
                enabled=settings.integrity_store_history,
                clock=clock,
            ),
            logger=session_logger,
            allow_bypass=settings.integrity_allow_bypass,
            security_logger=security_logger,
        )
        session_logger.info("guard_session_started", url=url)
        return cls(
            settings=settings,
            store=store,
            logger=session_logger,
            limiters=limiters,
            lockout=lockout,
            session=session,
            pipeline=pipeline,
            recorder=recorder,
            security_logger=security_logger,
            integrity=integrity,
            clock=clock,
        )

    @property
    def locale(self) -> str:
        return self.settings.locale

    def guard_for(self, action: str) -> ActionGuard:
        """Build the guard for a known action.

        Raises:
            KeyError: If ``action`` has no event binding.
        """
        event_type, reason = _ACTION_BINDINGS[action]
        return ActionGuard(
            self, action=action, event_type=event_type, violation_reason=reason
        )

    def reset_limits(self) -> None:
        """Clear every attempt log, the violation ledger and any lockout."""
        self.limiters.reset_all()
        self.lockout.reset()
        self.logger.info("rate_limits_reset")

    async def shutdown(self) -> bool:
        """End the session: stop the timer and beacon the remaining queue.

        The beacon runs in the default executor and is not awaited; its
        future is kept on ``beacon``.

        Returns:
            True if a beacon was handed off.
        """
        batch = self.pipeline.drain()
        if batch is not None:
            loop = asyncio.get_running_loop()
            self.beacon = loop.run_in_executor(None, self.pipeline.send_beacon, batch)
        self.logger.info("guard_session_ended", events=self.session.event_count)
        return batch is not None
