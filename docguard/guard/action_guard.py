"""Action guard: the stage chain around a user action.

    lockout check -> rate-limit check -> telemetry -> action

Each gate stage either lets the request through (returns None) or ends it
with a denial outcome. Whatever the outcome, exactly one telemetry event
describes the attempt: the action's own event type when allowed,
``security_warning`` when denied.
"""

import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from docguard.guard.messages import MessageKey, render_message
from docguard.telemetry.models import EventType

if TYPE_CHECKING:
    from docguard.guard.context import GuardContext

type ActionHandler = Callable[[], Any] | Callable[[], Awaitable[Any]]


class OutcomeKind(str, Enum):
    ALLOWED = "allowed"
    RATE_LIMITED = "rate_limited"
    LOCKOUT_TRIGGERED = "lockout_triggered"
    LOCKED_OUT = "locked_out"


@dataclass(frozen=True, slots=True, kw_only=True)
class GuardOutcome:
    """Result of running an action through the guard.

    Attributes:
        kind: Which stage decided.
        message: Localized user-facing text (None when allowed).
        retry_after_seconds: Wait before retrying (rate-limited or locked out).
        remaining: Attempts left in the window (allowed only).
        warning: Storage warning from the limiter, if it failed open.
        result: Return value of the wrapped action (allowed only).
    """

    kind: OutcomeKind
    message: str | None = None
    retry_after_seconds: int = 0
    remaining: int | None = None
    warning: str | None = None
    result: Any = None

    @property
    def allowed(self) -> bool:
        return self.kind is OutcomeKind.ALLOWED

    @property
    def lockout_triggered(self) -> bool:
        return self.kind is OutcomeKind.LOCKOUT_TRIGGERED


@dataclass(slots=True, kw_only=True)
class GuardRequest:
    """State carried through the stages of one run."""

    metadata: dict[str, Any] = field(default_factory=dict)
    remaining: int | None = None
    warning: str | None = None


type Stage = Callable[[GuardRequest], Awaitable[GuardOutcome | None]]


class ActionGuard:
    """Runs one action kind through lockout, rate limit and telemetry.

    Attributes:
        action: Rate-limited action name (e.g., "document_click").
        event_type: Event recorded when the action is allowed.
        violation_reason: Reason recorded in the violation ledger on denial.
    """

    def __init__(
        self,
        context: "GuardContext",
        *,
        action: str,
        event_type: EventType,
        violation_reason: str,
    ) -> None:
        self._context = context
        self.action = action
        self.event_type = event_type
        self.violation_reason = violation_reason
        self.stages: tuple[Stage, ...] = (self._lockout_stage, self._rate_limit_stage)

    async def run(
        self,
        handler: ActionHandler | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> GuardOutcome:
        """Run the stage chain, then ``handler`` if every gate passed.

        Args:
            handler: The action itself (sync or async callable).
            metadata: Event metadata for the allowed-action event.

        Returns:
            GuardOutcome describing the decision.
        """
        request = GuardRequest(metadata=dict(metadata or {}))
        for stage in self.stages:
            outcome = await stage(request)
            if outcome is not None:
                return outcome

        await self._context.recorder.track(self.event_type, request.metadata)

        result = None
        if handler is not None:
            result = handler()
            if inspect.isawaitable(result):
                result = await result

        return GuardOutcome(
            kind=OutcomeKind.ALLOWED,
            remaining=request.remaining,
            warning=request.warning,
            result=result,
        )

    def wrap(self, handler: ActionHandler) -> Callable[..., Awaitable[GuardOutcome]]:
        """Build a guarded version of ``handler``."""

        async def guarded(metadata: dict[str, Any] | None = None) -> GuardOutcome:
            return await self.run(handler, metadata)

        return guarded

    async def _lockout_stage(self, request: GuardRequest) -> GuardOutcome | None:
        status = self._context.lockout.is_locked_out()
        if not status.locked:
            return None

        seconds = status.time_remaining_seconds or 0
        await self._context.recorder.track(
            EventType.SECURITY_WARNING,
            {
                "action": self.action,
                "outcome": OutcomeKind.LOCKED_OUT.value,
                "reason": status.reason,
                "timeRemainingSeconds": seconds,
            },
        )
        return GuardOutcome(
            kind=OutcomeKind.LOCKED_OUT,
            message=render_message(
                MessageKey.LOCKED_OUT,
                self._context.locale,
                reason=status.reason,
                seconds=seconds,
            ),
            retry_after_seconds=seconds,
        )

    async def _rate_limit_stage(self, request: GuardRequest) -> GuardOutcome | None:
        decision = self._context.limiters.is_allowed(self.action)
        request.remaining = decision.remaining
        request.warning = decision.warning
        if decision.allowed:
            return None

        triggered = self._context.lockout.record_violation(self.violation_reason)
        kind = OutcomeKind.LOCKOUT_TRIGGERED if triggered else OutcomeKind.RATE_LIMITED
        await self._context.recorder.track(
            EventType.SECURITY_WARNING,
            {
                "action": self.action,
                "outcome": kind.value,
                "reason": self.violation_reason,
                "retryAfterSeconds": decision.retry_after_seconds,
            },
        )

        if triggered:
            lockout_ms = self._context.lockout.policy.duration_ms
            message = render_message(
                MessageKey.LOCKOUT_TRIGGERED,
                self._context.locale,
                minutes=max(1, lockout_ms // 60_000),
            )
            retry_after = lockout_ms // 1000
        else:
            limiter = self._context.limiters.get(self.action)
            policy = limiter.policy if limiter is not None else None
            message = render_message(
                MessageKey.RATE_LIMITED,
                self._context.locale,
                seconds=decision.retry_after_seconds,
                limit=policy.max_attempts if policy else "?",
                window_seconds=policy.window_ms // 1000 if policy else "?",
            )
            retry_after = decision.retry_after_seconds

        return GuardOutcome(
            kind=kind,
            message=message,
            retry_after_seconds=retry_after,
            warning=decision.warning,
        )
