"""Diagnostic snapshot of the session's rate-limit state."""

from dataclasses import dataclass
from typing import TYPE_CHECKING

from docguard.rate_limiter.models import LockoutStatus

if TYPE_CHECKING:
    from docguard.guard.context import GuardContext


@dataclass(frozen=True, slots=True, kw_only=True)
class ActionUsage:
    """Attempts inside the current window against the cap."""

    used: int
    max_attempts: int
    window_ms: int

    @property
    def remaining(self) -> int:
        return max(0, self.max_attempts - self.used)


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitStatus:
    actions: dict[str, ActionUsage]
    lockout: LockoutStatus


def rate_limit_status(context: "GuardContext") -> RateLimitStatus:
    """Collect per-action usage and the lockout status.

    Only attempts still inside each action's window are counted. Reading
    the lockout status may clear an expired lockout.
    """
    now = context.clock()
    actions: dict[str, ActionUsage] = {}
    for action, limiter in context.limiters.limiters.items():
        window_ms = limiter.policy.window_ms
        used = sum(1 for ts in limiter.attempts() if now - ts < window_ms)
        actions[action] = ActionUsage(
            used=used, max_attempts=limiter.policy.max_attempts, window_ms=window_ms
        )

    status = RateLimitStatus(actions=actions, lockout=context.lockout.is_locked_out())
    context.logger.info(
        "rate_limit_status",
        **{f"{action}_used": usage.used for action, usage in actions.items()},
        locked=status.lockout.locked,
    )
    return status
