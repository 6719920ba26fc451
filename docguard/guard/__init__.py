"""Guard: the user-facing composition of limits, lockout and telemetry.

Architecture:
    - messages.py: localized denial messages
    - action_guard.py: lockout -> rate limit -> telemetry -> action chain
    - context.py: GuardContext, the session-lifetime owner of components
    - status.py: diagnostic snapshot
"""

from docguard.guard.action_guard import ActionGuard, GuardOutcome, OutcomeKind
from docguard.guard.context import GuardContext
from docguard.guard.messages import MessageKey, render_message
from docguard.guard.status import ActionUsage, RateLimitStatus, rate_limit_status

__all__ = [
    "ActionGuard",
    "ActionUsage",
    "GuardContext",
    "GuardOutcome",
    "MessageKey",
    "OutcomeKind",
    "RateLimitStatus",
    "rate_limit_status",
    "render_message",
]
