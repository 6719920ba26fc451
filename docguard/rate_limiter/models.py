"""Rate limiter result and state models.

- RateLimitDecision: outcome of one limiter evaluation
- Violation: one entry of the violation ledger
- LockoutState: persisted lockout record
- LockoutStatus: outcome of a lockout check
"""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, slots=True, kw_only=True)
class RateLimitDecision:
    """Outcome of ``AttemptStore.record_and_check``.

    Attributes:
        allowed: Whether the attempt was admitted.
        remaining: Attempts still available in the current window (0 when denied).
        retry_after_seconds: Whole seconds until the window admits a new
            attempt (0 when allowed, always > 0 when denied).
        warning: Set when persistence failed and the limiter failed open
            or could not record the attempt.
    """

    allowed: bool
    remaining: int
    retry_after_seconds: int = 0
    warning: str | None = None


class Violation(BaseModel):
    """One recorded rate-limit violation."""

    model_config = ConfigDict(frozen=True)

    timestamp: int = Field(..., description="Epoch milliseconds")
    reason: str


class LockoutState(BaseModel):
    """Active lockout record as persisted.

    Serialized with camelCase keys (``until``, ``reason``, ``issuedAt``).
    Invariant: ``until > issued_at``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    until: int
    reason: str
    issued_at: int = Field(..., alias="issuedAt")


@dataclass(frozen=True, slots=True, kw_only=True)
class LockoutStatus:
    """Outcome of ``LockoutManager.is_locked_out``.

    Attributes:
        locked: Whether a lockout is in force.
        time_remaining_seconds: Whole seconds until the lockout ends (locked only).
        reason: Reason recorded with the lockout (locked only).
    """

    locked: bool
    time_remaining_seconds: int | None = None
    reason: str | None = None
