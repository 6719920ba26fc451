"""Sliding-window log algorithm.

Counts attempts within the last ``window_ms`` milliseconds relative to the
current instant. There are no aligned buckets, so a burst straddling a
bucket boundary cannot double the effective limit.

The function is pure: it receives the stored timestamps and returns the
sequence that should be persisted, leaving I/O to the AttemptStore.
"""

import math
from dataclasses import dataclass

from docguard.rate_limiter.config import ActionPolicy


@dataclass(frozen=True, slots=True, kw_only=True)
class SlidingWindowEvaluation:
    """Result of evaluating one attempt.

    Attributes:
        allowed: Whether the attempt fits in the window.
        remaining: Attempts left after this one (0 when denied).
        retry_after_seconds: Seconds until the oldest surviving attempt
            leaves the window (0 when allowed).
        timestamps: Sequence to persist (pruned, plus ``now`` when allowed).
    """

    allowed: bool
    remaining: int
    retry_after_seconds: int
    timestamps: list[int]


def evaluate_sliding_window(
    timestamps: list[int], now: int, policy: ActionPolicy
) -> SlidingWindowEvaluation:
    """Evaluate one attempt at ``now`` against ``policy``.

    Args:
        timestamps: Previously recorded attempts (epoch ms, oldest first).
        now: Current time in epoch ms.
        policy: Window size and attempt cap.

    Returns:
        SlidingWindowEvaluation describing the decision and the new log.

    Examples:
        >>> policy = ActionPolicy(action="a", max_attempts=2, window_ms=60_000)
        >>> evaluate_sliding_window([0, 50], 100, policy).retry_after_seconds
        60
    """
    surviving = [ts for ts in timestamps if now - ts < policy.window_ms]

    if len(surviving) >= policy.max_attempts:
        oldest = min(surviving)
        wait_ms = policy.window_ms - (now - oldest)
        return SlidingWindowEvaluation(
            allowed=False,
            remaining=0,
            retry_after_seconds=max(1, math.ceil(wait_ms / 1000)),
            timestamps=surviving,
        )

    surviving.append(now)
    return SlidingWindowEvaluation(
        allowed=True,
        remaining=policy.max_attempts - len(surviving),
        retry_after_seconds=0,
        timestamps=surviving,
    )
