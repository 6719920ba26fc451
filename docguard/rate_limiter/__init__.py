"""Rate limiter bounded context.

Architecture:
    - config.py: ActionPolicy, LockoutPolicy and the stock policies
    - algorithms/: sliding-window log evaluation (pure)
    - attempt_store.py: durable per-action attempt log (fail-open)
    - service.py: RateLimiter per action, RateLimiterService per session
    - lockout.py: violation ledger and lockout state machine
    - factory.py: wiring from Settings

Quick Start:
    ```python
    from docguard.infrastructure.storage import MemoryKeyValueStore
    from docguard.rate_limiter import ActionPolicy, AttemptStore, RateLimiter

    attempts = AttemptStore(MemoryKeyValueStore(), logger, prefix="docguard:")
    limiter = RateLimiter(
        ActionPolicy(action="document_click", max_attempts=50, window_ms=60_000),
        attempts,
        logger,
    )
    decision = limiter.is_allowed()
    ```
"""

from docguard.rate_limiter.attempt_store import AttemptStore
from docguard.rate_limiter.config import ActionPolicy, LockoutPolicy
from docguard.rate_limiter.lockout import LockoutManager
from docguard.rate_limiter.models import (
    LockoutState,
    LockoutStatus,
    RateLimitDecision,
    Violation,
)
from docguard.rate_limiter.service import RateLimiter, RateLimiterService

__all__ = [
    # Configuration
    "ActionPolicy",
    "LockoutPolicy",
    # Models
    "LockoutState",
    "LockoutStatus",
    "RateLimitDecision",
    "Violation",
    # Components
    "AttemptStore",
    "LockoutManager",
    "RateLimiter",
    "RateLimiterService",
]
