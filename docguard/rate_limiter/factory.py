"""Factory functions for the rate limiter bounded context.

Creates concrete limiters and the lockout manager from Settings and injects
the shared storage, logger and clock.

Usage:
    ```python
    from docguard.rate_limiter.factory import build_rate_limiting

    limiters, lockout = build_rate_limiting(settings, store, logger)
    ```
"""

from docguard.core.clock import Clock, now_ms
from docguard.core.config import Settings
from docguard.domain.protocols import KeyValueStoreProtocol, LoggerProtocol
from docguard.rate_limiter.attempt_store import AttemptStore
from docguard.rate_limiter.config import lockout_policy
from docguard.rate_limiter.lockout import LockoutManager
from docguard.rate_limiter.service import RateLimiterService


def build_rate_limiting(
    settings: Settings,
    store: KeyValueStoreProtocol,
    logger: LoggerProtocol,
    *,
    clock: Clock = now_ms,
) -> tuple[RateLimiterService, LockoutManager]:
    """Create the session's limiters and lockout manager.

    Args:
        settings: Policies, lockout parameters and storage prefix.
        store: Key/value persistence shared by all components.
        logger: Structured logger.
        clock: Millisecond clock (injected by tests).

    Returns:
        Tuple of (RateLimiterService, LockoutManager).
    """
    attempts = AttemptStore(
        store, logger, prefix=settings.storage_prefix, clock=clock
    )
    service = RateLimiterService.from_settings(settings, attempts, logger)
    lockout = LockoutManager(
        store,
        logger,
        policy=lockout_policy(settings),
        prefix=settings.storage_prefix,
        clock=clock,
    )
    return service, lockout
