"""Rate limiter service.

RateLimiter wraps one ActionPolicy and the shared AttemptStore.
RateLimiterService holds the named limiters of a session and routes checks
by action name.

Key Design Decisions:
    1. Independent limiters
       - Each action has its own policy and its own stored log
       - No cross-action interaction (escalation lives in LockoutManager)

    2. Fail-open strategy
       - Unknown actions are allowed (no policy configured)
       - Storage failures are absorbed by the AttemptStore

Usage:
    ```python
    limiter = RateLimiter(policy, attempt_store, logger)
    decision = limiter.is_allowed()
    if not decision.allowed:
        wait = decision.retry_after_seconds
    ```
"""

from docguard.core.config import Settings
from docguard.core.constants import NEAR_LIMIT_THRESHOLDS
from docguard.domain.protocols import LoggerProtocol
from docguard.rate_limiter.attempt_store import AttemptStore
from docguard.rate_limiter.config import ActionPolicy, default_policies
from docguard.rate_limiter.models import RateLimitDecision


class RateLimiter:
    """Sliding-window limiter for one action kind.

    Attributes:
        policy: Immutable ActionPolicy.
        _attempts: Shared AttemptStore.
        _logger: Logger bound to the action name.
    """

    def __init__(
        self,
        policy: ActionPolicy,
        attempts: AttemptStore,
        logger: LoggerProtocol,
        *,
        near_limit_threshold: int | None = None,
    ) -> None:
        """Initialize limiter.

        Args:
            policy: Window size and attempt cap for this action.
            attempts: Attempt log shared by all limiters of the session.
            logger: Structured logger.
            near_limit_threshold: Remaining-attempt level at which a
                near-capacity warning is logged. Defaults to the stock
                threshold for the action, if any.
        """
        self.policy = policy
        self._attempts = attempts
        self._logger = logger.bind(action=policy.action)
        self._near_limit_threshold = (
            near_limit_threshold
            if near_limit_threshold is not None
            else NEAR_LIMIT_THRESHOLDS.get(policy.action)
        )

    @property
    def action(self) -> str:
        return self.policy.action

    def is_allowed(self) -> RateLimitDecision:
        """Record one attempt and report whether it is admitted.

        Returns:
            RateLimitDecision. Denials carry ``retry_after_seconds > 0``.
        """
        decision = self._attempts.record_and_check(self.policy.action, self.policy)

        if not decision.allowed:
            self._logger.warning(
                "rate_limit_exceeded",
                max_attempts=self.policy.max_attempts,
                window_ms=self.policy.window_ms,
                retry_after_seconds=decision.retry_after_seconds,
            )
        elif (
            self._near_limit_threshold is not None
            and decision.remaining <= self._near_limit_threshold
        ):
            self._logger.warning(
                "rate_limit_near_capacity", remaining=decision.remaining
            )

        return decision

    def attempts(self) -> list[int]:
        """Stored attempt timestamps (unpruned, as persisted)."""
        timestamps, _ = self._attempts.get_attempts(self.policy.action)
        return timestamps

    def reset(self) -> None:
        """Clear every stored attempt for this action (administrative override)."""
        self._attempts.clear(self.policy.action)
        self._logger.info("rate_limit_reset")


class RateLimiterService:
    """Named limiters of one session.

    Attributes:
        limiters: Mapping of action name to RateLimiter.
    """

    def __init__(self, limiters: dict[str, RateLimiter], logger: LoggerProtocol) -> None:
        self.limiters = limiters
        self._logger = logger

    @classmethod
    def from_policies(
        cls,
        policies: dict[str, ActionPolicy],
        attempts: AttemptStore,
        logger: LoggerProtocol,
    ) -> "RateLimiterService":
        return cls(
            {
                action: RateLimiter(policy, attempts, logger)
                for action, policy in policies.items()
            },
            logger,
        )

    @classmethod
    def from_settings(
        cls, settings: Settings, attempts: AttemptStore, logger: LoggerProtocol
    ) -> "RateLimiterService":
        """Build the stock overlay and document-click limiters."""
        return cls.from_policies(default_policies(settings), attempts, logger)

    def get(self, action: str) -> RateLimiter | None:
        return self.limiters.get(action)

    def is_allowed(self, action: str) -> RateLimitDecision:
        """Check ``action`` against its limiter.

        Actions without a configured policy are always allowed.
        """
        limiter = self.limiters.get(action)
        if limiter is None:
            self._logger.debug("rate_limit_no_policy", action=action)
            return RateLimitDecision(allowed=True, remaining=0)
        return limiter.is_allowed()

    def reset_all(self) -> None:
        for limiter in self.limiters.values():
            limiter.reset()
