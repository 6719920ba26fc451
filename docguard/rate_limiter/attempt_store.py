"""Durable per-action attempt log.

Persists one ordered list of epoch-millisecond timestamps per action under
``<prefix>ratelimit_<action>`` and evaluates new attempts against it with
the sliding-window algorithm.

Fail-open strategy:
    - Unreadable or malformed logs are treated as empty
    - Failed writes still report the computed decision
    - Both cases attach a warning to the decision and are logged
"""

from typing import Any

from docguard.core.clock import Clock, now_ms
from docguard.core.constants import RATE_LIMIT_KEY_PREFIX
from docguard.core.result import Failure, Success
from docguard.domain.protocols import KeyValueStoreProtocol, LoggerProtocol
from docguard.rate_limiter.algorithms import evaluate_sliding_window
from docguard.rate_limiter.config import ActionPolicy
from docguard.rate_limiter.models import RateLimitDecision


def _is_timestamp_list(value: Any) -> bool:
    return isinstance(value, list) and all(
        isinstance(ts, int) and not isinstance(ts, bool) for ts in value
    )


class AttemptStore:
    """Sliding-window attempt log backed by a key/value store.

    Attributes:
        _store: Persistence surface (KeyValueStoreProtocol).
        _prefix: Namespace prepended to every key.
        _logger: Structured logger.
        _clock: Millisecond clock.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        logger: LoggerProtocol,
        *,
        prefix: str = "",
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._logger = logger
        self._prefix = prefix
        self._clock = clock

    def key_for(self, action: str) -> str:
        """Build the storage key for ``action``.

        Examples:
            >>> AttemptStore(store, logger, prefix="docguard:").key_for("overlay_open")
            'docguard:ratelimit_overlay_open'
        """
        return f"{self._prefix}{RATE_LIMIT_KEY_PREFIX}{action}"

    def get_attempts(self, action: str) -> tuple[list[int], str | None]:
        """Read the stored attempt log.

        Returns:
            Tuple of (timestamps, warning). Timestamps are empty and a warning
            is set when the log cannot be read or has an unexpected shape.
        """
        key = self.key_for(action)
        match self._store.get_json(key):
            case Success(value=None):
                return [], None
            case Success(value=stored) if _is_timestamp_list(stored):
                return list(stored), None
            case Success():
                self._logger.warning(
                    "rate_limit_storage_unavailable",
                    action=action,
                    key=key,
                    reason="malformed attempt log",
                )
                return [], "storage_unavailable"
            case Failure(error=err):
                self._logger.warning(
                    "rate_limit_storage_unavailable",
                    action=action,
                    key=key,
                    reason=err.message,
                )
                return [], "storage_unavailable"

    def record_and_check(self, action: str, policy: ActionPolicy) -> RateLimitDecision:
        """Evaluate one attempt and persist the resulting log.

        The pruned log is written back on every call; the current attempt is
        appended only when it is admitted.

        Args:
            action: Action name (storage key suffix).
            policy: Window size and attempt cap.

        Returns:
            RateLimitDecision for this attempt.
        """
        attempts, warning = self.get_attempts(action)
        evaluation = evaluate_sliding_window(attempts, self._clock(), policy)

        match self._store.put_json(self.key_for(action), evaluation.timestamps):
            case Failure(error=err):
                self._logger.warning(
                    "rate_limit_storage_write_failed",
                    action=action,
                    reason=err.message,
                )
                warning = "storage_unavailable"
            case _:
                pass

        return RateLimitDecision(
            allowed=evaluation.allowed,
            remaining=evaluation.remaining,
            retry_after_seconds=evaluation.retry_after_seconds,
            warning=warning,
        )

    def prune(self, action: str, window_ms: int) -> bool:
        """Delete the log of ``action`` if no attempt is inside the window.

        Returns:
            True if the log was deleted.
        """
        now = self._clock()
        attempts, _ = self.get_attempts(action)
        if any(now - ts < window_ms for ts in attempts):
            return False
        self.clear(action)
        return True

    def clear(self, action: str) -> None:
        match self._store.delete(self.key_for(action)):
            case Failure(error=err):
                self._logger.warning(
                    "rate_limit_storage_write_failed", action=action, reason=err.message
                )
            case _:
                pass
