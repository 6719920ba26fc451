"""Violation ledger and lockout manager.

Two-state machine shared by every limiter of a profile:

    Active --(violations in window reach threshold)--> Locked
    Locked --(now >= until, observed by is_locked_out)--> Active

Transitions:
    - Active -> Active: violation recorded, count below threshold.
    - Active -> Locked: LockoutState installed with
      ``until = now + duration_ms`` and the triggering reason. The ledger
      is kept for audit.
    - Locked -> Locked: violations are still recorded but never extend or
      replace the active lockout.
    - Locked -> Active: detected lazily; the expired lockout and its
      violation history are cleared together.

Storage failures follow the limiter's fail-open policy: an unreadable
lockout record reads as "not locked", an unreadable ledger as empty.
"""

import math

from pydantic import TypeAdapter, ValidationError

from docguard.core.clock import Clock, now_ms
from docguard.core.constants import LOCKOUT_KEY, LOCKOUT_VIOLATIONS_KEY
from docguard.core.result import Failure, Success
from docguard.domain.protocols import KeyValueStoreProtocol, LoggerProtocol
from docguard.rate_limiter.config import LockoutPolicy
from docguard.rate_limiter.models import LockoutState, LockoutStatus, Violation

_violations_adapter = TypeAdapter(list[Violation])


class LockoutManager:
    """Escalates repeated rate-limit violations to a timed lockout.

    Attributes:
        policy: Threshold, lockout duration and violation window.
        _store: Persistence surface.
        _lockout_key: Storage key of the LockoutState.
        _violations_key: Storage key of the violation ledger.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        logger: LoggerProtocol,
        *,
        policy: LockoutPolicy | None = None,
        prefix: str = "",
        clock: Clock = now_ms,
    ) -> None:
        self.policy = policy or LockoutPolicy()
        self._store = store
        self._logger = logger
        self._clock = clock
        self._lockout_key = f"{prefix}{LOCKOUT_KEY}"
        self._violations_key = f"{prefix}{LOCKOUT_VIOLATIONS_KEY}"

    # ------------------------------------------------------------------
    # Public contract
    # ------------------------------------------------------------------

    def is_locked_out(self) -> LockoutStatus:
        """Report whether a lockout is in force, clearing it if expired.

        Returns:
            LockoutStatus with remaining seconds and reason when locked.
        """
        lockout = self._read_lockout()
        if lockout is None:
            return LockoutStatus(locked=False)

        now = self._clock()
        if now < lockout.until:
            return LockoutStatus(
                locked=True,
                time_remaining_seconds=math.ceil((lockout.until - now) / 1000),
                reason=lockout.reason,
            )

        self._clear()
        self._logger.info("lockout_expired", reason=lockout.reason)
        return LockoutStatus(locked=False)

    def record_violation(self, reason: str) -> bool:
        """Append a violation and install a lockout if the threshold is reached.

        Args:
            reason: Why the violation happened (shown to the user if it
                triggers the lockout).

        Returns:
            True if this call installed a new lockout, False otherwise
            (including while a lockout is already active).
        """
        now = self._clock()
        violations = self.violations()
        violations.append(Violation(timestamp=now, reason=reason))
        recent = [
            v for v in violations if now - v.timestamp < self.policy.violation_window_ms
        ]
        self._write_violations(recent)

        if len(recent) < self.policy.threshold:
            self._logger.info(
                "violation_recorded",
                reason=reason,
                violation_count=len(recent),
                threshold=self.policy.threshold,
            )
            return False

        active = self._read_lockout()
        if active is not None and now < active.until:
            self._logger.info(
                "violation_recorded_while_locked",
                reason=reason,
                violation_count=len(recent),
            )
            return False

        self._lockout(reason, now)
        return True

    def reset(self) -> None:
        """Administrative clear of the lockout and the violation history."""
        self._clear()
        self._logger.info("lockout_reset")

    def violations(self) -> list[Violation]:
        """Stored violations (as persisted, oldest first)."""
        match self._store.get_json(self._violations_key):
            case Success(value=None):
                return []
            case Success(value=stored):
                try:
                    return _violations_adapter.validate_python(stored)
                except ValidationError:
                    self._logger.warning(
                        "lockout_storage_unavailable",
                        key=self._violations_key,
                        reason="malformed violation ledger",
                    )
                    return []
            case Failure(error=err):
                self._logger.warning(
                    "lockout_storage_unavailable",
                    key=self._violations_key,
                    reason=err.message,
                )
                return []

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _lockout(self, reason: str, now: int) -> None:
        state = LockoutState(
            until=now + self.policy.duration_ms, reason=reason, issued_at=now
        )
        match self._store.put_json(self._lockout_key, state.model_dump(by_alias=True)):
            case Failure(error=err):
                self._logger.warning(
                    "lockout_storage_write_failed", reason=err.message
                )
            case _:
                pass
        self._logger.error(
            "lockout_triggered",
            reason=reason,
            duration_seconds=self.policy.duration_ms // 1000,
        )

    def _read_lockout(self) -> LockoutState | None:
        match self._store.get_json(self._lockout_key):
            case Success(value=None):
                return None
            case Success(value=stored):
                try:
                    return LockoutState.model_validate(stored)
                except ValidationError:
                    self._logger.warning(
                        "lockout_storage_unavailable",
                        key=self._lockout_key,
                        reason="malformed lockout record",
                    )
                    return None
            case Failure(error=err):
                self._logger.warning(
                    "lockout_storage_unavailable",
                    key=self._lockout_key,
                    reason=err.message,
                )
                return None

    def _write_violations(self, violations: list[Violation]) -> None:
        payload = [v.model_dump() for v in violations]
        match self._store.put_json(self._violations_key, payload):
            case Failure(error=err):
                self._logger.warning(
                    "lockout_storage_write_failed", reason=err.message
                )
            case _:
                pass

    def _clear(self) -> None:
        for key in (self._lockout_key, self._violations_key):
            match self._store.delete(key):
                case Failure(error=err):
                    self._logger.warning(
                        "lockout_storage_write_failed", key=key, reason=err.message
                    )
                case _:
                    pass
