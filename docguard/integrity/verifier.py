"""Integrity verification of fetched document data.

The verifier compares the SHA-256 digest of the raw document list with the
configured expected digest. With no expected digest configured every check
is skipped. A mismatch can be bypassed by the user only when bypass is
allowed; a bypass is logged and the accepted digest recorded.

Usage:
    ```python
    verifier = IntegrityVerifier(
        expected_hash=settings.integrity_expected_hash,
        history=history,
        logger=logger,
    )
    result = await verifier.verify(csv_text)
    if not result.verified and not await verifier.bypass(result):
        abort()
    ```
"""

from docguard.domain.protocols import LoggerProtocol
from docguard.integrity.hashing import generate_hash, normalize_expected_hash
from docguard.integrity.history import HashHistory
from docguard.integrity.models import IntegrityResult, IntegrityStatus
from docguard.telemetry.security_logger import SecurityLogger

_DIGEST_PREVIEW = 16


class IntegrityVerifier:
    """Checks document data against an expected digest."""

    def __init__(
        self,
        *,
        expected_hash: str | None,
        history: HashHistory,
        logger: LoggerProtocol,
        allow_bypass: bool = True,
        security_logger: SecurityLogger | None = None,
    ) -> None:
        self.expected_hash = (
            normalize_expected_hash(expected_hash) if expected_hash else None
        )
        self.history = history
        self.allow_bypass = allow_bypass
        self._logger = logger
        self._security_logger = security_logger

    async def verify(self, data: str | bytes) -> IntegrityResult:
        """Verify ``data`` and record its digest when it matches.

        Returns:
            IntegrityResult with status verified, skipped, mismatch or error.
        """
        if self.expected_hash is None:
            return IntegrityResult(
                status=IntegrityStatus.SKIPPED,
                message="Integrity checking disabled",
            )

        try:
            actual = generate_hash(data)
        except (TypeError, UnicodeEncodeError) as e:
            self._logger.error("integrity_check_error", error=e)
            return IntegrityResult(
                status=IntegrityStatus.ERROR,
                message="Failed to perform integrity check",
                error=str(e),
            )

        if actual == self.expected_hash:
            await self._security_log(
                "info",
                "Data integrity verified",
                {"hash": actual[:_DIGEST_PREVIEW] + "..."},
            )
            self.history.record(actual)
            return IntegrityResult(
                status=IntegrityStatus.VERIFIED,
                message="Data integrity verified successfully",
                hash=actual,
            )

        await self._security_log(
            "error",
            "Data integrity check FAILED",
            {
                "expected": self.expected_hash[:_DIGEST_PREVIEW] + "...",
                "actual": actual[:_DIGEST_PREVIEW] + "...",
            },
        )
        return IntegrityResult(
            status=IntegrityStatus.MISMATCH,
            message="Data has been modified or corrupted",
            hash=actual,
            expected_hash=self.expected_hash,
        )

    async def bypass(self, result: IntegrityResult) -> bool:
        """Accept data that failed verification, if bypass is allowed.

        Returns:
            True when the caller may continue with the unverified data.
        """
        if result.verified:
            return True
        if not self.allow_bypass or result.hash is None:
            return False

        await self._security_log(
            "warning",
            "User bypassed integrity check",
            {"actualHash": result.hash[:_DIGEST_PREVIEW]},
        )
        self.history.record(result.hash)
        return True

    async def _security_log(
        self, level: str, message: str, metadata: dict[str, str]
    ) -> None:
        if self._security_logger is not None:
            await self._security_logger.log_security(level, message, metadata)
            return
        log = getattr(self._logger, level)
        log("integrity_check", detail=message, **metadata)
