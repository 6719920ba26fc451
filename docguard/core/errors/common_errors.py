"""Error classes shared by the storage and delivery layers.

Error Types:
- StorageError: persistence unavailable or an entry could not be decoded
- DeliveryError: a telemetry batch was not accepted by the collector

Usage:
    from docguard.core.errors import StorageError
    from docguard.core.enums import ErrorCode
    from docguard.core.result import Failure

    return Failure(error=StorageError(
        code=ErrorCode.STORAGE_CORRUPT_ENTRY,
        message="Stored value is not valid JSON",
        key=key,
    ))
"""

from dataclasses import dataclass

from docguard.core.errors.domain_error import DomainError


@dataclass(frozen=True, slots=True, kw_only=True)
class StorageError(DomainError):
    """Key/value persistence failure.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        key: Storage key involved in the failed operation.
        details: Additional context.
    """

    key: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DeliveryError(DomainError):
    """Telemetry batch delivery failure.

    Attributes:
        code: ErrorCode enum.
        message: Human-readable message.
        status_code: HTTP status returned by the collector (None on
            network failure).
        is_transient: Whether a retry could plausibly succeed. Reported
            for diagnostics only; the pipeline requeues regardless.
        details: Additional context.
    """

    status_code: int | None = None
    is_transient: bool = True
