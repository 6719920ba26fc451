"""Integrity verification models."""

from dataclasses import dataclass
from enum import Enum

from pydantic import BaseModel, ConfigDict


class IntegrityStatus(str, Enum):
    VERIFIED = "verified"
    SKIPPED = "skipped"
    MISMATCH = "mismatch"
    ERROR = "error"


@dataclass(frozen=True, slots=True, kw_only=True)
class IntegrityResult:
    """Outcome of one integrity check.

    Attributes:
        status: What the check concluded.
        message: Human-readable summary.
        hash: Digest of the checked data (absent when skipped or on error).
        expected_hash: Normalized expected digest (mismatch only).
        error: Failure description (error only).
    """

    status: IntegrityStatus
    message: str
    hash: str | None = None
    expected_hash: str | None = None
    error: str | None = None

    @property
    def verified(self) -> bool:
        """True when the data may be used without a warning."""
        return self.status in (IntegrityStatus.VERIFIED, IntegrityStatus.SKIPPED)

    @property
    def skipped(self) -> bool:
        return self.status is IntegrityStatus.SKIPPED


class HashHistoryEntry(BaseModel):
    """One persisted digest: ``{hash, timestamp, date}``."""

    model_config = ConfigDict(frozen=True)

    hash: str
    timestamp: int
    date: str
