"""Data integrity: digest verification of fetched documents plus history."""

from docguard.integrity.hashing import generate_hash, normalize_expected_hash
from docguard.integrity.history import HashHistory
from docguard.integrity.models import HashHistoryEntry, IntegrityResult, IntegrityStatus
from docguard.integrity.verifier import IntegrityVerifier

__all__ = [
    "HashHistory",
    "HashHistoryEntry",
    "IntegrityResult",
    "IntegrityStatus",
    "IntegrityVerifier",
    "generate_hash",
    "normalize_expected_hash",
]
