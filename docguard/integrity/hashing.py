"""SHA-256 digests of document data."""

import hashlib

EXPECTED_HASH_PREFIX = "sha256-"


def generate_hash(data: str | bytes) -> str:
    """Hex SHA-256 digest of ``data`` (strings are UTF-8 encoded)."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return hashlib.sha256(data).hexdigest()


def normalize_expected_hash(expected: str) -> str:
    """Strip the optional ``sha256-`` prefix and lowercase the digest."""
    expected = expected.strip()
    if expected.startswith(EXPECTED_HASH_PREFIX):
        expected = expected[len(EXPECTED_HASH_PREFIX):]
    return expected.lower()
