"""KeyValueStoreProtocol: typed persistence surface for local state.

The rate limiter, lockout manager and hash history depend only on this
protocol, never on a concrete storage technology. Values are JSON-compatible
Python objects (lists, dicts, numbers, strings).

Contract:
    - Missing keys read as ``Success(value=None)``.
    - Unreadable or undecodable entries return ``Failure(StorageError)``;
      callers decide how to degrade (the limiter fails open).
    - No method raises for expected persistence failures.

Implementations:
    - MemoryKeyValueStore (tests, short-lived sessions)
    - FileKeyValueStore (long-running agents)
"""

from typing import Any, Protocol

from docguard.core.errors import StorageError
from docguard.core.result import Result


class KeyValueStoreProtocol(Protocol):
    """Protocol for JSON key/value persistence."""

    def get_json(self, key: str) -> Result[Any | None, StorageError]:
        """Read and decode the value stored under ``key``.

        Args:
            key: Fully-qualified storage key (prefix included).

        Returns:
            Success(value) with the decoded value, Success(None) if absent,
            or Failure(StorageError) if the entry cannot be read.
        """
        ...

    def put_json(self, key: str, value: Any) -> Result[None, StorageError]:
        """Encode and store ``value`` under ``key``, replacing any previous value."""
        ...

    def delete(self, key: str) -> Result[None, StorageError]:
        """Remove ``key``. Deleting a missing key is not an error."""
        ...
