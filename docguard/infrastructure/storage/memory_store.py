"""In-memory key/value storage implementation.

Concrete implementation using a Python dict of serialized JSON strings.
Values are kept serialized so a corrupt entry behaves exactly as it would in
a persistent backend: the read fails and the caller degrades.
"""

import json
from typing import Any

from docguard.core.enums import ErrorCode
from docguard.core.errors import StorageError
from docguard.core.result import Failure, Result, Success


class MemoryKeyValueStore:
    """In-memory dict storage.

    Note: Does NOT inherit from KeyValueStoreProtocol (structural typing).

    Usage:
        ```python
        store = MemoryKeyValueStore()
        store.put_json("docguard:ratelimit_overlay_open", [1700000000000])
        ```

    Note:
        State is lost when the process exits. Use FileKeyValueStore when
        limits must survive restarts.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get_json(self, key: str) -> Result[Any | None, StorageError]:
        raw = self._entries.get(key)
        if raw is None:
            return Success(value=None)
        try:
            return Success(value=json.loads(raw))
        except json.JSONDecodeError as e:
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_CORRUPT_ENTRY,
                    message=f"Failed to parse JSON for key '{key}'",
                    key=key,
                    details={"error": str(e)},
                )
            )

    def put_json(self, key: str, value: Any) -> Result[None, StorageError]:
        try:
            self._entries[key] = json.dumps(value)
        except (TypeError, ValueError) as e:
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_WRITE_FAILED,
                    message=f"Value for key '{key}' is not JSON-serializable",
                    key=key,
                    details={"error": str(e)},
                )
            )
        return Success(value=None)

    def delete(self, key: str) -> Result[None, StorageError]:
        self._entries.pop(key, None)
        return Success(value=None)

    def set_raw(self, key: str, raw: str) -> None:
        """Store an undecoded string under ``key``.

        Useful for testing corrupt-entry handling.
        """
        self._entries[key] = raw

    def keys(self) -> list[str]:
        return sorted(self._entries)

    def clear_all(self) -> None:
        """Remove every entry. Useful for testing."""
        self._entries.clear()
