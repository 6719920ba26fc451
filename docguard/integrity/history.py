"""Capped history of verified digests.

Kept in the key/value store under ``integrity_hash_history`` so an
administrator can see which data versions a client has accepted. Only the
most recent ``limit`` entries survive; older ones are discarded first.
"""

from pydantic import TypeAdapter, ValidationError

from docguard.core.clock import Clock, iso_timestamp, now_ms
from docguard.core.constants import HASH_HISTORY_KEY, HASH_HISTORY_LIMIT
from docguard.core.result import Failure, Success
from docguard.domain.protocols import KeyValueStoreProtocol, LoggerProtocol
from docguard.integrity.models import HashHistoryEntry

_entries_adapter = TypeAdapter(list[HashHistoryEntry])


class HashHistory:
    """Bounded list of accepted digests.

    Storage failures are logged and otherwise ignored; the history is
    diagnostic only.
    """

    def __init__(
        self,
        store: KeyValueStoreProtocol,
        logger: LoggerProtocol,
        *,
        prefix: str = "",
        limit: int = HASH_HISTORY_LIMIT,
        enabled: bool = True,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self._logger = logger
        self._key = f"{prefix}{HASH_HISTORY_KEY}"
        self.limit = limit
        self.enabled = enabled
        self._clock = clock

    def entries(self) -> list[HashHistoryEntry]:
        """Stored entries, oldest first. Unreadable history reads as empty."""
        match self._store.get_json(self._key):
            case Success(value=None):
                return []
            case Success(value=raw):
                try:
                    return _entries_adapter.validate_python(raw)
                except ValidationError:
                    self._logger.warning("hash_history_corrupt", key=self._key)
                    return []
            case Failure(error=err):
                self._logger.warning(
                    "hash_history_unavailable", key=self._key, error_code=err.code.value
                )
                return []

    def record(self, digest: str) -> None:
        """Append ``digest`` and trim to the newest ``limit`` entries."""
        if not self.enabled:
            return

        timestamp = self._clock()
        entries = self.entries()
        entries.append(
            HashHistoryEntry(
                hash=digest,
                timestamp=timestamp,
                date=iso_timestamp(timestamp),
            )
        )
        entries = entries[-self.limit:]

        result = self._store.put_json(
            self._key, _entries_adapter.dump_python(entries, mode="json")
        )
        if isinstance(result, Failure):
            self._logger.warning(
                "hash_history_write_failed",
                key=self._key,
                error_code=result.error.code.value,
            )

    def clear(self) -> None:
        self._store.delete(self._key)
