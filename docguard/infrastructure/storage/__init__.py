"""Key/value storage adapters implementing KeyValueStoreProtocol.

Available Adapters:
    - MemoryKeyValueStore: process-local dict (tests, short sessions)
    - FileKeyValueStore: single JSON document on disk (long-running agents)
"""

from docguard.infrastructure.storage.file_store import FileKeyValueStore
from docguard.infrastructure.storage.memory_store import MemoryKeyValueStore

__all__ = [
    "FileKeyValueStore",
    "MemoryKeyValueStore",
]
