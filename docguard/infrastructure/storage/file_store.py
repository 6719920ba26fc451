"""File-backed key/value storage implementation.

All keys live in one JSON object on disk. Every write rewrites the document
through a temporary file and ``os.replace`` so a crash never leaves a
half-written document behind.

Limitations:
    - Single-writer semantics. Two processes doing read-modify-write on the
      same file can lose updates.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from docguard.core.enums import ErrorCode
from docguard.core.errors import StorageError
from docguard.core.result import Failure, Result, Success


class FileKeyValueStore:
    """JSON document storage on the local filesystem.

    Note: Does NOT inherit from KeyValueStoreProtocol (structural typing).

    Attributes:
        _path: Location of the JSON document.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def _load(self) -> Result[dict[str, Any], StorageError]:
        if not self._path.exists():
            return Success(value={})
        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
        except OSError as e:
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_READ_FAILED,
                    message=f"Failed to read storage file '{self._path}'",
                    details={"error": str(e)},
                )
            )
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_CORRUPT_ENTRY,
                    message=f"Storage file '{self._path}' is not valid UTF-8 JSON",
                    details={"error": str(e)},
                )
            )
        if not isinstance(document, dict):
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_CORRUPT_ENTRY,
                    message=f"Storage file '{self._path}' does not hold an object",
                )
            )
        return Success(value=document)

    def _write(self, document: dict[str, Any]) -> Result[None, StorageError]:
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle)
            os.replace(tmp_name, self._path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            return Failure(
                error=StorageError(
                    code=ErrorCode.STORAGE_WRITE_FAILED,
                    message=f"Failed to write storage file '{self._path}'",
                    details={"error": str(e)},
                )
            )
        return Success(value=None)

    def get_json(self, key: str) -> Result[Any | None, StorageError]:
        match self._load():
            case Success(value=document):
                return Success(value=document.get(key))
            case Failure(error=err):
                return Failure(error=StorageError(
                    code=err.code, message=err.message, key=key, details=err.details
                ))

    def put_json(self, key: str, value: Any) -> Result[None, StorageError]:
        # An unreadable document is replaced rather than blocking all writes.
        match self._load():
            case Success(value=document):
                pass
            case Failure():
                document = {}
        document[key] = value
        return self._write(document)

    def delete(self, key: str) -> Result[None, StorageError]:
        match self._load():
            case Success(value=document):
                if key not in document:
                    return Success(value=None)
                del document[key]
                return self._write(document)
            case Failure(error=err):
                return Failure(error=err)
