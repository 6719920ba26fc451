"""Identifier generation for sessions, batches and collector events.

Format: ``<prefix>_<epoch ms>_<9 random base36 characters>``.
"""

import secrets
import string

from docguard.core.clock import now_ms
from docguard.core.constants import IDENTIFIER_RANDOM_LENGTH

_BASE36 = string.digits + string.ascii_lowercase


def _identifier(prefix: str, timestamp_ms: int | None = None) -> str:
    stamp = now_ms() if timestamp_ms is None else timestamp_ms
    suffix = "".join(secrets.choice(_BASE36) for _ in range(IDENTIFIER_RANDOM_LENGTH))
    return f"{prefix}_{stamp}_{suffix}"


def generate_session_id(timestamp_ms: int | None = None) -> str:
    return _identifier("sess", timestamp_ms)


def generate_batch_id(timestamp_ms: int | None = None) -> str:
    return _identifier("batch", timestamp_ms)


def generate_event_id(timestamp_ms: int | None = None) -> str:
    return _identifier("evt", timestamp_ms)
