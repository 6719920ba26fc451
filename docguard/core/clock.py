"""Millisecond wall clock.

Time-dependent components accept a ``Clock`` so tests can drive time
explicitly instead of sleeping.
"""

import time
from collections.abc import Callable
from datetime import UTC, datetime

type Clock = Callable[[], int]


def now_ms() -> int:
    """Milliseconds since the Unix epoch."""
    return int(time.time() * 1000)


def iso_timestamp(epoch_ms: int) -> str:
    """ISO-8601 UTC rendering with millisecond precision.

    Examples:
        >>> iso_timestamp(0)
        '1970-01-01T00:00:00.000Z'
    """
    return (
        datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )
