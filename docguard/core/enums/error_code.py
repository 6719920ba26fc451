"""Machine-readable error codes.

Error codes follow ENTITY_ACTION_REASON naming convention.
Used with Result types for railway-oriented programming.

Categories:
- Storage errors (STORAGE_*)
- Delivery errors (DELIVERY_*)
- Validation errors (INVALID_*, VALIDATION_*)
"""

from enum import Enum


class ErrorCode(Enum):
    """Machine-readable error codes."""

    # Storage errors
    STORAGE_READ_FAILED = "storage_read_failed"
    STORAGE_WRITE_FAILED = "storage_write_failed"
    STORAGE_CORRUPT_ENTRY = "storage_corrupt_entry"

    # Delivery errors
    DELIVERY_REJECTED = "delivery_rejected"
    DELIVERY_UNAVAILABLE = "delivery_unavailable"

    # Validation errors
    INVALID_EVENT_TYPE = "invalid_event_type"
    VALIDATION_FAILED = "validation_failed"
