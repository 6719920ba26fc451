"""Core shared kernel.

This module provides foundational utilities used across all bounded contexts:
- Result types for railway-oriented programming
- Base error classes for storage and delivery failures
- Settings and constants

The core module has NO dependencies on other application layers.
"""

from docguard.core.enums import ErrorCode
from docguard.core.errors import DeliveryError, DomainError, StorageError
from docguard.core.result import Failure, Result, Success

__all__ = [
    "DeliveryError",
    "DomainError",
    "ErrorCode",
    "Failure",
    "Result",
    "StorageError",
    "Success",
]
