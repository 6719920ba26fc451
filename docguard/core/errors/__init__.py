"""Core errors package.

Usage:
    from docguard.core.errors import DomainError, StorageError, DeliveryError
"""

from docguard.core.errors.common_errors import DeliveryError, StorageError
from docguard.core.errors.domain_error import DomainError

__all__ = [
    "DomainError",
    "StorageError",
    "DeliveryError",
]
