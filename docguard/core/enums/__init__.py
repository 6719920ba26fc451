"""Core enums package.

Usage:
    from docguard.core.enums import ErrorCode, Environment
"""

from docguard.core.enums.environment import Environment
from docguard.core.enums.error_code import ErrorCode

__all__ = ["ErrorCode", "Environment"]
