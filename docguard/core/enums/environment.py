"""Runtime environment types.

Used by Settings to select the log renderer and to guard against shipping
default shared secrets to production.
"""

from enum import Enum


class Environment(str, Enum):
    """Runtime environment types."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    CI = "ci"
    PRODUCTION = "production"
