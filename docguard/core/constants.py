"""Centralized constants for internal implementation details.

This module contains constants that are internal implementation details,
NOT environment-specific configuration. For environment-specific settings,
use `docguard/core/config.py` instead.

Example:
    >>> from docguard.core.constants import HASH_HISTORY_LIMIT
"""

# =============================================================================
# Storage Keys (appended to Settings.storage_prefix)
# =============================================================================

RATE_LIMIT_KEY_PREFIX: str = "ratelimit_"
"""Prefix for per-action attempt logs (``ratelimit_<action>``)."""

LOCKOUT_KEY: str = "ratelimit_lockout"
"""Key holding the active LockoutState."""

LOCKOUT_VIOLATIONS_KEY: str = "ratelimit_lockout_violations"
"""Key holding the violation ledger."""

HASH_HISTORY_KEY: str = "integrity_hash_history"
"""Key holding the verified-digest history."""


# =============================================================================
# Action Names
# =============================================================================

ACTION_OVERLAY_OPEN: str = "overlay_open"
ACTION_DOCUMENT_CLICK: str = "document_click"


# =============================================================================
# Limits
# =============================================================================

HASH_HISTORY_LIMIT: int = 50
"""Maximum number of digests kept in the hash history."""

NEAR_LIMIT_THRESHOLDS: dict[str, int] = {
    ACTION_OVERLAY_OPEN: 5,
    ACTION_DOCUMENT_CLICK: 10,
}
"""Remaining-attempt level at which a near-capacity warning is logged."""

IDENTIFIER_RANDOM_LENGTH: int = 9
"""Number of base36 characters in generated session/batch/event ids."""


# =============================================================================
# Classifier Thresholds
# =============================================================================

EXCESSIVE_OVERLAY_OPENS: int = 50
"""openCount above which an overlay_opened event is suspicious."""

RAPID_CLICK_THRESHOLD_MS: int = 100
"""Inter-click latency below which a document_clicked event is suspicious."""

BLOCKED_DOMAIN_REASON: str = "Domini no autoritzat"
"""Reason string attached by the URL allow-list when a domain is blocked."""

TRANSPORT_ERROR_KEYWORD: str = "CORS"
"""Substring in an error message that indicates a transport-layer failure."""
