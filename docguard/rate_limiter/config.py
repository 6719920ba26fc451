"""Rate limiter configuration models.

Defines the immutable per-action policy and the lockout escalation policy.
Applications inject their own policies; ``default_policies`` builds the two
stock limiters from Settings.

Key Design Decisions:
    1. Immutable policies (frozen Pydantic models)
       - Supplied at limiter construction, never mutated
    2. Millisecond windows
       - Attempt timestamps are epoch milliseconds, windows match that unit
    3. Lockout window independent from limiter windows
       - The violation window is its own setting; it is not derived from
         any limiter's window

Usage:
    ```python
    from docguard.rate_limiter.config import ActionPolicy

    policies = {
        "overlay_open": ActionPolicy(action="overlay_open", max_attempts=20, window_ms=60_000),
    }
    ```
"""

from pydantic import BaseModel, ConfigDict, Field

from docguard.core.config import Settings
from docguard.core.constants import ACTION_DOCUMENT_CLICK, ACTION_OVERLAY_OPEN


class ActionPolicy(BaseModel):
    """Sliding-window policy for one rate-limited action kind.

    Attributes:
        action: Action name; also the suffix of the storage key.
        max_attempts: Attempts allowed inside the window.
        window_ms: Window length in milliseconds.

    Examples:
        Overlay opens (20 per minute):
        ```python
        ActionPolicy(action="overlay_open", max_attempts=20, window_ms=60_000)
        ```
    """

    model_config = ConfigDict(frozen=True)

    action: str = Field(..., min_length=1, description="Rate-limited action name")
    max_attempts: int = Field(..., gt=0, description="Attempts allowed per window")
    window_ms: int = Field(..., gt=0, description="Sliding window length (ms)")


class LockoutPolicy(BaseModel):
    """Escalation policy from repeated violations to a timed lockout.

    Attributes:
        threshold: Violations inside ``violation_window_ms`` that trigger a lockout.
        duration_ms: Lockout length.
        violation_window_ms: Rolling window over which violations are counted.
    """

    model_config = ConfigDict(frozen=True)

    threshold: int = Field(5, gt=0)
    duration_ms: int = Field(300_000, gt=0)
    violation_window_ms: int = Field(300_000, gt=0)


def default_policies(settings: Settings) -> dict[str, ActionPolicy]:
    """Build the stock overlay and document-click policies from settings."""
    return {
        ACTION_OVERLAY_OPEN: ActionPolicy(
            action=ACTION_OVERLAY_OPEN,
            max_attempts=settings.max_overlay_opens,
            window_ms=settings.overlay_window_ms,
        ),
        ACTION_DOCUMENT_CLICK: ActionPolicy(
            action=ACTION_DOCUMENT_CLICK,
            max_attempts=settings.max_document_clicks,
            window_ms=settings.document_window_ms,
        ),
    }


def lockout_policy(settings: Settings) -> LockoutPolicy:
    return LockoutPolicy(
        threshold=settings.max_failed_attempts,
        duration_ms=settings.lockout_duration_ms,
        violation_window_ms=settings.violation_window_ms,
    )
