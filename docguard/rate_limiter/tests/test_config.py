"""Unit tests for rate limiter configuration models."""

import pytest
from pydantic import ValidationError

from docguard.core.config import Settings
from docguard.core.constants import ACTION_DOCUMENT_CLICK, ACTION_OVERLAY_OPEN
from docguard.rate_limiter.config import (
    ActionPolicy,
    LockoutPolicy,
    default_policies,
    lockout_policy,
)


class TestActionPolicy:
    """Test ActionPolicy validation."""

    def test_valid_policy(self):
        policy = ActionPolicy(action="overlay_open", max_attempts=20, window_ms=60_000)

        assert policy.action == "overlay_open"
        assert policy.max_attempts == 20
        assert policy.window_ms == 60_000

    def test_policy_is_immutable(self):
        policy = ActionPolicy(action="overlay_open", max_attempts=20, window_ms=60_000)

        with pytest.raises(ValidationError):
            policy.max_attempts = 5

    @pytest.mark.parametrize(
        "field,value",
        [("max_attempts", 0), ("window_ms", 0), ("max_attempts", -1)],
    )
    def test_rejects_non_positive_limits(self, field, value):
        kwargs = {"action": "a", "max_attempts": 1, "window_ms": 1000, field: value}

        with pytest.raises(ValidationError):
            ActionPolicy(**kwargs)

    def test_rejects_empty_action(self):
        with pytest.raises(ValidationError):
            ActionPolicy(action="", max_attempts=1, window_ms=1000)


class TestLockoutPolicy:
    """Test LockoutPolicy defaults."""

    def test_defaults(self):
        policy = LockoutPolicy()

        assert policy.threshold == 5
        assert policy.duration_ms == 300_000
        assert policy.violation_window_ms == 300_000


class TestDefaultPolicies:
    """Test the stock policies built from settings."""

    def test_stock_limits(self):
        policies = default_policies(Settings())

        assert set(policies) == {ACTION_OVERLAY_OPEN, ACTION_DOCUMENT_CLICK}
        assert policies[ACTION_OVERLAY_OPEN].max_attempts == 20
        assert policies[ACTION_OVERLAY_OPEN].window_ms == 60_000
        assert policies[ACTION_DOCUMENT_CLICK].max_attempts == 50
        assert policies[ACTION_DOCUMENT_CLICK].window_ms == 60_000

    def test_policies_follow_settings(self):
        settings = Settings(max_document_clicks=2, document_window_ms=10_000)

        policy = default_policies(settings)[ACTION_DOCUMENT_CLICK]

        assert policy.max_attempts == 2
        assert policy.window_ms == 10_000

    def test_lockout_policy_follows_settings(self):
        settings = Settings(
            max_failed_attempts=3, lockout_duration_ms=60_000, violation_window_ms=90_000
        )

        policy = lockout_policy(settings)

        assert policy == LockoutPolicy(
            threshold=3, duration_ms=60_000, violation_window_ms=90_000
        )
