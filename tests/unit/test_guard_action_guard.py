"""Unit tests for the action guard stage chain.

Every run must produce exactly one telemetry event: the action's own type
when allowed, ``security_warning`` when denied.
"""

import pytest

from docguard.core.constants import ACTION_DOCUMENT_CLICK, ACTION_OVERLAY_OPEN
from docguard.guard import GuardContext, OutcomeKind
from docguard.guard.action_guard import ActionGuard
from docguard.telemetry.models import EventType


@pytest.fixture
def context(test_settings, store, transport, mock_logger, clock):
    return GuardContext.start(
        test_settings,
        store=store,
        transport=transport,
        logger=mock_logger,
        clock=clock,
        url="https://docs.example.org/list",
    )


def _queued_types(context):
    return [e.event_type for e in context.pipeline.queued_events]


class TestAllowed:
    """Test the pass-through path."""

    @pytest.mark.asyncio
    async def test_allowed_action_runs_handler(self, context):
        calls = []

        outcome = await context.guard_for(ACTION_DOCUMENT_CLICK).run(
            lambda: calls.append("opened") or "doc", {"docTitle": "Horari"}
        )

        assert outcome.allowed is True
        assert outcome.kind is OutcomeKind.ALLOWED
        assert outcome.message is None
        assert outcome.remaining == 1
        assert outcome.result == "doc"
        assert calls == ["opened"]

    @pytest.mark.asyncio
    async def test_async_handler_is_awaited(self, context):
        async def open_overlay():
            return "overlay"

        outcome = await context.guard_for(ACTION_OVERLAY_OPEN).run(open_overlay)

        assert outcome.result == "overlay"

    @pytest.mark.asyncio
    async def test_allowed_action_emits_its_event(self, context):
        await context.guard_for(ACTION_DOCUMENT_CLICK).run(metadata={"docTitle": "Horari"})

        (event,) = context.pipeline.queued_events
        assert event.event_type == EventType.DOCUMENT_CLICKED
        assert event.metadata == {"docTitle": "Horari"}

    @pytest.mark.asyncio
    async def test_wrap_builds_guarded_callable(self, context):
        guarded = context.guard_for(ACTION_OVERLAY_OPEN).wrap(lambda: "shown")

        outcome = await guarded()

        assert outcome.result == "shown"
        assert _queued_types(context) == [EventType.OVERLAY_OPENED]

    def test_unknown_action_has_no_binding(self, context):
        with pytest.raises(KeyError):
            context.guard_for("print_document")


class TestRateLimited:
    """Test the rate-limit stage."""

    @pytest.mark.asyncio
    async def test_denial_skips_handler_and_records_violation(self, context):
        guard = context.guard_for(ACTION_DOCUMENT_CLICK)
        await guard.run()
        await guard.run()
        calls = []

        outcome = await guard.run(lambda: calls.append("opened"))

        assert outcome.allowed is False
        assert outcome.kind is OutcomeKind.RATE_LIMITED
        assert outcome.retry_after_seconds == 60
        assert "Wait 60 seconds" in outcome.message
        assert "Limit: 2 times every 60 seconds" in outcome.message
        assert calls == []
        assert len(context.lockout.violations()) == 1

    @pytest.mark.asyncio
    async def test_denial_emits_one_security_warning(self, context):
        guard = context.guard_for(ACTION_DOCUMENT_CLICK)
        for _ in range(3):
            await guard.run()

        assert _queued_types(context) == [
            EventType.DOCUMENT_CLICKED,
            EventType.DOCUMENT_CLICKED,
            EventType.SECURITY_WARNING,
        ]
        warning = context.pipeline.queued_events[-1]
        assert warning.metadata["action"] == ACTION_DOCUMENT_CLICK
        assert warning.metadata["outcome"] == "rate_limited"
        assert warning.metadata["retryAfterSeconds"] == 60


class TestLockout:
    """Test escalation and the lockout stage."""

    @pytest.mark.asyncio
    async def test_fifth_violation_triggers_lockout(self, context):
        guard = context.guard_for(ACTION_DOCUMENT_CLICK)
        await guard.run()
        await guard.run()

        outcomes = [await guard.run() for _ in range(5)]

        assert [o.kind for o in outcomes] == [OutcomeKind.RATE_LIMITED] * 4 + [
            OutcomeKind.LOCKOUT_TRIGGERED
        ]
        assert outcomes[-1].lockout_triggered is True
        assert outcomes[-1].retry_after_seconds == 300
        assert "blocked for 5 minutes" in outcomes[-1].message

    @pytest.mark.asyncio
    async def test_lockout_blocks_every_action(self, context, clock):
        clicks = context.guard_for(ACTION_DOCUMENT_CLICK)
        for _ in range(7):
            await clicks.run()
        clock.advance(1_000)
        calls = []

        outcome = await context.guard_for(ACTION_OVERLAY_OPEN).run(
            lambda: calls.append("overlay")
        )

        assert outcome.kind is OutcomeKind.LOCKED_OUT
        assert outcome.retry_after_seconds == 299
        assert "Massa clics a documents" in outcome.message
        assert calls == []
        last = context.pipeline.queued_events[-1]
        assert last.event_type == EventType.SECURITY_WARNING
        assert last.metadata["outcome"] == "locked_out"

    @pytest.mark.asyncio
    async def test_locked_out_attempts_do_not_touch_limiters(self, context, store):
        clicks = context.guard_for(ACTION_DOCUMENT_CLICK)
        for _ in range(7):
            await clicks.run()

        await context.guard_for(ACTION_OVERLAY_OPEN).run()

        assert "docguard:ratelimit_overlay_open" not in store.keys()

    @pytest.mark.asyncio
    async def test_lockout_expires(self, context, clock):
        clicks = context.guard_for(ACTION_DOCUMENT_CLICK)
        for _ in range(7):
            await clicks.run()
        clock.advance(300_000)

        outcome = await clicks.run()

        assert outcome.allowed is True


class TestCustomGuard:
    """Test guards built for other actions."""

    @pytest.mark.asyncio
    async def test_action_without_policy_is_allowed(self, context):
        guard = ActionGuard(
            context,
            action="print_document",
            event_type=EventType.DOCUMENT_CLICKED,
            violation_reason="Massa impressions",
        )

        outcomes = [await guard.run() for _ in range(10)]

        assert all(o.allowed for o in outcomes)
