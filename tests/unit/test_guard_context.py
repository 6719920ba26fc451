"""Unit tests for GuardContext wiring, status and shutdown."""

import threading

import pytest

from docguard.core.constants import ACTION_DOCUMENT_CLICK, ACTION_OVERLAY_OPEN
from docguard.guard import GuardContext, rate_limit_status
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
        environment={"language": "ca-ES"},
    )


class TestStart:
    """Test session wiring."""

    def test_components_share_the_session(self, context, test_settings):
        assert context.session.url == "https://docs.example.org/list"
        assert context.session.session_id.startswith("sess_")
        assert context.pipeline.batch_size == test_settings.batch_size
        assert context.lockout.policy.threshold == test_settings.max_failed_attempts
        assert set(context.limiters.limiters) == {ACTION_OVERLAY_OPEN, ACTION_DOCUMENT_CLICK}
        assert context.locale == "en"

    def test_logger_is_bound_to_session(self, context, mock_logger):
        mock_logger.bind.assert_any_call(session_id=context.session.session_id)
        mock_logger.info.assert_any_call(
            "guard_session_started", url="https://docs.example.org/list"
        )

    @pytest.mark.asyncio
    async def test_environment_is_attached_to_events(self, context):
        event = await context.recorder.track(EventType.OVERLAY_CLOSED, {"overlayId": "o1"})

        assert event.metadata == {"language": "ca-ES", "overlayId": "o1"}

    @pytest.mark.asyncio
    async def test_disabled_telemetry_records_nothing(
        self, test_settings, store, transport, mock_logger, clock
    ):
        settings = test_settings.model_copy(update={"telemetry_enabled": False})
        context = GuardContext.start(
            settings, store=store, transport=transport, logger=mock_logger, clock=clock
        )

        outcome = await context.guard_for(ACTION_OVERLAY_OPEN).run()

        assert outcome.allowed is True
        assert len(context.pipeline) == 0


class TestResetAndStatus:
    """Test administrative reset and the diagnostic snapshot."""

    @pytest.mark.asyncio
    async def test_status_counts_attempts_in_window(self, context, clock):
        guard = context.guard_for(ACTION_OVERLAY_OPEN)
        await guard.run()
        clock.advance(30_000)
        await guard.run()
        clock.advance(40_000)

        status = rate_limit_status(context)

        overlay = status.actions[ACTION_OVERLAY_OPEN]
        assert overlay.used == 1
        assert overlay.remaining == 2
        assert status.actions[ACTION_DOCUMENT_CLICK].used == 0
        assert status.lockout.locked is False

    @pytest.mark.asyncio
    async def test_reset_limits_clears_lockout_and_logs(self, context):
        guard = context.guard_for(ACTION_DOCUMENT_CLICK)
        for _ in range(7):
            await guard.run()
        assert context.lockout.is_locked_out().locked is True

        context.reset_limits()

        status = rate_limit_status(context)
        assert status.lockout.locked is False
        assert status.actions[ACTION_DOCUMENT_CLICK].used == 0
        assert context.lockout.violations() == []
        assert (await guard.run()).allowed is True


class TestShutdown:
    """Test session teardown."""

    @pytest.mark.asyncio
    async def test_shutdown_beacons_remaining_events(self, context, transport):
        await context.guard_for(ACTION_OVERLAY_OPEN).run()
        await context.guard_for(ACTION_DOCUMENT_CLICK).run()

        sent = await context.shutdown()
        await context.beacon

        assert sent is True
        (beacon,) = transport.beacons
        assert [e["eventType"] for e in beacon["events"]] == [
            "overlay_opened",
            "document_clicked",
        ]
        assert transport.batches == []
        assert context.pipeline.timer_pending is False

    @pytest.mark.asyncio
    async def test_shutdown_with_empty_queue_sends_nothing(self, context, transport):
        assert await context.shutdown() is False
        assert context.beacon is None
        assert transport.beacons == []

    @pytest.mark.asyncio
    async def test_shutdown_does_not_wait_for_the_beacon(self, context, transport):
        release = threading.Event()
        original = transport.send_beacon

        def slow_beacon(payload):
            release.wait(timeout=5)
            return original(payload)

        transport.send_beacon = slow_beacon
        await context.guard_for(ACTION_OVERLAY_OPEN).run()

        assert await context.shutdown() is True
        assert context.beacon.done() is False
        assert len(context.pipeline) == 0

        release.set()
        assert await context.beacon is True
        assert len(transport.beacons) == 1
