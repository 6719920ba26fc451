"""Unit tests for HttpTelemetryTransport using httpx.MockTransport."""

import json

import httpx
import pytest

from docguard.core.enums import ErrorCode
from docguard.core.result import Failure, Success
from docguard.infrastructure.telemetry import HttpTelemetryTransport

ENDPOINT = "https://collector.example.org/log"
PAYLOAD = {"events": [{"eventType": "overlay_opened"}], "batchId": "batch_1"}


def _transport(mock_logger, handler, **kwargs):
    return HttpTelemetryTransport(
        endpoint=ENDPOINT,
        api_key="s3cret",
        logger=mock_logger,
        async_transport=httpx.MockTransport(handler),
        sync_transport=httpx.MockTransport(handler),
        **kwargs,
    )


class TestSendBatch:
    """Test the retryable delivery path."""

    @pytest.mark.asyncio
    async def test_posts_json_with_api_key(self, mock_logger):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"success": True})

        result = await _transport(mock_logger, handler).send_batch(PAYLOAD)

        assert result == Success(value=None)
        (request,) = seen
        assert request.method == "POST"
        assert str(request.url) == ENDPOINT
        assert request.headers["X-API-Key"] == "s3cret"
        assert request.headers["Content-Type"] == "application/json"
        assert json.loads(request.content) == PAYLOAD
        assert "Origin" not in request.headers

    @pytest.mark.asyncio
    async def test_configured_origin_is_sent(self, mock_logger):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200)

        transport = _transport(mock_logger, handler, origin="https://docs.example.org")
        await transport.send_batch(PAYLOAD)

        assert seen[0].headers["Origin"] == "https://docs.example.org"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,transient", [(400, False), (401, False), (429, True), (500, True), (503, True)]
    )
    async def test_non_2xx_is_failure(self, mock_logger, status, transient):
        transport = _transport(
            mock_logger, lambda request: httpx.Response(status, text="nope")
        )

        result = await transport.send_batch(PAYLOAD)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.DELIVERY_REJECTED
        assert result.error.status_code == status
        assert result.error.is_transient is transient

    @pytest.mark.asyncio
    async def test_response_body_is_truncated(self, mock_logger):
        transport = _transport(
            mock_logger, lambda request: httpx.Response(500, text="x" * 2_000)
        )

        result = await transport.send_batch(PAYLOAD)

        assert len(result.error.details["body"]) == 500

    @pytest.mark.asyncio
    async def test_network_error_is_transient_failure(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        result = await _transport(mock_logger, handler).send_batch(PAYLOAD)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.DELIVERY_UNAVAILABLE
        assert result.error.status_code is None
        assert result.error.is_transient is True
        mock_logger.warning.assert_called_once()

    @pytest.mark.asyncio
    async def test_timeout_is_transient_failure(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        result = await _transport(mock_logger, handler).send_batch(PAYLOAD)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.DELIVERY_UNAVAILABLE
        assert result.error.message == "Telemetry collector request timed out"


class TestSendBeacon:
    """Test the best-effort teardown path."""

    def test_beacon_ignores_response_status(self, mock_logger):
        transport = _transport(mock_logger, lambda request: httpx.Response(500))

        assert transport.send_beacon(PAYLOAD) is True

    def test_beacon_sends_payload(self, mock_logger):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(200)

        _transport(mock_logger, handler).send_beacon(PAYLOAD)

        assert seen == [PAYLOAD]

    def test_beacon_never_raises(self, mock_logger):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        transport = _transport(mock_logger, handler)

        assert transport.send_beacon(PAYLOAD) is False
        mock_logger.debug.assert_called_once()
