"""API tests for the telemetry collector.

Tests the complete HTTP request/response cycle for ``/log`` and ``/health``:
- CORS preflight and method checks
- Origin allow-list and API key authentication
- Body validation, enrichment and classification
- Per-IP request cap
- Trace id propagation

Architecture:
- Uses FastAPI TestClient against an app built by ``create_app``
- In-memory sink injected so stored events can be inspected
"""

import pytest
from fastapi.testclient import TestClient

from docguard.collector import InMemoryEventSink, create_app

ORIGIN = "https://docs.example.org"


def _headers(**overrides):
    headers = {
        "Origin": ORIGIN,
        "X-API-Key": "collector-secret",
        "Content-Type": "application/json",
    }
    headers.update(overrides)
    return headers


@pytest.fixture
def sink(mock_logger):
    return InMemoryEventSink(logger=mock_logger)


@pytest.fixture
def client(test_settings, sink, mock_logger, clock):
    app = create_app(test_settings, sink=sink, logger=mock_logger, clock=clock)
    return TestClient(app)


class TestPreflightAndMethods:
    """Test OPTIONS handling and method filtering."""

    def test_options_returns_cors_headers(self, client):
        response = client.options("/log")

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "*"
        assert response.headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
        assert "X-API-Key" in response.headers["Access-Control-Allow-Headers"]

    def test_options_needs_no_credentials(self, client):
        response = client.options("/log", headers={"Origin": "https://evil.example"})

        assert response.status_code == 200

    def test_get_is_not_allowed(self, client):
        response = client.get("/log", headers=_headers())

        assert response.status_code == 405
        assert response.text == "Method not allowed"
        assert response.headers["Access-Control-Allow-Origin"] == "*"


class TestAuthentication:
    """Test origin and API key checks."""

    def test_unknown_origin_is_forbidden(self, client, sink):
        response = client.post(
            "/log",
            json={"eventType": "overlay_opened"},
            headers=_headers(Origin="https://evil.example"),
        )

        assert response.status_code == 403
        assert response.text == "Unauthorized origin"
        assert len(sink) == 0

    def test_missing_origin_is_forbidden(self, client):
        headers = _headers()
        del headers["Origin"]

        response = client.post("/log", json={"eventType": "overlay_opened"}, headers=headers)

        assert response.status_code == 403

    def test_second_allowed_origin_is_accepted(self, client):
        response = client.post(
            "/log",
            json={"eventType": "overlay_opened"},
            headers=_headers(Origin="https://portal.example.org"),
        )

        assert response.status_code == 200

    @pytest.mark.parametrize("api_key", ["wrong", "", "collector-secret-old"])
    def test_bad_api_key_is_unauthorized(self, client, api_key):
        response = client.post(
            "/log",
            json={"eventType": "overlay_opened"},
            headers=_headers(**{"X-API-Key": api_key}),
        )

        assert response.status_code == 401
        assert response.text == "Invalid API key"


class TestValidation:
    """Test body validation."""

    def test_invalid_json(self, client):
        response = client.post("/log", content=b"{not json", headers=_headers())

        assert response.status_code == 400
        assert response.text == "Invalid JSON body"

    def test_missing_event_type(self, client):
        response = client.post("/log", json={"metadata": {}}, headers=_headers())

        assert response.status_code == 400
        assert response.text == "Invalid event structure"

    @pytest.mark.parametrize("event_type", [["overlay_opened"], {"name": "overlay_opened"}])
    def test_non_string_event_type(self, client, sink, event_type):
        response = client.post("/log", json={"eventType": event_type}, headers=_headers())

        assert response.status_code == 400
        assert response.text == "Invalid event structure"
        assert len(sink) == 0

    def test_event_type_outside_whitelist(self, client, sink):
        response = client.post(
            "/log", json={"eventType": "security_event"}, headers=_headers()
        )

        assert response.status_code == 400
        assert len(sink) == 0


class TestIngestion:
    """Test accepted events and server-side enrichment."""

    def test_single_event_response(self, client, sink):
        response = client.post(
            "/log",
            json={"eventType": "overlay_opened", "sessionId": "sess_1_abc"},
            headers=_headers(),
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["eventId"].startswith("evt_")
        assert sink.events[0]["eventId"] == body["eventId"]
        assert response.headers["Access-Control-Allow-Origin"] == "*"

    def test_batch_response(self, client, sink):
        payload = {
            "batchId": "batch_1_abc",
            "events": [
                {"eventType": "overlay_opened", "eventNumber": 1},
                {"eventType": "document_clicked", "eventNumber": 2},
                {"eventType": "overlay_closed", "eventNumber": 3},
            ],
        }

        response = client.post("/log", json=payload, headers=_headers())

        body = response.json()
        assert body["success"] is True
        assert body["batchId"] == "batch_1_abc"
        assert body["eventIds"] == [e["eventId"] for e in sink.events]
        assert [e["eventNumber"] for e in sink.events] == [1, 2, 3]

    def test_enrichment_from_edge_headers(self, client, sink):
        client.post(
            "/log",
            json={"eventType": "error", "clientIP": "10.0.0.1"},
            headers=_headers(
                **{
                    "CF-Connecting-IP": "198.51.100.4",
                    "CF-IPCountry": "AD",
                    "User-Agent": "docguard-test",
                    "Referer": "https://docs.example.org/list",
                }
            ),
        )

        (event,) = sink.events
        assert event["clientIP"] == "198.51.100.4"
        assert event["country"] == "AD"
        assert event["userAgent"] == "docguard-test"
        assert event["referer"] == "https://docs.example.org/list"
        assert event["timestamp"] == "2023-11-14T22:13:20.000Z"

    def test_missing_edge_headers(self, client, sink):
        client.post("/log", json={"eventType": "overlay_opened"}, headers=_headers())

        assert sink.events[0]["clientIP"] == "unknown"
        assert sink.events[0]["country"] is None

    def test_suspicious_event_is_flagged_and_alerted(self, client, sink, mock_logger):
        client.post(
            "/log",
            json={"eventType": "overlay_opened", "metadata": {"openCount": 51}},
            headers=_headers(),
        )

        (event,) = sink.events
        assert event["securityFlags"] == ["excessive_overlay_opens"]
        assert event["severity"] == "HIGH"
        assert len(sink.alerts) == 1
        alert_events = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert "security_alert" in alert_events


class TestIngestionCap:
    """Test the per-IP request cap."""

    def test_requests_over_cap_are_rejected(self, test_settings, sink, mock_logger, clock):
        settings = test_settings.model_copy(update={"collector_rate_limit_per_minute": 2})
        client = TestClient(create_app(settings, sink=sink, logger=mock_logger, clock=clock))
        headers = _headers(**{"CF-Connecting-IP": "198.51.100.4"})

        codes = [
            client.post("/log", json={"eventType": "overlay_opened"}, headers=headers).status_code
            for _ in range(2)
        ]
        clock.advance(15_000)
        denied = client.post("/log", json={"eventType": "overlay_opened"}, headers=headers)

        assert codes == [200, 200]
        assert denied.status_code == 429
        assert denied.text == "Rate limit exceeded"
        assert denied.headers["Retry-After"] == "45"
        assert len(sink) == 2

    def test_cap_is_per_ip(self, test_settings, sink, mock_logger, clock):
        settings = test_settings.model_copy(update={"collector_rate_limit_per_minute": 1})
        client = TestClient(create_app(settings, sink=sink, logger=mock_logger, clock=clock))

        first = client.post(
            "/log",
            json={"eventType": "overlay_opened"},
            headers=_headers(**{"CF-Connecting-IP": "198.51.100.4"}),
        )
        second = client.post(
            "/log",
            json={"eventType": "overlay_opened"},
            headers=_headers(**{"CF-Connecting-IP": "198.51.100.5"}),
        )

        assert (first.status_code, second.status_code) == (200, 200)

    def test_idle_client_ips_are_forgotten(self, test_settings, sink, mock_logger, clock):
        app = create_app(test_settings, sink=sink, logger=mock_logger, clock=clock)
        client = TestClient(app)
        for n in range(30):
            client.post(
                "/log",
                json={"eventType": "overlay_opened"},
                headers=_headers(**{"CF-Connecting-IP": f"203.0.113.{n}"}),
            )
        assert app.state.ingestion_limits.tracked_clients == 30

        clock.advance(60_000)
        client.post("/log", json={"eventType": "overlay_opened"}, headers=_headers())

        assert app.state.ingestion_limits.tracked_clients == 1

    def test_zero_disables_cap(self, test_settings, sink, mock_logger, clock):
        settings = test_settings.model_copy(update={"collector_rate_limit_per_minute": 0})
        client = TestClient(create_app(settings, sink=sink, logger=mock_logger, clock=clock))

        codes = {
            client.post("/log", json={"eventType": "overlay_opened"}, headers=_headers()).status_code
            for _ in range(5)
        }

        assert codes == {200}


class FailingSink:
    """Sink whose storage always raises."""

    async def store(self, event):
        raise RuntimeError("disk full")

    async def alert(self, event):
        pass


class TestFailuresAndHealth:
    """Test unexpected failures, health check and tracing."""

    def test_sink_failure_returns_500(self, test_settings, mock_logger, clock):
        client = TestClient(
            create_app(test_settings, sink=FailingSink(), logger=mock_logger, clock=clock)
        )

        response = client.post("/log", json={"eventType": "overlay_opened"}, headers=_headers())

        assert response.status_code == 500
        assert response.text == "Internal server error"
        mock_logger.error.assert_called_once()
        assert mock_logger.error.call_args.args[0] == "collector_request_failed"

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_trace_id_is_generated(self, client):
        response = client.get("/health")

        assert len(response.headers["X-Trace-Id"]) == 36

    def test_trace_id_is_propagated(self, client):
        response = client.get("/health", headers={"X-Trace-Id": "trace-123"})

        assert response.headers["X-Trace-Id"] == "trace-123"
