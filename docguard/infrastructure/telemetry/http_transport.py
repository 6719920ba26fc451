"""HTTP transport for telemetry batches.

Handles the two delivery modes of the pipeline:
- send_batch: async POST, status interpretation, Result reporting
- send_beacon: bounded synchronous POST at teardown, outcome ignored

Wire format:
    POST <endpoint>
    Content-Type: application/json
    X-API-Key: <shared secret>

    {"events": [...], "batchId": "batch_..."}

Architecture:
    - Infrastructure layer (adapter for the remote collector)
    - Uses httpx for HTTP
    - Returns Result types (no exceptions for delivery failures)
"""

from typing import Any

import httpx

from docguard.core.enums import ErrorCode
from docguard.core.errors import DeliveryError
from docguard.core.result import Failure, Result, Success
from docguard.domain.protocols import LoggerProtocol

RESPONSE_BODY_MAX_LENGTH = 500


class HttpTelemetryTransport:
    """POSTs telemetry batches to the collector.

    Note: Does NOT inherit from TelemetryTransportProtocol (structural typing).

    Attributes:
        _endpoint: Collector URL.
        _api_key: Shared secret sent as ``X-API-Key``.
        _origin: Optional ``Origin`` header.
        _beacon_timeout: Upper bound in seconds for the teardown POST.
        _logger: Structured logger.
    """

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str,
        logger: LoggerProtocol,
        origin: str | None = None,
        beacon_timeout: float = 2.0,
        async_transport: httpx.AsyncBaseTransport | None = None,
        sync_transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            endpoint: Collector URL (e.g., "https://collector.example/log").
            api_key: Shared secret expected by the collector.
            logger: Structured logger.
            origin: Origin header value for non-browser clients (None = omit).
            beacon_timeout: Timeout for the teardown POST in seconds.
            async_transport: Optional httpx transport for send_batch (tests
                pass ``httpx.MockTransport``).
            sync_transport: Optional httpx transport for send_beacon.
        """
        self._endpoint = endpoint
        self._api_key = api_key
        self._origin = origin
        self._logger = logger
        self._beacon_timeout = beacon_timeout
        self._async_transport = async_transport
        self._sync_transport = sync_transport

    @property
    def headers(self) -> dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "X-API-Key": self._api_key,
        }
        if self._origin is not None:
            headers["Origin"] = self._origin
        return headers

    async def send_batch(self, payload: dict[str, Any]) -> Result[None, DeliveryError]:
        """POST one batch and interpret the response.

        Args:
            payload: ``{"events": [...], "batchId": ...}`` body.

        Returns:
            Success(None) on a 2xx response.
            Failure(DeliveryError) on a non-2xx response or network error.
        """
        batch_id = payload.get("batchId")
        try:
            async with httpx.AsyncClient(transport=self._async_transport) as client:
                response = await client.post(
                    self._endpoint, json=payload, headers=self.headers
                )
        except httpx.TimeoutException as e:
            self._logger.warning(
                "telemetry_transport_timeout", batch_id=batch_id, error=str(e)
            )
            return Failure(
                error=DeliveryError(
                    code=ErrorCode.DELIVERY_UNAVAILABLE,
                    message="Telemetry collector request timed out",
                    is_transient=True,
                )
            )
        except httpx.RequestError as e:
            self._logger.warning(
                "telemetry_transport_connection_error", batch_id=batch_id, error=str(e)
            )
            return Failure(
                error=DeliveryError(
                    code=ErrorCode.DELIVERY_UNAVAILABLE,
                    message=f"Failed to reach telemetry collector: {e}",
                    is_transient=True,
                )
            )

        if response.is_success:
            return Success(value=None)

        status = response.status_code
        return Failure(
            error=DeliveryError(
                code=ErrorCode.DELIVERY_REJECTED,
                message=f"Telemetry collector responded with HTTP {status}",
                status_code=status,
                is_transient=status >= 500 or status == 429,
                details={"body": response.text[:RESPONSE_BODY_MAX_LENGTH]},
            )
        )

    def send_beacon(self, payload: dict[str, Any]) -> bool:
        """POST a batch without inspecting the response.

        Args:
            payload: ``{"events": [...], "batchId": ...}`` body.

        Returns:
            True if the request was transmitted, False if it could not be.
        """
        try:
            with httpx.Client(
                transport=self._sync_transport, timeout=self._beacon_timeout
            ) as client:
                client.post(self._endpoint, json=payload, headers=self.headers)
        except httpx.HTTPError as e:
            self._logger.debug(
                "telemetry_beacon_failed",
                batch_id=payload.get("batchId"),
                error=str(e),
            )
            return False
        return True
