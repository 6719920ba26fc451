"""TelemetryTransportProtocol: delivery channel to the remote collector.

Two delivery modes with deliberately different contracts:

    send_batch: awaited, reports the outcome as a Result so the pipeline
        can requeue. Never raises for HTTP or network failures.
    send_beacon: best-effort, used at teardown. Not retried, response not
        inspected, never raises. Returns whether the payload was handed to
        the network layer.
"""

from typing import Any, Protocol

from docguard.core.errors import DeliveryError
from docguard.core.result import Result


class TelemetryTransportProtocol(Protocol):
    """Protocol for telemetry delivery transports."""

    async def send_batch(self, payload: dict[str, Any]) -> Result[None, DeliveryError]:
        """Deliver one ``{"events": [...], "batchId": ...}`` body.

        Args:
            payload: JSON-serializable batch body.

        Returns:
            Success(None) if the collector accepted the batch,
            Failure(DeliveryError) otherwise.
        """
        ...

    def send_beacon(self, payload: dict[str, Any]) -> bool:
        """Fire-and-forget delivery of a batch body during teardown."""
        ...
