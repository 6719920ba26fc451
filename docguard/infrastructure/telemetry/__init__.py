"""Telemetry delivery transports."""

from docguard.infrastructure.telemetry.http_transport import HttpTelemetryTransport

__all__ = ["HttpTelemetryTransport"]
