"""Infrastructure adapters (logging, storage, telemetry transport)."""
