"""Ingestion error taxonomy."""


class TelemetryError(Exception):
    """Base class for ingestion failures."""

    status_code = 500
    public_message = "Failed to process telemetry data"


class TelemetryValidationError(TelemetryError):
    """Batch envelope is missing session_id or an events array. Not retryable."""

    status_code = 400
    public_message = "Invalid telemetry data"


class TelemetryProcessingError(TelemetryError):
    """Materializing the batch failed."""

    status_code = 500
    public_message = "Failed to process telemetry data"


class TelemetryDecodeError(TelemetryError):
    """A single event in the batch could not be decoded."""
