"""Wire format of browser telemetry and its decoding into tagged variants."""

from dataclasses import dataclass
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import TelemetryDecodeError, TelemetryValidationError

Number = Union[int, float]


class BrowserInfo(BaseModel):
    """Page metadata sent alongside every batch."""

    model_config = ConfigDict(extra="allow")

    user_agent: str | None = None
    url: str | None = None
    market_session: str | None = None
    timestamp: str | Number | None = None


class TelemetryBatch(BaseModel):
    """Batch envelope. Events stay raw here and are decoded one by one."""

    session_id: str = Field(min_length=1)
    events: list[Any]
    browser_info: BrowserInfo | None = None

    @field_validator("browser_info", mode="before")
    @classmethod
    def _ignore_malformed_browser_info(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else None


class JourneySubEvent(BaseModel):
    name: str = "unknown"
    timestamp: Number | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class JourneyChildSpan(BaseModel):
    span_id: str | None = None
    name: str | None = None
    start_time: Number | None = None
    end_time: Number | None = None
    duration: Number | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class JourneyPayload(BaseModel):
    """A finalized client journey."""

    model_config = ConfigDict(extra="allow")

    journey_name: str = Field(min_length=1)
    trace_id: str | None = None
    span_id: str | None = None
    start_time: Number | None = None
    end_time: Number | None = None
    duration: Number | None = None
    status: str | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)
    events: list[JourneySubEvent] = Field(default_factory=list)
    spans: list[JourneyChildSpan] = Field(default_factory=list)

    @property
    def journey_status(self) -> str:
        return str(self.attributes.get("journey.status") or self.status or "unknown")


class StandaloneEventPayload(BaseModel):
    """An event reported outside of any journey, or a critical journey event."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    timestamp: Number | None = None
    attributes: dict[str, Any] = Field(default_factory=dict)


class UnknownPayload(BaseModel):
    """An object with neither journey_name nor name."""

    model_config = ConfigDict(extra="allow")


EventPayload = Union[JourneyPayload, StandaloneEventPayload, UnknownPayload]


@dataclass(frozen=True)
class BrowserEvent:
    """One decoded queue item from a batch."""

    payload: EventPayload
    priority: str = "normal"
    timestamp: Number | None = None
    delivery_id: str | None = None

    @property
    def event_type(self) -> str:
        if isinstance(self.payload, JourneyPayload):
            return self.payload.journey_name
        if isinstance(self.payload, StandaloneEventPayload):
            return self.payload.name
        return "unknown"


def parse_batch(body: Any) -> TelemetryBatch:
    """
    Validate the batch envelope.

    Raises:
        TelemetryValidationError: If session_id or the events array is
            missing or malformed
    """
    try:
        return TelemetryBatch.model_validate(body)
    except ValidationError as e:
        raise TelemetryValidationError(str(e)) from e


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def decode_event(raw: Any) -> BrowserEvent:
    """
    Decode one `{data, priority, timestamp, id}` item.

    The `data` shape decides the variant: `journey_name` means a journey,
    `name` alone means a standalone event, anything else is unknown.

    Raises:
        TelemetryDecodeError: If the item or its data is not an object, or
            a journey/event payload has the wrong field types
    """
    if not isinstance(raw, dict):
        raise TelemetryDecodeError("Telemetry event must be an object")

    data = raw.get("data")
    if not isinstance(data, dict):
        raise TelemetryDecodeError("Telemetry event data must be an object")

    try:
        if data.get("journey_name"):
            payload: EventPayload = JourneyPayload.model_validate(data)
        elif data.get("name"):
            payload = StandaloneEventPayload.model_validate(data)
        else:
            payload = UnknownPayload.model_validate(data)
    except ValidationError as e:
        raise TelemetryDecodeError(f"Malformed telemetry event: {e}") from e

    priority = raw.get("priority")
    timestamp = raw.get("timestamp")
    delivery_id = raw.get("id")
    return BrowserEvent(
        payload=payload,
        priority=priority if isinstance(priority, str) and priority else "normal",
        timestamp=timestamp if _is_number(timestamp) else None,
        delivery_id=delivery_id if isinstance(delivery_id, str) and delivery_id else None,
    )
