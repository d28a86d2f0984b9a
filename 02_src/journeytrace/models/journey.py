"""Client-side journey data models."""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class JourneyStatus(str, Enum):
    """Lifecycle state of a journey."""

    ACTIVE = "active"
    COMPLETED = "completed"
    UNMOUNTED = "unmounted"


class Priority(str, Enum):
    """Delivery priority. Values are the wire strings."""

    NORMAL = "normal"
    CRITICAL = "critical_event"


def generate_trace_id() -> str:
    """32 hex chars, W3C trace-context sized."""
    return uuid.uuid4().hex


def generate_span_id() -> str:
    """16 hex chars, W3C trace-context sized."""
    return uuid.uuid4().hex[:16]


@dataclass
class JourneyEvent:
    """A durationless occurrence attached to a journey."""

    name: str
    timestamp: int  # epoch ms
    attributes: dict[str, Any] = field(default_factory=dict)
    priority: Priority = Priority.NORMAL

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "timestamp": self.timestamp,
            "attributes": dict(self.attributes),
        }


@dataclass
class JourneySpan:
    """A timed sub-operation of a journey, e.g. one outbound call."""

    span_id: str
    name: str
    start_time: int
    end_time: int
    attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def duration(self) -> int:
        return self.end_time - self.start_time

    def to_payload(self) -> dict[str, Any]:
        return {
            "span_id": self.span_id,
            "name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "attributes": dict(self.attributes),
        }


@dataclass
class Journey:
    """
    A traced, named user interaction.

    Owned by JourneyTracer while active. Once ended it is serialized
    into the transport queue and never touched again.
    """

    trace_id: str
    span_id: str
    name: str
    start_time: int  # epoch ms
    end_time: int | None = None
    status: JourneyStatus = JourneyStatus.ACTIVE
    attributes: dict[str, Any] = field(default_factory=dict)
    events: list[JourneyEvent] = field(default_factory=list)
    spans: list[JourneySpan] = field(default_factory=list)

    @property
    def duration(self) -> int | None:
        if self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def is_open(self) -> bool:
        return self.end_time is None

    def to_payload(self) -> dict[str, Any]:
        """Wire shape of a journey payload (`data` of a queue item)."""
        return {
            "trace_id": self.trace_id,
            "span_id": self.span_id,
            "journey_name": self.name,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration": self.duration,
            "status": self.status.value,
            "attributes": dict(self.attributes),
            "events": [event.to_payload() for event in self.events],
            "spans": [span.to_payload() for span in self.spans],
        }
