"""Browser session and outbound queue models."""

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .journey import Priority


def generate_session_id() -> str:
    """Generate a session id of the form browser-<epoch ms>-<suffix>."""
    return f"browser-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


@dataclass(frozen=True)
class Session:
    """One per page load. The id is generated once and never changes."""

    id: str
    created_at: datetime
    user_agent: str
    url: str
    referrer: str = ""

    @classmethod
    def create(cls, user_agent: str, url: str, referrer: str = "") -> "Session":
        return cls(
            id=generate_session_id(),
            created_at=datetime.now(timezone.utc),
            user_agent=user_agent,
            url=url,
            referrer=referrer,
        )


@dataclass
class QueueItem:
    """A finalized journey or standalone event waiting for delivery."""

    payload: dict[str, Any]
    priority: Priority
    enqueued_at: int  # epoch ms
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_wire(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "data": self.payload,
            "priority": self.priority.value,
            "timestamp": self.enqueued_at,
        }
