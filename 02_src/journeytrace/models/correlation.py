"""Server-side correlation context read from browser request headers."""

from dataclasses import dataclass
from typing import Any, Mapping

TRACE_ID_HEADER = "x-trace-id"
PARENT_SPAN_ID_HEADER = "x-parent-span-id"
SESSION_HEADER = "x-browser-session"
PORTFOLIO_ID_HEADER = "x-portfolio-id"
CORRELATION_ACK_HEADER = "x-backend-trace-correlation"


@dataclass(frozen=True)
class CorrelationContext:
    """Identifiers shared between a browser journey and a backend request."""

    trace_id: str
    parent_span_id: str | None = None
    session_id: str | None = None
    portfolio_id: str | None = None

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "CorrelationContext | None":
        """Return a context when the request carries a browser trace id."""
        trace_id = headers.get(TRACE_ID_HEADER)
        if not trace_id:
            return None
        return cls(
            trace_id=trace_id,
            parent_span_id=headers.get(PARENT_SPAN_ID_HEADER) or None,
            session_id=headers.get(SESSION_HEADER) or None,
            portfolio_id=headers.get(PORTFOLIO_ID_HEADER) or None,
        )

    def to_span_attributes(self) -> dict[str, Any]:
        attributes: dict[str, Any] = {
            "browser.trace_id": self.trace_id,
            "correlation.frontend_backend": True,
        }
        if self.parent_span_id:
            attributes["browser.parent_span_id"] = self.parent_span_id
        if self.session_id:
            attributes["browser.session_id"] = self.session_id
        if self.portfolio_id:
            attributes["browser.portfolio_id"] = self.portfolio_id
        return attributes
