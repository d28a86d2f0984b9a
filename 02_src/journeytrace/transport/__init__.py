"""Transport module."""

from .sender import HttpTelemetrySender, ITelemetrySender, TransportError
from .transport import ITransportLayer, TransportLayer

__all__ = [
    "HttpTelemetrySender",
    "ITelemetrySender",
    "ITransportLayer",
    "TransportError",
    "TransportLayer",
]
