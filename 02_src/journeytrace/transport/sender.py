"""Transmission primitives: async batch send and teardown beacon."""

from typing import Any, Protocol

import httpx

from ..logging_config import get_logger

logger = get_logger(__name__)


class TransportError(Exception):
    """A batch could not be delivered."""


class ITelemetrySender(Protocol):
    """Network delivery of telemetry batches."""

    async def send(self, payload: dict[str, Any]) -> None:
        """Deliver a batch. Raises TransportError on failure."""
        ...

    def send_beacon(self, body: bytes) -> bool:
        """Fire-and-forget delivery for page teardown. Never raises."""
        ...

    async def aclose(self) -> None:
        """Release network resources."""
        ...


class HttpTelemetrySender:
    """Delivers batches to the ingestion endpoint over HTTP."""

    def __init__(
        self,
        endpoint: str,
        timeout: float = 5.0,
        client: httpx.AsyncClient | None = None,
        beacon_client: httpx.Client | None = None,
    ):
        self._endpoint = endpoint
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._beacon_client = beacon_client or httpx.Client(timeout=timeout)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    async def send(self, payload: dict[str, Any]) -> None:
        try:
            response = await self._client.post(self._endpoint, json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise TransportError(f"Telemetry delivery failed: {e}") from e

    def send_beacon(self, body: bytes) -> bool:
        """
        Blocking POST used while the page is being torn down.

        The caller does not wait for an acknowledgement it could act on, so
        only a failure to hand the request to the network is reported.
        """
        try:
            self._beacon_client.post(
                self._endpoint,
                content=body,
                headers={"Content-Type": "application/json"},
            )
            return True
        except httpx.HTTPError as e:
            logger.warning("Telemetry beacon failed: %s", e)
            return False

    async def aclose(self) -> None:
        await self._client.aclose()
        self._beacon_client.close()
