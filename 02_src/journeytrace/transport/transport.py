"""TransportLayer: outbound queue, flush scheduling and delivery."""

import asyncio
import json
import time
from collections import deque
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from ..config import TransportSettings
from ..logging_config import get_logger
from ..market_session import get_market_session
from ..models import Priority, QueueItem, Session
from .sender import ITelemetrySender

logger = get_logger(__name__)


def _now_ms() -> int:
    return int(time.time() * 1000)


class ITransportLayer(Protocol):
    """Queueing and delivery of finalized journeys and standalone events."""

    def enqueue(
        self, payload: dict[str, Any], priority: Priority = Priority.NORMAL
    ) -> QueueItem | None:
        """Add an item to the outbound queue, flushing if a trigger fires."""
        ...


class TransportLayer:
    """
    Batches telemetry and delivers it to the ingestion endpoint.

    Flush triggers, highest precedence first: a critical item is enqueued,
    the queue reaches batch_size, the periodic timer fires, the page is torn
    down. Items inside one batch keep enqueue order; nothing is promised
    across batches.
    """

    def __init__(
        self,
        session: Session,
        sender: ITelemetrySender,
        settings: TransportSettings | None = None,
        clock: Callable[[], int] | None = None,
    ):
        self._session = session
        self._sender = sender
        self._settings = settings or TransportSettings()
        self._clock = clock or _now_ms

        self._queue: deque[QueueItem] = deque()
        self._flush_tasks: set[asyncio.Task] = set()
        self._timer_task: asyncio.Task | None = None
        self._running = False
        self.dropped_items = 0

    @property
    def settings(self) -> TransportSettings:
        return self._settings

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    def pending_items(self) -> list[QueueItem]:
        return list(self._queue)

    def enqueue(
        self, payload: dict[str, Any], priority: Priority = Priority.NORMAL
    ) -> QueueItem | None:
        """Add an item to the outbound queue."""
        try:
            item = QueueItem(payload=payload, priority=priority, enqueued_at=self._clock())
            self._queue.append(item)
            # Hard ceiling while no flush can run: one batch beyond batch_size.
            self._drop_oldest(2 * self._settings.batch_size)

            if priority is Priority.CRITICAL:
                self._request_flush("critical")
            elif len(self._queue) >= self._settings.batch_size:
                self._request_flush("batch_size")
            return item
        except Exception as e:
            logger.warning("Failed to queue browser telemetry: %s", e)
            return None

    def _request_flush(self, reason: str) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning(
                "No running event loop, %s flush deferred until the next flush", reason
            )
            return

        task = loop.create_task(self.flush())
        self._flush_tasks.add(task)
        task.add_done_callback(self._flush_tasks.discard)

    def _drop_oldest(self, limit: int) -> int:
        dropped = 0
        while len(self._queue) > limit:
            self._queue.popleft()
            dropped += 1
        if dropped:
            self.dropped_items += dropped
            logger.warning("Dropped %s queued telemetry items", dropped)
        return dropped

    def _take_batch(self) -> list[QueueItem]:
        size = min(self._settings.batch_size, len(self._queue))
        batch = [self._queue.popleft() for _ in range(size)]
        self._drop_oldest(self._settings.batch_size)
        return batch

    def _now(self) -> datetime:
        return datetime.fromtimestamp(self._clock() / 1000, tz=timezone.utc)

    def build_payload(self, batch: list[QueueItem]) -> dict[str, Any]:
        """Wire body for a batch: session id, events, browser info."""
        now = self._now()
        return {
            "session_id": self._session.id,
            "events": [item.to_wire() for item in batch],
            "browser_info": {
                "user_agent": self._session.user_agent,
                "url": self._session.url,
                "market_session": get_market_session(now).value,
                "timestamp": now.isoformat(),
            },
        }

    async def flush(self) -> int:
        """
        Send up to batch_size queued items. Returns the number delivered.

        On failure the batch goes back to the head of the queue and the
        queue is cut back to batch_size, losing the oldest items.
        """
        if not self._queue:
            return 0

        batch = self._take_batch()
        payload = self.build_payload(batch)
        try:
            await self._sender.send(payload)
        except Exception as e:
            logger.warning("Failed to send browser telemetry: %s", e)
            self._queue.extendleft(reversed(batch))
            self._drop_oldest(self._settings.batch_size)
            return 0

        logger.debug("Flushed %s telemetry items", len(batch))
        return len(batch)

    def _encode(self, payload: dict[str, Any]) -> bytes:
        return json.dumps(payload, separators=(",", ":"), default=str).encode("utf-8")

    def flush_on_teardown(self) -> bool:
        """
        Last-chance delivery while the page is going away.

        Uses the beacon primitive instead of the async path. The batch is
        trimmed from the newest end until it fits beacon_max_bytes; whatever
        does not fit is lost.
        """
        self._cancel_timer()
        if not self._queue:
            return True

        batch = self._take_batch()
        body = self._encode(self.build_payload(batch))
        while len(body) > self._settings.beacon_max_bytes and batch:
            batch.pop()
            self.dropped_items += 1
            body = self._encode(self.build_payload(batch))

        if not batch:
            logger.warning("Teardown batch exceeds beacon size limit, nothing sent")
            return False

        return self._sender.send_beacon(body)

    async def start(self) -> None:
        """Start the periodic flush timer."""
        if self._running:
            return
        self._running = True
        self._timer_task = asyncio.create_task(self._flush_timer())

    async def _flush_timer(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self._settings.flush_interval)
                if self._queue:
                    await self.flush()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error("Flush timer error: %s", e, exc_info=True)

    def _cancel_timer(self) -> None:
        self._running = False
        if self._timer_task:
            self._timer_task.cancel()
            self._timer_task = None

    async def drain(self) -> None:
        """Wait for flushes already in flight."""
        if self._flush_tasks:
            await asyncio.gather(*list(self._flush_tasks), return_exceptions=True)

    async def stop(self) -> None:
        """Stop the timer and wait for in-flight flushes."""
        self._cancel_timer()
        await self.drain()
