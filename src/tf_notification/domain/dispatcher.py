"""Fire-and-forget notification fan-out.

publish() never blocks and never raises: events go onto a bounded
asyncio.Queue and a single background worker writes them. Delivery is
at-most-once; a full queue or a failed write drops the event with a log
line. The triggering action has already committed by the time it publishes.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable

from src.tf_notification.domain.models import NotificationEvent

logger = logging.getLogger(__name__)

NotificationWriter = Callable[[NotificationEvent], Awaitable[None]]


class NotificationDispatcher:
    def __init__(self, writer: NotificationWriter, maxsize: int = 1000) -> None:
        self._writer = writer
        self._queue: asyncio.Queue[NotificationEvent] = asyncio.Queue(maxsize=maxsize)
        self._worker: asyncio.Task[None] | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, event: NotificationEvent) -> bool:
        """Enqueue `event`; returns False if it was dropped."""
        if event.is_self:
            return False
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.warning(
                "notification queue full, dropping %s for %s", event.type, event.recipient_id
            )
            return False
        self._ensure_worker()
        return True

    def start(self) -> None:
        self._ensure_worker()

    async def drain(self) -> None:
        """Wait until every queued event has been handled."""
        await self._queue.join()

    async def stop(self, timeout: float = 5.0) -> None:
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout)
        except TimeoutError:
            logger.warning("notification drain timed out, %d events lost", self.pending)
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    def _ensure_worker(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # No loop (sync caller); the lifespan start() will pick the queue up
            return
        if (
            self._worker is not None
            and not self._worker.done()
            and self._worker.get_loop() is loop
        ):
            return
        self._worker = loop.create_task(self._run(), name="notification-dispatcher")

    async def _run(self) -> None:
        while True:
            event = await self._queue.get()
            try:
                await self._writer(event)
            except Exception:
                logger.warning(
                    "notification %s for %s failed", event.type, event.recipient_id, exc_info=True
                )
            finally:
                self._queue.task_done()
