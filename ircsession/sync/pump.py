"""Asyncio delivery of protocol events into a synchronizer.

Transports usually produce events from a reader task or a foreign thread.
``EventPump`` queues them and feeds the synchronizer from one consumer task,
so every reduction runs on the event loop that owns the session.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterable

from ..constants import EVENT_QUEUE_MAXSIZE
from ..logs.logger import logger
from ..protocol.events import ProtocolEvent
from .synchronizer import SessionSynchronizer

_STOP = object()


class EventPump:
    """Queue-backed event feeder for a :class:`SessionSynchronizer`."""

    def __init__(
        self, synchronizer: SessionSynchronizer, *, maxsize: int = EVENT_QUEUE_MAXSIZE
    ) -> None:
        self.synchronizer = synchronizer
        self._queue: asyncio.Queue[object] = asyncio.Queue(maxsize=maxsize)
        self._loop: asyncio.AbstractEventLoop | None = None
        self._closed = False
        self.processed = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def post(self, event: ProtocolEvent) -> None:
        """Queue an event from the loop thread.

        Raises:
            RuntimeError: The pump was closed.
            asyncio.QueueFull: A bounded queue is full.
        """
        if self._closed:
            raise RuntimeError("Event pump is closed")
        self._queue.put_nowait(event)

    async def put(self, event: ProtocolEvent) -> None:
        """Queue an event, waiting for room in a bounded queue.

        Raises:
            RuntimeError: The pump was closed.
        """
        if self._closed:
            raise RuntimeError("Event pump is closed")
        await self._queue.put(event)

    def post_threadsafe(self, event: ProtocolEvent) -> None:
        """Queue an event from a thread other than the running pump's loop."""
        if self._loop is None:
            raise RuntimeError("Event pump is not running")
        self._loop.call_soon_threadsafe(self.post, event)

    def close(self) -> None:
        """Stop accepting events; ``run`` returns after draining what is queued.

        On a full bounded queue the stop marker is queued by a task on the
        running loop once there is room.
        """
        if self._closed:
            return
        self._closed = True
        try:
            self._queue.put_nowait(_STOP)
        except asyncio.QueueFull:
            self._stopper = asyncio.get_running_loop().create_task(
                self._queue.put(_STOP)
            )
        logger.log_event("pump", "closed", level=logging.DEBUG)

    async def aclose(self) -> None:
        """Like :meth:`close`, waiting for room in a bounded queue."""
        if self._closed:
            return
        self._closed = True
        await self._queue.put(_STOP)
        logger.log_event("pump", "closed", level=logging.DEBUG)

    async def run(self) -> None:
        """Deliver queued events in order until :meth:`close` is called."""
        self._loop = asyncio.get_running_loop()
        logger.log_event("pump", "started", level=logging.DEBUG)
        try:
            while True:
                item = await self._queue.get()
                try:
                    if item is _STOP:
                        break
                    self._deliver(item)  # type: ignore[arg-type]
                finally:
                    self._queue.task_done()
        finally:
            self._loop = None
            logger.log_event(
                "pump", "stopped", level=logging.DEBUG, processed=self.processed
            )

    async def consume(self, events: AsyncIterable[ProtocolEvent]) -> int:
        """Queue every event of an async source, then close the pump.

        A bounded queue applies backpressure to the source.
        """
        count = 0
        try:
            async for event in events:
                await self.put(event)
                count += 1
        finally:
            logger.log_event(
                "pump", "source_exhausted", level=logging.DEBUG, count=count
            )
            await self.aclose()
        return count

    async def join(self) -> None:
        """Wait until every queued event has been delivered."""
        await self._queue.join()

    def _deliver(self, event: ProtocolEvent) -> None:
        try:
            self.synchronizer.handle_event(event)
        except Exception as e:  # noqa: BLE001
            logger.log_event(
                "pump",
                "delivery_error",
                level=logging.ERROR,
                event=type(event).__name__,
                error=str(e),
                error_type=type(e).__name__,
            )
        finally:
            self.processed += 1
