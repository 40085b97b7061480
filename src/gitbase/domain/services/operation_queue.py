"""Per-key serialization of asynchronous operations.

Each key gets one worker task consuming an ``asyncio.Queue`` of pending
operations in FIFO order, so at most one operation per key is in flight.
Workers exit once their queue drains and are started again on demand.
"""

import asyncio
from typing import Any, Awaitable, Callable, TypeVar

from gitbase.core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Operation = Callable[[], Awaitable[Any]]


class OperationQueue:
    """Runs operations one at a time per key.

    An operation must not enqueue further work under its own key; it would
    wait for itself forever. Work under a different key is fine.
    """

    def __init__(self) -> None:
        self._queues: dict[str, asyncio.Queue[tuple[Operation, asyncio.Future]]] = {}
        self._workers: dict[str, asyncio.Task] = {}
        self._closed = False

    async def run(self, key: str, operation: Callable[[], Awaitable[T]]) -> T:
        """Enqueue ``operation`` under ``key`` and wait for its result.

        Exceptions raised by the operation are re-raised to the caller.
        """
        if self._closed:
            raise RuntimeError("Operation queue is closed")

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        queue = self._queues.get(key)
        if queue is None:
            queue = asyncio.Queue()
            self._queues[key] = queue
        queue.put_nowait((operation, future))

        if key not in self._workers:
            self._workers[key] = asyncio.create_task(
                self._worker(key, queue), name=f"gitbase-queue:{key}"
            )

        return await future

    async def _worker(self, key: str, queue: asyncio.Queue) -> None:
        try:
            while True:
                try:
                    operation, future = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break

                # Caller gave up before we got to it
                if future.done():
                    continue

                try:
                    result = await operation()
                except asyncio.CancelledError:
                    future.cancel()
                    raise
                except Exception as e:
                    if not future.done():
                        future.set_exception(e)
                else:
                    if not future.done():
                        future.set_result(result)
        finally:
            self._workers.pop(key, None)
            if queue.empty() and self._queues.get(key) is queue:
                del self._queues[key]

    def pending(self, key: str) -> int:
        """Number of operations waiting (not yet started) under ``key``."""
        queue = self._queues.get(key)
        return queue.qsize() if queue is not None else 0

    def active_keys(self) -> list[str]:
        return list(self._workers.keys())

    async def aclose(self) -> None:
        """Cancel running workers and fail every pending operation."""
        self._closed = True
        workers = list(self._workers.values())
        for task in workers:
            task.cancel()
        if workers:
            await asyncio.gather(*workers, return_exceptions=True)

        for key, queue in list(self._queues.items()):
            while not queue.empty():
                _, future = queue.get_nowait()
                if not future.done():
                    future.cancel()
            logger.debug("Operation queue drained on close", key=key)
        self._queues.clear()
