from __future__ import annotations

import asyncio

from computeforge.queue.models import JobMessage


class InMemoryJobEnqueuer:
    """asyncio-backed queue; the API drains it in-process for local runs."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[JobMessage] = asyncio.Queue()

    async def enqueue(self, message: JobMessage) -> str:
        await self._queue.put(message)
        return message.job_id

    async def dequeue(self) -> JobMessage:
        return await self._queue.get()

    def task_done(self) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        """Wait until every enqueued message has been processed."""
        await self._queue.join()

    def size(self) -> int:
        return self._queue.qsize()
