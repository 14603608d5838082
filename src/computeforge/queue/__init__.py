from __future__ import annotations

from typing import Protocol

from computeforge.queue.memory import InMemoryJobEnqueuer
from computeforge.queue.models import PROVISION_JOB, JobMessage
from computeforge.queue.sqs import SQSJobEnqueuer


class JobQueue(Protocol):
    async def enqueue(self, message: JobMessage) -> str: ...


__all__ = ["InMemoryJobEnqueuer", "JobMessage", "JobQueue", "PROVISION_JOB", "SQSJobEnqueuer"]
