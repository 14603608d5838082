from __future__ import annotations

from fastapi import Depends

from computeforge.config import Settings, get_settings
from computeforge.core.errors import ConfigurationError
from computeforge.queue import InMemoryJobEnqueuer, JobQueue, SQSJobEnqueuer

_memory_enqueuer: InMemoryJobEnqueuer | None = None


def memory_enqueuer() -> InMemoryJobEnqueuer:
    global _memory_enqueuer
    if _memory_enqueuer is None:
        _memory_enqueuer = InMemoryJobEnqueuer()
    return _memory_enqueuer


def get_job_enqueuer(settings: Settings = Depends(get_settings)) -> JobQueue:  # noqa: B008
    if settings.job_queue_backend == "memory":
        return memory_enqueuer()

    if settings.job_queue_backend == "sqs":
        return SQSJobEnqueuer(settings)

    raise ConfigurationError(f"Unsupported job queue backend: {settings.job_queue_backend}")
