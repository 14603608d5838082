from __future__ import annotations

import structlog
from fastapi import HTTPException, status
from pydantic import BaseModel

from computeforge.queue import JobMessage, JobQueue
from computeforge.triggers.models import Invocation

logger = structlog.get_logger()


class InvocationAccepted(BaseModel):
    invocation_id: str | None = None
    status: str = "accepted"


IGNORED = InvocationAccepted(status="ignored")


async def enqueue_invocation(enqueuer: JobQueue, invocation: Invocation) -> InvocationAccepted:
    message = JobMessage.for_invocation(invocation)
    try:
        await enqueuer.enqueue(message)
    except (ConnectionError, TimeoutError, OSError, RuntimeError) as exc:
        logger.exception("job_enqueue_failed", invocation_id=invocation.invocation_id)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to enqueue provisioning job",
        ) from exc

    logger.info(
        "job_enqueued",
        invocation_id=invocation.invocation_id,
        source=invocation.source.value,
        requested_by=invocation.requested_by,
    )
    return InvocationAccepted(invocation_id=invocation.invocation_id)
