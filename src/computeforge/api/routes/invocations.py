from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Header, Request, status
from pydantic import BaseModel, Field

from computeforge.api.deps import get_job_enqueuer
from computeforge.api.routes.common import InvocationAccepted, enqueue_invocation
from computeforge.queue import JobQueue
from computeforge.triggers.manual import manual_invocation

router = APIRouter()


class InvocationRequest(BaseModel):
    parameters: dict[str, Any] = Field(default_factory=dict)


@router.post("/invocations", status_code=status.HTTP_202_ACCEPTED, response_model=InvocationAccepted)
async def create_invocation(
    payload: InvocationRequest,
    request: Request,
    enqueuer: JobQueue = Depends(get_job_enqueuer),  # noqa: B008
    idempotency_key: str | None = Header(default=None, alias="Idempotency-Key"),
) -> InvocationAccepted:
    invocation = manual_invocation(
        payload.parameters,
        requested_by=request.headers.get("X-Principal-Id", "anonymous"),
        invocation_id=idempotency_key,
    )
    return await enqueue_invocation(enqueuer, invocation)
