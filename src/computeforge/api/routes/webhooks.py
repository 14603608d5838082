from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

from computeforge.api.deps import get_job_enqueuer
from computeforge.api.routes.common import IGNORED, InvocationAccepted, enqueue_invocation
from computeforge.config import Settings, get_settings
from computeforge.queue import JobQueue
from computeforge.triggers.incident import parse_incident_event
from computeforge.triggers.signatures import verify_github_signature, verify_pagerduty_signature
from computeforge.triggers.vcs import parse_push_event

router = APIRouter(prefix="/webhooks")
logger = structlog.get_logger()


def _json_body(body: bytes) -> dict[str, Any]:
    try:
        data = json.loads(body or b"{}")
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON") from exc
    if not isinstance(data, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Expected a JSON object")
    return data


def _reject_signature(source: str) -> HTTPException:
    logger.warning("webhook_signature_rejected", source=source)
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid signature")


@router.post("/vcs", status_code=status.HTTP_202_ACCEPTED, response_model=InvocationAccepted)
async def vcs_webhook(
    request: Request,
    enqueuer: JobQueue = Depends(get_job_enqueuer),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
    event: str | None = Header(default=None, alias="X-GitHub-Event"),
    delivery: str | None = Header(default=None, alias="X-GitHub-Delivery"),
    signature: str | None = Header(default=None, alias="X-Hub-Signature-256"),
) -> InvocationAccepted:
    body = await request.body()
    if not verify_github_signature(settings.github_webhook_secret, body, signature):
        raise _reject_signature("vcs")

    if event != "push":
        logger.info("vcs_event_ignored", github_event=event)
        return IGNORED

    invocation = parse_push_event(_json_body(body), delivery_id=delivery)
    if invocation is None:
        return IGNORED
    return await enqueue_invocation(enqueuer, invocation)


@router.post("/incident", status_code=status.HTTP_202_ACCEPTED, response_model=InvocationAccepted)
async def incident_webhook(
    request: Request,
    enqueuer: JobQueue = Depends(get_job_enqueuer),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
    signature: str | None = Header(default=None, alias="X-PagerDuty-Signature"),
) -> InvocationAccepted:
    body = await request.body()
    if not verify_pagerduty_signature(settings.pagerduty_webhook_secret, body, signature):
        raise _reject_signature("incident")

    invocation = parse_incident_event(_json_body(body))
    if invocation is None:
        return IGNORED
    return await enqueue_invocation(enqueuer, invocation)
