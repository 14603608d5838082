from __future__ import annotations

import asyncio
import json
import time
from typing import Any

import structlog
from circuitbreaker import CircuitBreakerError

from computeforge.clients import github_client, pagerduty_client
from computeforge.clients.base import HTTPClientError
from computeforge.cloudwatch import get_metrics_collector
from computeforge.config import Settings, get_settings
from computeforge.core.errors import ValidationError
from computeforge.logging import configure_logging, invocation_context
from computeforge.orchestration.reporter import failure_outcome
from computeforge.orchestration.results import InvocationOutcome
from computeforge.providers import provider_from_settings
from computeforge.relay import relay_for
from computeforge.tracing import init_xray, trace_async
from computeforge.triggers.incident import fetch_incident_parameters
from computeforge.triggers.models import Invocation, TriggerSource, merge_defaults
from computeforge.triggers.vcs import fetch_parameters
from computeforge.workflows.provision import ProvisionWorkflow

logger = structlog.get_logger()


async def resolve_parameters(invocation: Invocation, settings: Settings) -> dict[str, str]:
    """Final parameter bag for an invocation: trigger values over configured defaults."""
    bag = dict(invocation.parameters)
    if invocation.source == TriggerSource.vcs:
        path = settings.vcs_parameter_file
        bag = await fetch_parameters(github_client(settings), invocation, path) | bag
    elif invocation.source == TriggerSource.incident and settings.pagerduty_token:
        client = pagerduty_client(settings)
        try:
            bag = await fetch_incident_parameters(client, invocation) | bag
        finally:
            await client.aclose()
    return merge_defaults(bag, settings.parameter_defaults)


async def run_invocation(invocation: Invocation, settings: Settings) -> InvocationOutcome:
    try:
        parameters = await resolve_parameters(invocation, settings)
    except ValidationError as exc:
        logger.warning("parameters_unavailable", error=exc.message)
        return failure_outcome(exc)
    except (HTTPClientError, CircuitBreakerError) as exc:
        logger.error("parameters_unavailable", error=str(exc), error_type=type(exc).__name__)
        return failure_outcome(f"Could not read parameters from {invocation.source.value}: {exc}")

    provider = provider_from_settings(settings)
    try:
        workflow = ProvisionWorkflow(provider, concurrency=settings.apply_concurrency)
        return await workflow.run(invocation.invocation_id, parameters)
    finally:
        await provider.aclose()


@trace_async("process_job")
async def process_job(payload: dict[str, Any], settings: Settings) -> InvocationOutcome:
    invocation = Invocation.model_validate(payload["payload"]["invocation"])
    job_type = payload.get("job_type", "unknown")
    metrics = get_metrics_collector(settings.metrics_namespace, settings.aws_region)

    with invocation_context(invocation.invocation_id, source=invocation.source.value):
        start_ts = time.time()
        logger.info("job_started", requested_by=invocation.requested_by)
        await metrics.emit("InvocationStarted", 1, JobType=job_type, Source=invocation.source.value)

        async with metrics.timer("InvocationDuration", JobType=job_type):
            outcome = await run_invocation(invocation, settings)

        relay = relay_for(invocation, settings)
        try:
            await relay.report(invocation, outcome)
        except Exception as exc:
            logger.error("relay_failed", error=str(exc), status=outcome.status.value)
            raise
        finally:
            await relay.aclose()

        metric = "InvocationSucceeded" if outcome.succeeded else "InvocationFailed"
        await metrics.emit(metric, 1, JobType=job_type, Status=outcome.status.value)
        logger.info(
            "job_finished",
            status=outcome.status.value,
            duration=time.time() - start_ts,
        )
    return outcome


async def handle_event(event: dict[str, Any], settings: Settings) -> dict[str, Any]:
    """
    Handle SQS event with partial batch failure support.
    Returns batchItemFailures for failed messages.
    """
    records = event.get("Records", [])
    failed_message_ids = []

    for record in records:
        message_id = record.get("messageId")
        try:
            payload = json.loads(record["body"])
            await process_job(payload, settings)
        except Exception as exc:
            logger.error(
                "message_processing_failed",
                message_id=message_id,
                error=str(exc),
            )
            failed_message_ids.append(message_id)

    await get_metrics_collector(settings.metrics_namespace, settings.aws_region).flush()
    return {"batchItemFailures": [{"itemIdentifier": msg_id} for msg_id in failed_message_ids]}


def lambda_handler(event: dict[str, Any], context: Any) -> dict[str, Any]:
    settings = get_settings()
    configure_logging(settings.log_level)
    init_xray("computeforge-worker")

    logger.info(
        "lambda_invoked",
        request_id=getattr(context, "aws_request_id", "unknown"),
        record_count=len(event.get("Records", [])),
    )

    return asyncio.run(handle_event(event, settings))
