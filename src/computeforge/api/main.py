from __future__ import annotations

import asyncio
import contextlib
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import AsyncIterator

import structlog
from fastapi import FastAPI
from mangum import Mangum

from computeforge import __version__
from computeforge.api.deps import memory_enqueuer
from computeforge.api.routes import health, invocations, webhooks
from computeforge.config import Settings, get_settings
from computeforge.logging import configure_logging
from computeforge.queue import InMemoryJobEnqueuer
from computeforge.workers.handler import process_job

logger = structlog.get_logger()


async def consume(queue: InMemoryJobEnqueuer, settings: Settings) -> None:
    """Drain the in-memory queue through the worker until cancelled."""
    while True:
        message = await queue.dequeue()
        try:
            await process_job(asdict(message), settings)
        except Exception as exc:
            logger.error("job_processing_failed", job_id=message.job_id, error=str(exc))
        finally:
            queue.task_done()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    configure_logging(settings.log_level)

    consumer: asyncio.Task[None] | None = None
    if settings.job_queue_backend == "memory":
        consumer = asyncio.create_task(consume(memory_enqueuer(), settings))
        logger.info("memory_consumer_started")
    try:
        yield
    finally:
        if consumer is not None:
            consumer.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await consumer


def create_app() -> FastAPI:
    settings = get_settings()

    app = FastAPI(
        title="ComputeForge API",
        version=__version__,
        docs_url=f"{settings.api_prefix}/docs",
        openapi_url=f"{settings.api_prefix}/openapi.json",
        lifespan=lifespan,
    )

    app.include_router(webhooks.router, prefix=settings.api_prefix, tags=["webhooks"])
    app.include_router(invocations.router, prefix=settings.api_prefix, tags=["invocations"])
    app.include_router(health.router, tags=["health"])
    return app


app = create_app()
handler = Mangum(app)
