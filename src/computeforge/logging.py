"""structlog setup and invocation-scoped log context."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterator

import structlog


def configure_logging(level: int | str = logging.INFO, *, json_output: bool = True) -> None:
    """Configure the structlog/standard logging bridge.

    JSON lines are emitted for services and workers; the CLI passes
    ``json_output=False`` to get the console renderer.
    """

    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(level=level, format="%(message)s")


@contextmanager
def invocation_context(invocation_id: str, **fields: Any) -> Iterator[None]:
    """Attach ``invocation_id`` (and extra fields) to every log line in scope."""

    tokens = structlog.contextvars.bind_contextvars(invocation_id=invocation_id, **fields)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
