from __future__ import annotations

import structlog

from computeforge.orchestration.reporter import render_text
from computeforge.orchestration.results import InvocationOutcome
from computeforge.triggers.models import Invocation

logger = structlog.get_logger()


class LogRelay:
    """Reports outcomes as a structured log line only."""

    async def report(self, invocation: Invocation, outcome: InvocationOutcome) -> None:
        logger.info(
            "outcome_reported",
            invocation_id=invocation.invocation_id,
            source=invocation.source.value,
            status=outcome.status.value,
            report=render_text(outcome, invocation.invocation_id),
        )

    async def aclose(self) -> None:
        return None
