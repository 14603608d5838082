from __future__ import annotations

import structlog

from computeforge.clients.base import HTTPClientError
from computeforge.clients.pagerduty import PagerDutyClient
from computeforge.orchestration.reporter import render_markdown
from computeforge.orchestration.results import InvocationOutcome
from computeforge.relay.base import RelayError
from computeforge.triggers.models import Invocation

logger = structlog.get_logger()


class PagerDutyIncidentRelay:
    """Reports outcomes as a note on the incident that triggered the run."""

    def __init__(self, client: PagerDutyClient) -> None:
        self._client = client

    async def report(self, invocation: Invocation, outcome: InvocationOutcome) -> None:
        incident_id = invocation.reply["incident_id"]
        try:
            await self._client.add_note(
                incident_id, render_markdown(outcome, invocation.invocation_id)
            )
        except HTTPClientError as exc:
            raise RelayError(str(exc)) from exc
        logger.info("incident_note_added", incident_id=incident_id, status=outcome.status.value)

    async def aclose(self) -> None:
        await self._client.aclose()
