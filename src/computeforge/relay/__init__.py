"""Relays: deliver an invocation outcome back to its trigger."""

from __future__ import annotations

import structlog

from computeforge.clients import github_client, pagerduty_client
from computeforge.config import Settings
from computeforge.relay.base import Relay, RelayError
from computeforge.relay.github import GitHubStatusRelay
from computeforge.relay.log import LogRelay
from computeforge.relay.pagerduty import PagerDutyIncidentRelay
from computeforge.triggers.models import Invocation, TriggerSource

logger = structlog.get_logger()


def relay_for(invocation: Invocation, settings: Settings) -> Relay:
    """Pick the relay that reports back to ``invocation``'s trigger.

    Falls back to ``LogRelay`` when the trigger's credentials are not configured.
    """
    if invocation.source == TriggerSource.vcs:
        if settings.github_token:
            return GitHubStatusRelay(
                github_client(settings), context=settings.github_status_context
            )
        logger.warning("relay_unconfigured", source=invocation.source.value)

    if invocation.source == TriggerSource.incident:
        if settings.pagerduty_token:
            return PagerDutyIncidentRelay(pagerduty_client(settings))
        logger.warning("relay_unconfigured", source=invocation.source.value)

    return LogRelay()


__all__ = [
    "GitHubStatusRelay",
    "LogRelay",
    "PagerDutyIncidentRelay",
    "Relay",
    "RelayError",
    "relay_for",
]
