from __future__ import annotations

from computeforge.clients.compute import ComputeEngineClient
from computeforge.clients.github import GitHubClient
from computeforge.clients.pagerduty import PagerDutyClient
from computeforge.config import Settings


def github_client(settings: Settings) -> GitHubClient:
    return GitHubClient(
        settings.github_token,
        base_url=str(settings.github_base_url),
        timeout=settings.http_timeout,
        max_retries=settings.http_max_retries,
        backoff_factor=settings.http_retry_backoff_factor,
    )


def pagerduty_client(settings: Settings) -> PagerDutyClient:
    return PagerDutyClient(
        settings.pagerduty_token,
        default_from=settings.pagerduty_from_email,
        timeout=settings.http_timeout,
    )


__all__ = [
    "ComputeEngineClient",
    "GitHubClient",
    "PagerDutyClient",
    "github_client",
    "pagerduty_client",
]
