from __future__ import annotations

import structlog

from computeforge.clients.base import HTTPClientError
from computeforge.clients.github import GITHUB_STATUS_DESCRIPTION_LIMIT, GitHubClient
from computeforge.orchestration.reporter import headline
from computeforge.orchestration.results import InvocationOutcome
from computeforge.relay.base import RelayError
from computeforge.triggers.models import Invocation

logger = structlog.get_logger()


class GitHubStatusRelay:
    """Reports outcomes as a commit status on the pushed sha."""

    def __init__(self, client: GitHubClient, *, context: str) -> None:
        self._client = client
        self._context = context

    async def report(self, invocation: Invocation, outcome: InvocationOutcome) -> None:
        repository = invocation.reply["repository"]
        sha = invocation.reply["sha"]
        state = "success" if outcome.succeeded else "failure"
        try:
            await self._client.create_commit_status(
                repository,
                sha,
                state=state,
                description=headline(outcome, GITHUB_STATUS_DESCRIPTION_LIMIT),
                context=self._context,
            )
        except HTTPClientError as exc:
            raise RelayError(
                f"Failed to set commit status on {repository}@{sha}: {exc}",
                details={"status_code": exc.status_code},
            ) from exc
        logger.info("commit_status_set", repository=repository, sha=sha, state=state)

    async def aclose(self) -> None:
        return None
