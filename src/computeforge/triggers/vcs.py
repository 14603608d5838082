"""
GitHub push webhook adapter.

A push only names a commit; the parameter bag lives in a YAML file in
the repository and is fetched at the pushed sha when the job runs.
"""

from __future__ import annotations

from typing import Any

import structlog
import yaml

from computeforge.clients.base import NotFoundHTTPError
from computeforge.clients.github import GitHubClient
from computeforge.core.errors import ValidationError
from computeforge.triggers.models import Invocation, TriggerSource, stringify

logger = structlog.get_logger()

ZERO_SHA = "0" * 40


def parse_push_event(payload: dict[str, Any], delivery_id: str | None = None) -> Invocation | None:
    """Turn a push payload into an Invocation, or None when there is nothing to apply."""
    if payload.get("deleted") or payload.get("after") in (None, ZERO_SHA):
        logger.info("push_ignored", reason="branch_deleted", ref=payload.get("ref"))
        return None

    repository = (payload.get("repository") or {}).get("full_name")
    if not repository:
        logger.info("push_ignored", reason="missing_repository")
        return None

    pusher = (payload.get("pusher") or {}).get("name") or (payload.get("sender") or {}).get("login")
    fields: dict[str, Any] = {
        "source": TriggerSource.vcs,
        "requested_by": pusher,
        "reply": {
            "repository": repository,
            "sha": payload["after"],
            "ref": payload.get("ref") or "",
        },
    }
    if delivery_id:
        fields["invocation_id"] = delivery_id
    return Invocation(**fields)


def parse_parameter_file(content: str, path: str) -> dict[str, str]:
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ValidationError(f"Parameter file {path} is not valid YAML: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError(f"Parameter file {path} must contain a mapping")
    return stringify(data)


async def fetch_parameters(client: GitHubClient, invocation: Invocation, path: str) -> dict[str, str]:
    """Read the parameter bag for a push from the repository at the pushed sha."""
    repository = invocation.reply["repository"]
    sha = invocation.reply["sha"]
    logger.info("parameter_file_fetching", repository=repository, sha=sha, path=path)
    try:
        content = await client.get_file(repository, path, sha)
    except NotFoundHTTPError as exc:
        raise ValidationError(f"Parameter file {path} not found in {repository}@{sha}") from exc
    return parse_parameter_file(content, path)
