from __future__ import annotations

import base64
from typing import Any

from computeforge.clients.base import BaseHTTPClient

GITHUB_STATUS_DESCRIPTION_LIMIT = 140


class GitHubClient(BaseHTTPClient):
    """GitHub REST client: repository contents and commit statuses."""

    def __init__(
        self,
        token: str | None,
        *,
        base_url: str = "https://api.github.com",
        timeout: float = 30.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            base_url,
            timeout=timeout,
            max_retries=max_retries,
            backoff_factor=backoff_factor,
            **kwargs,
        )
        self._token = token

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def get_file(self, repository: str, path: str, ref: str) -> str:
        """Return the decoded text of ``path`` at ``ref``."""
        data = await self.get(f"/repos/{repository}/contents/{path}", params={"ref": ref})
        content = data.get("content", "")
        if data.get("encoding") == "base64":
            return base64.b64decode(content).decode("utf-8")
        return content

    async def create_commit_status(
        self,
        repository: str,
        sha: str,
        *,
        state: str,
        description: str,
        context: str,
        target_url: str | None = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "state": state,
            "description": description[:GITHUB_STATUS_DESCRIPTION_LIMIT],
            "context": context,
        }
        if target_url:
            payload["target_url"] = target_url
        return await self.post(f"/repos/{repository}/statuses/{sha}", json=payload)
