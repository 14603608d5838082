from __future__ import annotations

import asyncio
from typing import Any, Callable

import httpx
import pagerduty
from pagerduty import RestApiV2Client

from computeforge.clients.base import (
    HTTPClientError,
    NotFoundHTTPError,
    PermanentHTTPError,
    RetryableHTTPError,
    is_retryable_status,
)

DEFAULT_USER_AGENT = "computeforge-pagerduty/0.1.0"


class PagerDutyClient:
    """Incident notes and custom field values over the official python-pagerduty client.

    The underlying client is synchronous; every call runs in a worker thread.
    Failures are raised as ``HTTPClientError`` subclasses, like ``BaseHTTPClient``.
    """

    def __init__(
        self,
        api_token: str,
        *,
        default_from: str,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        client_factory: Callable[..., RestApiV2Client] | None = None,
    ) -> None:
        self._timeout = timeout
        self._user_agent = user_agent
        factory = client_factory or RestApiV2Client
        self._client = factory(api_token, default_from=default_from)

    async def aclose(self) -> None:
        await asyncio.to_thread(self._client.close)

    async def custom_field_values(self, incident_id: str) -> list[dict[str, Any]]:
        data = await self._request("get", f"/incidents/{incident_id}/custom_fields/values")
        return data.get("custom_fields") or []

    async def add_note(self, incident_id: str, content: str) -> dict[str, Any]:
        data = await self._request(
            "post",
            f"/incidents/{incident_id}/notes",
            json={"note": {"content": content}},
        )
        return data.get("note", data)

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        headers = {
            "Accept": "application/vnd.pagerduty+json;version=2",
            "Content-Type": "application/json",
            "User-Agent": self._user_agent,
        }

        def _call() -> dict[str, Any]:
            try:
                response: httpx.Response = getattr(self._client, method)(
                    path,
                    timeout=self._timeout,
                    headers=headers,
                    **kwargs,
                )
                response.raise_for_status()
            except (pagerduty.HttpError, pagerduty.ServerHttpError, httpx.HTTPError) as exc:
                raise _as_client_error(method, path, exc) from exc
            try:
                return response.json()
            except ValueError as exc:
                raise PermanentHTTPError("PagerDuty response did not contain JSON") from exc

        return await asyncio.to_thread(_call)


def _as_client_error(method: str, path: str, exc: Exception) -> HTTPClientError:
    status = getattr(getattr(exc, "response", None), "status_code", None)
    message = f"PagerDuty request {method.upper()} {path} failed: {exc}"
    if status == 404:
        return NotFoundHTTPError(message, status)
    if status is None or is_retryable_status(status):
        return RetryableHTTPError(message, status)
    return PermanentHTTPError(message, status)
