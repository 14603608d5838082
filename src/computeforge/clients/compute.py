"""
Compute Engine REST v1 client.

Thin wrapper over the resource endpoints the provisioner needs. Every
mutating call returns a zone or region Operation; ``wait_for_operation``
polls it until it is DONE.
"""

from __future__ import annotations

from typing import Any

import structlog
from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_result,
    stop_after_delay,
    wait_fixed,
)

from computeforge.clients.base import BaseHTTPClient

logger = structlog.get_logger()

DEFAULT_COMPUTE_URL = "https://compute.googleapis.com/compute/v1"


class OperationFailed(Exception):
    """A long-running Compute Engine operation finished with errors."""


class OperationTimeout(Exception):
    """A long-running Compute Engine operation did not finish in time."""


class ComputeEngineClient(BaseHTTPClient):
    """Compute Engine API client authenticated with an injected bearer token."""

    def __init__(
        self,
        token: str | None,
        *,
        base_url: str = DEFAULT_COMPUTE_URL,
        timeout: float = 30.0,
        max_retries: int = 1,
        poll_interval: float = 2.0,
        operation_timeout: float = 600.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(base_url, timeout=timeout, max_retries=max_retries, **kwargs)
        self._token = token
        self._poll_interval = poll_interval
        self._operation_timeout = operation_timeout

    def _headers(self) -> dict[str, str]:
        headers = super()._headers()
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    # Addresses

    async def get_address(self, project: str, region: str, name: str) -> dict[str, Any]:
        return await self.get(f"/projects/{project}/regions/{region}/addresses/{name}")

    async def insert_address(self, project: str, region: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.post(f"/projects/{project}/regions/{region}/addresses", json=body)

    # Instances

    async def get_instance(self, project: str, zone: str, name: str) -> dict[str, Any]:
        return await self.get(f"/projects/{project}/zones/{zone}/instances/{name}")

    async def insert_instance(self, project: str, zone: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.post(f"/projects/{project}/zones/{zone}/instances", json=body)

    async def attach_disk(
        self, project: str, zone: str, instance: str, body: dict[str, Any]
    ) -> dict[str, Any]:
        return await self.post(
            f"/projects/{project}/zones/{zone}/instances/{instance}/attachDisk", json=body
        )

    # Disks

    async def get_disk(self, project: str, zone: str, name: str) -> dict[str, Any]:
        return await self.get(f"/projects/{project}/zones/{zone}/disks/{name}")

    async def insert_disk(self, project: str, zone: str, body: dict[str, Any]) -> dict[str, Any]:
        return await self.post(f"/projects/{project}/zones/{zone}/disks", json=body)

    # Operations

    async def wait_for_operation(self, operation: dict[str, Any]) -> dict[str, Any]:
        """Poll ``operation`` via its selfLink until DONE; raise on errors."""
        if operation.get("status") != "DONE":
            link = operation["selfLink"]
            try:
                async for attempt in AsyncRetrying(
                    retry=retry_if_result(lambda op: op.get("status") != "DONE"),
                    stop=stop_after_delay(self._operation_timeout),
                    wait=wait_fixed(self._poll_interval),
                ):
                    with attempt:
                        operation = await self.get(link)
                    if not attempt.retry_state.outcome.failed:
                        attempt.retry_state.set_result(operation)
            except RetryError as exc:
                raise OperationTimeout(
                    f"Operation {operation.get('name')} not done after {self._operation_timeout}s"
                ) from exc

        errors = (operation.get("error") or {}).get("errors") or []
        if errors:
            message = "; ".join(
                f"{e.get('code', 'ERROR')}: {e.get('message', '')}".strip() for e in errors
            )
            raise OperationFailed(message)

        logger.debug("operation_done", operation=operation.get("name"), target=operation.get("targetLink"))
        return operation
