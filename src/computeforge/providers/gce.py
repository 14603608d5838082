"""
Compute Engine provider.

Maps each resource kind onto the Compute Engine REST API:

- address: regional static address
- instance: VM with a boot disk initialised from an image, NIC on the
  configured network using the reserved address
- disk: zonal persistent disk
- attachment: ``attachDisk`` of the disk onto the instance

Lookups are plain GETs (404 means absent). Creations wait for the
returned operation before reporting the new resource's selfLink.
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, TypeVar

import structlog
from circuitbreaker import CircuitBreakerError

from computeforge.clients.base import HTTPClientError, NotFoundHTTPError
from computeforge.clients.compute import (
    DEFAULT_COMPUTE_URL,
    ComputeEngineClient,
    OperationFailed,
    OperationTimeout,
)
from computeforge.core.errors import ApiError
from computeforge.domain.models import ResourceKind
from computeforge.graph.models import ResourceDefinition
from computeforge.providers.registry import register_provider

logger = structlog.get_logger()

T = TypeVar("T")

_API_FAILURES = (HTTPClientError, OperationFailed, OperationTimeout, CircuitBreakerError)


async def _call(action: str, identity: str, fn: Callable[[], Awaitable[T]]) -> T:
    try:
        return await fn()
    except NotFoundHTTPError:
        raise
    except _API_FAILURES as exc:
        status = getattr(exc, "status_code", None)
        logger.warning("compute_api_error", action=action, identity=identity, status=status, error=str(exc))
        raise ApiError(f"{action} {identity} failed: {exc}", status_code=status) from exc


async def _get_or_none(
    identity: str, fn: Callable[[], Awaitable[dict[str, Any]]]
) -> dict[str, Any] | None:
    try:
        return await _call("lookup", identity, fn)
    except NotFoundHTTPError:
        return None


def image_link(image: str) -> str:
    """Resolve an image reference.

    Accepts a full URL or ``projects/...`` path, ``<project>/<family>``
    shorthand, or a bare image name in the target project.
    """
    if image.startswith(("projects/", "https://", "global/")):
        return image
    if image.count("/") == 1:
        project, family = image.split("/")
        return f"projects/{project}/global/images/family/{family}"
    return f"global/images/{image}"


def network_link(project: str, network: str) -> str:
    if "/" in network:
        return network
    return f"projects/{project}/global/networks/{network}"


class _GceResource:
    kind: ResourceKind

    def __init__(self, client: ComputeEngineClient) -> None:
        self._client = client

    async def _finish(self, identity: str, operation: dict[str, Any]) -> str:
        done = await _call("create", identity, lambda: self._client.wait_for_operation(operation))
        target = done.get("targetLink")
        if not target:
            raise ApiError(f"create {identity} returned no targetLink")
        return target


class GceAddressResource(_GceResource):
    kind = ResourceKind.address

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        s = definition.spec
        found = await _get_or_none(
            definition.identity,
            lambda: self._client.get_address(s["project"], s["region"], s["name"]),
        )
        return found.get("selfLink") if found else None

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]) -> str:
        s = definition.spec
        body = {
            "name": s["name"],
            "addressType": s["address_type"],
            "networkTier": s["network_tier"],
        }
        operation = await _call(
            "create",
            definition.identity,
            lambda: self._client.insert_address(s["project"], s["region"], body),
        )
        return await self._finish(definition.identity, operation)


class GceInstanceResource(_GceResource):
    kind = ResourceKind.instance

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        s = definition.spec
        found = await _get_or_none(
            definition.identity,
            lambda: self._client.get_instance(s["project"], s["zone"], s["name"]),
        )
        return found.get("selfLink") if found else None

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]) -> str:
        s = definition.spec
        ip = await self._reserved_ip(definition, dependencies)
        body = self.instance_body(definition.spec, ip)
        operation = await _call(
            "create",
            definition.identity,
            lambda: self._client.insert_instance(s["project"], s["zone"], body),
        )
        return await self._finish(definition.identity, operation)

    async def _reserved_ip(
        self, definition: ResourceDefinition, dependencies: Mapping[str, str]
    ) -> str:
        address_link = next(iter(dependencies.values()), None)
        if address_link is None:
            raise ApiError(f"create {definition.identity}: no address available")
        address = await _call(
            "create", definition.identity, lambda: self._client.get(address_link)
        )
        ip = address.get("address")
        if not ip:
            raise ApiError(f"create {definition.identity}: address {address_link} has no IP")
        return ip

    @staticmethod
    def instance_body(spec: Mapping[str, Any], ip: str) -> dict[str, Any]:
        zone = spec["zone"]
        boot = spec["boot_disk"]
        interface: dict[str, Any] = {"network": network_link(spec["project"], spec["network"])}
        if spec.get("address_type") == "INTERNAL":
            interface["networkIP"] = ip
        else:
            interface["accessConfigs"] = [
                {
                    "name": "External NAT",
                    "type": "ONE_TO_ONE_NAT",
                    "natIP": ip,
                    "networkTier": spec["network_tier"],
                }
            ]
        return {
            "name": spec["name"],
            "machineType": f"zones/{zone}/machineTypes/{spec['machine_type']}",
            "disks": [
                {
                    "boot": True,
                    "autoDelete": True,
                    "deviceName": boot["device_name"],
                    "initializeParams": {
                        "sourceImage": image_link(boot["image"]),
                        "diskType": f"zones/{zone}/diskTypes/{boot['type']}",
                        "diskSizeGb": str(boot["size_gb"]),
                    },
                }
            ],
            "networkInterfaces": [interface],
        }


class GceDiskResource(_GceResource):
    kind = ResourceKind.disk

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        s = definition.spec
        found = await _get_or_none(
            definition.identity,
            lambda: self._client.get_disk(s["project"], s["zone"], s["name"]),
        )
        return found.get("selfLink") if found else None

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]) -> str:
        s = definition.spec
        body = {
            "name": s["name"],
            "type": f"zones/{s['zone']}/diskTypes/{s['type']}",
            "sizeGb": str(s["size_gb"]),
        }
        operation = await _call(
            "create",
            definition.identity,
            lambda: self._client.insert_disk(s["project"], s["zone"], body),
        )
        return await self._finish(definition.identity, operation)


class GceAttachmentResource(_GceResource):
    kind = ResourceKind.attachment

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        s = definition.spec
        instance = await _get_or_none(
            definition.identity,
            lambda: self._client.get_instance(s["project"], s["zone"], s["instance_name"]),
        )
        if not instance:
            return None
        suffix = f"/zones/{s['zone']}/disks/{s['disk_name']}"
        for attached in instance.get("disks", []):
            if str(attached.get("source", "")).endswith(suffix):
                return f"{instance['selfLink']}/disks/{s['disk_name']}"
        return None

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]) -> str:
        s = definition.spec
        disk_link = next(
            (link for link in dependencies.values() if f"/disks/{s['disk_name']}" in link),
            f"projects/{s['project']}/zones/{s['zone']}/disks/{s['disk_name']}",
        )
        body = {"source": disk_link, "deviceName": s["disk_name"], "autoDelete": False}
        operation = await _call(
            "create",
            definition.identity,
            lambda: self._client.attach_disk(s["project"], s["zone"], s["instance_name"], body),
        )
        instance_link = await self._finish(definition.identity, operation)
        return f"{instance_link}/disks/{s['disk_name']}"


class GoogleComputeProvider:
    """Compute provider backed by the Compute Engine REST API."""

    name = "gce"

    def __init__(
        self,
        token: str | None = None,
        *,
        base_url: str = DEFAULT_COMPUTE_URL,
        timeout: float = 30.0,
        poll_interval: float = 2.0,
        operation_timeout: float = 600.0,
        client: ComputeEngineClient | None = None,
        **_: Any,
    ) -> None:
        self._client = client or ComputeEngineClient(
            token,
            base_url=base_url,
            timeout=timeout,
            poll_interval=poll_interval,
            operation_timeout=operation_timeout,
        )
        self._resources = {
            resource.kind: resource
            for resource in (
                GceAddressResource(self._client),
                GceInstanceResource(self._client),
                GceDiskResource(self._client),
                GceAttachmentResource(self._client),
            )
        }

    def resource(self, kind: ResourceKind) -> _GceResource:
        return self._resources[kind]

    async def aclose(self) -> None:
        return None


def _factory(**kwargs: Any) -> GoogleComputeProvider:
    return GoogleComputeProvider(**kwargs)


register_provider(
    GoogleComputeProvider.name,
    _factory,
    description="Compute Engine REST v1 provider",
)

__all__ = ["GoogleComputeProvider", "image_link", "network_link"]
