"""
Resource graph builder.

The topology is fixed by resource kind:

    address     (no dependencies)
    instance    -> address
    disk        (no dependencies)
    attachment  -> instance, disk

``build`` stamps each node with an identity and a spec taken from the
configuration, then derives a stable apply order from the edges.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from computeforge.core.errors import GraphError
from computeforge.domain.models import CANONICAL_KIND_ORDER, ProvisioningConfig, ResourceKind
from computeforge.graph.models import DependencyEdge, ResourceDefinition, ResourceGraph

logger = structlog.get_logger()


def address_identity(cfg: ProvisioningConfig) -> str:
    return f"address:{cfg.project}/{cfg.region}/{cfg.address.name}"


def instance_identity(cfg: ProvisioningConfig) -> str:
    return f"instance:{cfg.project}/{cfg.zone}/{cfg.instance_name}"


def disk_identity(cfg: ProvisioningConfig) -> str:
    return f"disk:{cfg.project}/{cfg.zone}/{cfg.additional_disk.name}"


def attachment_identity(cfg: ProvisioningConfig) -> str:
    return f"attachment:{cfg.project}/{cfg.zone}/{cfg.instance_name}/{cfg.additional_disk.name}"


def _definitions(cfg: ProvisioningConfig) -> list[ResourceDefinition]:
    address_id = address_identity(cfg)
    instance_id = instance_identity(cfg)
    disk_id = disk_identity(cfg)

    return [
        ResourceDefinition(
            kind=ResourceKind.address,
            identity=address_id,
            spec={
                "project": cfg.project,
                "region": cfg.region,
                "name": cfg.address.name,
                "address_type": cfg.address.type.value,
                "network_tier": cfg.address.network_tier.value,
            },
        ),
        ResourceDefinition(
            kind=ResourceKind.instance,
            identity=instance_id,
            spec={
                "project": cfg.project,
                "zone": cfg.zone,
                "name": cfg.instance_name,
                "machine_type": cfg.machine_type,
                "network": cfg.network,
                "address_type": cfg.address.type.value,
                "network_tier": cfg.address.network_tier.value,
                "address_name": cfg.address.name,
                "region": cfg.region,
                "boot_disk": {
                    "device_name": cfg.boot_disk.device_name,
                    "image": cfg.boot_disk.image,
                    "type": cfg.boot_disk.type.value,
                    "size_gb": cfg.boot_disk.size_gb,
                },
            },
            depends_on=(address_id,),
        ),
        ResourceDefinition(
            kind=ResourceKind.disk,
            identity=disk_id,
            spec={
                "project": cfg.project,
                "zone": cfg.zone,
                "name": cfg.additional_disk.name,
                "type": cfg.additional_disk.type.value,
                "size_gb": cfg.additional_disk.size_gb,
            },
        ),
        ResourceDefinition(
            kind=ResourceKind.attachment,
            identity=attachment_identity(cfg),
            spec={
                "project": cfg.project,
                "zone": cfg.zone,
                "instance_name": cfg.instance_name,
                "disk_name": cfg.additional_disk.name,
            },
            depends_on=(instance_id, disk_id),
        ),
    ]


def build(cfg: ProvisioningConfig) -> ResourceGraph:
    """Expand ``cfg`` into the four resource definitions and their edges."""
    definitions = _definitions(cfg)
    known = {d.identity for d in definitions}

    edges: set[DependencyEdge] = set()
    for definition in definitions:
        for target in definition.depends_on:
            if target not in known:
                raise GraphError(
                    f"{definition.identity} references {target}, which is not part of this build",
                    {"source": definition.identity, "target": target},
                )
            edges.add(DependencyEdge(source=definition.identity, target=target))

    order = topological_order(definitions, edges)
    logger.debug(
        "resource_graph_built",
        nodes=len(definitions),
        edges=len(edges),
        order=[d.identity for d in order],
    )
    return ResourceGraph(nodes=frozenset(definitions), edges=frozenset(edges), order=order)


def topological_order(
    nodes: Iterable[ResourceDefinition],
    edges: Iterable[DependencyEdge],
) -> tuple[ResourceDefinition, ...]:
    """Order ``nodes`` so every edge target comes before its source.

    Depth-first post-order over dependencies. Roots and dependencies are
    visited in canonical kind order (then identity), so the result does not
    depend on set iteration order.
    """

    def sort_key(definition: ResourceDefinition) -> tuple[int, str]:
        return CANONICAL_KIND_ORDER.index(definition.kind), definition.identity

    by_identity = {n.identity: n for n in nodes}
    deps: dict[str, list[ResourceDefinition]] = {identity: [] for identity in by_identity}
    for edge in edges:
        if edge.source not in by_identity or edge.target not in by_identity:
            raise GraphError(
                f"Edge {edge.source} -> {edge.target} references an unknown node",
                {"source": edge.source, "target": edge.target},
            )
        deps[edge.source].append(by_identity[edge.target])

    order: list[ResourceDefinition] = []
    done: set[str] = set()
    in_progress: set[str] = set()

    def visit(definition: ResourceDefinition) -> None:
        if definition.identity in done:
            return
        if definition.identity in in_progress:
            raise GraphError(f"Dependency cycle through {definition.identity}")
        in_progress.add(definition.identity)
        for dependency in sorted(deps[definition.identity], key=sort_key):
            visit(dependency)
        in_progress.discard(definition.identity)
        done.add(definition.identity)
        order.append(definition)

    for definition in sorted(by_identity.values(), key=sort_key):
        visit(definition)

    return tuple(order)
