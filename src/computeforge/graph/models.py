from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from computeforge.domain.models import ResourceKind


@dataclass(frozen=True)
class ResourceDefinition:
    """A node of the resource graph."""

    kind: ResourceKind
    identity: str
    spec: Mapping[str, Any] = field(compare=False, hash=False)
    depends_on: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "spec", MappingProxyType(dict(self.spec)))


@dataclass(frozen=True)
class DependencyEdge:
    """``target`` must exist before ``source`` is created."""

    source: str
    target: str


@dataclass(frozen=True)
class ResourceGraph:
    """Nodes and edges of one build, plus their apply order."""

    nodes: frozenset[ResourceDefinition]
    edges: frozenset[DependencyEdge]
    order: tuple[ResourceDefinition, ...]

    def node(self, identity: str) -> ResourceDefinition:
        for definition in self.order:
            if definition.identity == identity:
                return definition
        raise KeyError(identity)

    def dependencies(self, identity: str) -> list[str]:
        """Identities ``identity`` depends on, in apply order."""
        targets = {edge.target for edge in self.edges if edge.source == identity}
        return [d.identity for d in self.order if d.identity in targets]

    def by_kind(self, kind: ResourceKind) -> ResourceDefinition:
        for definition in self.order:
            if definition.kind == kind:
                return definition
        raise KeyError(kind)
