"""Resource graph: definitions, dependency edges and apply order."""

from computeforge.graph.builder import build, topological_order
from computeforge.graph.models import DependencyEdge, ResourceDefinition, ResourceGraph

__all__ = [
    "DependencyEdge",
    "ResourceDefinition",
    "ResourceGraph",
    "build",
    "topological_order",
]
