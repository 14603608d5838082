from __future__ import annotations

from typing import Mapping, Protocol

from computeforge.domain.models import ResourceKind
from computeforge.graph.models import ResourceDefinition


class ResourceClient(Protocol):
    """Per-kind contract of the infrastructure API.

    Implementations raise ``ApiError`` (or any exception) on failure.
    """

    kind: ResourceKind

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        """Return the remote id of the existing resource, or None."""
        ...

    async def create(
        self,
        definition: ResourceDefinition,
        dependencies: Mapping[str, str],
    ) -> str:
        """Create the resource and return its remote id.

        ``dependencies`` maps each dependency identity to its remote id.
        """
        ...


class ComputeProvider(Protocol):
    """Infrastructure API exposed to the apply engine."""

    name: str

    def resource(self, kind: ResourceKind) -> ResourceClient:
        ...

    async def aclose(self) -> None:
        ...
