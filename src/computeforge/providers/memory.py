"""
Stateful in-memory compute provider.

Remembers every resource it creates, so a second apply of the same graph
finds everything already present. Failures can be injected per kind for
lookups or creations. Used by the test-suite and for rehearsal runs from
the CLI.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Mapping

from computeforge.core.errors import ApiError
from computeforge.domain.models import ResourceKind
from computeforge.graph.models import ResourceDefinition
from computeforge.providers.registry import register_provider


@dataclass(frozen=True)
class RecordedCall:
    operation: str
    kind: ResourceKind
    identity: str
    dependencies: Mapping[str, str] = field(default_factory=dict)


class InMemoryResource:
    def __init__(self, provider: InMemoryComputeProvider, kind: ResourceKind) -> None:
        self._provider = provider
        self.kind = kind

    async def lookup(self, definition: ResourceDefinition) -> str | None:
        await asyncio.sleep(0)
        self._provider.calls.append(RecordedCall("lookup", self.kind, definition.identity))
        message = self._provider.fail_lookup.get(self.kind)
        if message:
            raise ApiError(message)
        return self._provider.state.get(definition.identity)

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]) -> str:
        await asyncio.sleep(0)
        self._provider.calls.append(
            RecordedCall("create", self.kind, definition.identity, dict(dependencies))
        )
        message = self._provider.fail_create.get(self.kind)
        if message:
            raise ApiError(message)
        remote_id = f"memory://{definition.identity.split(':', 1)[1]}"
        self._provider.state[definition.identity] = remote_id
        return remote_id


class InMemoryComputeProvider:
    """Fake infrastructure API backed by a dict of identity -> remote id."""

    name = "memory"

    def __init__(
        self,
        *,
        state: dict[str, str] | None = None,
        fail_create: Mapping[ResourceKind | str, str] | None = None,
        fail_lookup: Mapping[ResourceKind | str, str] | None = None,
        **_: Any,
    ) -> None:
        self.state: dict[str, str] = state if state is not None else {}
        self.fail_create = {ResourceKind(k): v for k, v in (fail_create or {}).items()}
        self.fail_lookup = {ResourceKind(k): v for k, v in (fail_lookup or {}).items()}
        self.calls: list[RecordedCall] = []
        self.closed = False

    def resource(self, kind: ResourceKind) -> InMemoryResource:
        return InMemoryResource(self, kind)

    def calls_for(self, operation: str) -> list[RecordedCall]:
        return [call for call in self.calls if call.operation == operation]

    async def aclose(self) -> None:
        self.closed = True


def _factory(**kwargs: Any) -> InMemoryComputeProvider:
    return InMemoryComputeProvider(**kwargs)


register_provider(
    InMemoryComputeProvider.name,
    _factory,
    description="Stateful in-memory fake for tests and rehearsals",
)
