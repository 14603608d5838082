import asyncio
from typing import Mapping

import pytest

from computeforge.core.errors import ApiError
from computeforge.domain.models import ResourceKind
from computeforge.graph.models import ResourceDefinition
from computeforge.orchestration import ApplyEngine, ApplyStatus, OutcomeStatus
from computeforge.providers.memory import InMemoryComputeProvider

from conftest import ADDRESS_ID, ATTACHMENT_ID, DISK_ID, INSTANCE_ID


@pytest.mark.asyncio
async def test_fresh_apply_creates_everything_in_order(graph):
    provider = InMemoryComputeProvider()

    outcome = await ApplyEngine(provider).apply(graph)

    assert outcome.status == OutcomeStatus.success
    assert [r.identity for r in outcome.results] == [ADDRESS_ID, INSTANCE_ID, DISK_ID, ATTACHMENT_ID]
    assert all(r.status == ApplyStatus.created for r in outcome.results)
    assert outcome.results[0].remote_id == "memory://acme-prod/us-central1/web-1-ip"


@pytest.mark.asyncio
async def test_second_apply_finds_everything_and_creates_nothing(graph):
    provider = InMemoryComputeProvider()
    engine = ApplyEngine(provider)
    first = await engine.apply(graph)
    provider.calls.clear()

    second = await engine.apply(graph)

    assert second.status == OutcomeStatus.success
    assert all(r.status == ApplyStatus.already_exists for r in second.results)
    assert provider.calls_for("create") == []
    assert [r.remote_id for r in second.results] == [r.remote_id for r in first.results]


@pytest.mark.asyncio
async def test_lookup_always_precedes_create(graph):
    provider = InMemoryComputeProvider()

    await ApplyEngine(provider).apply(graph)

    for identity in (ADDRESS_ID, INSTANCE_ID, DISK_ID, ATTACHMENT_ID):
        ops = [c.operation for c in provider.calls if c.identity == identity]
        assert ops == ["lookup", "create"]


@pytest.mark.asyncio
async def test_create_receives_dependency_remote_ids(graph):
    provider = InMemoryComputeProvider(state={DISK_ID: "existing-disk"})

    await ApplyEngine(provider).apply(graph)

    attach = next(c for c in provider.calls_for("create") if c.identity == ATTACHMENT_ID)
    assert attach.dependencies == {
        INSTANCE_ID: "memory://acme-prod/us-central1-a/web-1",
        DISK_ID: "existing-disk",
    }


@pytest.mark.asyncio
async def test_failed_instance_short_circuits_attachment(graph):
    provider = InMemoryComputeProvider(fail_create={"instance": "quota exceeded"})

    outcome = await ApplyEngine(provider).apply(graph)
    by_id = {r.identity: r for r in outcome.results}

    assert outcome.status == OutcomeStatus.partial_failure
    assert by_id[ADDRESS_ID].status == ApplyStatus.created
    assert by_id[DISK_ID].status == ApplyStatus.created
    assert by_id[INSTANCE_ID].status == ApplyStatus.failed
    assert by_id[INSTANCE_ID].error.kind == "ApiError"
    assert "quota exceeded" in by_id[INSTANCE_ID].error.detail
    assert by_id[ATTACHMENT_ID].status == ApplyStatus.failed
    assert str(by_id[ATTACHMENT_ID].error) == f"DependencyFailed({INSTANCE_ID})"
    assert not [c for c in provider.calls if c.identity == ATTACHMENT_ID]


@pytest.mark.asyncio
async def test_failure_propagates_transitively(graph):
    provider = InMemoryComputeProvider(fail_lookup={ResourceKind.address: "permission denied"})

    outcome = await ApplyEngine(provider).apply(graph)
    by_id = {r.identity: r for r in outcome.results}

    assert str(by_id[INSTANCE_ID].error) == f"DependencyFailed({ADDRESS_ID})"
    assert str(by_id[ATTACHMENT_ID].error) == f"DependencyFailed({INSTANCE_ID})"
    assert by_id[DISK_ID].status == ApplyStatus.created
    assert provider.calls_for("create")[0].identity == DISK_ID


@pytest.mark.asyncio
async def test_everything_failing_is_failure(graph):
    provider = InMemoryComputeProvider(
        fail_create={"address": "boom", "disk": "boom"},
    )

    outcome = await ApplyEngine(provider).apply(graph)

    assert outcome.status == OutcomeStatus.failure
    assert all(r.status == ApplyStatus.failed for r in outcome.results)


@pytest.mark.asyncio
async def test_unexpected_exception_is_recorded_as_api_error(graph):
    provider = InMemoryComputeProvider()
    original = provider.resource

    class Exploding:
        kind = ResourceKind.disk

        async def lookup(self, definition):
            raise RuntimeError("connection reset")

        async def create(self, definition, dependencies):
            raise AssertionError("create must not be reached")

    provider.resource = lambda kind: Exploding() if kind == ResourceKind.disk else original(kind)

    outcome = await ApplyEngine(provider).apply(graph)
    disk = next(r for r in outcome.results if r.identity == DISK_ID)

    assert str(disk.error) == "ApiError(connection reset)"


class GatedProvider(InMemoryComputeProvider):
    """Address creation blocks until the disk creation has started."""

    def __init__(self) -> None:
        super().__init__()
        self.disk_started = asyncio.Event()

    def resource(self, kind):
        inner = super().resource(kind)
        if kind == ResourceKind.address:
            return _WaitsFor(inner, self.disk_started)
        if kind == ResourceKind.disk:
            return _Signals(inner, self.disk_started)
        return inner


class _WaitsFor:
    def __init__(self, inner, event):
        self.kind = inner.kind
        self._inner = inner
        self._event = event

    async def lookup(self, definition: ResourceDefinition):
        return await self._inner.lookup(definition)

    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]):
        await self._event.wait()
        return await self._inner.create(definition, dependencies)


class _Signals(_WaitsFor):
    async def create(self, definition: ResourceDefinition, dependencies: Mapping[str, str]):
        self._event.set()
        return await self._inner.create(definition, dependencies)


@pytest.mark.asyncio
async def test_independent_branches_run_concurrently(graph):
    provider = GatedProvider()

    outcome = await asyncio.wait_for(ApplyEngine(provider).apply(graph), timeout=5)

    assert outcome.status == OutcomeStatus.success
    assert [r.identity for r in outcome.results] == [ADDRESS_ID, INSTANCE_ID, DISK_ID, ATTACHMENT_ID]


@pytest.mark.asyncio
async def test_concurrency_limit_of_one_still_completes(graph):
    provider = InMemoryComputeProvider()

    outcome = await ApplyEngine(provider, concurrency=1).apply(graph)

    assert outcome.status == OutcomeStatus.success
    assert len(provider.calls_for("create")) == 4


@pytest.mark.asyncio
async def test_memory_provider_injected_error_is_api_error(graph):
    provider = InMemoryComputeProvider(fail_create={"disk": "disk quota"})

    with pytest.raises(ApiError):
        await provider.resource(ResourceKind.disk).create(graph.by_kind(ResourceKind.disk), {})
