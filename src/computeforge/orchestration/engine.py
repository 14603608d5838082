"""
Apply engine.

Walks a resource graph in dependency order against a compute provider.
Each node is a lookup-before-create: a resource that already exists is
recorded and left untouched. A node whose dependency failed is not
attempted. Nodes without a path between them run concurrently; results
are always reported in the graph's topological order.
"""

from __future__ import annotations

import asyncio

import structlog

from computeforge.graph.models import ResourceDefinition, ResourceGraph
from computeforge.orchestration.reporter import summarize
from computeforge.orchestration.results import (
    API_ERROR,
    DEPENDENCY_FAILED,
    ApplyError,
    ApplyResult,
    ApplyStatus,
    InvocationOutcome,
    ResultCollector,
)
from computeforge.providers.base import ComputeProvider

logger = structlog.get_logger()


class ApplyEngine:
    """Applies resource graphs through a compute provider."""

    def __init__(self, provider: ComputeProvider, *, concurrency: int | None = None) -> None:
        self._provider = provider
        self._concurrency = concurrency

    async def apply(self, graph: ResourceGraph) -> InvocationOutcome:
        """Apply every node of ``graph`` and summarize the results."""
        return summarize(await self.run(graph))

    async def run(self, graph: ResourceGraph) -> list[ApplyResult]:
        """Apply every node of ``graph``; return results in apply order."""
        collector = ResultCollector([d.identity for d in graph.order])
        limit = asyncio.Semaphore(self._concurrency) if self._concurrency else None
        loop = asyncio.get_running_loop()
        settled: dict[str, asyncio.Future[ApplyResult]] = {
            d.identity: loop.create_future() for d in graph.order
        }

        async def apply_node(definition: ResourceDefinition) -> None:
            parents = [await settled[p] for p in graph.dependencies(definition.identity)]
            if limit is None:
                result = await self._apply_node(definition, parents)
            else:
                async with limit:
                    result = await self._apply_node(definition, parents)
            collector.record(result)
            settled[definition.identity].set_result(result)

        await asyncio.gather(*(apply_node(d) for d in graph.order))
        return collector.results()

    async def _apply_node(
        self,
        definition: ResourceDefinition,
        parents: list[ApplyResult],
    ) -> ApplyResult:
        log = logger.bind(kind=definition.kind.value, identity=definition.identity)

        failed_parent = next((p for p in parents if not p.succeeded), None)
        if failed_parent is not None:
            log.warning("node_skipped", failed_dependency=failed_parent.identity)
            return ApplyResult(
                kind=definition.kind,
                identity=definition.identity,
                status=ApplyStatus.failed,
                error=ApplyError(DEPENDENCY_FAILED, failed_parent.identity),
            )

        try:
            resource = self._provider.resource(definition.kind)
            log.debug("node_lookup")
            existing = await resource.lookup(definition)
            if existing is not None:
                log.info("node_exists", remote_id=existing)
                return ApplyResult(
                    kind=definition.kind,
                    identity=definition.identity,
                    status=ApplyStatus.already_exists,
                    remote_id=existing,
                )

            dependencies = {p.identity: p.remote_id or "" for p in parents}
            remote_id = await resource.create(definition, dependencies)
        except Exception as exc:
            log.error("node_failed", error=str(exc), error_type=type(exc).__name__)
            return ApplyResult(
                kind=definition.kind,
                identity=definition.identity,
                status=ApplyStatus.failed,
                error=ApplyError(API_ERROR, str(exc)),
            )

        log.info("node_created", remote_id=remote_id)
        return ApplyResult(
            kind=definition.kind,
            identity=definition.identity,
            status=ApplyStatus.created,
            remote_id=remote_id,
        )
