from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, TypedDict

import structlog
from langgraph.graph import END, StateGraph

from computeforge.core.errors import GraphError, ValidationError
from computeforge.domain.models import ProvisioningConfig
from computeforge.graph import ResourceGraph, build
from computeforge.intake import validate
from computeforge.logging import invocation_context
from computeforge.orchestration.engine import ApplyEngine
from computeforge.orchestration.reporter import failure_outcome, summarize
from computeforge.orchestration.results import ApplyResult, InvocationOutcome
from computeforge.providers.base import ComputeProvider

logger = structlog.get_logger()


class ProvisionState(TypedDict, total=False):
    invocation_id: str
    parameters: dict[str, str]
    config: ProvisioningConfig | None
    graph: ResourceGraph | None
    results: list[ApplyResult]
    error: ValidationError | GraphError | None
    outcome: InvocationOutcome | None


@dataclass(slots=True)
class ProvisionWorkflow:
    provider: ComputeProvider
    concurrency: int | None = None
    _graph: Any = field(init=False)

    def __post_init__(self) -> None:
        graph = StateGraph(ProvisionState)
        graph.add_node("validate", self._validate)
        graph.add_node("build_graph", self._build_graph)
        graph.add_node("apply", self._apply)
        graph.add_node("report", self._report)

        graph.set_entry_point("validate")
        graph.add_conditional_edges(
            "validate",
            self._next_step,
            {"continue": "build_graph", "report": "report"},
        )
        graph.add_conditional_edges(
            "build_graph",
            self._next_step,
            {"continue": "apply", "report": "report"},
        )
        graph.add_edge("apply", "report")
        graph.add_edge("report", END)

        self._graph = graph.compile()

    def _next_step(self, state: ProvisionState) -> str:
        return "report" if state.get("error") is not None else "continue"

    async def run(self, invocation_id: str, parameters: Mapping[str, str]) -> InvocationOutcome:
        """Run one invocation end to end and return its outcome."""
        state: ProvisionState = {
            "invocation_id": invocation_id,
            "parameters": dict(parameters),
            "error": None,
        }
        with invocation_context(invocation_id):
            logger.info("invocation_started", parameter_count=len(state["parameters"]))
            result_state = await self._graph.ainvoke(state)
            outcome: InvocationOutcome = result_state["outcome"]
            logger.info("invocation_finished", status=outcome.status.value)
        return outcome

    async def _validate(self, state: ProvisionState) -> ProvisionState:
        try:
            config = validate(state["parameters"])
        except ValidationError as exc:
            logger.warning("parameters_rejected", error=exc.message)
            return state | {"error": exc}
        logger.info("parameters_validated", instance=config.instance_name, zone=config.zone)
        return state | {"config": config}

    async def _build_graph(self, state: ProvisionState) -> ProvisionState:
        try:
            graph = build(state["config"])
        except GraphError as exc:
            logger.error("graph_build_failed", error=exc.message)
            return state | {"error": exc}
        logger.info("graph_built", nodes=len(graph.nodes), edges=len(graph.edges))
        return state | {"graph": graph}

    async def _apply(self, state: ProvisionState) -> ProvisionState:
        engine = ApplyEngine(self.provider, concurrency=self.concurrency)
        results = await engine.run(state["graph"])
        return state | {"results": results}

    async def _report(self, state: ProvisionState) -> ProvisionState:
        error = state.get("error")
        if error is not None:
            outcome = failure_outcome(error)
        else:
            outcome = summarize(state.get("results", []))
        return state | {"outcome": outcome}
