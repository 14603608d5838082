"""Orchestration package: apply engine, results and outcome reporting."""

from computeforge.orchestration.engine import ApplyEngine
from computeforge.orchestration.reporter import failure_outcome, summarize
from computeforge.orchestration.results import (
    ApplyError,
    ApplyResult,
    ApplyStatus,
    InvocationOutcome,
    OutcomeStatus,
    ResultCollector,
)

__all__ = [
    "ApplyEngine",
    "ApplyError",
    "ApplyResult",
    "ApplyStatus",
    "InvocationOutcome",
    "OutcomeStatus",
    "ResultCollector",
    "failure_outcome",
    "summarize",
]
