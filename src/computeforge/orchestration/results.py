"""Result types for provisioning invocations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from computeforge.core.errors import ExitCode
from computeforge.domain.models import ResourceKind


class ApplyStatus(StrEnum):
    created = "Created"
    already_exists = "AlreadyExists"
    failed = "Failed"


class OutcomeStatus(StrEnum):
    success = "Success"
    partial_failure = "PartialFailure"
    failure = "Failure"


API_ERROR = "ApiError"
DEPENDENCY_FAILED = "DependencyFailed"


@dataclass(frozen=True)
class ApplyError:
    """Why a node failed: an API error or a failed dependency."""

    kind: str
    detail: str

    def __str__(self) -> str:
        return f"{self.kind}({self.detail})"


@dataclass(frozen=True)
class ApplyResult:
    """Outcome of applying one resource definition."""

    kind: ResourceKind
    identity: str
    status: ApplyStatus
    remote_id: str | None = None
    error: ApplyError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status in (ApplyStatus.created, ApplyStatus.already_exists)

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "identity": self.identity,
            "status": self.status.value,
            "remote_id": self.remote_id,
            "error": str(self.error) if self.error else None,
        }


@dataclass(frozen=True)
class InvocationOutcome:
    """Aggregate result of one invocation."""

    status: OutcomeStatus
    results: tuple[ApplyResult, ...]
    summary: str

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.success

    @property
    def exit_code(self) -> ExitCode:
        if self.status == OutcomeStatus.success:
            return ExitCode.SUCCESS
        if self.status == OutcomeStatus.partial_failure:
            return ExitCode.PARTIAL_FAILURE
        return ExitCode.PROVIDER_ERROR

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status.value,
            "results": [result.to_dict() for result in self.results],
            "summary": self.summary,
        }


class ResultCollector:
    """Collects per-node results during one apply run.

    Results may arrive in any order; ``results()`` returns them in the
    apply order the collector was created with.
    """

    def __init__(self, order: list[str]) -> None:
        self._order = list(order)
        self._results: dict[str, ApplyResult] = {}

    def record(self, result: ApplyResult) -> None:
        if result.identity in self._results:
            raise ValueError(f"Result for {result.identity} already recorded")
        self._results[result.identity] = result

    def results(self) -> list[ApplyResult]:
        return [self._results[identity] for identity in self._order if identity in self._results]
