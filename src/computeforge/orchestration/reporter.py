"""
Outcome reporter.

Aggregates apply results into an InvocationOutcome and renders it for the
trigger that started the invocation. All rendering is deterministic: the
same ordered results always produce byte-identical text.
"""

from __future__ import annotations

from typing import Sequence

from computeforge.core.errors import ComputeForgeError
from computeforge.orchestration.results import (
    ApplyResult,
    ApplyStatus,
    InvocationOutcome,
    OutcomeStatus,
)


def summarize(results: Sequence[ApplyResult]) -> InvocationOutcome:
    """Aggregate ordered results into one outcome."""
    ordered = tuple(results)
    succeeded = sum(1 for r in ordered if r.succeeded)

    if ordered and succeeded == len(ordered):
        status = OutcomeStatus.success
    elif succeeded == 0:
        status = OutcomeStatus.failure
    else:
        status = OutcomeStatus.partial_failure

    return InvocationOutcome(status=status, results=ordered, summary=_summary_text(status, ordered))


def failure_outcome(error: ComputeForgeError | str) -> InvocationOutcome:
    """Outcome for an invocation rejected before any API call."""
    message = error.message if isinstance(error, ComputeForgeError) else str(error)
    return InvocationOutcome(status=OutcomeStatus.failure, results=(), summary=message)


def summary_line(result: ApplyResult) -> str:
    detail = result.remote_id if result.succeeded else str(result.error)
    return f"{result.kind.value} {result.identity} {result.status.value} {detail}"


def _summary_text(status: OutcomeStatus, results: tuple[ApplyResult, ...]) -> str:
    counts = {s: sum(1 for r in results if r.status == s) for s in ApplyStatus}
    header = (
        f"{status.value}: {counts[ApplyStatus.created]} created, "
        f"{counts[ApplyStatus.already_exists]} existing, "
        f"{counts[ApplyStatus.failed]} failed"
    )
    return "\n".join([header, *(summary_line(r) for r in results)])


def headline(outcome: InvocationOutcome, limit: int | None = None) -> str:
    """First summary line, optionally truncated to ``limit`` characters."""
    first = outcome.summary.splitlines()[0] if outcome.summary else outcome.status.value
    if limit is not None and len(first) > limit:
        first = first[: limit - 3] + "..."
    return first


def render_text(outcome: InvocationOutcome, invocation_id: str | None = None) -> str:
    lines = []
    if invocation_id:
        lines.append(f"Invocation {invocation_id}: {outcome.status.value}")
    lines.append(outcome.summary)
    return "\n".join(lines)


def render_markdown(outcome: InvocationOutcome, invocation_id: str | None = None) -> str:
    """Markdown rendering used for incident notes."""
    title = f"**Provisioning {outcome.status.value}**"
    if invocation_id:
        title += f" (invocation `{invocation_id}`)"

    if not outcome.results:
        return f"{title}\n\n{outcome.summary}"

    rows = ["| Kind | Identity | Status | Detail |", "| --- | --- | --- | --- |"]
    for result in outcome.results:
        detail = result.remote_id if result.succeeded else str(result.error)
        rows.append(
            f"| {result.kind.value} | `{result.identity}` | {result.status.value} | {detail} |"
        )
    return "\n".join([title, "", headline(outcome), "", *rows])
