"""
Apply command: run the full provisioning pipeline as a manual invocation.
"""

from __future__ import annotations

import asyncio
import json
import os
from typing import Sequence

from rich.markup import escape

from computeforge.cli.params import load_parameters
from computeforge.cli.ux import console, header, info, print_table, styled, warning
from computeforge.config import Settings, get_settings
from computeforge.orchestration.results import InvocationOutcome
from computeforge.providers import provider_from_settings
from computeforge.triggers.manual import manual_invocation
from computeforge.triggers.models import Invocation, merge_defaults
from computeforge.workflows.provision import ProvisionWorkflow


async def run_apply(
    invocation: Invocation,
    settings: Settings,
    provider_name: str | None = None,
) -> InvocationOutcome:
    parameters = merge_defaults(invocation.parameters, settings.parameter_defaults)
    provider = provider_from_settings(settings, provider_name)
    try:
        workflow = ProvisionWorkflow(provider, concurrency=settings.apply_concurrency)
        return await workflow.run(invocation.invocation_id, parameters)
    finally:
        await provider.aclose()


def apply_command(
    params: Sequence[str] | None = None,
    params_file: str | None = None,
    provider_name: str | None = None,
    output_format: str = "text",
) -> int:
    settings = get_settings()
    invocation = manual_invocation(
        load_parameters(params, params_file),
        requested_by=os.environ.get("USER", "cli"),
    )

    if output_format != "json":
        header("Apply")
        info(f"Invocation {invocation.invocation_id} via {provider_name or settings.compute_provider}")
        if (provider_name or settings.compute_provider) == "memory":
            warning("In-memory provider: nothing is created in the cloud")

    outcome = asyncio.run(run_apply(invocation, settings, provider_name))

    if output_format == "json":
        print(json.dumps({"invocation_id": invocation.invocation_id, **outcome.to_dict()}, indent=2))
        return outcome.exit_code

    if outcome.results:
        print_table(
            "Results",
            ["Kind", "Identity", "Status", "Detail"],
            [
                [
                    r.kind.value,
                    r.identity,
                    styled(r.status),
                    escape((r.remote_id or "") if r.succeeded else str(r.error)),
                ]
                for r in outcome.results
            ],
        )
    console.print()
    console.print(f"{styled(outcome.status)}: {escape(outcome.summary.splitlines()[0])}")
    return outcome.exit_code
