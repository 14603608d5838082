"""
Plan command: show the resource graph an apply would walk.
"""

from __future__ import annotations

import json
from typing import Sequence

from rich.markup import escape

from computeforge.cli.params import load_parameters
from computeforge.cli.ux import console, error, header, print_table
from computeforge.core.errors import ComputeForgeError, format_error_message
from computeforge.graph import build
from computeforge.intake import validate


def plan_command(
    params: Sequence[str] | None = None,
    params_file: str | None = None,
    output_format: str = "text",
) -> int:
    try:
        graph = build(validate(load_parameters(params, params_file)))
    except ComputeForgeError as exc:
        if output_format == "json":
            print(json.dumps({"error": exc.message}))
        else:
            error(format_error_message(exc))
        return exc.exit_code

    if output_format == "json":
        data = {
            "order": [
                {"kind": d.kind.value, "identity": d.identity, "depends_on": list(d.depends_on)}
                for d in graph.order
            ],
            "edges": sorted([e.source, e.target] for e in graph.edges),
        }
        print(json.dumps(data, indent=2))
        return 0

    header("Provisioning Plan")
    print_table(
        "Apply order",
        ["#", "Kind", "Identity", "Depends on"],
        [
            [str(i), d.kind.value, escape(d.identity), escape(", ".join(d.depends_on)) or "-"]
            for i, d in enumerate(graph.order, start=1)
        ],
    )
    console.print(f"\n[muted]{len(graph.nodes)} resources, {len(graph.edges)} dependencies[/muted]")
    return 0
