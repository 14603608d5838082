from __future__ import annotations

from typing import Any, Mapping

from computeforge.triggers.models import Invocation, TriggerSource, stringify


def manual_invocation(
    parameters: Mapping[str, Any],
    requested_by: str | None = None,
    invocation_id: str | None = None,
) -> Invocation:
    """Invocation for a direct call (HTTP API or CLI)."""
    fields: dict[str, Any] = {
        "source": TriggerSource.manual,
        "parameters": stringify(parameters),
        "requested_by": requested_by,
    }
    if invocation_id:
        fields["invocation_id"] = invocation_id
    return Invocation(**fields)
