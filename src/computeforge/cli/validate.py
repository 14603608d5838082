"""
Validate command.
"""

from __future__ import annotations

from typing import Sequence

from computeforge.cli.params import load_parameters
from computeforge.cli.ux import console, error, header, print_key_value, success
from computeforge.core.errors import ValidationError, format_error_message
from computeforge.intake import validate


def validate_command(params: Sequence[str] | None = None, params_file: str | None = None) -> int:
    """
    Check a parameter bag without contacting any API.

    Returns:
        Exit code (0 = valid, 12 = invalid)
    """
    header("Validate Parameters")

    try:
        config = validate(load_parameters(params, params_file))
    except ValidationError as exc:
        error(format_error_message(exc))
        return exc.exit_code

    success("Parameters are valid")
    disk = config.additional_disk
    print_key_value(
        {
            "project": config.project,
            "zone": config.zone,
            "instance": f"{config.instance_name} ({config.machine_type})",
            "address": f"{config.address.name} ({config.address.type}, {config.address.network_tier})",
            "disk": f"{disk.name} ({disk.type}, {disk.size_gb} GB)",
        },
        title="Provisioning config",
    )
    console.print()
    return 0
