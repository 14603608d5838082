from __future__ import annotations

from pathlib import Path
from typing import Sequence

from computeforge.core.errors import ValidationError
from computeforge.triggers.vcs import parse_parameter_file


def parse_param_args(pairs: Sequence[str]) -> dict[str, str]:
    """Parse repeated ``--param key=value`` arguments; later keys win."""
    bag: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise ValidationError(f"Malformed --param '{pair}', expected key=value")
        bag[key.strip()] = value
    return bag


def load_parameters(pairs: Sequence[str] | None, params_file: str | None) -> dict[str, str]:
    """Parameter bag from a YAML file overlaid with ``--param`` values."""
    bag: dict[str, str] = {}
    if params_file:
        path = Path(params_file)
        if not path.is_file():
            raise ValidationError(f"Parameter file not found: {params_file}")
        bag.update(parse_parameter_file(path.read_text(encoding="utf-8"), params_file))
    bag.update(parse_param_args(pairs or []))
    return bag
