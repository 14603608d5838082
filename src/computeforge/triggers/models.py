"""Invocation model shared by all trigger adapters."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Mapping
from uuid import uuid4

from pydantic import BaseModel, Field


class TriggerSource(StrEnum):
    vcs = "vcs"
    incident = "incident"
    manual = "manual"


class Invocation(BaseModel):
    """One request to provision, as produced by a trigger adapter.

    ``reply`` carries what the relay needs to report back to the trigger:
    repository and sha for VCS pushes, incident id for incidents.
    """

    invocation_id: str = Field(default_factory=lambda: str(uuid4()))
    source: TriggerSource
    parameters: dict[str, str] = Field(default_factory=dict)
    requested_by: str | None = None
    reply: dict[str, str] = Field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def merge_defaults(bag: Mapping[str, str], defaults: Mapping[str, str]) -> dict[str, str]:
    """Fill keys missing from ``bag`` with ``defaults``; bag values win."""
    merged = dict(defaults)
    merged.update(bag)
    return merged


def stringify(values: Mapping[Any, Any]) -> dict[str, str]:
    """Coerce a loosely typed mapping (YAML, JSON) into a parameter bag.

    ``None`` values are dropped so they surface as missing parameters.
    """
    bag: dict[str, str] = {}
    for key, value in values.items():
        if value is None:
            continue
        if isinstance(value, bool):
            value = str(value).lower()
        bag[str(key)] = str(value)
    return bag
