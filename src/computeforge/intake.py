"""
Parameter intake.

Turns the flat, untyped parameter bag supplied by a trigger into a
ProvisioningConfig, or raises the first problem found. Checks run over a
fixed key list so the reported error never depends on bag ordering:

1. Every required key is present (MissingParameter)
2. No value is blank
3. Disk sizes are positive integers
4. Enum-like fields are in their allow-lists
5. Resource names follow the compute naming rule
6. The zone belongs to the region
"""

from __future__ import annotations

import re
from enum import StrEnum
from typing import Mapping

import structlog

from computeforge.core.errors import InvalidValue, MissingParameter
from computeforge.domain.models import (
    AddressSpec,
    AddressType,
    BootDiskSpec,
    DiskSpec,
    DiskType,
    NetworkTier,
    ProvisioningConfig,
)

logger = structlog.get_logger()

ParameterBag = Mapping[str, str]

REQUIRED_PARAMETERS: tuple[str, ...] = (
    "project",
    "network",
    "instance_name",
    "machine_type",
    "zone",
    "device_name",
    "image",
    "size",
    "type",
    "address_name",
    "address_type",
    "region",
    "network_tier",
    "additional_disk_name",
    "additional_disk_type",
    "additional_disk_size",
)

POSITIVE_INT_PARAMETERS = frozenset({"size", "additional_disk_size"})

ENUM_PARAMETERS: dict[str, type[StrEnum]] = {
    "type": DiskType,
    "address_type": AddressType,
    "network_tier": NetworkTier,
    "additional_disk_type": DiskType,
}

NAMED_RESOURCE_PARAMETERS = frozenset({"instance_name", "address_name", "additional_disk_name"})

RESOURCE_NAME_PATTERN = re.compile(r"^[a-z]([-a-z0-9]{0,61}[a-z0-9])?$")
INTEGER_PATTERN = re.compile(r"^[-+]?[0-9]+$")


def validate(bag: ParameterBag) -> ProvisioningConfig:
    """Validate ``bag`` and return the typed configuration."""
    for name in REQUIRED_PARAMETERS:
        if name not in bag or bag[name] is None:
            raise MissingParameter(name)

    values: dict[str, str | int] = {}
    for name in REQUIRED_PARAMETERS:
        values[name] = _normalize(name, str(bag[name]))

    zone, region = str(values["zone"]), str(values["region"])
    if not zone.startswith(f"{region}-"):
        raise InvalidValue("zone", f"zone {zone!r} is not in region {region!r}")

    extra = sorted(set(bag) - set(REQUIRED_PARAMETERS))
    if extra:
        logger.debug("unrecognized_parameters_ignored", parameters=extra)

    return ProvisioningConfig(
        project=values["project"],
        network=values["network"],
        zone=zone,
        region=region,
        instance_name=values["instance_name"],
        machine_type=values["machine_type"],
        boot_disk=BootDiskSpec(
            device_name=values["device_name"],
            image=values["image"],
            type=values["type"],
            size_gb=values["size"],
        ),
        address=AddressSpec(
            name=values["address_name"],
            type=values["address_type"],
            network_tier=values["network_tier"],
        ),
        additional_disk=DiskSpec(
            name=values["additional_disk_name"],
            type=values["additional_disk_type"],
            size_gb=values["additional_disk_size"],
        ),
    )


def _normalize(name: str, raw: str) -> str | int:
    value = raw.strip()
    if not value:
        raise InvalidValue(name, "must not be empty")

    if name in POSITIVE_INT_PARAMETERS:
        return _positive_int(name, value)

    enum_type = ENUM_PARAMETERS.get(name)
    if enum_type is not None:
        return _enum_member(name, value, enum_type)

    if name in NAMED_RESOURCE_PARAMETERS and not RESOURCE_NAME_PATTERN.match(value):
        raise InvalidValue(
            name,
            f"{value!r} must be 1-63 lowercase letters, digits or hyphens, "
            "starting with a letter",
        )

    return value


def _positive_int(name: str, value: str) -> int:
    if not INTEGER_PATTERN.match(value):
        raise InvalidValue(name, f"{value!r} is not an integer")
    number = int(value)
    if number <= 0:
        raise InvalidValue(name, f"must be a positive integer, got {number}")
    return number


def _enum_member(name: str, value: str, enum_type: type[StrEnum]) -> str:
    allowed = [member.value for member in enum_type]
    # Allow-lists are either all upper or all lower case.
    candidate = value.upper() if allowed[0].isupper() else value.lower()
    if candidate not in allowed:
        raise InvalidValue(name, f"{value!r} is not one of {', '.join(allowed)}")
    return candidate
