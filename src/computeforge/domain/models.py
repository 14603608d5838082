from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ResourceKind(StrEnum):
    """Provisionable resource kinds, in canonical order."""

    address = "address"
    instance = "instance"
    disk = "disk"
    attachment = "attachment"


CANONICAL_KIND_ORDER: tuple[ResourceKind, ...] = (
    ResourceKind.address,
    ResourceKind.instance,
    ResourceKind.disk,
    ResourceKind.attachment,
)


class AddressType(StrEnum):
    EXTERNAL = "EXTERNAL"
    INTERNAL = "INTERNAL"


class NetworkTier(StrEnum):
    PREMIUM = "PREMIUM"
    STANDARD = "STANDARD"


class DiskType(StrEnum):
    pd_standard = "pd-standard"
    pd_balanced = "pd-balanced"
    pd_ssd = "pd-ssd"
    pd_extreme = "pd-extreme"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class BootDiskSpec(_Frozen):
    device_name: str
    image: str
    type: DiskType
    size_gb: int = Field(gt=0)


class AddressSpec(_Frozen):
    name: str
    type: AddressType
    network_tier: NetworkTier


class DiskSpec(_Frozen):
    name: str
    type: DiskType
    size_gb: int = Field(gt=0)


class ProvisioningConfig(_Frozen):
    """Validated, typed expansion of a parameter bag."""

    project: str
    network: str
    zone: str
    region: str
    instance_name: str
    machine_type: str
    boot_disk: BootDiskSpec
    address: AddressSpec
    additional_disk: DiskSpec
