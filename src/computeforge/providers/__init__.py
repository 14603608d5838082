"""Compute providers and built-in registrations."""

from __future__ import annotations

# Import built-in providers for side effects (registration)
from computeforge.providers import gce as _gce  # noqa: F401
from computeforge.providers import memory as _memory  # noqa: F401
from computeforge.config import Settings
from computeforge.providers.base import ComputeProvider, ResourceClient
from computeforge.providers.registry import (
    create_provider,
    list_providers,
    register_provider,
)


def provider_from_settings(settings: Settings, name: str | None = None) -> ComputeProvider:
    """Create the configured provider, injecting credentials from settings."""
    return create_provider(
        name or settings.compute_provider,
        token=settings.compute_access_token,
        base_url=settings.compute_base_url,
        timeout=settings.http_timeout,
        poll_interval=settings.operation_poll_interval,
        operation_timeout=settings.operation_timeout,
    )


__all__ = [
    "ComputeProvider",
    "ResourceClient",
    "create_provider",
    "list_providers",
    "provider_from_settings",
    "register_provider",
]
