from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List

from computeforge.core.errors import ConfigurationError
from computeforge.providers.base import ComputeProvider

ProviderFactory = Callable[..., ComputeProvider]


@dataclass(frozen=True)
class ProviderSpec:
    """Metadata describing a registered compute provider."""

    name: str
    factory: ProviderFactory
    description: str | None = None


class ProviderRegistry:
    """In-memory registry of compute provider factories."""

    def __init__(self) -> None:
        self._providers: Dict[str, ProviderSpec] = {}

    def register(
        self,
        name: str,
        factory: ProviderFactory,
        *,
        description: str | None = None,
    ) -> None:
        if not name:
            raise ValueError("Provider name is required")
        self._providers[name] = ProviderSpec(name=name, factory=factory, description=description)

    def create(self, name: str, **kwargs: Any) -> ComputeProvider:
        spec = self._providers.get(name)
        if spec is None:
            known = ", ".join(sorted(self._providers)) or "none"
            raise ConfigurationError(f"Unknown compute provider '{name}' (registered: {known})")
        return spec.factory(**kwargs)

    def list(self) -> List[ProviderSpec]:
        return list(self._providers.values())


provider_registry = ProviderRegistry()


def register_provider(
    name: str,
    factory: ProviderFactory,
    *,
    description: str | None = None,
) -> None:
    provider_registry.register(name, factory, description=description)


def create_provider(name: str, **kwargs: Any) -> ComputeProvider:
    return provider_registry.create(name, **kwargs)


def list_providers() -> List[ProviderSpec]:
    return provider_registry.list()
