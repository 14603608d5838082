from __future__ import annotations

from typing import Protocol

from computeforge.core.errors import ProviderError
from computeforge.orchestration.results import InvocationOutcome
from computeforge.triggers.models import Invocation


class RelayError(ProviderError):
    """Raised when an outcome cannot be delivered back to its trigger."""


class Relay(Protocol):
    """Delivers an invocation outcome back to whatever triggered it."""

    async def report(self, invocation: Invocation, outcome: InvocationOutcome) -> None: ...

    async def aclose(self) -> None: ...
