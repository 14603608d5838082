from __future__ import annotations

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from computeforge import __version__
from computeforge.config import Settings, get_settings
from computeforge.providers import list_providers

router = APIRouter()


class HealthResponse(BaseModel):
    status: str
    version: str = __version__
    compute_provider: str
    queue_backend: str
    providers: list[str]


@router.get("/health", response_model=HealthResponse, status_code=status.HTTP_200_OK)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:  # noqa: B008
    """Liveness plus the configured backends."""
    return HealthResponse(
        status="healthy",
        compute_provider=settings.compute_provider,
        queue_backend=settings.job_queue_backend,
        providers=sorted(spec.name for spec in list_providers()),
    )
