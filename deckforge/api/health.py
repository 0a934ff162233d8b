"""
Health check endpoints.

Provides liveness and readiness probes. Readiness checks that the data
folder can be written.
"""

import os

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from deckforge.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    storage: str | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running.
    Does not check dependencies.
    """
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(response: Response) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the data folder cannot be created or written.
    """
    try:
        settings.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", storage="unavailable")

    if not os.access(settings.data_dir, os.W_OK):
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", storage="read-only")
    return HealthResponse(status="ready", storage="writable")
