"""
Health check routes.

Provides endpoints for API health monitoring.
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from vinime_bot import __version__

from ..schemas import HealthResponse

router = APIRouter(tags=["Health"])


def _health() -> HealthResponse:
    return HealthResponse(status="ok", timestamp=datetime.now(timezone.utc), version=__version__)


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns:
        HealthResponse: API status and current server time.
    """
    return _health()


@router.get("/", response_model=HealthResponse)
async def root() -> HealthResponse:
    return _health()
