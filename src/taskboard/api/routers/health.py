"""Liveness endpoint, served outside the API prefix."""

from __future__ import annotations

from fastapi import APIRouter

from ...models.common import utcnow
from ...schemas import HealthCheckResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthCheckResponse, summary="Service liveness probe")
async def healthcheck() -> HealthCheckResponse:
    return HealthCheckResponse(status="OK", timestamp=utcnow())
