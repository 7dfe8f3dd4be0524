"""
Admin / observability endpoints
===============================

GET /api/admin/stats  -- counts of users, active rides and messages
GET /api/admin/health -- simple health check
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from carpool.api.dependencies import get_db
from carpool.api.middleware import default_limit, limiter
from carpool.api.schemas import HealthResponse, StatsResponse
from carpool.infrastructure.repositories import (
    MessageRepository,
    RideRepository,
    UserRepository,
)

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/stats", response_model=StatsResponse, summary="Store counters")
@limiter.limit(default_limit)
async def get_stats(
    request: Request,
    db: AsyncSession = Depends(get_db),
):
    return StatsResponse(
        users=await UserRepository(db).count(),
        active_rides=await RideRepository(db).count_active(),
        messages=await MessageRepository(db).count(),
    )


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health():
    return HealthResponse()
